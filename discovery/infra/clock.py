from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def now_utc() -> datetime:
	return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
	"""Attach UTC to naive datetimes; aware values are converted to UTC."""

	if value is None:
		return None
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value.astimezone(timezone.utc)
