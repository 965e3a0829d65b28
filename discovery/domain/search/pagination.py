"""Keyset cursor codecs for search pagination."""

from __future__ import annotations

import base64
import binascii
import json
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from discovery.domain.scenes.exceptions import CursorDecodeError
from discovery.infra.clock import as_utc


@dataclass(slots=True, frozen=True)
class ScoreCursor:
	"""Resume point for score-ranked pages: the last item's score and id."""

	score: float
	entity_id: str


@dataclass(slots=True, frozen=True)
class TimeCursor:
	"""Resume point for start-time ordered pages, second precision."""

	starts_at: datetime
	entity_id: str


def encode_cursor(score: float, entity_id: str) -> str:
	"""Encode a score cursor as unpadded URL-safe base64 of a compact JSON object.

	JSON floats use the shortest repr that round-trips, so the decoded score
	has the same bit pattern as the encoded one.
	"""

	blob = json.dumps({"score": score, "id": entity_id}, separators=(",", ":"))
	return base64.urlsafe_b64encode(blob.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(value: Optional[str]) -> Optional[ScoreCursor]:
	"""Decode a cursor produced by :func:`encode_cursor`; ``""`` means no cursor."""

	if not value:
		return None
	try:
		padded = value + "=" * (-len(value) % 4)
		raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
		data = json.loads(raw.decode("utf-8"))
	except (ValueError, binascii.Error) as exc:
		raise CursorDecodeError("bad_cursor") from exc
	if not isinstance(data, dict):
		raise CursorDecodeError("bad_cursor")
	score = data.get("score")
	entity_id = data.get("id")
	if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
		raise CursorDecodeError("bad_cursor")
	if not isinstance(entity_id, str) or not entity_id:
		raise CursorDecodeError("bad_cursor")
	return ScoreCursor(score=float(score), entity_id=entity_id)


def truncate_to_second(value: datetime) -> datetime:
	"""Normalise to UTC second precision; naive values are taken as UTC."""

	return as_utc(value).replace(microsecond=0)


def encode_time_cursor(starts_at: datetime, entity_id: str) -> str:
	"""Encode ``<RFC3339 timestamp>|<id>``."""

	stamp = truncate_to_second(starts_at).strftime("%Y-%m-%dT%H:%M:%SZ")
	return f"{stamp}|{entity_id}"


def decode_time_cursor(value: Optional[str]) -> Optional[TimeCursor]:
	if not value:
		return None
	stamp, sep, entity_id = value.partition("|")
	if not sep or not entity_id:
		raise CursorDecodeError("bad_cursor")
	if stamp.endswith("Z"):
		stamp = stamp[:-1] + "+00:00"
	try:
		starts_at = datetime.fromisoformat(stamp)
	except ValueError as exc:
		raise CursorDecodeError("bad_cursor") from exc
	if starts_at.tzinfo is None:
		raise CursorDecodeError("bad_cursor")
	return TimeCursor(starts_at=truncate_to_second(starts_at), entity_id=entity_id)


__all__ = [
	"ScoreCursor",
	"TimeCursor",
	"decode_cursor",
	"decode_time_cursor",
	"encode_cursor",
	"encode_time_cursor",
	"truncate_to_second",
]
