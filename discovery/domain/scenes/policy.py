"""Input rules for scene and event writes."""

from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Optional

from discovery.domain.geo import geohash
from discovery.domain.scenes.exceptions import ValidationError
from discovery.domain.scenes.models import VISIBILITIES

MIN_SCENE_NAME_LENGTH = 3
MAX_SCENE_NAME_LENGTH = 64
MIN_EVENT_TITLE_LENGTH = 3
MAX_EVENT_TITLE_LENGTH = 80

_SCENE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _\-.]+$")


def validate_scene_name(name: str) -> None:
	trimmed = (name or "").strip()
	if len(trimmed) < MIN_SCENE_NAME_LENGTH:
		raise ValidationError(f"scene name must be at least {MIN_SCENE_NAME_LENGTH} characters")
	if len(trimmed) > MAX_SCENE_NAME_LENGTH:
		raise ValidationError(f"scene name must not exceed {MAX_SCENE_NAME_LENGTH} characters")
	if not _SCENE_NAME_PATTERN.match(trimmed):
		raise ValidationError("scene name contains invalid characters (allowed: letters, numbers, spaces, -, _, .)")


def validate_event_title(title: str) -> None:
	trimmed = (title or "").strip()
	if len(trimmed) < MIN_EVENT_TITLE_LENGTH:
		raise ValidationError(f"event title must be at least {MIN_EVENT_TITLE_LENGTH} characters")
	if len(trimmed) > MAX_EVENT_TITLE_LENGTH:
		raise ValidationError(f"event title must not exceed {MAX_EVENT_TITLE_LENGTH} characters")


def validate_visibility(visibility: str) -> None:
	if visibility not in VISIBILITIES:
		raise ValidationError("visibility must be one of: " + ", ".join(VISIBILITIES))


def validate_time_window(starts_at: datetime, ends_at: Optional[datetime]) -> None:
	if ends_at is not None and not starts_at < ends_at:
		raise ValidationError("start time must be before end time")


def validate_coarse_geohash(value: str) -> None:
	"""A coarse geohash is mandatory on every stored record."""

	if not value:
		raise ValidationError("coarse_geohash is required")
	if not geohash.is_valid(value):
		raise ValidationError("coarse_geohash is not a valid geohash")


def sanitize_text(value: str) -> str:
	"""Trim and HTML-escape free text; call after validation passes."""

	return html.escape(value.strip())
