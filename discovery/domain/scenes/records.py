"""Map upstream record payloads onto scenes and events.

Payloads arrive as decoded JSON objects keyed the way the upstream network
writes them (``allowPrecise``, ``startsAt``). The mapped entity carries its
``(record_owner, record_key)`` linkage so repeated ingestion can upsert.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from discovery.domain.geo import Point, geohash
from discovery.domain.scenes import policy
from discovery.domain.scenes.exceptions import ValidationError
from discovery.domain.scenes.models import (
	STATUS_SCHEDULED,
	VISIBILITY_PUBLIC,
	Event,
	Palette,
	Scene,
	enforce_location_consent,
)
from discovery.settings import settings


class _Location(BaseModel):
	lat: float = Field(ge=-90.0, le=90.0)
	lng: float = Field(ge=-180.0, le=180.0)
	allow_precise: bool = Field(default=False, alias="allowPrecise")

	model_config = ConfigDict(populate_by_name=True)


class _SceneRecord(BaseModel):
	name: str = ""
	description: Optional[str] = None
	location: Optional[_Location] = None
	tags: list[str] = Field(default_factory=list)
	visibility: Optional[str] = None
	palette: Optional[Palette] = None


class _EventRecord(BaseModel):
	name: str = ""
	description: Optional[str] = None
	location: Optional[_Location] = None
	tags: list[str] = Field(default_factory=list)
	status: Optional[str] = None
	starts_at: Optional[datetime] = Field(default=None, alias="startsAt")
	ends_at: Optional[datetime] = Field(default=None, alias="endsAt")

	model_config = ConfigDict(populate_by_name=True)


def _parse(schema: type[BaseModel], record: Mapping[str, Any]):
	if not record:
		raise ValidationError("record payload is empty")
	return _build(schema, record)


def _build(schema: type[BaseModel], values: Mapping[str, Any]):
	try:
		return schema.model_validate(values)
	except SchemaError as exc:
		raise ValidationError(f"record payload is malformed: {exc.errors()[0]['msg']}") from exc


def _location_fields(location: Optional[_Location]) -> dict[str, Any]:
	if location is None:
		raise ValidationError("location is required")
	return {
		"allow_precise": location.allow_precise,
		"precise_point": Point(lat=location.lat, lng=location.lng),
		"coarse_geohash": geohash.encode(location.lat, location.lng, settings.geohash_precision),
	}


def map_scene_record(owner: str, key: str, record: Mapping[str, Any]) -> Scene:
	parsed: _SceneRecord = _parse(_SceneRecord, record)
	if not parsed.name:
		raise ValidationError("missing required field: name")
	policy.validate_scene_name(parsed.name)
	policy.validate_visibility(parsed.visibility or VISIBILITY_PUBLIC)
	scene = _build(
		Scene,
		dict(
			name=parsed.name,
			description=parsed.description or "",
			owner_id=owner,
			visibility=parsed.visibility or VISIBILITY_PUBLIC,
			palette=parsed.palette,
			tags=list(parsed.tags),
			record_owner=owner,
			record_key=key,
			**_location_fields(parsed.location),
		),
	)
	return enforce_location_consent(scene)


def map_event_record(owner: str, key: str, record: Mapping[str, Any], scene_id: str) -> Event:
	"""Map an event payload; ``scene_id`` is resolved by the caller from the upstream scene reference."""

	parsed: _EventRecord = _parse(_EventRecord, record)
	if not parsed.name:
		raise ValidationError("missing required field: name")
	policy.validate_event_title(parsed.name)
	if parsed.starts_at is None:
		raise ValidationError("missing required field: startsAt")
	if not scene_id:
		raise ValidationError("missing required field: scene_id")
	event = _build(
		Event,
		dict(
			scene_id=scene_id,
			title=parsed.name,
			description=parsed.description or "",
			status=parsed.status or STATUS_SCHEDULED,
			starts_at=parsed.starts_at,
			ends_at=parsed.ends_at,
			tags=list(parsed.tags),
			record_owner=owner,
			record_key=key,
			**_location_fields(parsed.location),
		),
	)
	policy.validate_time_window(event.starts_at, event.ends_at)
	return enforce_location_consent(event)


__all__ = ["map_event_record", "map_scene_record"]
