"""Domain models for scenes and events with location consent."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discovery.domain.geo import Point
from discovery.infra.clock import as_utc

Visibility = Literal["public", "members_only", "hidden"]
EventStatus = Literal["scheduled", "live", "ended", "cancelled"]

VISIBILITY_PUBLIC: Visibility = "public"
VISIBILITY_MEMBERS_ONLY: Visibility = "members_only"
VISIBILITY_HIDDEN: Visibility = "hidden"
VISIBILITIES: tuple[str, ...] = (VISIBILITY_PUBLIC, VISIBILITY_MEMBERS_ONLY, VISIBILITY_HIDDEN)

STATUS_SCHEDULED: EventStatus = "scheduled"
STATUS_LIVE: EventStatus = "live"
STATUS_ENDED: EventStatus = "ended"
STATUS_CANCELLED: EventStatus = "cancelled"


class Palette(BaseModel):
	"""Colour scheme for a scene's visual identity."""

	primary: str
	secondary: str


class LocatedRecord(BaseModel):
	"""Fields shared by every record that carries a consent-gated location.

	``precise_point`` is only persisted while ``allow_precise`` holds; the
	``coarse_geohash`` is always present and safe to expose.
	"""

	id: str = ""
	description: str = ""
	allow_precise: bool = False
	precise_point: Optional[Point] = None
	coarse_geohash: str
	tags: list[str] = Field(default_factory=list)
	record_owner: Optional[str] = None
	record_key: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None
	deleted_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)

	@field_validator("created_at", "updated_at", "deleted_at")
	def _timestamps_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
		return as_utc(value)

	@property
	def is_deleted(self) -> bool:
		return self.deleted_at is not None

	def record_ref(self) -> Optional[tuple[str, str]]:
		"""Upstream identity pair, or None unless both halves are set."""

		if self.record_owner and self.record_key:
			return (self.record_owner, self.record_key)
		return None


class Scene(LocatedRecord):
	"""A persistent community discoverable by approximate location."""

	name: str
	owner_id: str
	visibility: Visibility = VISIBILITY_PUBLIC
	palette: Optional[Palette] = None


class Event(LocatedRecord):
	"""A scheduled happening hosted by a scene."""

	scene_id: str
	title: str
	status: EventStatus = STATUS_SCHEDULED
	starts_at: datetime
	ends_at: Optional[datetime] = None
	cancelled_at: Optional[datetime] = None
	cancellation_reason: Optional[str] = None

	@field_validator("starts_at", "ends_at", "cancelled_at")
	def _schedule_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
		return as_utc(value)


RecordT = TypeVar("RecordT", bound=LocatedRecord)


def enforce_location_consent(entity: RecordT) -> RecordT:
	"""Drop the precise point unless the record grants precise-location consent.

	This is the only place a precise point is cleared. Mutates and returns
	``entity``; write paths call it on their private copy.
	"""

	if not entity.allow_precise:
		entity.precise_point = None
	return entity
