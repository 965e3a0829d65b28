"""Pydantic schemas for scene and event search."""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from discovery.domain.geo import BoundingBox
from discovery.infra.clock import as_utc
from discovery.settings import settings


def _default_limit() -> int:
	return settings.search_default_limit


class _PagedQuery(BaseModel):
	bbox: BoundingBox
	limit: int = Field(default_factory=_default_limit, ge=1)
	cursor: str = Field(default="", description="Opaque cursor from the previous page")

	model_config = ConfigDict(populate_by_name=True)

	@field_validator("bbox", mode="before")
	def _parse_bbox(cls, value):  # type: ignore[override]
		if isinstance(value, str):
			return BoundingBox.parse(value)
		return value

	@field_validator("limit")
	def _cap_limit(cls, value: int) -> int:
		return min(value, settings.search_max_limit)

	@field_validator("cursor", mode="before")
	def _none_cursor(cls, value):  # type: ignore[override]
		return value or ""


class _RankedQuery(_PagedQuery):
	query: str = Field(default="", max_length=200)
	trust_scores: Optional[dict[str, float]] = Field(
		default=None,
		description="Per-owner trust in [0, 1]; supplying a map opts in to the trust signal",
	)

	def normalized_query(self) -> str:
		return self.query.strip()


class _WindowMixin(BaseModel):
	from_: datetime = Field(..., alias="from")
	to: datetime

	@field_validator("from_", "to")
	def _window_utc(cls, value: datetime) -> datetime:
		return as_utc(value)

	@model_validator(mode="after")
	def _check_window(self):
		if self.to < self.from_:
			raise ValueError("'to' must not be before 'from'")
		return self


class SceneSearchOptions(_RankedQuery):
	"""Ranked scene search: bbox, optional text, trust map and cursor."""


class EventSearchOptions(_RankedQuery, _WindowMixin):
	"""Ranked event search over a start-time window."""


class EventWindowOptions(_PagedQuery, _WindowMixin):
	"""Start-time ordered event listing inside a bbox, no text ranking."""


T = TypeVar("T")


class SearchPage(BaseModel, Generic[T]):
	items: list[T]
	next_cursor: str = ""

	@property
	def has_more(self) -> bool:
		return bool(self.next_cursor)
