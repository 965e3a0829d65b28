"""Coordinate value types shared by scenes, events and search."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, model_validator


class Point(BaseModel):
	"""A latitude/longitude pair, stored exactly as supplied."""

	lat: float
	lng: float

	model_config = ConfigDict(frozen=True)

	def distance_to(self, other: "Point") -> float:
		"""Planar Euclidean distance in degrees."""

		return math.hypot(self.lat - other.lat, self.lng - other.lng)


class BoundingBox(BaseModel):
	"""Axis-aligned search area, ordered like the query string ``minLng,minLat,maxLng,maxLat``."""

	min_lng: float
	min_lat: float
	max_lng: float
	max_lat: float

	model_config = ConfigDict(frozen=True)

	@model_validator(mode="after")
	def _check_order(self) -> "BoundingBox":
		if self.min_lng > self.max_lng or self.min_lat > self.max_lat:
			raise ValueError("bbox minimums must not exceed maximums")
		return self

	@classmethod
	def parse(cls, raw: str) -> "BoundingBox":
		parts = [part.strip() for part in (raw or "").split(",")]
		if len(parts) != 4:
			raise ValueError("bbox must have four comma-separated values")
		try:
			min_lng, min_lat, max_lng, max_lat = (float(part) for part in parts)
		except ValueError as exc:
			raise ValueError("bbox values must be numeric") from exc
		return cls(min_lng=min_lng, min_lat=min_lat, max_lng=max_lng, max_lat=max_lat)

	def contains(self, point: Point) -> bool:
		return self.min_lat <= point.lat <= self.max_lat and self.min_lng <= point.lng <= self.max_lng

	def center(self) -> Point:
		return Point(lat=(self.min_lat + self.max_lat) / 2.0, lng=(self.min_lng + self.max_lng) / 2.0)
