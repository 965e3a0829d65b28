"""Geo primitives: points, bounding boxes and coarse geohashes."""

from .geohash import DEFAULT_PRECISION, encode, round_geohash
from .models import BoundingBox, Point

__all__ = [
	"BoundingBox",
	"DEFAULT_PRECISION",
	"Point",
	"encode",
	"round_geohash",
]
