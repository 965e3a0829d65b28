"""Geohash encoding and truncation used for coarse, privacy-safe locations."""

from __future__ import annotations

DEFAULT_PRECISION = 6

_BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_VALID = frozenset(_BASE32)


def encode(lat: float, lng: float, precision: int = DEFAULT_PRECISION) -> str:
	"""Encode a coordinate as a base32 geohash.

	A non-positive ``precision`` falls back to :data:`DEFAULT_PRECISION`.
	"""

	if precision <= 0:
		precision = DEFAULT_PRECISION
	lat_lo, lat_hi = -90.0, 90.0
	lng_lo, lng_hi = -180.0, 180.0
	chars: list[str] = []
	bits = 0
	bit_count = 0
	even = True
	while len(chars) < precision:
		if even:
			mid = (lng_lo + lng_hi) / 2.0
			if lng >= mid:
				bits = (bits << 1) | 1
				lng_lo = mid
			else:
				bits <<= 1
				lng_hi = mid
		else:
			mid = (lat_lo + lat_hi) / 2.0
			if lat >= mid:
				bits = (bits << 1) | 1
				lat_lo = mid
			else:
				bits <<= 1
				lat_hi = mid
		even = not even
		bit_count += 1
		if bit_count == 5:
			chars.append(_BASE32[bits])
			bits = 0
			bit_count = 0
	return "".join(chars)


def is_valid(value: str) -> bool:
	return bool(value) and all(ch in _VALID for ch in value.lower())


def round_geohash(value: str, precision: int = DEFAULT_PRECISION) -> str:
	"""Truncate a geohash to ``precision`` characters.

	Input is lower-cased first. Returns ``""`` for empty or invalid input and for a
	non-positive precision; shorter input is returned unchanged.
	"""

	if precision <= 0 or not value:
		return ""
	lowered = value.lower()
	if not is_valid(lowered):
		return ""
	return lowered[:precision]
