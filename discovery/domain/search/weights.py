"""Ranking weight vectors and calibration file loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SceneWeights(BaseModel):
	"""Scene composite: text * 0.6 + proximity * 0.25 + trust * 0.15 (scenes have no recency)."""

	text_match: float = Field(default=0.6, ge=0.0)
	proximity: float = Field(default=0.25, ge=0.0)
	trust: float = Field(default=0.15, ge=0.0)


class EventWeights(BaseModel):
	"""Event composite: recency * 0.3 + text * 0.4 + proximity * 0.2 + trust * 0.1."""

	recency: float = Field(default=0.3, ge=0.0)
	text_match: float = Field(default=0.4, ge=0.0)
	proximity: float = Field(default=0.2, ge=0.0)
	trust: float = Field(default=0.1, ge=0.0)


class RankingWeights(BaseModel):
	scene: SceneWeights = Field(default_factory=SceneWeights)
	event: EventWeights = Field(default_factory=EventWeights)


def default_weights() -> RankingWeights:
	return RankingWeights()


def merge_calibration(base: Optional[RankingWeights], override: Optional[Mapping[str, Any]]) -> RankingWeights:
	"""Apply the non-zero values of a raw ``weights`` mapping on top of ``base``.

	Zero or missing values keep the base weight, so a calibration file may
	override a single component.
	"""

	if base is None:
		return default_weights()
	if override is not None and not isinstance(override, Mapping):
		raise ValueError("calibration weights must be an object")
	merged = base.model_dump()
	for section in ("scene", "event"):
		values = (override or {}).get(section) or {}
		if not isinstance(values, Mapping):
			raise ValueError(f"calibration section {section!r} must be an object")
		for key, value in values.items():
			if key not in merged[section]:
				continue
			if value:
				merged[section][key] = float(value)
	return RankingWeights.model_validate(merged)


def _overrides(defaults: RankingWeights, loaded: RankingWeights) -> list[str]:
	changes: list[str] = []
	before = defaults.model_dump()
	after = loaded.model_dump()
	for section in ("scene", "event"):
		for key, old in before[section].items():
			new = after[section][key]
			if new != old:
				changes.append(f"{section}.{key}: {old:.2f} -> {new:.2f}")
	return changes


def load_calibration(path: Optional[str | Path]) -> RankingWeights:
	"""Load ranking weights from a JSON calibration file.

	Expected shape: ``{"version": "1", "weights": {"scene": {...}, "event": {...}}}``.
	A missing path yields the defaults. An unreadable or malformed file is
	logged and also yields the defaults.
	"""

	defaults = default_weights()
	if not path:
		return defaults
	try:
		raw = json.loads(Path(path).read_text(encoding="utf-8"))
		if not isinstance(raw, dict):
			raise ValueError("calibration root must be an object")
		merged = merge_calibration(defaults, raw.get("weights") or {})
	except (OSError, TypeError, ValueError) as exc:
		logger.warning("ranking calibration unusable, using defaults", extra={"path": str(path), "error": str(exc)})
		return defaults
	changes = _overrides(defaults, merged)
	if changes:
		logger.info("loaded ranking calibration with overrides", extra={"overrides": changes, "version": raw.get("version")})
	else:
		logger.info("loaded ranking calibration (using all defaults)", extra={"version": raw.get("version")})
	return merged


__all__ = [
	"EventWeights",
	"RankingWeights",
	"SceneWeights",
	"default_weights",
	"load_calibration",
	"merge_calibration",
]
