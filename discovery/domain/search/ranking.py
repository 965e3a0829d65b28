"""Ranking helpers shared by scene and event search.

Every signal lands in ``[0, 1]``; composites are plain weighted sums and are
never renormalised, so callers wanting a different balance pass their own
weight vector.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional

from discovery.domain.geo import Point
from discovery.domain.scenes.models import Event, Scene
from discovery.domain.search.weights import EventWeights, SceneWeights

# Downstream consumers pin this exact value for records without a precise point.
NEUTRAL_PROXIMITY = 0.5

# (title/name, description, tag) tiers; the first matching tier wins.
EVENT_TEXT_TIERS = (1.0, 0.8, 0.6)
SCENE_TEXT_TIERS = (1.0, 0.7, 0.5)


def clamp(value: float, *, lower: float = 0.0, upper: float = 1.0) -> float:
	return max(lower, min(upper, value))


def recency_score(event_start: datetime, now: datetime, window_span: timedelta) -> float:
	"""Favour events starting sooner within the searched window."""

	if window_span <= timedelta(0):
		return 1.0
	until_start = event_start - now
	if until_start <= timedelta(0):
		return 1.0
	return clamp(1.0 - until_start / window_span)


def _text_score(query: str, primary: str, description: str, tags: Iterable[str], tiers: tuple[float, float, float]) -> float:
	if not query:
		return 1.0
	needle = query.lower()
	if needle in (primary or "").lower():
		return tiers[0]
	if needle in (description or "").lower():
		return tiers[1]
	if any(needle in tag.lower() for tag in tags):
		return tiers[2]
	return 0.0


def event_text_score(event: Event, query: str) -> float:
	return _text_score(query, event.title, event.description, event.tags, EVENT_TEXT_TIERS)


def scene_text_score(scene: Scene, query: str) -> float:
	return _text_score(query, scene.name, scene.description, scene.tags, SCENE_TEXT_TIERS)


def proximity_score(point: Optional[Point], reference: Point) -> float:
	"""Decay ``1 / (1 + d)`` over planar distance; neutral when no precise point is stored."""

	if point is None:
		return NEUTRAL_PROXIMITY
	return 1.0 / (1.0 + point.distance_to(reference))


def trust_score(trust_scores: Optional[Mapping[str, float]], key: str) -> float:
	if not trust_scores:
		return 0.0
	return clamp(float(trust_scores.get(key, 0.0)))


def event_composite_score(
	recency: float,
	text: float,
	proximity: float,
	trust: float,
	weights: EventWeights,
	*,
	include_trust: bool,
) -> float:
	score = recency * weights.recency + text * weights.text_match + proximity * weights.proximity
	if include_trust:
		score += trust * weights.trust
	return score


def scene_composite_score(
	text: float,
	proximity: float,
	trust: float,
	weights: SceneWeights,
	*,
	include_trust: bool,
) -> float:
	score = text * weights.text_match + proximity * weights.proximity
	if include_trust:
		score += trust * weights.trust
	return score


__all__ = [
	"NEUTRAL_PROXIMITY",
	"clamp",
	"event_composite_score",
	"event_text_score",
	"proximity_score",
	"recency_score",
	"scene_composite_score",
	"scene_text_score",
	"trust_score",
]
