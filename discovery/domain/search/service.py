"""Search orchestration: filter, score, sort and paginate a corpus snapshot.

These functions are pure over the records they are handed. Repositories call
them while holding their read lock and copy the resulting page before it
leaves the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Generic, Iterable, Optional

from discovery.domain.geo import BoundingBox, Point
from discovery.domain.scenes.exceptions import CursorDecodeError
from discovery.domain.scenes.models import STATUS_CANCELLED, VISIBILITY_PUBLIC, Event, LocatedRecord, RecordT, Scene
from discovery.domain.search import pagination, ranking, schemas
from discovery.domain.search.weights import EventWeights, SceneWeights
from discovery.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Scored(Generic[RecordT]):
	score: float
	record: RecordT


def _within_bbox(record: LocatedRecord, bbox: BoundingBox) -> bool:
	# Records without a precise point cannot be placed inside a bbox yet; matching on the
	# coarse geohash cell would widen results and is not done here.
	if record.precise_point is None:
		return False
	return bbox.contains(record.precise_point)


def scene_is_searchable(scene: Scene, bbox: BoundingBox) -> bool:
	if scene.is_deleted:
		return False
	if scene.visibility != VISIBILITY_PUBLIC:
		return False
	return _within_bbox(scene, bbox)


def event_is_searchable(event: Event, bbox: BoundingBox, from_: datetime, to: datetime) -> bool:
	if event.is_deleted:
		return False
	if event.status == STATUS_CANCELLED:
		return False
	if event.starts_at < from_ or event.starts_at > to:
		return False
	return _within_bbox(event, bbox)


def _decode(kind: str, decoder: Callable[[str], object], raw: str):
	try:
		return decoder(raw)
	except CursorDecodeError:
		obs_metrics.inc_cursor_decode_failure(kind)
		logger.warning("rejected malformed cursor", extra={"kind": kind, "cursor_length": len(raw)})
		raise


def rank(scored: Iterable[Scored[RecordT]]) -> list[Scored[RecordT]]:
	"""Score descending, then id ascending; the id is the only tie-break."""

	return sorted(scored, key=lambda item: (-item.score, item.record.id))


def _after_cursor(item: Scored, cursor: Optional[pagination.ScoreCursor]) -> bool:
	if cursor is None:
		return True
	if item.score < cursor.score:
		return True
	return item.score == cursor.score and item.record.id > cursor.entity_id


def paginate(
	ranked: list[Scored[RecordT]],
	cursor: Optional[pagination.ScoreCursor],
	limit: int,
) -> tuple[list[RecordT], str]:
	"""Slice one page from ``ranked`` and build the cursor for the next one."""

	remaining = [item for item in ranked if _after_cursor(item, cursor)]
	page = remaining[:limit]
	next_cursor = ""
	if len(remaining) > limit and page:
		last = page[-1]
		next_cursor = pagination.encode_cursor(last.score, last.record.id)
	return [item.record for item in page], next_cursor


def score_scene(
	scene: Scene,
	*,
	query: str,
	reference: Point,
	weights: SceneWeights,
	trust_scores: Optional[dict[str, float]],
	include_trust: bool,
) -> float:
	return ranking.scene_composite_score(
		ranking.scene_text_score(scene, query),
		ranking.proximity_score(scene.precise_point, reference),
		ranking.trust_score(trust_scores, scene.id),
		weights,
		include_trust=include_trust,
	)


def score_event(
	event: Event,
	*,
	query: str,
	reference: Point,
	now: datetime,
	window_span: timedelta,
	weights: EventWeights,
	trust_scores: Optional[dict[str, float]],
	include_trust: bool,
) -> float:
	return ranking.event_composite_score(
		ranking.recency_score(event.starts_at, now, window_span),
		ranking.event_text_score(event, query),
		ranking.proximity_score(event.precise_point, reference),
		ranking.trust_score(trust_scores, event.scene_id),
		weights,
		include_trust=include_trust,
	)


def search_scenes(
	scenes: Iterable[Scene],
	options: schemas.SceneSearchOptions,
	*,
	weights: SceneWeights,
	trust_enabled: bool = True,
) -> schemas.SearchPage[Scene]:
	cursor = _decode("scene", pagination.decode_cursor, options.cursor)
	query = options.normalized_query()
	reference = options.bbox.center()
	include_trust = trust_enabled and options.trust_scores is not None
	candidates = [
		Scored(
			score=score_scene(
				scene,
				query=query,
				reference=reference,
				weights=weights,
				trust_scores=options.trust_scores,
				include_trust=include_trust,
			),
			record=scene,
		)
		for scene in scenes
		if scene_is_searchable(scene, options.bbox)
	]
	items, next_cursor = paginate(rank(candidates), cursor, options.limit)
	return schemas.SearchPage[Scene](items=items, next_cursor=next_cursor)


def search_events(
	events: Iterable[Event],
	options: schemas.EventSearchOptions,
	*,
	weights: EventWeights,
	now: datetime,
	trust_enabled: bool = True,
) -> schemas.SearchPage[Event]:
	cursor = _decode("event", pagination.decode_cursor, options.cursor)
	query = options.normalized_query()
	reference = options.bbox.center()
	window_span = options.to - options.from_
	include_trust = trust_enabled and options.trust_scores is not None
	candidates = [
		Scored(
			score=score_event(
				event,
				query=query,
				reference=reference,
				now=now,
				window_span=window_span,
				weights=weights,
				trust_scores=options.trust_scores,
				include_trust=include_trust,
			),
			record=event,
		)
		for event in events
		if event_is_searchable(event, options.bbox, options.from_, options.to)
	]
	items, next_cursor = paginate(rank(candidates), cursor, options.limit)
	return schemas.SearchPage[Event](items=items, next_cursor=next_cursor)


def search_events_by_time(
	events: Iterable[Event],
	options: schemas.EventWindowOptions,
) -> schemas.SearchPage[Event]:
	"""Start-time ordered listing; ordering and cursor comparison both use whole seconds."""

	cursor = _decode("event_time", pagination.decode_time_cursor, options.cursor)
	keyed = sorted(
		(
			(pagination.truncate_to_second(event.starts_at), event.id, event)
			for event in events
			if event_is_searchable(event, options.bbox, options.from_, options.to)
		),
		key=lambda entry: (entry[0], entry[1]),
	)
	if cursor is not None:
		boundary = (cursor.starts_at, cursor.entity_id)
		keyed = [entry for entry in keyed if (entry[0], entry[1]) > boundary]
	page = keyed[: options.limit]
	next_cursor = ""
	if len(keyed) > options.limit and page:
		stamp, entity_id, _ = page[-1]
		next_cursor = pagination.encode_time_cursor(stamp, entity_id)
	return schemas.SearchPage[Event](items=[entry[2] for entry in page], next_cursor=next_cursor)


__all__ = [
	"Scored",
	"event_is_searchable",
	"paginate",
	"rank",
	"scene_is_searchable",
	"search_events",
	"search_events_by_time",
	"search_scenes",
]
