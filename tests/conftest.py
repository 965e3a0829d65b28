from datetime import datetime, timedelta, timezone

import pytest

from discovery.domain.geo import Point, encode
from discovery.domain.scenes.models import Event, Scene
from discovery.domain.scenes.repo import EventRepository, SceneRepository
from discovery.domain.search.weights import default_weights


FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

NYC = (40.7128, -74.0060)
LA = (34.0522, -118.2437)
LONDON = (51.5074, -0.1278)


class FrozenClock:
	"""Wall clock stand-in that only moves when a test advances it."""

	def __init__(self, start: datetime = FIXED_NOW) -> None:
		self.current = start

	def __call__(self) -> datetime:
		return self.current

	def advance(self, **kwargs) -> datetime:
		self.current = self.current + timedelta(**kwargs)
		return self.current


@pytest.fixture
def clock() -> FrozenClock:
	return FrozenClock()


@pytest.fixture
def scene_repo(clock) -> SceneRepository:
	return SceneRepository(clock=clock, weights=default_weights(), trust_enabled=True)


@pytest.fixture
def event_repo(clock) -> EventRepository:
	return EventRepository(clock=clock, weights=default_weights(), trust_enabled=True)


@pytest.fixture
def make_scene():
	def _make(scene_id: str, *, lat: float = NYC[0], lng: float = NYC[1], allow_precise: bool = True, **overrides) -> Scene:
		values = {
			"id": scene_id,
			"name": f"Scene {scene_id}",
			"owner_id": "owner-1",
			"allow_precise": allow_precise,
			"precise_point": Point(lat=lat, lng=lng),
			"coarse_geohash": encode(lat, lng, 6),
		}
		values.update(overrides)
		return Scene(**values)

	return _make


@pytest.fixture
def make_event():
	def _make(
		event_id: str,
		*,
		starts_at: datetime = FIXED_NOW + timedelta(hours=2),
		lat: float = NYC[0],
		lng: float = NYC[1],
		allow_precise: bool = True,
		**overrides,
	) -> Event:
		values = {
			"id": event_id,
			"scene_id": "scene-1",
			"title": f"Event {event_id}",
			"allow_precise": allow_precise,
			"precise_point": Point(lat=lat, lng=lng),
			"coarse_geohash": encode(lat, lng, 6),
			"starts_at": starts_at,
		}
		values.update(overrides)
		return Event(**values)

	return _make
