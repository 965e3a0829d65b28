import pytest

from discovery.domain.geo import Point
from discovery.domain.scenes.models import enforce_location_consent
from discovery.obs import metrics as obs_metrics


LONDON = (51.5074, -0.1278)


def _strip_count(kind: str, path: str) -> float:
	return obs_metrics.CONSENT_STRIPS.labels(kind=kind, path=path)._value.get()


def test_enforce_clears_point_without_consent(make_scene):
	scene = make_scene("scene-1", allow_precise=False)
	assert enforce_location_consent(scene) is scene
	assert scene.precise_point is None


def test_enforce_keeps_point_with_consent(make_scene):
	scene = make_scene("scene-1", allow_precise=True)
	enforce_location_consent(scene)
	assert scene.precise_point == Point(lat=40.7128, lng=-74.0060)


def test_enforce_is_idempotent(make_event):
	event = make_event("evt-1", allow_precise=False)
	enforce_location_consent(enforce_location_consent(event))
	assert event.precise_point is None
	assert event.coarse_geohash


@pytest.mark.asyncio
async def test_consent_revocation_clears_stored_point(scene_repo, make_scene):
	await scene_repo.insert(make_scene("scene-london", lat=LONDON[0], lng=LONDON[1], allow_precise=True))
	stored = await scene_repo.get_by_id("scene-london")
	assert stored.precise_point == Point(lat=LONDON[0], lng=LONDON[1])

	revoked = make_scene("scene-london", lat=LONDON[0], lng=LONDON[1], allow_precise=False)
	assert revoked.precise_point is not None
	await scene_repo.update(revoked)

	refetched = await scene_repo.get_by_id("scene-london")
	assert refetched.allow_precise is False
	assert refetched.precise_point is None
	# The caller's own object is never touched by the write.
	assert revoked.precise_point == Point(lat=LONDON[0], lng=LONDON[1])


@pytest.mark.asyncio
async def test_every_scene_write_path_drops_unconsented_point(scene_repo, make_scene):
	await scene_repo.insert(make_scene("scene-1", allow_precise=False))
	await scene_repo.insert(make_scene("scene-2", allow_precise=True))
	await scene_repo.update(make_scene("scene-2", allow_precise=False))
	created = await scene_repo.upsert(make_scene("", allow_precise=False, record_owner="did:plc:a", record_key="rk"))
	await scene_repo.upsert(make_scene("", allow_precise=False, record_owner="did:plc:a", record_key="rk"))

	for scene_id in ("scene-1", "scene-2", created.id):
		stored = await scene_repo.get_by_id(scene_id)
		assert stored.precise_point is None


@pytest.mark.asyncio
async def test_every_event_write_path_drops_unconsented_point(event_repo, make_event):
	await event_repo.insert(make_event("evt-1", allow_precise=False))
	await event_repo.insert(make_event("evt-2", allow_precise=True))
	await event_repo.update(make_event("evt-2", allow_precise=False))
	created = await event_repo.upsert(make_event("", allow_precise=False, record_owner="did:plc:a", record_key="rk"))

	for event_id in ("evt-1", "evt-2", created.id):
		stored = await event_repo.get_by_id(event_id)
		assert stored.precise_point is None


@pytest.mark.asyncio
async def test_consent_strip_is_counted(scene_repo, make_scene):
	before = _strip_count("scene", "insert")
	await scene_repo.insert(make_scene("scene-1", allow_precise=False))
	await scene_repo.insert(make_scene("scene-2", allow_precise=True))
	assert _strip_count("scene", "insert") == before + 1


@pytest.mark.asyncio
async def test_unconsented_scene_is_excluded_from_bbox_search(scene_repo, make_scene):
	from discovery.domain.geo import BoundingBox
	from discovery.domain.search import schemas

	await scene_repo.insert(make_scene("scene-private", allow_precise=False))
	page = await scene_repo.search(
		schemas.SceneSearchOptions(bbox=BoundingBox(min_lng=-74.3, min_lat=40.5, max_lng=-73.7, max_lat=40.9))
	)
	assert page.items == []


@pytest.mark.asyncio
async def test_upsert_revocation_clears_stored_point(scene_repo, make_scene):
	ref = {"record_owner": "did:plc:host", "record_key": "scene-rk"}
	granted = await scene_repo.upsert(make_scene("", lat=LONDON[0], lng=LONDON[1], allow_precise=True, **ref))
	stored = await scene_repo.get_by_record_key("did:plc:host", "scene-rk")
	assert stored.precise_point == Point(lat=LONDON[0], lng=LONDON[1])

	revoked = await scene_repo.upsert(make_scene("", lat=LONDON[0], lng=LONDON[1], allow_precise=False, **ref))

	assert revoked.inserted is False
	assert revoked.id == granted.id
	refetched = await scene_repo.get_by_record_key("did:plc:host", "scene-rk")
	assert refetched.allow_precise is False
	assert refetched.precise_point is None
