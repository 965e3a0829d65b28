from datetime import datetime, timezone

import pytest

from discovery.domain.scenes.exceptions import CursorDecodeError
from discovery.domain.search import pagination


@pytest.mark.parametrize(
	"score,entity_id",
	[
		(0.123456789012345, "scene-42"),
		(0.0, "a"),
		(0.1 + 0.2, "01HV7Z8K3M5Q"),
		(1.0, "ünïcode/ids+are=fine"),
	],
)
def test_score_cursor_round_trip_is_exact(score, entity_id):
	token = pagination.encode_cursor(score, entity_id)
	decoded = pagination.decode_cursor(token)
	assert decoded.score == score
	assert decoded.score.hex() == float(score).hex()
	assert decoded.entity_id == entity_id


def test_cursor_is_url_safe():
	token = pagination.encode_cursor(0.987654321, "??>>??")
	assert all(ch.isalnum() or ch in "-_" for ch in token)


@pytest.mark.parametrize("value", ["", None])
def test_empty_cursor_means_first_page(value):
	assert pagination.decode_cursor(value) is None


@pytest.mark.parametrize(
	"value",
	[
		"not base64 !!",
		"e30",  # {}
		"W10",  # []
		"%%%%",
		"eyJzY29yZSI6InNvbWUiLCJpZCI6IngifQ",  # score is a string
		"eyJzY29yZSI6MC41LCJpZCI6IiJ9",  # empty id
		"eyJzY29yZSI6dHJ1ZSwiaWQiOiJ4In0",  # boolean score
	],
)
def test_malformed_cursor_raises(value):
	with pytest.raises(CursorDecodeError) as exc:
		pagination.decode_cursor(value)
	assert exc.value.status_code == 400


def test_time_cursor_round_trip_truncates_to_seconds():
	starts_at = datetime(2026, 3, 1, 20, 15, 30, 987654, tzinfo=timezone.utc)
	token = pagination.encode_time_cursor(starts_at, "evt-7")
	assert token == "2026-03-01T20:15:30Z|evt-7"
	decoded = pagination.decode_time_cursor(token)
	assert decoded.starts_at == datetime(2026, 3, 1, 20, 15, 30, tzinfo=timezone.utc)
	assert decoded.entity_id == "evt-7"


@pytest.mark.parametrize("value", ["2026-03-01T20:15:30Z", "yesterday|evt-1", "2026-03-01T20:15:30|evt-1", "2026-03-01T20:15:30Z|"])
def test_malformed_time_cursor_raises(value):
	with pytest.raises(CursorDecodeError):
		pagination.decode_time_cursor(value)


def test_truncate_to_second_treats_naive_as_utc():
	naive = datetime(2026, 3, 1, 20, 15, 30, 500000)
	assert pagination.truncate_to_second(naive) == datetime(2026, 3, 1, 20, 15, 30, tzinfo=timezone.utc)
