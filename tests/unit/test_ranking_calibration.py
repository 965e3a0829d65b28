import json
import logging

import pytest

from discovery.domain.search.weights import RankingWeights, default_weights, load_calibration, merge_calibration


def test_defaults_match_documented_weights():
	weights = default_weights()
	assert weights.scene.model_dump() == {"text_match": 0.6, "proximity": 0.25, "trust": 0.15}
	assert weights.event.model_dump() == {"recency": 0.3, "text_match": 0.4, "proximity": 0.2, "trust": 0.1}


def test_merge_applies_only_non_zero_values():
	merged = merge_calibration(
		default_weights(),
		{"scene": {"text_match": 0.7, "proximity": 0}, "event": {"trust": 0.2, "unknown": 9}},
	)
	assert merged.scene.text_match == 0.7
	assert merged.scene.proximity == 0.25
	assert merged.event.trust == 0.2
	assert merged.event.recency == 0.3


def test_merge_without_base_returns_defaults():
	assert merge_calibration(None, {"scene": {"text_match": 0.9}}) == default_weights()


def test_merge_rejects_non_mapping_sections():
	with pytest.raises(ValueError):
		merge_calibration(default_weights(), {"scene": [0.1, 0.2]})


def test_load_missing_path_returns_defaults():
	assert load_calibration(None) == default_weights()
	assert load_calibration("") == default_weights()


def test_load_calibration_file(tmp_path, caplog):
	path = tmp_path / "calibration.json"
	path.write_text(json.dumps({"version": "2", "weights": {"event": {"recency": 0.5}}}), encoding="utf-8")

	with caplog.at_level(logging.INFO, logger="discovery.domain.search.weights"):
		weights = load_calibration(path)

	assert isinstance(weights, RankingWeights)
	assert weights.event.recency == 0.5
	assert weights.event.text_match == 0.4
	assert any("overrides" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", json.dumps({"weights": {"scene": {"text_match": -1}}})])
def test_unusable_calibration_falls_back_with_warning(tmp_path, caplog, content):
	path = tmp_path / "calibration.json"
	path.write_text(content, encoding="utf-8")

	with caplog.at_level(logging.WARNING, logger="discovery.domain.search.weights"):
		weights = load_calibration(path)

	assert weights == default_weights()
	assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_unreadable_calibration_path_falls_back(tmp_path):
	assert load_calibration(tmp_path / "missing.json") == default_weights()


def test_repository_uses_supplied_weights(make_scene):
	from discovery.domain.scenes.repo import SceneRepository

	weights = merge_calibration(default_weights(), {"scene": {"proximity": 2.0}})
	repo = SceneRepository(weights=weights, trust_enabled=False)
	assert repo._weights.scene.proximity == 2.0
	assert repo._trust_enabled is False
