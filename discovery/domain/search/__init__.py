"""Ranked discovery search over scenes and events."""

from .schemas import EventSearchOptions, EventWindowOptions, SceneSearchOptions, SearchPage
from .weights import EventWeights, RankingWeights, SceneWeights, default_weights, load_calibration

__all__ = [
	"EventSearchOptions",
	"EventWeights",
	"EventWindowOptions",
	"RankingWeights",
	"SceneSearchOptions",
	"SceneWeights",
	"SearchPage",
	"default_weights",
	"load_calibration",
]
