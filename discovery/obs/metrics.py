"""Central registry for Prometheus metrics used across the engine."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


SEARCH_QUERIES = Counter(
	"discovery_search_queries_total",
	"Search calls served",
	["kind"],
)

SEARCH_LATENCY = Histogram(
	"discovery_search_latency_seconds",
	"Search latency (filter, score, sort, paginate) in seconds",
	["kind"],
	buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

SEARCH_RESULTS = Histogram(
	"discovery_search_results",
	"Items returned per search page",
	["kind"],
	buckets=(0, 1, 5, 10, 20, 50, 100),
)

CURSOR_DECODE_FAILURES = Counter(
	"discovery_cursor_decode_failures_total",
	"Malformed pagination cursors rejected",
	["kind"],
)

CONSENT_STRIPS = Counter(
	"discovery_consent_strips_total",
	"Precise points dropped at write time because consent was not granted",
	["kind", "path"],
)

REPO_WRITES = Counter(
	"discovery_repo_writes_total",
	"Repository write operations",
	["kind", "op"],
)


def inc_search_query(kind: str) -> None:
	SEARCH_QUERIES.labels(kind=kind).inc()


def observe_search_latency(kind: str, latency_seconds: float) -> None:
	SEARCH_LATENCY.labels(kind=kind).observe(latency_seconds)


def observe_search_results(kind: str, count: int) -> None:
	SEARCH_RESULTS.labels(kind=kind).observe(count)


def inc_cursor_decode_failure(kind: str) -> None:
	CURSOR_DECODE_FAILURES.labels(kind=kind).inc()


def inc_consent_strip(kind: str, path: str) -> None:
	CONSENT_STRIPS.labels(kind=kind, path=path).inc()


def inc_repo_write(kind: str, op: str) -> None:
	REPO_WRITES.labels(kind=kind, op=op).inc()
