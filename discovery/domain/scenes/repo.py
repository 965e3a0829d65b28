"""Scene and event repositories with location-consent enforcement on every write."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, Optional

import ulid
from pydantic import BaseModel

from discovery.domain.scenes import policy
from discovery.domain.scenes.exceptions import DeletedError, DuplicateNameError, NotFoundError, ValidationError
from discovery.domain.scenes.models import (
	STATUS_CANCELLED,
	Event,
	RecordT,
	Scene,
	enforce_location_consent,
)
from discovery.domain.scenes.store import RecordStore
from discovery.domain.search import schemas
from discovery.domain.search import service as search_service
from discovery.domain.search.weights import RankingWeights, load_calibration
from discovery.infra.clock import Clock, as_utc, now_utc
from discovery.obs import metrics as obs_metrics
from discovery.settings import settings

logger = logging.getLogger(__name__)


class UpsertResult(BaseModel):
	inserted: bool
	id: str


def _new_id() -> str:
	return ulid.new().str


class _RecordRepository(ABC, Generic[RecordT]):
	"""Shared write/read paths; subclasses name the kind and its owner field.

	Every value crossing the store boundary, in or out, is a deep copy.
	"""

	kind: str = "record"

	def __init__(
		self,
		*,
		clock: Clock = now_utc,
		weights: Optional[RankingWeights] = None,
		trust_enabled: Optional[bool] = None,
	) -> None:
		self._store: RecordStore[RecordT] = RecordStore()
		self._clock = clock
		self._weights = weights or load_calibration(settings.ranking_calibration_path)
		self._trust_enabled = settings.rank_trust_enabled if trust_enabled is None else trust_enabled

	# -- helpers (callers hold the store lock) ---------------------------------

	def _now(self) -> datetime:
		return as_utc(self._clock())

	@abstractmethod
	def _owner_of(self, record: RecordT) -> str:
		"""Identity that ``list_by_owner`` matches against."""

	def _validate(self, record: RecordT) -> None:
		if not record.id:
			raise ValidationError("id is required")
		policy.validate_coarse_geohash(record.coarse_geohash)

	def _prepare(self, record: RecordT, path: str) -> RecordT:
		"""Copy the caller's record and strip the precise point unless consent holds."""

		private = record.model_copy(deep=True)
		had_point = private.precise_point is not None
		enforce_location_consent(private)
		if had_point and private.precise_point is None:
			obs_metrics.inc_consent_strip(self.kind, path)
			logger.info(
				"precise point dropped without consent",
				extra={"kind": self.kind, "record_id": private.id, "write_path": path},
			)
		return private

	def _require(self, record_id: str) -> RecordT:
		record = self._store.get(record_id)
		if record is None:
			raise NotFoundError(f"{self.kind}_not_found")
		if record.is_deleted:
			raise DeletedError(f"{self.kind}_deleted")
		return record

	def _carry_over(self, incoming: RecordT, stored: Optional[RecordT]) -> None:
		"""Keep creation and deletion stamps of the stored version on overwrite."""

		now = self._now()
		if stored is not None:
			incoming.created_at = stored.created_at or incoming.created_at
			if stored.deleted_at is not None:
				incoming.deleted_at = stored.deleted_at
		if incoming.created_at is None:
			incoming.created_at = now
		incoming.updated_at = now

	# -- writes ----------------------------------------------------------------

	async def insert(self, record: RecordT) -> None:
		"""Store a new record by primary key after enforcing location consent."""

		async with self._store.write():
			private = self._prepare(record, "insert")
			self._validate(private)
			self._carry_over(private, None)
			self._store.put(private)
		obs_metrics.inc_repo_write(self.kind, "insert")

	async def update(self, record: RecordT) -> None:
		"""Overwrite the record stored under ``record.id``; consent is re-applied."""

		async with self._store.write():
			private = self._prepare(record, "update")
			self._validate(private)
			self._carry_over(private, self._store.get(private.id))
			self._store.put(private)
		obs_metrics.inc_repo_write(self.kind, "update")

	async def upsert(self, record: RecordT) -> UpsertResult:
		"""Idempotent write keyed by ``(record_owner, record_key)``.

		Without both halves of the key, or when the caller's id is already taken,
		the record is inserted under a freshly generated id.
		"""

		async with self._store.write():
			private = self._prepare(record, "upsert")
			ref = private.record_ref()
			existing = self._store.get_by_ref(*ref) if ref is not None else None
			if existing is not None:
				private.id = existing.id
			elif ref is None or not private.id or self._store.get(private.id) is not None:
				# A new record key never takes over an id that already belongs to another record.
				private.id = _new_id()
			self._validate(private)
			self._carry_over(private, existing)
			self._store.put(private)
		obs_metrics.inc_repo_write(self.kind, "upsert")
		return UpsertResult(inserted=existing is None, id=private.id)

	async def delete(self, record_id: str) -> None:
		"""Soft delete; the record stays stored with ``deleted_at`` set."""

		async with self._store.write():
			stored = self._require(record_id)
			private = self._prepare(stored, "delete")
			now = self._now()
			private.deleted_at = now
			private.updated_at = now
			self._store.put(private)
		obs_metrics.inc_repo_write(self.kind, "delete")
		logger.info("record soft-deleted", extra={"kind": self.kind, "record_id": record_id})

	# -- reads -----------------------------------------------------------------

	async def get_by_id(self, record_id: str) -> RecordT:
		async with self._store.read():
			return self._require(record_id).model_copy(deep=True)

	async def get_by_record_key(self, owner: str, key: str) -> RecordT:
		async with self._store.read():
			record = self._store.get_by_ref(owner, key)
			if record is None:
				raise NotFoundError(f"{self.kind}_not_found")
			if record.is_deleted:
				raise DeletedError(f"{self.kind}_deleted")
			return record.model_copy(deep=True)

	async def list_by_owner(self, owner: str) -> list[RecordT]:
		async with self._store.read():
			return [
				record.model_copy(deep=True)
				for record in self._store.values()
				if not record.is_deleted and self._owner_of(record) == owner
			]

	async def _run_search(self, run) -> schemas.SearchPage:
		start = time.perf_counter()
		obs_metrics.inc_search_query(self.kind)
		async with self._store.read():
			page = run(self._store.values())
			page.items = [item.model_copy(deep=True) for item in page.items]
		obs_metrics.observe_search_latency(self.kind, time.perf_counter() - start)
		obs_metrics.observe_search_results(self.kind, len(page.items))
		return page


class SceneRepository(_RecordRepository[Scene]):
	kind = "scene"

	def _owner_of(self, record: Scene) -> str:
		return record.owner_id

	async def exists_by_owner_and_name(self, owner: str, name: str, exclude_id: Optional[str] = None) -> bool:
		"""Case-insensitive name collision check among an owner's live scenes."""

		wanted = name.strip().lower()
		async with self._store.read():
			for scene in self._store.values():
				if scene.is_deleted or scene.owner_id != owner:
					continue
				if exclude_id is not None and scene.id == exclude_id:
					continue
				if scene.name.strip().lower() == wanted:
					return True
		return False

	async def ensure_name_available(self, owner: str, name: str, exclude_id: Optional[str] = None) -> None:
		if await self.exists_by_owner_and_name(owner, name, exclude_id):
			raise DuplicateNameError()

	async def search(self, options: schemas.SceneSearchOptions) -> schemas.SearchPage[Scene]:
		return await self._run_search(
			lambda scenes: search_service.search_scenes(
				scenes,
				options,
				weights=self._weights.scene,
				trust_enabled=self._trust_enabled,
			)
		)


class EventRepository(_RecordRepository[Event]):
	kind = "event"

	def _owner_of(self, record: Event) -> str:
		return record.scene_id

	def _validate(self, record: Event) -> None:
		super()._validate(record)
		policy.validate_time_window(record.starts_at, record.ends_at)

	async def list_by_scene(self, scene_id: str) -> list[Event]:
		return await self.list_by_owner(scene_id)

	async def cancel(self, event_id: str, reason: Optional[str] = None) -> Event:
		"""Mark an event cancelled; repeat calls keep the first ``cancelled_at``."""

		async with self._store.write():
			stored = self._require(event_id)
			private = self._prepare(stored, "cancel")
			now = self._now()
			if private.status != STATUS_CANCELLED or private.cancelled_at is None:
				private.status = STATUS_CANCELLED
				private.cancelled_at = now
				logger.info("event cancelled", extra={"kind": self.kind, "record_id": event_id})
			if reason is not None:
				private.cancellation_reason = policy.sanitize_text(reason)
			private.updated_at = now
			self._store.put(private)
			result = private.model_copy(deep=True)
		obs_metrics.inc_repo_write(self.kind, "cancel")
		return result

	async def search(self, options: schemas.EventSearchOptions) -> schemas.SearchPage[Event]:
		now = self._now()
		return await self._run_search(
			lambda events: search_service.search_events(
				events,
				options,
				weights=self._weights.event,
				now=now,
				trust_enabled=self._trust_enabled,
			)
		)

	async def search_by_bbox_and_time(self, options: schemas.EventWindowOptions) -> schemas.SearchPage[Event]:
		return await self._run_search(lambda events: search_service.search_events_by_time(events, options))


__all__ = ["EventRepository", "SceneRepository", "UpsertResult"]
