"""In-memory record store shared by the scene and event repositories."""

from __future__ import annotations

from typing import AsyncContextManager, Generic, Iterator, Optional

from discovery.domain.scenes.exceptions import ValidationError
from discovery.domain.scenes.models import RecordT
from discovery.infra.locks import ReadWriteLock


class RecordStore(Generic[RecordT]):
	"""Primary-key map plus a ``(record_owner, record_key)`` secondary index.

	Accessors do not lock. Callers wrap each whole operation in :meth:`read` or
	:meth:`write` so the map and index are always observed together.
	"""

	def __init__(self) -> None:
		self._lock = ReadWriteLock()
		self._records: dict[str, RecordT] = {}
		self._by_ref: dict[tuple[str, str], str] = {}

	def read(self) -> AsyncContextManager[None]:
		return self._lock.read()

	def write(self) -> AsyncContextManager[None]:
		return self._lock.write()

	def get(self, record_id: str) -> Optional[RecordT]:
		return self._records.get(record_id)

	def get_by_ref(self, owner: str, key: str) -> Optional[RecordT]:
		record_id = self._by_ref.get((owner, key))
		if record_id is None:
			return None
		return self._records.get(record_id)

	def put(self, record: RecordT) -> None:
		"""Store ``record`` (already a private copy) and re-point the record index."""

		ref = record.record_ref()
		if ref is not None:
			holder = self._by_ref.get(ref)
			if holder is not None and holder != record.id:
				raise ValidationError("record_key_conflict")
		previous = self._records.get(record.id)
		if previous is not None:
			old_ref = previous.record_ref()
			if old_ref is not None and old_ref != ref and self._by_ref.get(old_ref) == record.id:
				del self._by_ref[old_ref]
		self._records[record.id] = record
		if ref is not None:
			self._by_ref[ref] = record.id

	def values(self) -> Iterator[RecordT]:
		return iter(self._records.values())

	def __len__(self) -> int:
		return len(self._records)
