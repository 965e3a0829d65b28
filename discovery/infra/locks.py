"""Async readers-writer lock for in-process stores."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ReadWriteLock:
	"""Many concurrent readers or one writer.

	Waiting writers block new readers, so a steady stream of searches cannot
	starve inserts.
	"""

	def __init__(self) -> None:
		self._cond = asyncio.Condition()
		self._readers = 0
		self._writer = False
		self._writers_waiting = 0

	@asynccontextmanager
	async def read(self) -> AsyncIterator[None]:
		async with self._cond:
			await self._cond.wait_for(lambda: not self._writer and self._writers_waiting == 0)
			self._readers += 1
		try:
			yield
		finally:
			async with self._cond:
				self._readers -= 1
				if self._readers == 0:
					self._cond.notify_all()

	@asynccontextmanager
	async def write(self) -> AsyncIterator[None]:
		async with self._cond:
			self._writers_waiting += 1
			try:
				await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
			except BaseException:
				# An abandoned writer must wake readers it was holding back.
				self._writers_waiting -= 1
				self._cond.notify_all()
				raise
			self._writers_waiting -= 1
			self._writer = True
		try:
			yield
		finally:
			async with self._cond:
				self._writer = False
				self._cond.notify_all()

	@property
	def readers(self) -> int:
		return self._readers

	@property
	def locked_for_write(self) -> bool:
		return self._writer
