import asyncio

import pytest

from discovery.infra.locks import ReadWriteLock


@pytest.mark.asyncio
async def test_readers_share_the_lock():
	lock = ReadWriteLock()
	async with lock.read():
		async with lock.read():
			assert lock.readers == 2
	assert lock.readers == 0


@pytest.mark.asyncio
async def test_writer_waits_for_readers_and_excludes_them():
	lock = ReadWriteLock()
	order = []
	reader_entered = asyncio.Event()
	release_reader = asyncio.Event()

	async def reader():
		async with lock.read():
			reader_entered.set()
			await release_reader.wait()
			order.append("reader-done")

	async def writer():
		await reader_entered.wait()
		async with lock.write():
			assert lock.readers == 0
			assert lock.locked_for_write
			order.append("writer")

	tasks = [asyncio.create_task(reader()), asyncio.create_task(writer())]
	await asyncio.sleep(0)
	await asyncio.sleep(0)
	assert order == []
	release_reader.set()
	await asyncio.gather(*tasks)
	assert order == ["reader-done", "writer"]
	assert not lock.locked_for_write


@pytest.mark.asyncio
async def test_waiting_writer_blocks_new_readers():
	lock = ReadWriteLock()
	order = []
	first_in = asyncio.Event()
	release_first = asyncio.Event()

	async def first_reader():
		async with lock.read():
			first_in.set()
			await release_first.wait()
		order.append("first-reader")

	async def writer():
		async with lock.write():
			order.append("writer")

	async def late_reader():
		async with lock.read():
			order.append("late-reader")

	first = asyncio.create_task(first_reader())
	await first_in.wait()
	pending_writer = asyncio.create_task(writer())
	await asyncio.sleep(0)
	late = asyncio.create_task(late_reader())
	await asyncio.sleep(0)
	release_first.set()
	await asyncio.gather(first, pending_writer, late)
	assert order.index("writer") < order.index("late-reader")


@pytest.mark.asyncio
async def test_cancelled_writer_releases_waiting_readers():
	lock = ReadWriteLock()
	hold = asyncio.Event()
	entered = asyncio.Event()

	async def holder():
		async with lock.read():
			entered.set()
			await hold.wait()

	holding = asyncio.create_task(holder())
	await entered.wait()

	async def blocked_writer():
		async with lock.write():
			pass

	writer = asyncio.create_task(blocked_writer())
	await asyncio.sleep(0)
	writer.cancel()
	with pytest.raises(asyncio.CancelledError):
		await writer

	async with lock.read():
		assert lock.readers == 2
	hold.set()
	await holding


@pytest.mark.asyncio
async def test_concurrent_repository_writes_are_serialised(scene_repo, make_scene):
	await asyncio.gather(*(scene_repo.insert(make_scene(f"scene-{idx}")) for idx in range(20)))
	assert len(await scene_repo.list_by_owner("owner-1")) == 20
