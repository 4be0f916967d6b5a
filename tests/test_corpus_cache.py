import asyncio

import pytest

from core.domain import CorpusState
from core.exceptions import CorpusBuildError, TransientFetchError
from infrastructure.vector_store import InMemoryVectorStore
from services.corpus_cache import CorpusCache
from conftest import make_chunk


class CountingBuild:
    """Build function that can be held open and made to fail."""

    def __init__(self, fail_times: int = 0):
        self.calls = 0
        self.fail_times = fail_times
        self.release = asyncio.Event()

    async def __call__(self):
        self.calls += 1
        await self.release.wait()
        if self.calls <= self.fail_times:
            raise TransientFetchError("page fetch exhausted")
        return InMemoryVectorStore([make_chunk("only", [1.0, 0.0])])


@pytest.mark.asyncio
async def test_starts_empty():
    cache = CorpusCache(build=CountingBuild())
    assert cache.state == CorpusState.EMPTY
    assert cache.store is None


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_build():
    build = CountingBuild()
    cache = CorpusCache(build=build)

    waiters = [asyncio.ensure_future(cache.ensure_ready()) for _ in range(10)]
    await asyncio.sleep(0)
    assert cache.state == CorpusState.BUILDING

    build.release.set()
    stores = await asyncio.gather(*waiters)

    assert build.calls == 1
    assert cache.build_count == 1
    assert all(s is stores[0] for s in stores)
    assert cache.state == CorpusState.READY


@pytest.mark.asyncio
async def test_ready_cache_does_no_further_work():
    build = CountingBuild()
    build.release.set()
    cache = CorpusCache(build=build)

    first = await cache.ensure_ready()
    second = await cache.ensure_ready()

    assert first is second
    assert build.calls == 1


@pytest.mark.asyncio
async def test_failure_reaches_every_waiter_and_resets_to_empty():
    build = CountingBuild(fail_times=1)
    cache = CorpusCache(build=build)

    waiters = [asyncio.ensure_future(cache.ensure_ready()) for _ in range(3)]
    await asyncio.sleep(0)
    build.release.set()
    results = await asyncio.gather(*waiters, return_exceptions=True)

    assert all(isinstance(r, TransientFetchError) for r in results)
    assert build.calls == 1
    assert cache.state == CorpusState.EMPTY
    assert cache.store is None


@pytest.mark.asyncio
async def test_next_call_after_failure_rebuilds():
    build = CountingBuild(fail_times=1)
    build.release.set()
    cache = CorpusCache(build=build)

    with pytest.raises(TransientFetchError):
        await cache.ensure_ready()

    store = await cache.ensure_ready()

    assert build.calls == 2
    assert store.count() == 1
    assert cache.state == CorpusState.READY


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_build():
    build = CountingBuild()
    cache = CorpusCache(build=build)

    impatient = asyncio.ensure_future(cache.ensure_ready())
    patient = asyncio.ensure_future(cache.ensure_ready())
    await asyncio.sleep(0)
    impatient.cancel()
    build.release.set()

    store = await patient

    assert impatient.cancelled()
    assert store.count() == 1
    assert build.calls == 1


@pytest.mark.asyncio
async def test_separate_instances_are_isolated():
    build_a, build_b = CountingBuild(), CountingBuild()
    build_a.release.set()
    build_b.release.set()

    await CorpusCache(build=build_a).ensure_ready()
    await CorpusCache(build=build_b).ensure_ready()

    assert (build_a.calls, build_b.calls) == (1, 1)


@pytest.mark.asyncio
async def test_build_error_type_is_preserved():
    async def failing_build():
        raise CorpusBuildError("nothing indexed")

    cache = CorpusCache(build=failing_build)
    with pytest.raises(CorpusBuildError, match="nothing indexed"):
        await cache.ensure_ready()
    assert cache.state == CorpusState.EMPTY


class HangingBuild:
    """Build function that never finishes on its own and records cancellation."""

    def __init__(self):
        self.started = False
        self.cancelled = False

    async def __call__(self):
        self.started = True
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


@pytest.mark.asyncio
async def test_aclose_cancels_running_build():
    build = HangingBuild()
    cache = CorpusCache(build=build)

    waiter = asyncio.ensure_future(cache.ensure_ready())
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert build.started

    await cache.aclose()

    assert build.cancelled
    assert cache.state == CorpusState.EMPTY
    with pytest.raises(asyncio.CancelledError):
        await waiter


@pytest.mark.asyncio
async def test_aclose_before_build_starts_resets_state():
    build = HangingBuild()
    cache = CorpusCache(build=build)

    waiter = asyncio.ensure_future(cache.ensure_ready())
    await asyncio.sleep(0)
    assert cache.state == CorpusState.BUILDING

    await cache.aclose()

    assert not build.started
    assert cache.state == CorpusState.EMPTY
    with pytest.raises(asyncio.CancelledError):
        await waiter


@pytest.mark.asyncio
async def test_aclose_is_a_noop_when_idle_or_ready():
    build = CountingBuild()
    build.release.set()
    cache = CorpusCache(build=build)

    await cache.aclose()
    store = await cache.ensure_ready()
    await cache.aclose()

    assert cache.state == CorpusState.READY
    assert cache.store is store
