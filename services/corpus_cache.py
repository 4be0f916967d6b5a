# services/corpus_cache.py
"""Single-flight cache for the process-wide corpus"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from config import settings
from core.domain import CorpusState
from core.interfaces import IVectorStore

logger = logging.getLogger(settings.LOGGER_NAME)


class CorpusCache:
    """
    Builds the vector store at most once at a time and serves it afterwards.

    EMPTY → BUILDING on the first ensure_ready(); callers arriving while
    BUILDING await the same in-flight task. BUILDING → READY on success,
    BUILDING → EMPTY on failure (every waiter sees the error, the next call
    starts a fresh build). READY is terminal.

    Must be used from a single event loop.
    """

    def __init__(self, build: Callable[[], Awaitable[IVectorStore]]):
        self._build = build
        self._store: Optional[IVectorStore] = None
        self._inflight: Optional["asyncio.Task[IVectorStore]"] = None
        self._build_count = 0

    @property
    def state(self) -> CorpusState:
        if self._store is not None:
            return CorpusState.READY
        if self._inflight is not None:
            return CorpusState.BUILDING
        return CorpusState.EMPTY

    @property
    def store(self) -> Optional[IVectorStore]:
        return self._store

    @property
    def build_count(self) -> int:
        """Number of pipeline runs started so far"""
        return self._build_count

    async def _run_build(self) -> IVectorStore:
        self._build_count += 1
        logger.info(f"[CORPUS] Build #{self._build_count} started")
        try:
            store = await self._build()
        except Exception as e:
            logger.error(f"[CORPUS] Build failed, cache reset to empty: {e}", exc_info=True)
            raise
        else:
            self._store = store
            logger.info(f"[CORPUS] Ready with {store.count()} chunks")
            return store
        finally:
            self._inflight = None

    async def ensure_ready(self) -> IVectorStore:
        """Return the vector store, building it first if needed."""
        if self._store is not None:
            return self._store

        if self._inflight is None:
            # No await between the check and the assignment, so only one
            # coroutine can start the build.
            self._inflight = asyncio.ensure_future(self._run_build())
        else:
            logger.debug("[CORPUS] Joining in-flight build")

        # shield: one caller being cancelled must not cancel the shared build
        return await asyncio.shield(self._inflight)

    async def aclose(self) -> None:
        """Cancel an in-flight build and wait for it to unwind (app shutdown)."""
        task = self._inflight
        if task is None or task.done():
            return
        logger.info("[CORPUS] Cancelling in-flight build")
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        finally:
            # A task cancelled before it first ran never reaches its own finally
            if self._inflight is task:
                self._inflight = None
