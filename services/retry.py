# services/retry.py
"""Exponential-backoff retry for flaky async operations"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

T = TypeVar("T")


class RetryExecutor:
    """
    Runs an async operation up to ``max_retries`` times in total.

    After failed attempt ``i`` (0-based) it sleeps ``initial_delay * 2**i``
    seconds before the next one. No sleep follows the final failure; that
    failure is re-raised unchanged. The operation is a zero-argument factory
    so every attempt starts from scratch.
    """

    def __init__(
        self,
        max_retries: int = 5,
        initial_delay: float = 3.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        label: str = "operation",
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.label = label
        self._sleep = sleep or asyncio.sleep

    def _log_attempt(self, retry_state: RetryCallState) -> None:
        logger.warning(
            f"[RETRY] {self.label} attempt {retry_state.attempt_number}/{self.max_retries} "
            f"failed: {retry_state.outcome.exception()}. "
            f"Retrying in {retry_state.next_action.sleep:.1f}s"
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.initial_delay, exp_base=2, min=0),
            before_sleep=self._log_attempt,
            sleep=self._sleep,
            reraise=True,
        )

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await self._retrying()(operation)
        except Exception as e:
            logger.error(f"[RETRY] {self.label} failed after {self.max_retries} attempts: {e}")
            raise
