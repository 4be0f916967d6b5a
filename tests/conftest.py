"""
Shared test fixtures: in-memory fakes for every external collaborator.

No browser, network or model is touched by the suite.
"""
from typing import Dict, List, Sequence

import pytest

from core.domain import (
    Block, ChatMessage, Chunk, ChunkMetadata, BlockType, CodeBlock,
    HeadingBlock, ListBlock, TextBlock, ToggleBlock,
)
from core.exceptions import CompletionError, EmbeddingError, TransientFetchError
from core.interfaces import IEmbeddingService, ILLMService, IPageFetcher
from services.retry import RetryExecutor


class FakeEmbedding(IEmbeddingService):
    """Deterministic embedder. Texts in `vectors` get that vector, others a hash-based one."""

    def __init__(self, vectors: Dict[str, List[float]] = None, fail_on: Sequence[str] = (), dim: int = 3):
        self.vectors = vectors or {}
        self.fail_on = set(fail_on)
        self.dim = dim
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if text in self.fail_on:
            raise EmbeddingError(f"cannot embed {text!r}")
        if text in self.vectors:
            return list(self.vectors[text])
        seed = sum(ord(c) for c in text)
        return [float((seed + i) % 7 + 1) for i in range(self.dim)]


class FakeLLM(ILLMService):
    def __init__(self, reply: str = "answer", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.calls: List[List[ChatMessage]] = []

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        self.calls.append(list(messages))
        if self.fail:
            raise CompletionError("model unavailable")
        return self.reply


class FakePageFetcher(IPageFetcher):
    """Serves canned block trees; `failures[url]` fetches fail before succeeding."""

    def __init__(self, pages: Dict[str, List[Block]], failures: Dict[str, int] = None):
        self.pages = pages
        self.failures = dict(failures or {})
        self.fetch_calls: List[str] = []
        self.entered = 0
        self.exited = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exited += 1

    async def fetch_rendered(self, url: str) -> List[Block]:
        self.fetch_calls.append(url)
        if self.failures.get(url, 0) > 0:
            self.failures[url] -= 1
            raise TransientFetchError(f"timeout loading {url}")
        return list(self.pages[url])


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_chunk(content: str, embedding: Sequence[float], title: str = "Doc") -> Chunk:
    return Chunk(
        content=content,
        embedding=tuple(embedding),
        metadata=ChunkMetadata(title=title, url=f"https://docs.example/{title}", block_type=BlockType.TEXT),
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def no_wait_retry(recording_sleep) -> RetryExecutor:
    return RetryExecutor(max_retries=3, initial_delay=0.5, sleep=recording_sleep)


@pytest.fixture
def sample_blocks() -> List[Block]:
    """A page with a nested toggle section."""
    return [
        HeadingBlock(text="Authentication", level=1),
        TextBlock(text="Every request needs a token. Tokens expire after a day."),
        ToggleBlock(
            header="Example request",
            children=(
                CodeBlock(text="curl -H 'Authorization: Token abc' https://api.example", language="bash"),
                ToggleBlock(header="Response fields", children=(ListBlock(items=("id", "name")),)),
            ),
        ),
        TextBlock(text="Rate limits apply!"),
    ]
