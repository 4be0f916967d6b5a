# core/interfaces.py
"""Core interfaces for the RAG system"""
from abc import ABC, abstractmethod
from typing import List, Sequence

from core.domain import Block, ChatMessage, Chunk

# ============= Page Fetcher Interface =============
class IPageFetcher(ABC):
    """
    Renders a documentation page and returns its nested block tree.

    Implementations may hold a browser or connection open; use as an
    async context manager around a batch of fetches.
    """

    async def __aenter__(self) -> "IPageFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    @abstractmethod
    async def fetch_rendered(self, url: str) -> List[Block]:
        """
        Fetch a page once the content is stable.

        Raises:
            TransientFetchError: on any navigation or extraction failure
        """
        pass

# ============= Embedding Service Interface =============
class IEmbeddingService(ABC):
    """Interface for embedding generation"""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding for one text.

        Raises:
            EmbeddingError: if the model call fails
        """
        pass

# ============= Completion Service Interface =============
class ILLMService(ABC):
    """Interface for conversational completion"""

    @abstractmethod
    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        """
        Return the assistant's reply to the message sequence.

        Raises:
            CompletionError: if the model call fails or returns nothing
        """
        pass

# ============= Vector Store Interface =============
class IVectorStore(ABC):
    """Read-only similarity index over a built corpus"""

    @abstractmethod
    def query(self, query_vector: Sequence[float], top_k: int = 5) -> List[Chunk]:
        """Return the top_k most similar chunks, most similar first"""
        pass

    @abstractmethod
    def count(self) -> int:
        """Get total number of chunks"""
        pass
