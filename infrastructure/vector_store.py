# infrastructure/vector_store.py
"""In-memory cosine-similarity index over an immutable corpus"""
import logging
from typing import List, Optional, Sequence

import numpy as np

from config import settings
from core.domain import Chunk, ChunkSearchResult
from core.exceptions import EmbeddingDimensionError
from core.interfaces import IVectorStore

logger = logging.getLogger(settings.LOGGER_NAME)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (|a| * |b|), defined as 0.0 when either vector has zero
    magnitude.
    """
    va = np.asarray(a, dtype="float64")
    vb = np.asarray(b, dtype="float64")
    if va.shape != vb.shape:
        raise ValueError(f"Vector shapes differ: {va.shape} vs {vb.shape}")
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.dot(va, vb) / denom)


class InMemoryVectorStore(IVectorStore):
    """
    Holds the corpus as one (N, D) matrix built at construction.

    Nothing is mutated after __init__, so concurrent queries need no lock.
    Ties in similarity keep corpus insertion order.
    """

    def __init__(self, chunks: Sequence[Chunk]):
        self._chunks: tuple = tuple(chunks)
        self._dimension: Optional[int] = None

        if self._chunks:
            self._dimension = len(self._chunks[0].embedding)
            for pos, chunk in enumerate(self._chunks):
                if len(chunk.embedding) != self._dimension:
                    raise EmbeddingDimensionError(
                        f"Chunk {pos} has {len(chunk.embedding)} dimensions, "
                        f"expected {self._dimension}"
                    )
            self._matrix = np.array([c.embedding for c in self._chunks], dtype="float64")
        else:
            self._matrix = np.zeros((0, 0), dtype="float64")

        self._norms = np.linalg.norm(self._matrix, axis=1) if self._chunks else np.zeros(0)
        self._matrix.setflags(write=False)
        self._norms.setflags(write=False)
        logger.info(f"[VECTOR] Store ready with {len(self._chunks)} chunks (dim={self._dimension})")

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    @property
    def chunks(self) -> tuple:
        return self._chunks

    def count(self) -> int:
        return len(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def _scores(self, query_vector: Sequence[float]) -> np.ndarray:
        q = np.asarray(query_vector, dtype="float64")
        if q.ndim != 1 or q.shape[0] != self._dimension:
            raise ValueError(
                f"Query vector has shape {q.shape}, expected ({self._dimension},)"
            )
        denom = self._norms * np.linalg.norm(q)
        dots = self._matrix @ q
        # Zero-magnitude pairs score exactly 0
        return np.divide(dots, denom, out=np.zeros_like(dots), where=denom != 0)

    def search(self, query_vector: Sequence[float], top_k: int = 5) -> List[ChunkSearchResult]:
        """Top-k chunks with their similarity scores, most similar first."""
        if not self._chunks or top_k <= 0:
            return []
        scores = self._scores(query_vector)
        order = np.argsort(-scores, kind="stable")[:top_k]
        return [
            ChunkSearchResult(chunk=self._chunks[i], score=float(scores[i]))
            for i in order
        ]

    def query(self, query_vector: Sequence[float], top_k: int = 5) -> List[Chunk]:
        return [result.chunk for result in self.search(query_vector, top_k)]
