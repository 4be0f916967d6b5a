# services/embedding_indexer.py
"""Flatten → render → chunk → embed, producing indexed chunks"""
import logging
from typing import List, Optional, Sequence

from config import settings
from core.domain import (
    Block, Chunk, ChunkMetadata, CodeBlock, HeadingBlock, ListBlock,
    ScrapedDocument, TextBlock, ToggleBlock,
)
from core.exceptions import EmbeddingDimensionError
from core.interfaces import IEmbeddingService
from services.chunker import chunk_text
from services.content_flattener import flatten
from services.retry import RetryExecutor

logger = logging.getLogger(settings.LOGGER_NAME)

LIST_BULLET = "• "


def render_block(block: Block) -> str:
    """Text rendering of a single (already flattened) block."""
    if isinstance(block, HeadingBlock):
        return f"# {block.text}"
    if isinstance(block, CodeBlock):
        return f"```{block.language}\n{block.text}\n```"
    if isinstance(block, ListBlock):
        return "\n".join(f"{LIST_BULLET}{item}" for item in block.items)
    if isinstance(block, TextBlock):
        return block.text
    if isinstance(block, ToggleBlock):
        raise ValueError("Toggle blocks must be flattened before rendering")
    raise TypeError(f"Unknown block: {block!r}")


class EmbeddingIndexer:
    """
    Best-effort indexer: a chunk whose embedding still fails after retries
    is logged and skipped; the rest of the corpus is kept.

    The first successful vector fixes the corpus dimension. Later vectors
    of a different length are dropped.
    """

    def __init__(
        self,
        embedding_service: IEmbeddingService,
        retry: Optional[RetryExecutor] = None,
        max_chunk_length: int = settings.CHUNK_MAX_LENGTH,
    ):
        self.embedding_service = embedding_service
        self.retry = retry or RetryExecutor(
            max_retries=settings.EMBED_MAX_RETRIES,
            initial_delay=settings.EMBED_INITIAL_DELAY_SEC,
            label="embedding",
        )
        self.max_chunk_length = max_chunk_length

    async def index(self, documents: Sequence[ScrapedDocument]) -> List[Chunk]:
        chunks: List[Chunk] = []
        dimension: Optional[int] = None
        skipped = 0

        for doc in documents:
            for block in flatten(doc.content):
                metadata = ChunkMetadata(
                    title=doc.title,
                    url=doc.url,
                    block_type=block.block_type,
                    language=block.language if isinstance(block, CodeBlock) else None,
                )
                for piece in chunk_text(render_block(block), self.max_chunk_length):
                    try:
                        vector = await self.retry.run(
                            lambda piece=piece: self.embedding_service.embed(piece)
                        )
                        if dimension is None:
                            dimension = len(vector)
                        elif len(vector) != dimension:
                            raise EmbeddingDimensionError(
                                f"Expected {dimension} dimensions, got {len(vector)}"
                            )
                    except Exception as e:
                        skipped += 1
                        logger.warning(
                            f"[INDEXER] Skipping chunk from '{doc.title}' ({block.block_type.value}): {e}"
                        )
                        continue

                    chunks.append(Chunk(
                        content=piece,
                        embedding=tuple(float(x) for x in vector),
                        metadata=metadata,
                    ))

        logger.info(
            f"[INDEXER] Indexed {len(chunks)} chunks from {len(documents)} documents "
            f"({skipped} skipped)"
        )
        return chunks
