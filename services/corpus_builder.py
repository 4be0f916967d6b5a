# services/corpus_builder.py
"""Cold-start pipeline: fetch pages → index → vector store"""
import logging
from typing import List, Optional, Sequence

from config import DocPage, settings
from core.domain import ScrapedDocument
from core.exceptions import EmptyCorpusError
from core.interfaces import IPageFetcher
from infrastructure.vector_store import InMemoryVectorStore
from services.embedding_indexer import EmbeddingIndexer
from services.retry import RetryExecutor

logger = logging.getLogger(settings.LOGGER_NAME)


class CorpusBuilder:
    """
    Runs the full ingestion pipeline once per call.

    A page that still fails after the fetch retries aborts the build.
    Embedding failures only drop individual chunks (see EmbeddingIndexer),
    but a build that ends with zero chunks is treated as a failure.
    """

    def __init__(
        self,
        page_fetcher: IPageFetcher,
        indexer: EmbeddingIndexer,
        pages: Optional[Sequence[DocPage]] = None,
        fetch_retry: Optional[RetryExecutor] = None,
    ):
        self.page_fetcher = page_fetcher
        self.indexer = indexer
        self.pages = list(pages if pages is not None else settings.DOC_PAGES)
        self.fetch_retry = fetch_retry or RetryExecutor(
            max_retries=settings.FETCH_MAX_RETRIES,
            initial_delay=settings.FETCH_INITIAL_DELAY_SEC,
            label="page fetch",
        )

    async def fetch_documents(self) -> List[ScrapedDocument]:
        documents: List[ScrapedDocument] = []
        async with self.page_fetcher as fetcher:
            for page in self.pages:
                logger.info(f"[BUILD] Fetching '{page.title}' ({page.url})")
                blocks = await self.fetch_retry.run(
                    lambda url=page.url: fetcher.fetch_rendered(url)
                )
                documents.append(ScrapedDocument(
                    title=page.title,
                    url=page.url,
                    content=tuple(blocks),
                ))
                logger.info(f"[BUILD] '{page.title}': {len(blocks)} top-level blocks")
        return documents

    async def build(self) -> InMemoryVectorStore:
        documents = await self.fetch_documents()
        chunks = await self.indexer.index(documents)
        if not chunks:
            raise EmptyCorpusError(
                f"No chunks could be indexed from {len(documents)} documents"
            )
        return InMemoryVectorStore(chunks)
