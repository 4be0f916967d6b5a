# services/factory.py
"""Provider functions for FastAPI dependency injection

Each provider returns a process-wide instance (lru_cache). Tests override
``get_chat_service`` or build their own CorpusCache instead.
"""
from functools import lru_cache

from config import settings
from core.interfaces import IEmbeddingService, ILLMService, IPageFetcher
from infrastructure.embedding_services import OpenAIEmbedding
from infrastructure.llm_services import OllamaChatService, OpenAIChatService
from infrastructure.page_fetcher import PlaywrightPageFetcher
from services.chat_service import ChatService
from services.corpus_builder import CorpusBuilder
from services.corpus_cache import CorpusCache
from services.embedding_indexer import EmbeddingIndexer


@lru_cache(maxsize=None)
def get_embedding_service() -> IEmbeddingService:
    """Create embedding service based on configuration."""
    if settings.EMBEDDING_PROVIDER == "openai":
        return OpenAIEmbedding(settings.EMBEDDING_MODEL_NAME)
    elif settings.EMBEDDING_PROVIDER == "sentence_transformers":
        # Imported here so torch is only loaded when the local model is used
        from infrastructure.local_embedding import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(settings.LOCAL_EMBEDDING_MODEL_NAME)
    else:
        raise ValueError(f"Unknown embedding provider: {settings.EMBEDDING_PROVIDER}")


@lru_cache(maxsize=None)
def get_llm_service() -> ILLMService:
    """Create completion service based on configuration."""
    if settings.LLM_PROVIDER == "openai":
        return OpenAIChatService(settings.LLM_MODEL_NAME, settings.LLM_TEMPERATURE)
    elif settings.LLM_PROVIDER == "ollama":
        return OllamaChatService(settings.OLLAMA_BASE_URL, settings.OLLAMA_MODEL_NAME)
    else:
        raise ValueError(f"Unknown LLM provider: {settings.LLM_PROVIDER}")


def get_page_fetcher() -> IPageFetcher:
    return PlaywrightPageFetcher()


def get_corpus_builder() -> CorpusBuilder:
    return CorpusBuilder(
        page_fetcher=get_page_fetcher(),
        indexer=EmbeddingIndexer(get_embedding_service()),
        pages=settings.DOC_PAGES,
    )


@lru_cache(maxsize=None)
def get_corpus_cache() -> CorpusCache:
    """The one corpus cache for this process."""
    return CorpusCache(build=lambda: get_corpus_builder().build())


@lru_cache(maxsize=None)
def get_chat_service() -> ChatService:
    return ChatService(
        corpus_cache=get_corpus_cache(),
        embedding_service=get_embedding_service(),
        llm_service=get_llm_service(),
        top_k=settings.TOP_K,
        product=settings.ASSISTANT_PRODUCT_NAME,
    )


def clear_instances() -> None:
    """Drop cached providers (app shutdown, tests)."""
    for provider in (get_embedding_service, get_llm_service, get_corpus_cache, get_chat_service):
        provider.cache_clear()
