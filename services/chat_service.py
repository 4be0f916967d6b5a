# services/chat_service.py
"""Retrieval-grounded chat: corpus → top-k context → completion"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from config import settings
from core.domain import ChatMessage, ChatRole, Chunk, CorpusState
from core.interfaces import IEmbeddingService, ILLMService
from services.corpus_cache import CorpusCache
from services.prompts import build_system_prompt

logger = logging.getLogger(settings.LOGGER_NAME)

CONTEXT_SEPARATOR = "\n\n"


def build_context(chunks: Sequence[Chunk]) -> str:
    """Join chunk contents, most relevant first, with a blank line between."""
    return CONTEXT_SEPARATOR.join(chunk.content for chunk in chunks)


def build_messages(
    question: str,
    history: Sequence[str],
    context: str,
    product: str = settings.ASSISTANT_PRODUCT_NAME,
) -> List[ChatMessage]:
    """
    System prompt with context, then history alternating user/assistant by
    position (even index = user), then the question as the final user turn.
    """
    messages = [ChatMessage(ChatRole.SYSTEM, build_system_prompt(context, product))]
    for i, text in enumerate(history):
        role = ChatRole.USER if i % 2 == 0 else ChatRole.ASSISTANT
        messages.append(ChatMessage(role, text))
    messages.append(ChatMessage(ChatRole.USER, question))
    return messages


class ChatService:
    """
    Answers a question from the documentation corpus.

    Does no retries of its own: embedding and completion failures
    propagate to the caller and leave the corpus untouched.
    """

    def __init__(
        self,
        corpus_cache: CorpusCache,
        embedding_service: IEmbeddingService,
        llm_service: ILLMService,
        top_k: int = settings.TOP_K,
        product: str = settings.ASSISTANT_PRODUCT_NAME,
    ):
        self.corpus_cache = corpus_cache
        self.embedding_service = embedding_service
        self.llm_service = llm_service
        self.top_k = top_k
        self.product = product

    async def retrieve(self, question: str) -> List[Chunk]:
        store = await self.corpus_cache.ensure_ready()
        query_vector = await self.embedding_service.embed(question)
        return store.query(query_vector, self.top_k)

    async def respond(self, question: str, history: Optional[Sequence[str]] = None) -> str:
        chunks = await self.retrieve(question)
        logger.info(f"[CHAT] Retrieved {len(chunks)} chunks for question ({len(question)} chars)")

        messages = build_messages(question, history or [], build_context(chunks), self.product)
        return await self.llm_service.complete(messages)

    def status(self) -> Dict[str, Any]:
        store = self.corpus_cache.store
        state = self.corpus_cache.state
        return {
            "state": state,
            "chunks_available": store.count() if store is not None else 0,
            "ready_for_queries": state == CorpusState.READY,
        }
