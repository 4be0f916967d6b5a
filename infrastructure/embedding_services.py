# infrastructure/embedding_services.py
"""Remote embedding generation via the OpenAI API"""
import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from config import settings
from core.exceptions import EmbeddingError
from core.interfaces import IEmbeddingService

logger = logging.getLogger(settings.LOGGER_NAME)


def truncate_for_embedding(text: str, max_chars: int = settings.EMBEDDING_MAX_INPUT_CHARS) -> str:
    """Clip input to the model's accepted length."""
    return text[:max_chars]


class OpenAIEmbedding(IEmbeddingService):
    """OpenAI embeddings endpoint, one request per text."""

    def __init__(
        self,
        model_name: str = settings.EMBEDDING_MODEL_NAME,
        client: Optional[AsyncOpenAI] = None,
        max_input_chars: int = settings.EMBEDDING_MAX_INPUT_CHARS,
    ):
        self.model_name = model_name
        self.max_input_chars = max_input_chars
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # Created lazily so the app can boot without an API key
        if self._client is None:
            self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY or None)
        return self._client

    async def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        try:
            response = await self.client.embeddings.create(
                model=self.model_name,
                input=truncate_for_embedding(text, self.max_input_chars),
            )
        except OpenAIError as e:
            raise EmbeddingError(f"OpenAI embedding request failed: {e}") from e

        if not response.data:
            raise EmbeddingError("OpenAI returned no embedding")
        return list(response.data[0].embedding)
