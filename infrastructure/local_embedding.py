# infrastructure/local_embedding.py
"""Local embedding generation with L2 normalization"""
import asyncio
import logging
import numpy as np
from typing import List, Optional
from sentence_transformers import SentenceTransformer

from config import settings
from core.exceptions import EmbeddingError
from core.interfaces import IEmbeddingService
from infrastructure.embedding_services import truncate_for_embedding

logger = logging.getLogger(settings.LOGGER_NAME)

class SentenceTransformerEmbedding(IEmbeddingService):
    """
    Sentence transformer with L2 normalization (unit vectors).

    With unit vectors cosine similarity reduces to a dot product, so scores
    stay comparable with the remote embedding provider.
    """

    _model: Optional[SentenceTransformer] = None  # Singleton cache

    def __init__(
        self,
        model_name: str = settings.LOCAL_EMBEDDING_MODEL_NAME,
        max_input_chars: int = settings.EMBEDDING_MAX_INPUT_CHARS,
    ):
        """Initializes the service, loading the heavy model only once."""
        self.max_input_chars = max_input_chars

        if SentenceTransformerEmbedding._model is None:
            try:
                logger.info(f"Attempting to load model {model_name} from local cache...")
                SentenceTransformerEmbedding._model = SentenceTransformer(
                    model_name,
                    local_files_only=True
                )
                logger.info(f"Successfully loaded {model_name} from local cache.")

            except Exception as e:
                logger.warning(
                    f"Model {model_name} not found in cache. Attempting online download. "
                    f"This may take a few minutes. Error: {e}"
                )
                SentenceTransformerEmbedding._model = SentenceTransformer(model_name)
                logger.info(f"Successfully downloaded and loaded {model_name}.")

        self.model = SentenceTransformerEmbedding._model

    @staticmethod
    def _l2_normalize(vec: np.ndarray) -> np.ndarray:
        norm = np.linalg.norm(vec)
        if norm == 0:
            return vec
        return vec / norm

    async def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        try:
            raw = await asyncio.to_thread(
                self.model.encode,
                truncate_for_embedding(text, self.max_input_chars),
                convert_to_tensor=False
            )
        except Exception as e:
            raise EmbeddingError(f"Local embedding failed: {e}") from e

        normalized = self._l2_normalize(np.array(raw, dtype="float32").reshape(-1))
        return normalized.tolist()
