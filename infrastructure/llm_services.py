# infrastructure/llm_services.py
"""Chat completion backends"""
import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

import requests
from openai import AsyncOpenAI, OpenAIError

from config import settings
from core.domain import ChatMessage
from core.exceptions import CompletionError
from core.interfaces import ILLMService

logger = logging.getLogger(settings.LOGGER_NAME)


class OpenAIChatService(ILLMService):
    """OpenAI chat completions."""

    def __init__(
        self,
        model: str = settings.LLM_MODEL_NAME,
        temperature: float = settings.LLM_TEMPERATURE,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY or None)
        return self._client

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        logger.info(f"Sending {len(messages)} messages to '{self.model}'...")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[m.to_dict() for m in messages],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise CompletionError(f"OpenAI completion failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise CompletionError("Empty response from completion model")
        return content


class OllamaChatService(ILLMService):
    """A service to interact with a local LLM API (e.g., Ollama)."""

    def __init__(self, base_url: str, model: str, timeout: int = settings.REQUEST_TIMEOUT):
        """
        Initializes the service.

        Args:
            base_url: The base URL of the LLM API.
            model: The name of the model to use.
            timeout: The request timeout in seconds.
        """
        self.base_url = base_url
        self.model = model
        self.timeout = timeout

    def _post_chat(self, messages: Sequence[ChatMessage]) -> Dict[str, Any]:
        try:
            response = requests.post(
                f'{self.base_url}/api/chat',
                json={
                    'model': self.model,
                    'messages': [m.to_dict() for m in messages],
                    'stream': False
                },
                timeout=self.timeout
            )
            response.raise_for_status()  # Raises an HTTPError for bad responses (4xx or 5xx)
            return response.json()

        except requests.exceptions.Timeout as e:
            raise CompletionError(f"LLM request timed out after {self.timeout} seconds") from e
        except requests.exceptions.ConnectionError as e:
            raise CompletionError(f"Cannot connect to LLM at {self.base_url}") from e
        except requests.exceptions.HTTPError as e:
            raise CompletionError(
                f"LLM service returned an error: {e.response.status_code} {e.response.text}"
            ) from e
        except ValueError as e:
            raise CompletionError("LLM response was not valid JSON") from e

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        logger.info(f"Sending {len(messages)} messages to LLM model '{self.model}'...")
        result = await asyncio.to_thread(self._post_chat, messages)

        content = (result.get('message') or {}).get('content')
        if not content:
            logger.error("LLM response was empty or malformed.")
            raise CompletionError("Empty response from LLM")
        logger.info("Successfully received response from LLM.")
        return content.strip()
