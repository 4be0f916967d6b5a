# config.py
"""Application configuration"""
from typing import List
from pydantic import BaseModel
from pydantic_settings import BaseSettings
from utils.common import get_log_file_path


class DocPage(BaseModel):
    """A documentation page that feeds the corpus"""
    url: str
    title: str


class Settings(BaseSettings):
    """Application configuration"""

    # Logger configuration
    LOGGER_NAME: str = "docs_assistant"
    LOG_FILE_PATH: str = get_log_file_path()
    LOG_LEVEL: str = "INFO"

    # App metadata
    APP_TITLE: str = "Docs Assistant"
    APP_VERSION: str = "1.0.0"

    # Source pages (override with a JSON list in .env)
    DOC_PAGES: List[DocPage] = [
        DocPage(
            url="https://crustdata.notion.site/Crustdata-Discovery-And-Enrichment-API-c66d5236e8ea40df8af114f6d447ab48",
            title="Discovery API",
        ),
        DocPage(
            url="https://crustdata.notion.site/Crustdata-Data-Dictionary-c265aa415fda41cb871090cbf7275922",
            title="Data Dictionary",
        ),
        DocPage(
            url="https://crustdata.notion.site/Crustdata-Dataset-API-Detailed-Examples-b83bd0f1ec09452bb0c2cac811bba88c",
            title="Dataset API Examples",
        ),
    ]

    # Page fetching
    PAGE_CONTENT_SELECTOR: str = ".notion-page-content"
    PAGE_LOAD_TIMEOUT_MS: int = 60000
    BROWSER_HEADLESS: bool = True
    EXPAND_TOGGLES: bool = True

    # Retry policy
    FETCH_MAX_RETRIES: int = 5
    FETCH_INITIAL_DELAY_SEC: float = 3.0
    EMBED_MAX_RETRIES: int = 3
    EMBED_INITIAL_DELAY_SEC: float = 1.0

    # Chunking / retrieval
    CHUNK_MAX_LENGTH: int = 1000
    TOP_K: int = 5

    # Embedding model
    EMBEDDING_PROVIDER: str = "openai"  # Options: openai, sentence_transformers
    EMBEDDING_MODEL_NAME: str = "text-embedding-ada-002"
    LOCAL_EMBEDDING_MODEL_NAME: str = "paraphrase-multilingual-mpnet-base-v2"
    EMBEDDING_MAX_INPUT_CHARS: int = 8000

    # Completion model
    LLM_PROVIDER: str = "openai"  # Options: openai, ollama
    LLM_MODEL_NAME: str = "gpt-4o"
    LLM_TEMPERATURE: float = 0.7
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL_NAME: str = "llama3.1:8b"
    REQUEST_TIMEOUT: int = 60

    # Token secret (SET IN .env FOR PROD)
    OPENAI_API_KEY: str = ""

    # Prompt
    ASSISTANT_PRODUCT_NAME: str = "Crustdata API"

    # Start building the corpus as soon as the app boots
    WARM_CORPUS_ON_STARTUP: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
