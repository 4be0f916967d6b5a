# core/exceptions.py
"""Error taxonomy for the retrieval pipeline"""
from core.domain import ErrorCode


class RAGPipelineError(Exception):
    """Base error carrying a machine-readable error code"""

    error_code: ErrorCode = ErrorCode.BUILD_FAILED

    def __init__(self, message: str, error_code: ErrorCode = None):
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        super().__init__(message)

    def __str__(self):
        # Format used for logging
        return f"[{self.error_code.value}] {self.message}"


class TransientFetchError(RAGPipelineError):
    """A page could not be fetched or rendered. Retried with backoff."""
    error_code = ErrorCode.FETCH_FAILED


class EmbeddingError(RAGPipelineError):
    """A single text could not be embedded."""
    error_code = ErrorCode.EMBEDDING_FAILED


class EmbeddingDimensionError(EmbeddingError):
    """Vector length differs from the rest of the corpus."""
    error_code = ErrorCode.DIMENSION_MISMATCH


class CompletionError(RAGPipelineError):
    """The completion model call failed."""
    error_code = ErrorCode.COMPLETION_FAILED


class CorpusBuildError(RAGPipelineError):
    error_code = ErrorCode.BUILD_FAILED


class EmptyCorpusError(CorpusBuildError):
    """The build finished but produced no chunks."""
    error_code = ErrorCode.EMPTY_CORPUS
