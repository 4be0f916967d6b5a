# core/domain.py
"""Shared enumerations and domain models used across the application."""
from enum import Enum

from dataclasses import dataclass
from typing import ClassVar, List, Optional, Tuple, Union

# ============= Enums =============

class ErrorCode(str, Enum):
    """Error codes for pipeline failures."""
    FETCH_FAILED = "FETCH_FAILED"
    EMBEDDING_FAILED = "EMBEDDING_FAILED"
    DIMENSION_MISMATCH = "DIMENSION_MISMATCH"
    COMPLETION_FAILED = "COMPLETION_FAILED"
    BUILD_FAILED = "BUILD_FAILED"
    EMPTY_CORPUS = "EMPTY_CORPUS"


class BlockType(str, Enum):
    """Kinds of content block found on a documentation page."""
    HEADING = "heading"
    CODE = "code"
    LIST = "list"
    TEXT = "text"
    TOGGLE = "toggle"


class CorpusState(str, Enum):
    """Lifecycle of the process-wide corpus."""
    EMPTY = "empty"
    BUILDING = "building"
    READY = "ready"


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# ============= Content Blocks =============

@dataclass(frozen=True)
class HeadingBlock:
    text: str
    level: int = 1
    block_type: ClassVar[BlockType] = BlockType.HEADING


@dataclass(frozen=True)
class CodeBlock:
    text: str
    language: str = "plaintext"
    block_type: ClassVar[BlockType] = BlockType.CODE


@dataclass(frozen=True)
class ListBlock:
    items: Tuple[str, ...]
    block_type: ClassVar[BlockType] = BlockType.LIST


@dataclass(frozen=True)
class TextBlock:
    text: str
    block_type: ClassVar[BlockType] = BlockType.TEXT


@dataclass(frozen=True)
class ToggleBlock:
    """Collapsible container; the only block that nests other blocks."""
    header: str
    children: Tuple["Block", ...] = ()
    expanded: bool = False
    block_type: ClassVar[BlockType] = BlockType.TOGGLE


Block = Union[HeadingBlock, CodeBlock, ListBlock, TextBlock, ToggleBlock]


# ============= Domain Models =============

@dataclass(frozen=True)
class ScrapedDocument:
    """One rendered source page"""
    title: str
    url: str
    content: Tuple[Block, ...]


@dataclass(frozen=True)
class ChunkMetadata:
    """Provenance of a chunk"""
    title: str
    url: str
    block_type: BlockType
    language: Optional[str] = None


@dataclass(frozen=True)
class Chunk:
    """Domain model for an indexed chunk"""
    content: str
    embedding: Tuple[float, ...]
    metadata: ChunkMetadata


@dataclass(frozen=True)
class ChunkSearchResult:
    """Domain model for search results"""
    chunk: Chunk
    score: float


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}


Corpus = List[Chunk]
