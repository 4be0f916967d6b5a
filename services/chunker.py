# services/chunker.py
"""Sentence-boundary chunking with a soft length limit"""
import re
from typing import List

from config import settings

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
SENTENCE_JOINER = ". "


def split_sentences(text: str) -> List[str]:
    """Split on '.', '!' and '?'; trim and drop empty sentences."""
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text) if s.strip()]


def chunk_text(text: str, max_length: int = settings.CHUNK_MAX_LENGTH) -> List[str]:
    """
    Greedily pack sentences into chunks of at most ``max_length`` characters.

    Sentences are re-joined with ". ". A sentence that alone exceeds
    ``max_length`` is emitted as its own oversized chunk rather than split.
    Never returns empty strings; empty input gives an empty list.
    """
    chunks: List[str] = []
    buffer = ""

    for sentence in split_sentences(text):
        if not buffer:
            buffer = sentence
            continue
        if len(buffer) + len(SENTENCE_JOINER) + len(sentence) > max_length:
            chunks.append(buffer)
            buffer = sentence
        else:
            buffer = f"{buffer}{SENTENCE_JOINER}{sentence}"

    if buffer:
        chunks.append(buffer)
    return chunks
