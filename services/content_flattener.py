# services/content_flattener.py
"""Turns a nested block tree into a flat, reading-ordered block list"""
from typing import Iterable, Iterator, List

from core.domain import Block, TextBlock, ToggleBlock


def iter_flattened(blocks: Iterable[Block]) -> Iterator[Block]:
    """
    Pre-order walk that replaces every toggle with a TextBlock of its header
    followed by its (flattened) children.

    Uses an explicit stack of iterators so deeply nested toggles cannot hit
    the interpreter's recursion limit.
    """
    stack: List[Iterator[Block]] = [iter(blocks)]
    while stack:
        block = next(stack[-1], None)
        if block is None:
            stack.pop()
            continue
        if isinstance(block, ToggleBlock):
            yield TextBlock(text=block.header)
            stack.append(iter(block.children))
        else:
            yield block


def flatten(blocks: Iterable[Block]) -> List[Block]:
    """Flatten a block tree. The result contains no ToggleBlock."""
    return list(iter_flattened(blocks))
