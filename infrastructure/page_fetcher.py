# infrastructure/page_fetcher.py
"""Rendered-page scraping of Notion documentation with Playwright

The browser does the DOM walk and hands back plain nested dicts; everything
after that (validation, typing into Block values) happens in Python so it
can be tested without a browser.
"""
import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import Browser, Error as PlaywrightError, Playwright, async_playwright

from config import settings
from core.domain import (
    Block, BlockType, CodeBlock, HeadingBlock, ListBlock, TextBlock, ToggleBlock,
)
from core.exceptions import TransientFetchError
from core.interfaces import IPageFetcher

logger = logging.getLogger(settings.LOGGER_NAME)

# Walks block elements under the content root and returns
# [{type, text|items|header, language, level, expanded, children}]
EXTRACT_BLOCKS_JS = r"""
(rootSelector) => {
  const root = document.querySelector(rootSelector);
  if (!root) return [];

  const text = (el) => (el && el.textContent ? el.textContent.trim() : '');
  const isBlock = (el) => el.hasAttribute && el.hasAttribute('data-block-id');

  const childBlocks = (el) =>
    Array.from(el.querySelectorAll('[data-block-id]')).filter(
      (c) => c !== el && c.parentElement && c.parentElement.closest('[data-block-id]') === el
    );

  const topBlocks = (container) =>
    Array.from(container.querySelectorAll('[data-block-id]')).filter(
      (c) => !c.parentElement.closest('[data-block-id]') ||
             !container.contains(c.parentElement.closest('[data-block-id]'))
    );

  const walk = (el) => {
    const cls = el.classList;
    if (cls.contains('notion-toggle-block')) {
      const button = el.querySelector('[role="button"]');
      const leaf = el.querySelector('[data-content-editable-leaf], [contenteditable]');
      return {
        type: 'toggle',
        header: text(leaf),
        expanded: button ? button.getAttribute('aria-expanded') === 'true' : false,
        children: childBlocks(el).map(walk).filter(Boolean),
      };
    }
    if (cls.contains('notion-code-block')) {
      return {
        type: 'code',
        text: text(el.querySelector('code')),
        language: el.getAttribute('data-language') || 'plaintext',
      };
    }
    if (cls.contains('notion-sub_sub_header-block')) return { type: 'heading', text: text(el), level: 3 };
    if (cls.contains('notion-sub_header-block')) return { type: 'heading', text: text(el), level: 2 };
    if (cls.contains('notion-header-block')) return { type: 'heading', text: text(el), level: 1 };
    if (cls.contains('notion-bulleted_list-block') || cls.contains('notion-numbered_list-block') ||
        cls.contains('notion-bulleted-list') || cls.contains('notion-numbered-list')) {
      const lis = Array.from(el.querySelectorAll('li'));
      const items = lis.length ? lis.map(text) : [text(el)];
      return { type: 'list', items: items.filter(Boolean) };
    }
    if (cls.contains('notion-text-block')) return { type: 'text', text: text(el) };
    return null;
  };

  return topBlocks(root).filter(isBlock).map(walk).filter(Boolean);
}
"""

EXPAND_TOGGLES_JS = r"""
(rootSelector) => {
  const root = document.querySelector(rootSelector);
  if (!root) return 0;
  const closed = root.querySelectorAll('.notion-toggle-block [role="button"][aria-expanded="false"]');
  closed.forEach((b) => b.click());
  return closed.length;
}
"""

MAX_EXPAND_PASSES = 10


def parse_block(raw: Dict[str, Any]) -> Optional[Block]:
    """Convert one raw block dict from the DOM walker. Empty blocks give None."""
    kind = raw.get("type")

    if kind == BlockType.TOGGLE.value:
        children = tuple(
            block for block in (parse_block(c) for c in raw.get("children") or [])
            if block is not None
        )
        header = (raw.get("header") or "").strip()
        if not header and not children:
            return None
        return ToggleBlock(header=header, children=children, expanded=bool(raw.get("expanded")))

    if kind == BlockType.LIST.value:
        items = tuple(i.strip() for i in raw.get("items") or [] if i and i.strip())
        return ListBlock(items=items) if items else None

    text = (raw.get("text") or "").strip()
    if not text:
        return None
    if kind == BlockType.HEADING.value:
        return HeadingBlock(text=text, level=int(raw.get("level") or 1))
    if kind == BlockType.CODE.value:
        return CodeBlock(text=text, language=raw.get("language") or "plaintext")
    if kind == BlockType.TEXT.value:
        return TextBlock(text=text)

    logger.debug(f"[FETCH] Ignoring unknown block type: {kind}")
    return None


def parse_blocks(raw_blocks: List[Dict[str, Any]]) -> List[Block]:
    return [block for block in (parse_block(raw) for raw in raw_blocks) if block is not None]


class PlaywrightPageFetcher(IPageFetcher):
    """
    Headless Chromium fetcher. The browser lives for one ``async with``
    block; each fetch_rendered() call gets its own fresh page.
    """

    def __init__(
        self,
        content_selector: str = settings.PAGE_CONTENT_SELECTOR,
        timeout_ms: int = settings.PAGE_LOAD_TIMEOUT_MS,
        headless: bool = settings.BROWSER_HEADLESS,
        expand_toggles: bool = settings.EXPAND_TOGGLES,
    ):
        self.content_selector = content_selector
        self.timeout_ms = timeout_ms
        self.headless = headless
        self.expand_toggles = expand_toggles
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> "PlaywrightPageFetcher":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
        except PlaywrightError as e:
            await self._playwright.stop()
            self._playwright = None
            raise TransientFetchError(f"Could not launch browser: {e}") from e
        logger.info("[FETCH] Browser started")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("[FETCH] Browser closed")

    async def _expand_all_toggles(self, page) -> None:
        for _ in range(MAX_EXPAND_PASSES):
            opened = await page.evaluate(EXPAND_TOGGLES_JS, self.content_selector)
            if not opened:
                return
            await page.wait_for_load_state("networkidle", timeout=self.timeout_ms)

    async def fetch_rendered(self, url: str) -> List[Block]:
        if self._browser is None:
            raise RuntimeError("PlaywrightPageFetcher must be used inside 'async with'")

        page = await self._browser.new_page()
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
            await page.wait_for_selector(self.content_selector, timeout=self.timeout_ms)
            if self.expand_toggles:
                await self._expand_all_toggles(page)
            raw_blocks = await page.evaluate(EXTRACT_BLOCKS_JS, self.content_selector)
        except PlaywrightError as e:
            raise TransientFetchError(f"Failed to render {url}: {e}") from e
        finally:
            await page.close()

        blocks = parse_blocks(raw_blocks or [])
        logger.info(f"[FETCH] {url}: {len(blocks)} blocks")
        return blocks
