"""
Playwright implementation of the Page Inspection Port.

Wraps ``playwright.async_api.Page`` and translates Playwright errors
(including timeouts) into InspectionError at the boundary.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from apiq_e2e.adapters.base import BoundingBox, PageElement, PageInspector, Pattern
from apiq_e2e.errors import InspectionError

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

logger = logging.getLogger(__name__)

DEFAULT_ELEMENT_TIMEOUT = 3000
DEFAULT_QUERY_LIMIT = 200


def _as_regex(pattern: Pattern) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(pattern), re.IGNORECASE)


class PlaywrightElement(PageElement):
    """PageElement backed by a single-element Playwright Locator."""

    def __init__(self, locator: Locator, description: str, timeout: int) -> None:
        self._locator = locator
        self._description = description
        self._timeout = timeout

    def describe(self) -> str:
        return self._description

    async def is_visible(self) -> bool:
        try:
            return await self._locator.is_visible()
        except PlaywrightError as e:
            raise InspectionError(f"{self._description}: {e.message}") from e

    async def is_enabled(self) -> bool:
        try:
            return await self._locator.is_enabled(timeout=self._timeout)
        except PlaywrightError as e:
            raise InspectionError(f"{self._description}: {e.message}") from e

    async def bounding_box(self) -> BoundingBox | None:
        try:
            box = await self._locator.bounding_box(timeout=self._timeout)
        except PlaywrightError as e:
            raise InspectionError(f"{self._description}: {e.message}") from e
        if box is None:
            return None
        return BoundingBox(x=box["x"], y=box["y"], width=box["width"], height=box["height"])

    async def get_attribute(self, name: str) -> str | None:
        try:
            return await self._locator.get_attribute(name, timeout=self._timeout)
        except PlaywrightError as e:
            raise InspectionError(f"{self._description}: {e.message}") from e

    async def text_content(self) -> str | None:
        try:
            return await self._locator.text_content(timeout=self._timeout)
        except PlaywrightError as e:
            raise InspectionError(f"{self._description}: {e.message}") from e


class PlaywrightInspector(PageInspector):
    """
    Page inspector for a live Playwright page.

    Usage:
        inspector = PlaywrightInspector(page)
        engine = ComplianceEngine(inspector)
    """

    def __init__(
        self,
        page: Page,
        element_timeout: int = DEFAULT_ELEMENT_TIMEOUT,
        query_limit: int = DEFAULT_QUERY_LIMIT,
    ) -> None:
        """
        Initialize the inspector.

        Args:
            page: Playwright Page instance
            element_timeout: Timeout for per-element queries (ms)
            query_limit: Maximum elements returned by a single query
        """
        self.page = page
        self.element_timeout = element_timeout
        self.query_limit = query_limit

    @property
    def url(self) -> str:
        return self.page.url

    def viewport(self) -> tuple[int, int] | None:
        size = self.page.viewport_size
        if not size:
            return None
        return size["width"], size["height"]

    async def title(self) -> str:
        try:
            return await self.page.title()
        except PlaywrightError as e:
            raise InspectionError(f"title: {e.message}") from e

    async def _expand(self, locator: Locator, description: str) -> list[PageElement]:
        try:
            count = await locator.count()
        except PlaywrightError as e:
            raise InspectionError(f"{description}: {e.message}") from e

        if count > self.query_limit:
            logger.debug("%s matched %d elements, inspecting first %d", description, count, self.query_limit)
            count = self.query_limit

        return [
            PlaywrightElement(locator.nth(i), f"{description} >> nth={i}", self.element_timeout)
            for i in range(count)
        ]

    async def query_selector(self, selector: str) -> list[PageElement]:
        return await self._expand(self.page.locator(selector), f"css={selector}")

    async def get_by_role(self, role: str, name: Pattern | None = None) -> list[PageElement]:
        if name is None:
            return await self._expand(self.page.get_by_role(role), f"role={role}")  # type: ignore[arg-type]
        regex = _as_regex(name)
        return await self._expand(
            self.page.get_by_role(role, name=regex),  # type: ignore[arg-type]
            f"role={role}[name=/{regex.pattern}/]",
        )

    async def get_by_label(self, pattern: Pattern) -> list[PageElement]:
        regex = _as_regex(pattern)
        return await self._expand(self.page.get_by_label(regex), f"label=/{regex.pattern}/")

    async def get_by_placeholder(self, pattern: Pattern) -> list[PageElement]:
        regex = _as_regex(pattern)
        return await self._expand(self.page.get_by_placeholder(regex), f"placeholder=/{regex.pattern}/")

    async def get_by_text(self, pattern: Pattern) -> list[PageElement]:
        regex = _as_regex(pattern)
        return await self._expand(self.page.get_by_text(regex), f"text=/{regex.pattern}/")

    async def focused_element(self) -> PageElement | None:
        elements = await self.query_selector(":focus")
        return elements[0] if elements else None

    async def set_viewport(self, width: int, height: int) -> None:
        try:
            await self.page.set_viewport_size({"width": width, "height": height})
        except PlaywrightError as e:
            raise InspectionError(f"set_viewport({width}x{height}): {e.message}") from e

    async def press_key(self, key: str) -> None:
        try:
            await self.page.keyboard.press(key)
        except PlaywrightError as e:
            raise InspectionError(f"press({key}): {e.message}") from e

    async def wait_for_load_state(self, state: str, timeout: int) -> bool:
        try:
            await self.page.wait_for_load_state(state, timeout=timeout)  # type: ignore[arg-type]
        except PlaywrightError:
            logger.debug("Load state %s not reached within %dms", state, timeout)
            return False
        return True

    async def wait_for_selector(self, selector: str, timeout: int) -> bool:
        try:
            await self.page.wait_for_selector(selector, state="visible", timeout=timeout)
        except PlaywrightError:
            logger.debug("Selector %s not visible within %dms", selector, timeout)
            return False
        return True
