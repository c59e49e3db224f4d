"""In-memory page inspection port for unit tests.

``FakePage`` implements :class:`~apiq_e2e.adapters.base.PageInspector`
without a browser.  CSS queries are answered from a dict keyed by the exact
selector string, so tests register elements under the selectors the rules
use (usually by importing the selector constants from ``apiq_e2e.rules``).
Role, text, label and placeholder queries filter every registered element.
"""

from __future__ import annotations

import itertools
import re

import pytest

from apiq_e2e.adapters.base import BoundingBox, PageElement, PageInspector, Pattern
from apiq_e2e.config import ComplianceSettings
from apiq_e2e.engine import ComplianceEngine
from apiq_e2e.errors import InspectionError

_ids = itertools.count()


def _search(pattern: Pattern, text: str | None) -> bool:
    if not text:
        return False
    if isinstance(pattern, re.Pattern):
        return pattern.search(text) is not None
    return pattern.lower() in text.lower()


class FakeElement(PageElement):
    """Element with static text, attributes, visibility and geometry."""

    def __init__(
        self,
        text: str = "",
        *,
        tag: str = "div",
        role: str | None = None,
        label: str | None = None,
        visible: bool = True,
        enabled: bool = True,
        box: tuple[float, float, float, float] | None = (0, 0, 100, 48),
        boxes: dict[tuple[int, int], tuple[float, float, float, float]] | None = None,
        broken: bool = False,
        **attrs: str,
    ) -> None:
        self.text = text
        self.tag = tag
        self.role = role
        self.label = label
        self.visible = visible
        self.enabled = enabled
        self.box = box
        self.boxes = boxes or {}
        self.broken = broken
        self.attrs = {k.replace("_", "-"): v for k, v in attrs.items()}
        if role is not None:
            self.attrs.setdefault("role", role)
        self.page: FakePage | None = None
        self._name = f"{tag}#{next(_ids)}"

    def _check(self) -> None:
        if self.broken:
            raise InspectionError(f"{self._name}: element detached")

    def describe(self) -> str:
        return self._name

    async def is_visible(self) -> bool:
        self._check()
        return self.visible

    async def is_enabled(self) -> bool:
        self._check()
        return self.enabled

    async def bounding_box(self) -> BoundingBox | None:
        self._check()
        raw = self.box
        if self.page is not None and self.page.viewport() in self.boxes:
            raw = self.boxes[self.page.viewport()]
        if raw is None or not self.visible:
            return None
        return BoundingBox(*raw)

    async def get_attribute(self, name: str) -> str | None:
        self._check()
        return self.attrs.get(name)

    async def text_content(self) -> str | None:
        self._check()
        return self.text


class FakePage(PageInspector):
    """Page whose DOM is whatever the test registered."""

    def __init__(
        self,
        url: str = "http://localhost:3000/dashboard",
        viewport: tuple[int, int] | None = (1280, 720),
        title: str = "APIQ",
    ) -> None:
        self._url = url
        self._viewport = viewport
        self.title_text = title
        self.selectors: dict[str, list[FakeElement]] = {}
        self.elements: list[FakeElement] = []
        self.broken_selectors: set[str] = set()
        self.tab_target: FakeElement | None = None
        self.focused: FakeElement | None = None
        self.keys: list[str] = []
        self.queries: list[str] = []
        self.viewport_history: list[tuple[int, int]] = []
        self.waits: list[tuple[str, str]] = []
        self.closed = False

    def add(self, selector: str, *elements: FakeElement) -> FakePage:
        """Register elements as matches for a CSS selector."""
        for element in elements:
            element.page = self
            if element not in self.elements:
                self.elements.append(element)
        self.selectors.setdefault(selector, []).extend(elements)
        return self

    def register(self, *elements: FakeElement) -> FakePage:
        """Register elements reachable only by role/text/label/placeholder."""
        for element in elements:
            element.page = self
            if element not in self.elements:
                self.elements.append(element)
        return self

    def _guard(self) -> None:
        if self.closed:
            raise InspectionError("Target page has been closed")

    @property
    def url(self) -> str:
        return self._url

    def viewport(self) -> tuple[int, int] | None:
        return self._viewport

    async def title(self) -> str:
        self._guard()
        return self.title_text

    async def query_selector(self, selector: str) -> list[PageElement]:
        self._guard()
        self.queries.append(selector)
        if selector in self.broken_selectors:
            raise InspectionError(f"css={selector}: Timeout 3000ms exceeded")
        return list(self.selectors.get(selector, []))

    async def get_by_role(self, role: str, name: Pattern | None = None) -> list[PageElement]:
        self._guard()
        return [
            e
            for e in self.elements
            if e.role == role and (name is None or _search(name, e.text or e.attrs.get("aria-label")))
        ]

    async def get_by_label(self, pattern: Pattern) -> list[PageElement]:
        self._guard()
        return [e for e in self.elements if _search(pattern, e.label)]

    async def get_by_placeholder(self, pattern: Pattern) -> list[PageElement]:
        self._guard()
        return [e for e in self.elements if _search(pattern, e.attrs.get("placeholder"))]

    async def get_by_text(self, pattern: Pattern) -> list[PageElement]:
        self._guard()
        return [e for e in self.elements if _search(pattern, e.text)]

    async def focused_element(self) -> PageElement | None:
        self._guard()
        return self.focused

    async def set_viewport(self, width: int, height: int) -> None:
        self._guard()
        self._viewport = (width, height)
        self.viewport_history.append((width, height))

    async def press_key(self, key: str) -> None:
        self._guard()
        self.keys.append(key)
        if key == "Tab" and self.tab_target is not None:
            self.focused = self.tab_target

    async def wait_for_load_state(self, state: str, timeout: int) -> bool:
        self.waits.append(("load_state", state))
        return not self.closed

    async def wait_for_selector(self, selector: str, timeout: int) -> bool:
        self.waits.append(("selector", selector))
        return bool(self.selectors.get(selector))


@pytest.fixture
def settings() -> ComplianceSettings:
    return ComplianceSettings()


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def engine(page: FakePage, settings: ComplianceSettings) -> ComplianceEngine:
    return ComplianceEngine(page, settings)
