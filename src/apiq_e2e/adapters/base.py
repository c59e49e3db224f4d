"""
Page Inspection Port for APIQ UX compliance checking.

Defines the read-mostly interface the compliance engine consumes. Browser
drivers implement it; the engine never touches a driver directly.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

Pattern = str | re.Pattern[str]


@dataclass(frozen=True)
class BoundingBox:
    """Element geometry in CSS (logical) pixels."""

    x: float
    y: float
    width: float
    height: float


class PageElement(ABC):
    """
    Opaque handle to one element located on a page.

    Every method is a suspension point and may raise InspectionError
    when the browser cannot answer (timeout, detached element, closed page).
    """

    @abstractmethod
    def describe(self) -> str:
        """Stable description used in reports (e.g. ``css=button >> nth=2``)."""
        ...

    @abstractmethod
    async def is_visible(self) -> bool: ...

    @abstractmethod
    async def is_enabled(self) -> bool: ...

    @abstractmethod
    async def bounding_box(self) -> BoundingBox | None: ...

    @abstractmethod
    async def get_attribute(self, name: str) -> str | None: ...

    @abstractmethod
    async def text_content(self) -> str | None: ...


class PageInspector(ABC):
    """
    Abstract page inspector.

    Stack-specific inspectors (Playwright today) implement this interface so
    the rule engine can be driven by a real browser or by an in-memory fake.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Current page URL."""
        ...

    @abstractmethod
    def viewport(self) -> tuple[int, int] | None:
        """Current viewport as ``(width, height)``, or None if unknown."""
        ...

    @abstractmethod
    async def title(self) -> str: ...

    @abstractmethod
    async def query_selector(self, selector: str) -> list[PageElement]:
        """
        Locate all elements matching a CSS selector, in document order.

        Args:
            selector: CSS selector

        Returns:
            List of element handles (visible or not)
        """
        ...

    @abstractmethod
    async def get_by_role(self, role: str, name: Pattern | None = None) -> list[PageElement]:
        """Locate elements by ARIA role, optionally filtered by accessible name."""
        ...

    @abstractmethod
    async def get_by_label(self, pattern: Pattern) -> list[PageElement]:
        """Locate form controls by associated label text."""
        ...

    @abstractmethod
    async def get_by_placeholder(self, pattern: Pattern) -> list[PageElement]:
        """Locate inputs by placeholder text."""
        ...

    @abstractmethod
    async def get_by_text(self, pattern: Pattern) -> list[PageElement]:
        """Locate elements by visible text."""
        ...

    @abstractmethod
    async def focused_element(self) -> PageElement | None:
        """Return the element that currently has keyboard focus."""
        ...

    @abstractmethod
    async def set_viewport(self, width: int, height: int) -> None: ...

    @abstractmethod
    async def press_key(self, key: str) -> None: ...

    @abstractmethod
    async def wait_for_load_state(self, state: str, timeout: int) -> bool:
        """
        Wait for a page load state.

        Returns:
            True if the state was reached, False on timeout
        """
        ...

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout: int) -> bool:
        """
        Wait for a selector to become visible.

        Returns:
            True if the selector appeared, False on timeout
        """
        ...
