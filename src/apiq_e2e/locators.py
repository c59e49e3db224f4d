"""
Evidence Locators for APIQ UX Compliance Testing.

Evidence is located through an ordered list of locator strategies: the first
strategy that yields at least one visible (and, when requested, text-matching)
element wins.  The order is data, not control flow, so it can be inspected,
reported, and tested.

Usage:
    resolver = LocatorResolver(inspector)

    request = EvidenceRequest(
        kind=EvidenceKind.ERROR_MESSAGE,
        candidates=(
            LocatorStrategy.test_id("error-message"),
            LocatorStrategy.role("alert"),
            LocatorStrategy.css(".text-red-600"),
        ),
        match_text="required",
    )
    evidence = await resolver.resolve(request)
    if not evidence.found:
        print(f"Tried: {', '.join(evidence.attempted)}")
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from apiq_e2e.errors import InspectionError

if TYPE_CHECKING:
    from apiq_e2e.adapters.base import PageElement, PageInspector

logger = logging.getLogger(__name__)

TextPattern = str | re.Pattern[str]


class EvidenceKind(str, Enum):
    """What a piece of evidence represents on the page."""

    HEADING = "heading"
    PRIMARY_ACTION = "primary_action"
    ACTION_BUTTON = "action_button"
    ERROR_MESSAGE = "error_message"
    SUCCESS_MESSAGE = "success_message"
    FORM_FIELD = "form_field"
    TOUCH_TARGET = "touch_target"
    ARIA_LABEL = "aria_label"
    NAVIGATION_TAB = "navigation_tab"
    FOCUSABLE = "focusable"
    LANDMARK = "landmark"
    GUIDANCE = "guidance"
    EMPTY_STATE = "empty_state"
    CONFIRMATION = "confirmation"
    GENERIC = "generic"


class StrategyKind(str, Enum):
    """Concrete ways of finding an element, most specific first."""

    TEST_ID = "test_id"
    ROLE = "role"
    LABEL = "label"
    PLACEHOLDER = "placeholder"
    CSS = "css"
    TEXT = "text"


class IdMatch(str, Enum):
    """How a test id strategy compares ``data-testid`` values."""

    EXACT = "exact"
    PREFIX = "prefix"
    CONTAINS = "contains"


class LocatorStrategy(BaseModel):
    """
    One concrete locator strategy.

    Attributes:
        kind: Strategy variant
        value: Test id, role, CSS selector, or text/label/placeholder pattern
        name_pattern: For role strategies, accessible-name filter
        match: For test id strategies, how the id is compared
        descendant: For test id strategies, CSS selector scoped under the match
    """

    kind: StrategyKind
    value: str
    name_pattern: str | None = None
    match: IdMatch = IdMatch.EXACT
    descendant: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def test_id(
        cls,
        value: str,
        match: IdMatch = IdMatch.EXACT,
        descendant: str | None = None,
    ) -> LocatorStrategy:
        return cls(kind=StrategyKind.TEST_ID, value=value, match=match, descendant=descendant)

    @classmethod
    def role(cls, role: str, name_pattern: str | None = None) -> LocatorStrategy:
        return cls(kind=StrategyKind.ROLE, value=role, name_pattern=name_pattern)

    @classmethod
    def label(cls, pattern: str) -> LocatorStrategy:
        return cls(kind=StrategyKind.LABEL, value=pattern)

    @classmethod
    def placeholder(cls, pattern: str) -> LocatorStrategy:
        return cls(kind=StrategyKind.PLACEHOLDER, value=pattern)

    @classmethod
    def css(cls, selector: str) -> LocatorStrategy:
        return cls(kind=StrategyKind.CSS, value=selector)

    @classmethod
    def text(cls, pattern: str) -> LocatorStrategy:
        return cls(kind=StrategyKind.TEXT, value=pattern)

    def test_id_selector(self) -> str:
        """CSS selector equivalent of a test id strategy."""
        operator = {IdMatch.EXACT: "=", IdMatch.PREFIX: "^=", IdMatch.CONTAINS: "*="}
        selector = f'[data-testid{operator[self.match]}"{self.value}"]'
        if self.descendant:
            selector += f" {self.descendant}"
        return selector

    def describe(self) -> str:
        """Human-readable form used in failure messages."""
        match self.kind:
            case StrategyKind.TEST_ID:
                return self.test_id_selector()
            case StrategyKind.ROLE:
                if self.name_pattern:
                    return f"role={self.value}[name=/{self.name_pattern}/i]"
                return f"role={self.value}"
            case StrategyKind.LABEL:
                return f"label=/{self.value}/i"
            case StrategyKind.PLACEHOLDER:
                return f"placeholder=/{self.value}/i"
            case StrategyKind.CSS:
                return f"css={self.value}"
            case StrategyKind.TEXT:
                return f"text=/{self.value}/i"


class EvidenceRequest(BaseModel):
    """
    A logical request for evidence, resolved through ordered candidates.

    Attributes:
        kind: What the evidence represents
        candidates: Locator strategies in priority order
        match_text: Optional text filter (regex, case-insensitive for strings)
        limit: Optional cap on elements inspected per strategy
        visible_only: Drop elements that fail the visibility check (default)
        description: Optional human-readable label for reports
    """

    kind: EvidenceKind
    candidates: tuple[LocatorStrategy, ...] = Field(min_length=1)
    match_text: Any = None  # str | re.Pattern
    limit: int | None = Field(default=None, ge=1)
    visible_only: bool = True
    description: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        return self.description or self.kind.value


@dataclass
class ResolvedEvidence:
    """
    Outcome of resolving one EvidenceRequest against the current page.

    Scoped to a single rule evaluation; never reuse across navigations.
    """

    request: EvidenceRequest
    found: bool
    elements: list[PageElement] = field(default_factory=list)
    strategy: LocatorStrategy | None = None
    attempted: list[str] = field(default_factory=list)
    present: int = 0  # Elements located in the DOM before filtering
    observed: list[str] = field(default_factory=list)  # Visible texts that did not match

    @property
    def count(self) -> int:
        """Number of visible matching elements."""
        return len(self.elements)

    @property
    def first(self) -> PageElement | None:
        return self.elements[0] if self.elements else None

    def summary(self) -> str:
        """One-line diagnostic of what was tried and found."""
        if self.found and self.strategy is not None:
            return f"{self.count} visible match(es) via {self.strategy.describe()}"
        parts = [f"no visible match; tried {', '.join(self.attempted) or 'nothing'}"]
        if self.present:
            parts.append(f"{self.present} element(s) present in DOM")
        if self.observed:
            parts.append("visible text: " + ", ".join(f'"{t}"' for t in self.observed[:10]))
        return "; ".join(parts)


def compile_pattern(pattern: TextPattern) -> re.Pattern[str]:
    """
    Compile a text pattern.

    Compiled patterns are used as-is.  Strings are treated as case-insensitive
    regular expressions (so ``"Dashboard|Workflows"`` is an alternation);
    strings that are not valid regex fall back to a literal match.
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(pattern), re.IGNORECASE)


def text_matches(pattern: TextPattern, text: str | None) -> bool:
    """Check whether *text* matches *pattern* anywhere."""
    if not text:
        return False
    return compile_pattern(pattern).search(text) is not None


def describe_pattern(pattern: TextPattern) -> str:
    """Render a pattern for failure messages (``/required/i``)."""
    if isinstance(pattern, re.Pattern):
        flags = "i" if pattern.flags & re.IGNORECASE else ""
        return f"/{pattern.pattern}/{flags}"
    return f"/{pattern}/i"


def normalize_text(text: str | None) -> str:
    """Collapse whitespace in element text."""
    return " ".join((text or "").split())


async def element_text(element: PageElement) -> str:
    """Visible text of an element, falling back to its aria-label."""
    text = normalize_text(await element.text_content())
    if text:
        return text
    return normalize_text(await element.get_attribute("aria-label"))


def parse_strategy(text: str) -> LocatorStrategy:
    """
    Parse a compact strategy string.

    Examples:
        "testid:error-message"        -> test id, exact
        "testid^:primary-action "     -> test id, prefix
        "role:alert"                  -> role
        "role:button:Create|Add"      -> role with name pattern
        "css:.text-red-600"           -> css
        "text:Get started"            -> text

    Args:
        text: Strategy string in ``kind:value`` form

    Returns:
        LocatorStrategy

    Raises:
        ValueError: If the format or kind is invalid
    """
    if ":" not in text:
        raise ValueError(f"Invalid locator strategy format: {text}. Expected 'kind:value'")

    kind, value = text.split(":", 1)

    match kind:
        case "testid":
            return LocatorStrategy.test_id(value)
        case "testid^":
            return LocatorStrategy.test_id(value, match=IdMatch.PREFIX)
        case "testid*":
            return LocatorStrategy.test_id(value, match=IdMatch.CONTAINS)
        case "role":
            role, _, name = value.partition(":")
            return LocatorStrategy.role(role, name or None)
        case "label":
            return LocatorStrategy.label(value)
        case "placeholder":
            return LocatorStrategy.placeholder(value)
        case "css":
            return LocatorStrategy.css(value)
        case "text":
            return LocatorStrategy.text(value)
        case _:
            raise ValueError(f"Unknown locator strategy kind: {kind}")


async def locate(inspector: PageInspector, strategy: LocatorStrategy) -> list[PageElement]:
    """
    Run one strategy against the page.

    The single dispatcher from strategy variants to inspector queries.
    """
    match strategy.kind:
        case StrategyKind.TEST_ID:
            return await inspector.query_selector(strategy.test_id_selector())
        case StrategyKind.ROLE:
            return await inspector.get_by_role(
                strategy.value,
                compile_pattern(strategy.name_pattern) if strategy.name_pattern else None,
            )
        case StrategyKind.LABEL:
            return await inspector.get_by_label(compile_pattern(strategy.value))
        case StrategyKind.PLACEHOLDER:
            return await inspector.get_by_placeholder(compile_pattern(strategy.value))
        case StrategyKind.CSS:
            return await inspector.query_selector(strategy.value)
        case StrategyKind.TEXT:
            return await inspector.get_by_text(compile_pattern(strategy.value))


class LocatorResolver:
    """
    Resolves evidence requests against a page inspector.

    Holds no state besides the inspector; every call queries the live page.
    """

    def __init__(self, inspector: PageInspector) -> None:
        """
        Initialize the resolver.

        Args:
            inspector: Page inspector to query
        """
        self.inspector = inspector

    async def resolve(self, request: EvidenceRequest) -> ResolvedEvidence:
        """
        Resolve an evidence request.

        Never raises: inspection failures count as "no match" for the
        strategy that hit them.

        Args:
            request: Evidence to look for

        Returns:
            ResolvedEvidence with found=False if every strategy came up empty
        """
        evidence = ResolvedEvidence(request=request, found=False)
        pattern = compile_pattern(request.match_text) if request.match_text is not None else None

        for strategy in request.candidates:
            evidence.attempted.append(strategy.describe())
            try:
                matches = await self._visible_matches(strategy, request, pattern, evidence)
            except InspectionError as e:
                logger.debug("Strategy %s failed: %s", strategy.describe(), e)
                continue

            if matches:
                evidence.found = True
                evidence.elements = matches
                evidence.strategy = strategy
                logger.debug("Resolved %s via %s (%d)", request.label, strategy.describe(), len(matches))
                return evidence

        logger.debug("No evidence for %s: %s", request.label, evidence.summary())
        return evidence

    async def _visible_matches(
        self,
        strategy: LocatorStrategy,
        request: EvidenceRequest,
        pattern: re.Pattern[str] | None,
        evidence: ResolvedEvidence,
    ) -> list[PageElement]:
        elements = await locate(self.inspector, strategy)
        evidence.present += len(elements)
        if request.limit is not None:
            elements = elements[: request.limit]

        matches: list[PageElement] = []
        for element in elements:
            try:
                if request.visible_only and not await element.is_visible():
                    continue
                if pattern is not None:
                    text = await element_text(element)
                    if pattern.search(text) is None:
                        if text and text not in evidence.observed:
                            evidence.observed.append(text)
                        continue
            except InspectionError as e:
                logger.debug("Skipping %s: %s", element.describe(), e)
                continue
            matches.append(element)
        return matches

    async def resolve_all(self, requests: list[EvidenceRequest]) -> list[ResolvedEvidence]:
        """Resolve several requests independently, in order."""
        return [await self.resolve(request) for request in requests]
