"""Page context classification and tolerance policy.

Two concerns live here so that "what context implies what requirement" is
auditable in one place:

* :func:`resolve_context` classifies the current page (URL path, ``tab``
  query parameter, viewport width, page complexity) into a :class:`ContextKey`.
* :data:`TOLERANCE_TABLE` holds the static per-rule violation ceilings and
  their context overrides; :func:`tolerance_for` looks them up.

Context changes *what counts as correct* for exactly one rule family
(activation-first primary actions: a dashboard overview has several
equal-weight actions rather than one primary action).  For every other rule
it only changes *how much slack is allowed*.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Page contexts
# ---------------------------------------------------------------------------


class PageContext(str, Enum):
    """Closed set of page classifications."""

    AUTH = "auth"
    DASHBOARD_OVERVIEW = "dashboard_overview"
    DASHBOARD_TAB = "dashboard_tab"
    OTHER = "other"


AUTH_PATH_PREFIXES: tuple[str, ...] = ("/login", "/signup", "/forgot-password", "/reset-password")
DASHBOARD_PATH_PREFIX = "/dashboard"

# ---------------------------------------------------------------------------
# Viewport buckets
# ---------------------------------------------------------------------------

VIEWPORTS: dict[str, tuple[int, int]] = {
    "mobile": (375, 667),
    "tablet": (768, 1024),
    "desktop": (1280, 720),
    "wide": (1920, 1080),
}

# Upper width bounds (exclusive) for each bucket, in ascending order.
_VIEWPORT_BUCKETS: tuple[tuple[str, int], ...] = (
    ("mobile", 600),
    ("tablet", 1024),
    ("desktop", 1440),
)


def viewport_bucket(viewport: tuple[int, int] | None) -> str:
    """Map a viewport size to ``mobile``, ``tablet``, ``desktop``, ``wide`` or ``unknown``."""
    if viewport is None:
        return "unknown"
    width = viewport[0]
    for name, upper in _VIEWPORT_BUCKETS:
        if width < upper:
            return name
    return "wide"


# ---------------------------------------------------------------------------
# Context key
# ---------------------------------------------------------------------------

COMPLEX_TAG = "complex"


@dataclass(frozen=True)
class ContextKey:
    """Classification of the current page used to pick rule variants and tolerances."""

    page: PageContext
    viewport: str = "unknown"
    path: str = ""
    tab: str | None = None
    complex: bool = False
    ambiguous: bool = False

    @property
    def tags(self) -> frozenset[str]:
        """Override keys this context satisfies (page, viewport, complexity)."""
        tags = {self.page.value, self.viewport}
        if self.complex:
            tags.add(COMPLEX_TAG)
        return frozenset(tags)

    def describe(self) -> str:
        parts = [self.page.value, self.viewport]
        if self.tab:
            parts.append(f"tab={self.tab}")
        if self.complex:
            parts.append(COMPLEX_TAG)
        if self.ambiguous:
            parts.append("ambiguous")
        return "/".join(parts)


def classify_url(url: str) -> tuple[PageContext, str, str | None, bool]:
    """
    Classify a URL into a page context.

    Returns:
        Tuple of (context, path, tab, ambiguous)
    """
    if not url or not url.strip():
        return PageContext.OTHER, "", None, True

    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https", "") or (parts.scheme and not parts.netloc):
        # about:blank, data:, chrome-error:// and friends
        return PageContext.OTHER, parts.path, None, True

    path = parts.path or "/"
    tabs = parse_qs(parts.query, keep_blank_values=True).get("tab")
    tab = tabs[0] if tabs else None

    if any(path == prefix or path.startswith(prefix + "/") for prefix in AUTH_PATH_PREFIXES):
        return PageContext.AUTH, path, tab, False

    if path == DASHBOARD_PATH_PREFIX or path.startswith(DASHBOARD_PATH_PREFIX + "/"):
        if tab is None:
            return PageContext.DASHBOARD_OVERVIEW, path, tab, False
        return PageContext.DASHBOARD_TAB, path, tab, False

    return PageContext.OTHER, path, tab, False


def resolve_context(
    url: str,
    viewport: tuple[int, int] | None,
    interactive_count: int | None = None,
    complex_threshold: int = 20,
) -> ContextKey:
    """
    Build the context key for the current page.

    Args:
        url: Current page URL
        viewport: Current viewport ``(width, height)`` if known
        interactive_count: Number of interactive elements, if measured
        complex_threshold: Interactive elements at which a page counts as complex

    Returns:
        ContextKey (unclassifiable pages resolve to ``other`` with ``ambiguous=True``)
    """
    page, path, tab, ambiguous = classify_url(url)
    if ambiguous:
        logger.debug("Could not classify %r, treating as %s", url, page.value)

    return ContextKey(
        page=page,
        viewport=viewport_bucket(viewport),
        path=path,
        tab=tab,
        complex=interactive_count is not None and interactive_count >= complex_threshold,
        ambiguous=ambiguous,
    )


# ---------------------------------------------------------------------------
# Tolerance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToleranceSpec:
    """
    How many individually-violating elements a rule accepts.

    Attributes:
        max_violations: Default ceiling
        context_overrides: Context tag -> ceiling; the largest matching override wins
        ceiling: Absolute cap applied after overrides
    """

    max_violations: int = 0
    context_overrides: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    ceiling: int | None = None

    def limit_for(self, key: ContextKey | None) -> int:
        """Effective violation ceiling for a context."""
        limit = self.max_violations
        if key is not None:
            for tag in key.tags:
                override = self.context_overrides.get(tag)
                if override is not None and override > limit:
                    limit = override
        if self.ceiling is not None:
            limit = min(limit, self.ceiling)
        return limit

    def describe(self) -> str:
        if not self.context_overrides and self.max_violations == 0:
            return "none"
        text = f"max {self.max_violations}"
        for tag, value in sorted(self.context_overrides.items()):
            text += f", {tag}: {value}"
        if self.ceiling is not None:
            text += f" (ceiling {self.ceiling})"
        return text


NO_TOLERANCE = ToleranceSpec()

TOLERANCE_TABLE: Mapping[str, ToleranceSpec] = MappingProxyType(
    {
        "touch_target_size": ToleranceSpec(
            max_violations=3,
            context_overrides=MappingProxyType({COMPLEX_TAG: 6}),
        ),
        "mobile_accessibility": ToleranceSpec(
            max_violations=3,
            context_overrides=MappingProxyType({COMPLEX_TAG: 8}),
            ceiling=8,
        ),
    }
)


def tolerance_for(rule_name: str) -> ToleranceSpec:
    """Static tolerance for a rule (no tolerance if the rule has no entry)."""
    return TOLERANCE_TABLE.get(rule_name, NO_TOLERANCE)
