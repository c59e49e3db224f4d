"""
Unit tests for evidence locators.

Tests strategy parsing, pattern helpers and ordered resolution against the
in-memory page.
"""

import re

import pytest
from pydantic import ValidationError

from apiq_e2e.locators import (
    EvidenceKind,
    EvidenceRequest,
    IdMatch,
    LocatorResolver,
    LocatorStrategy,
    StrategyKind,
    compile_pattern,
    describe_pattern,
    element_text,
    parse_strategy,
    text_matches,
)

from .conftest import FakeElement, FakePage


class TestStrategyParsing:
    """Tests for compact strategy strings."""

    def test_parse_test_id(self) -> None:
        """Test parsing an exact test id strategy."""
        strategy = parse_strategy("testid:error-message")
        assert strategy.kind == StrategyKind.TEST_ID
        assert strategy.test_id_selector() == '[data-testid="error-message"]'

    def test_parse_test_id_prefix(self) -> None:
        """Test parsing a prefix test id strategy keeps trailing spaces."""
        strategy = parse_strategy("testid^:primary-action ")
        assert strategy.match == IdMatch.PREFIX
        assert strategy.test_id_selector() == '[data-testid^="primary-action "]'

    def test_parse_test_id_contains(self) -> None:
        """Test parsing a substring test id strategy."""
        strategy = parse_strategy("testid*:error")
        assert strategy.test_id_selector() == '[data-testid*="error"]'

    def test_parse_role_with_name(self) -> None:
        """Test parsing a role strategy with an accessible-name filter."""
        strategy = parse_strategy("role:button:Create|Add")
        assert strategy.kind == StrategyKind.ROLE
        assert strategy.value == "button"
        assert strategy.name_pattern == "Create|Add"

    def test_parse_role_without_name(self) -> None:
        """Test parsing a bare role strategy."""
        strategy = parse_strategy("role:alert")
        assert strategy.name_pattern is None
        assert strategy.describe() == "role=alert"

    def test_parse_css_with_colons(self) -> None:
        """Test that CSS selectors may contain colons."""
        strategy = parse_strategy("css:button:not([disabled])")
        assert strategy.kind == StrategyKind.CSS
        assert strategy.value == "button:not([disabled])"

    def test_invalid_format_raises(self) -> None:
        """Test that a strategy string without a colon raises ValueError."""
        with pytest.raises(ValueError, match="Invalid locator strategy format"):
            parse_strategy("error-message")

    def test_unknown_kind_raises(self) -> None:
        """Test that an unknown kind raises ValueError."""
        with pytest.raises(ValueError, match="Unknown locator strategy kind"):
            parse_strategy("xpath://div")


class TestLocatorStrategy:
    """Tests for strategy descriptions and selectors."""

    def test_descendant_selector(self) -> None:
        """Test that a descendant is scoped under the test id."""
        strategy = LocatorStrategy.test_id("success-message", descendant=".text-green-800")
        assert strategy.test_id_selector() == '[data-testid="success-message"] .text-green-800'

    def test_describe_variants(self) -> None:
        """Test human-readable descriptions for each kind."""
        assert LocatorStrategy.css("h1").describe() == "css=h1"
        assert LocatorStrategy.text("Get started").describe() == "text=/Get started/i"
        assert LocatorStrategy.label("Email").describe() == "label=/Email/i"
        assert LocatorStrategy.placeholder("you@").describe() == "placeholder=/you@/i"
        assert LocatorStrategy.role("button", "Save").describe() == "role=button[name=/Save/i]"

    def test_strategies_are_frozen(self) -> None:
        """Test that strategies cannot be mutated."""
        strategy = LocatorStrategy.css("h1")
        with pytest.raises(ValidationError):
            strategy.value = "h2"  # type: ignore[misc]

    def test_request_requires_candidates(self) -> None:
        """Test that an evidence request needs at least one strategy."""
        with pytest.raises(ValidationError):
            EvidenceRequest(kind=EvidenceKind.HEADING, candidates=())


class TestPatternHelpers:
    """Tests for text pattern helpers."""

    def test_string_is_case_insensitive_regex(self) -> None:
        """Test that strings compile to case-insensitive alternations."""
        assert text_matches("dashboard|workflows", "My Workflows")
        assert not text_matches("dashboard|workflows", "Secrets")

    def test_invalid_regex_falls_back_to_literal(self) -> None:
        """Test that an invalid regex is matched literally."""
        pattern = compile_pattern("Cost (USD")
        assert pattern.search("Total cost (usd)") is not None

    def test_compiled_pattern_used_as_is(self) -> None:
        """Test that compiled patterns keep their flags."""
        pattern = re.compile("Saved")
        assert compile_pattern(pattern) is pattern
        assert not text_matches(pattern, "saved")

    def test_empty_text_never_matches(self) -> None:
        """Test that None and empty text never match."""
        assert not text_matches(".*", None)
        assert not text_matches(".*", "")

    def test_describe_pattern(self) -> None:
        """Test rendering patterns for failure messages."""
        assert describe_pattern("Required") == "/Required/i"
        assert describe_pattern(re.compile("Saved")) == "/Saved/"

    @pytest.mark.asyncio
    async def test_element_text_falls_back_to_aria_label(self) -> None:
        """Test that icon buttons are described by their aria-label."""
        assert await element_text(FakeElement("", aria_label="Close dialog")) == "Close dialog"
        assert await element_text(FakeElement("  Sign\n  in ")) == "Sign in"


class TestLocatorResolver:
    """Tests for ordered evidence resolution."""

    @pytest.mark.asyncio
    async def test_first_matching_strategy_wins(self, page: FakePage) -> None:
        """Test that strategies are tried in priority order."""
        page.add('[data-testid="error-message"]', FakeElement("Invalid email"))
        page.add(".text-red-600", FakeElement("Invalid email"))
        request = EvidenceRequest(
            kind=EvidenceKind.ERROR_MESSAGE,
            candidates=(
                LocatorStrategy.test_id("error-message"),
                LocatorStrategy.css(".text-red-600"),
            ),
        )

        evidence = await LocatorResolver(page).resolve(request)

        assert evidence.found
        assert evidence.strategy == LocatorStrategy.test_id("error-message")
        assert evidence.attempted == ['[data-testid="error-message"]']

    @pytest.mark.asyncio
    async def test_invisible_elements_do_not_count(self, page: FakePage) -> None:
        """Test that hidden elements are present but not found."""
        page.add("h1", FakeElement("Dashboard", visible=False))
        request = EvidenceRequest(kind=EvidenceKind.HEADING, candidates=(LocatorStrategy.css("h1"),))

        evidence = await LocatorResolver(page).resolve(request)

        assert not evidence.found
        assert evidence.present == 1

    @pytest.mark.asyncio
    async def test_visible_only_false_keeps_hidden_elements(self, page: FakePage) -> None:
        """Test attribute audits can include hidden elements."""
        page.add("[aria-live]", FakeElement("", visible=False, aria_live="polite"))
        request = EvidenceRequest(
            kind=EvidenceKind.LANDMARK,
            candidates=(LocatorStrategy.css("[aria-live]"),),
            visible_only=False,
        )

        evidence = await LocatorResolver(page).resolve(request)

        assert evidence.found
        assert evidence.count == 1

    @pytest.mark.asyncio
    async def test_text_filter_records_observed(self, page: FakePage) -> None:
        """Test that non-matching visible text is recorded for diagnostics."""
        page.add("h1", FakeElement("Secrets"))
        request = EvidenceRequest(
            kind=EvidenceKind.HEADING,
            candidates=(LocatorStrategy.css("h1"),),
            match_text="Dashboard",
        )

        evidence = await LocatorResolver(page).resolve(request)

        assert not evidence.found
        assert evidence.observed == ["Secrets"]
        assert "Secrets" in evidence.summary()

    @pytest.mark.asyncio
    async def test_inspection_error_counts_as_no_match(self, page: FakePage) -> None:
        """Test that a timing-out strategy falls through to the next."""
        page.broken_selectors.add('[data-testid="error-message"]')
        page.register(FakeElement("Required", role="alert"))
        request = EvidenceRequest(
            kind=EvidenceKind.ERROR_MESSAGE,
            candidates=(LocatorStrategy.test_id("error-message"), LocatorStrategy.role("alert")),
        )

        evidence = await LocatorResolver(page).resolve(request)

        assert evidence.found
        assert evidence.strategy is not None
        assert evidence.strategy.kind == StrategyKind.ROLE
        assert len(evidence.attempted) == 2

    @pytest.mark.asyncio
    async def test_detached_element_is_skipped(self, page: FakePage) -> None:
        """Test that a single failing element does not abort the strategy."""
        page.add("button", FakeElement("Gone", broken=True), FakeElement("Save"))
        request = EvidenceRequest(kind=EvidenceKind.ACTION_BUTTON, candidates=(LocatorStrategy.css("button"),))

        evidence = await LocatorResolver(page).resolve(request)

        assert evidence.count == 1

    @pytest.mark.asyncio
    async def test_limit_caps_inspected_elements(self, page: FakePage) -> None:
        """Test that limit bounds how many elements are inspected."""
        page.add("button", *(FakeElement(f"B{i}") for i in range(5)))
        request = EvidenceRequest(
            kind=EvidenceKind.ACTION_BUTTON,
            candidates=(LocatorStrategy.css("button"),),
            limit=2,
        )

        evidence = await LocatorResolver(page).resolve(request)

        assert evidence.count == 2
        assert evidence.present == 5

    @pytest.mark.asyncio
    async def test_nothing_found_lists_all_attempts(self, page: FakePage) -> None:
        """Test that a miss reports every strategy tried."""
        request = EvidenceRequest(
            kind=EvidenceKind.SUCCESS_MESSAGE,
            candidates=(LocatorStrategy.test_id("success-message"), LocatorStrategy.role("status")),
        )

        evidence = await LocatorResolver(page).resolve(request)

        assert not evidence.found
        assert evidence.first is None
        assert evidence.attempted == ['[data-testid="success-message"]', "role=status"]
