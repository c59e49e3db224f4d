"""
UX Compliance Assertions for APIQ E2E Testing.

Fail-fast wrapper around :class:`~apiq_e2e.engine.ComplianceEngine` for use
inside scenario tests.  Every ``validate_*`` method evaluates one rule and
raises a :class:`~apiq_e2e.errors.UXComplianceError` subclass when it fails;
the message names the rule, the locator strategies tried, and what was found.

Usage:
    ux = UXComplianceAssertions(page)

    await ux.validate_page_title("APIQ")
    await ux.validate_heading_hierarchy(["Sign in to APIQ"])
    await ux.validate_error_container("Invalid email or password")

    # Structured result, never raises
    report = await ux.check("touch_target_size")

    # Presets
    await validate_login_page(page)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from apiq_e2e.adapters.base import PageInspector
from apiq_e2e.adapters.playwright_adapter import PlaywrightInspector
from apiq_e2e.config import ComplianceSettings, get_settings
from apiq_e2e.engine import ComplianceEngine
from apiq_e2e.errors import (
    EvidenceNotFoundError,
    PredicateViolationError,
    ToleranceExceededError,
    UXComplianceError,
)
from apiq_e2e.locators import TextPattern
from apiq_e2e.report import ComplianceReport, ComplianceSummary, FailureKind
from apiq_e2e.rules import COMPLETE_UX_RULES

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

_ERROR_FOR_FAILURE: dict[FailureKind, type[UXComplianceError]] = {
    FailureKind.EVIDENCE_NOT_FOUND: EvidenceNotFoundError,
    FailureKind.PREDICATE_VIOLATION: PredicateViolationError,
    FailureKind.TOLERANCE_EXCEEDED: ToleranceExceededError,
}


def raise_for_report(report: ComplianceReport, fail_on_advisory: bool = False) -> ComplianceReport:
    """
    Raise the matching UXComplianceError if a report fails.

    Returns:
        The report unchanged when it passes (or is advisory and tolerated)
    """
    verdict = report.verdict
    if not verdict.fails(fail_on_advisory):
        if verdict.is_advisory:
            logger.warning("Advisory: %s", report.format())
        return report
    error_cls = _ERROR_FOR_FAILURE.get(verdict.failure, UXComplianceError) if verdict.failure else UXComplianceError
    raise error_cls(report)


class UXComplianceAssertions:
    """
    Rule-per-method assertions over the current page.

    Accepts a Playwright ``Page`` or any :class:`PageInspector`.
    """

    def __init__(
        self,
        page: Page | PageInspector,
        settings: ComplianceSettings | None = None,
    ) -> None:
        """
        Initialize assertions.

        Args:
            page: Playwright Page or PageInspector instance
            settings: Thresholds and timeouts (defaults to environment settings)
        """
        self.settings = settings or get_settings()
        if isinstance(page, PageInspector):
            self.inspector = page
        else:
            self.inspector = PlaywrightInspector(page, element_timeout=self.settings.element_timeout_ms)
        self.engine = ComplianceEngine(self.inspector, self.settings)

    async def check(self, rule_name: str, **params: Any) -> ComplianceReport:
        """Evaluate a rule and return the report without raising."""
        return await self.engine.evaluate(rule_name, **params)

    async def _assert(self, rule_name: str, **params: Any) -> ComplianceReport:
        report = await self.engine.evaluate(rule_name, **params)
        return raise_for_report(report, self.settings.fail_on_advisory)

    # -- Core rules ------------------------------------------------------------

    async def validate_heading_hierarchy(self, expected: list[TextPattern] | TextPattern) -> ComplianceReport:
        """
        Assert that every expected heading is visible.

        Args:
            expected: Heading patterns; strings are case-insensitive regex

        Raises:
            EvidenceNotFoundError: If any expected heading is missing
        """
        return await self._assert("heading_hierarchy", expected=expected)

    async def validate_form_accessibility(self) -> ComplianceReport:
        """Assert that visible form fields are accessibly labelled."""
        return await self._assert("form_accessibility")

    async def validate_error_container(self, expected: TextPattern) -> ComplianceReport:
        """
        Assert that a visible error message matches *expected*.

        Falls back to generic actionable error patterns and field-level
        error containers before failing.
        """
        return await self._assert("error_container", expected=expected)

    async def validate_success_container(self, message: str) -> ComplianceReport:
        """Assert that the success message contains *message* (case-sensitive)."""
        return await self._assert("success_container", message=message)

    async def validate_mobile_accessibility(self) -> ComplianceReport:
        return await self._assert("mobile_accessibility")

    async def validate_activation_first_ux(self) -> ComplianceReport:
        return await self._assert("activation_first_ux")

    async def validate_keyboard_navigation(self) -> ComplianceReport:
        return await self._assert("keyboard_navigation")

    async def validate_touch_targets(self) -> ComplianceReport:
        return await self._assert("touch_target_size")

    # -- Supplementary rules ---------------------------------------------------

    async def validate_page_title(self, expected: TextPattern) -> ComplianceReport:
        return await self._assert("page_title", expected=expected)

    async def validate_loading_state(self, selector: str) -> ComplianceReport:
        """Assert that the button at *selector* is disabled and shows a loading label."""
        return await self._assert("loading_state", selector=selector)

    async def validate_aria_compliance(self) -> ComplianceReport:
        return await self._assert("aria_labels")

    async def validate_screen_reader_compatibility(self) -> ComplianceReport:
        return await self._assert("screen_reader")

    async def validate_error_handling(self) -> ComplianceReport:
        return await self._assert("actionable_errors")

    async def validate_dashboard_navigation(self) -> ComplianceReport:
        return await self._assert("dashboard_navigation")

    async def validate_empty_states(self) -> ComplianceReport:
        return await self._assert("empty_states")

    async def validate_confirmation_dialogs(self) -> ComplianceReport:
        return await self._assert("confirmation_dialogs")

    async def validate_consistency(self) -> ComplianceReport:
        return await self._assert("button_consistency")

    async def validate_responsive_layout(self) -> ComplianceReport:
        return await self._assert("responsive_layout")

    # -- Workflow pages --------------------------------------------------------

    async def validate_performance_requirements(self) -> ComplianceReport:
        return await self._assert("performance_indicators")

    async def validate_workflow_templates(self) -> ComplianceReport:
        """Assert that template cards state difficulty or time and template controls are visible."""
        return await self._assert("workflow_templates")

    async def validate_onboarding_flow(self) -> ComplianceReport:
        return await self._assert("onboarding_flow")

    async def validate_workflow_ux(self) -> ComplianceReport:
        return await self._assert("workflow_status")

    async def validate_workflow_creation_ux(self) -> ComplianceReport:
        """
        Assert that the creation page shows its description input, guidance and Generate action.

        Only checks what is rendered; generating and saving a workflow is left
        to the scenario test.
        """
        return await self._assert("workflow_creation")

    async def validate_complete_ux_compliance(self) -> ComplianceSummary:
        """
        Run the complete rule set and raise on the first failing report.

        Every rule is evaluated before raising, so the summary is complete
        even when an assertion fails.
        """
        summary = await self.engine.evaluate_many(COMPLETE_UX_RULES)
        for report in summary.reports:
            raise_for_report(report, self.settings.fail_on_advisory)
        return summary


# =============================================================================
# Presets
# =============================================================================


async def validate_login_page(page: Page | PageInspector) -> UXComplianceAssertions:
    """Validate the APIQ login page."""
    ux = UXComplianceAssertions(page)
    await ux.validate_page_title("APIQ")
    await ux.validate_heading_hierarchy(["Sign in to APIQ"])
    await ux.validate_form_accessibility()
    await ux.validate_activation_first_ux()
    return ux


async def validate_dashboard(page: Page | PageInspector) -> UXComplianceAssertions:
    """Validate the APIQ dashboard."""
    ux = UXComplianceAssertions(page)
    await ux.validate_page_title("Dashboard")
    await ux.validate_heading_hierarchy(["Dashboard"])
    await ux.validate_dashboard_navigation()
    await ux.validate_empty_states()
    return ux


async def validate_workflow_management(page: Page | PageInspector) -> UXComplianceAssertions:
    """Validate the workflow management views."""
    ux = UXComplianceAssertions(page)
    await ux.validate_heading_hierarchy(["Workflows"])
    await ux.validate_workflow_ux()
    await ux.validate_confirmation_dialogs()
    return ux


async def validate_workflow_creation(page: Page | PageInspector) -> UXComplianceAssertions:
    """Validate the workflow creation page."""
    ux = UXComplianceAssertions(page)
    await ux.validate_page_title("Create Workflow")
    await ux.validate_heading_hierarchy(["Create Workflow"])
    await ux.validate_workflow_creation_ux()
    return ux


async def validate_ux_expectations(
    page: Page | PageInspector,
    title: TextPattern | None = None,
    headings: str | list[TextPattern] | None = None,
    validate_form: bool = False,
    validate_accessibility: bool = False,
) -> UXComplianceAssertions:
    """
    Validate a page against ad-hoc expectations.

    Args:
        page: Playwright Page or PageInspector
        title: Expected title pattern
        headings: Expected headings; a string is split on ``|`` into separate headings
        validate_form: Also check form accessibility
        validate_accessibility: Also check ARIA labels and keyboard navigation
    """
    ux = UXComplianceAssertions(page)
    if title:
        await ux.validate_page_title(title)
    if headings:
        expected = headings.split("|") if isinstance(headings, str) else headings
        await ux.validate_heading_hierarchy(expected)
    if validate_form:
        await ux.validate_form_accessibility()
    if validate_accessibility:
        await ux.validate_aria_compliance()
        await ux.validate_keyboard_navigation()
    return ux
