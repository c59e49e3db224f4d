"""
APIQ E2E UX Compliance.

Evaluates pages of the APIQ web application against a catalog of UX
compliance rules (headings, form labelling, touch targets, error and
success messaging, activation-first primary actions, keyboard and mobile
accessibility) through a small page-inspection port.

Usage:
    from apiq_e2e import UXComplianceAssertions

    async def test_login_page(page):
        await page.goto("http://localhost:3000/login")
        ux = UXComplianceAssertions(page)
        await ux.validate_page_title("APIQ")
        await ux.validate_heading_hierarchy(["Sign in to APIQ"])
        await ux.validate_activation_first_ux()

Structured reports:
    from apiq_e2e import ComplianceEngine, PlaywrightInspector

    engine = ComplianceEngine(PlaywrightInspector(page))
    summary = await engine.evaluate_many()
    print(summary.to_markdown())
"""

from apiq_e2e.adapters import BoundingBox, PageElement, PageInspector, PlaywrightInspector
from apiq_e2e.assertions import (
    UXComplianceAssertions,
    validate_dashboard,
    validate_login_page,
    validate_ux_expectations,
    validate_workflow_creation,
    validate_workflow_management,
)
from apiq_e2e.config import ComplianceSettings, get_settings
from apiq_e2e.context import ContextKey, PageContext, ToleranceSpec, resolve_context, tolerance_for
from apiq_e2e.engine import ComplianceEngine
from apiq_e2e.errors import (
    ApiqE2EError,
    EvidenceNotFoundError,
    InspectionError,
    PredicateViolationError,
    RuleRegistrationError,
    ToleranceExceededError,
    UnknownRuleError,
    UXComplianceError,
)
from apiq_e2e.locators import EvidenceKind, EvidenceRequest, LocatorResolver, LocatorStrategy
from apiq_e2e.report import ComplianceReport, ComplianceSummary, Severity, Verdict, Violation
from apiq_e2e.rules import CATALOG, COMPLETE_UX_RULES, Rule, RuleCatalog

__all__ = [
    # Scenario API
    "UXComplianceAssertions",
    "validate_login_page",
    "validate_dashboard",
    "validate_workflow_creation",
    "validate_workflow_management",
    "validate_ux_expectations",
    # Engine and reports
    "ComplianceEngine",
    "ComplianceReport",
    "ComplianceSummary",
    "Verdict",
    "Violation",
    "Severity",
    # Rules and policy
    "CATALOG",
    "COMPLETE_UX_RULES",
    "Rule",
    "RuleCatalog",
    "ContextKey",
    "PageContext",
    "ToleranceSpec",
    "resolve_context",
    "tolerance_for",
    # Evidence
    "EvidenceKind",
    "EvidenceRequest",
    "LocatorResolver",
    "LocatorStrategy",
    # Port
    "BoundingBox",
    "PageElement",
    "PageInspector",
    "PlaywrightInspector",
    # Configuration
    "ComplianceSettings",
    "get_settings",
    # Errors
    "ApiqE2EError",
    "InspectionError",
    "UnknownRuleError",
    "RuleRegistrationError",
    "UXComplianceError",
    "EvidenceNotFoundError",
    "PredicateViolationError",
    "ToleranceExceededError",
]
