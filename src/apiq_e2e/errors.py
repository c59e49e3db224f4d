"""
Error types for APIQ UX compliance checking.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apiq_e2e.report import ComplianceReport


class ApiqE2EError(Exception):
    """Base exception for all apiq_e2e errors."""


class InspectionError(ApiqE2EError):
    """
    Raised by a page inspector when a browser query cannot be completed.

    Examples:
    - Query timed out
    - Page was closed or navigated away mid-query
    - Element detached from the DOM
    """


class UnknownRuleError(ApiqE2EError, KeyError):
    """Raised when a rule name is not in the catalog."""

    def __init__(self, name: str, known: list[str]) -> None:
        self.name = name
        self.known = known
        super().__init__(f"Unknown rule: {name}. Known rules: {', '.join(known)}")

    def __str__(self) -> str:
        return str(self.args[0])


class RuleRegistrationError(ApiqE2EError):
    """Raised when a rule is registered twice or with an invalid check."""


class UXComplianceError(ApiqE2EError, AssertionError):
    """
    Raised by the fail-fast assertion API when a rule does not pass.

    Carries the full report so callers (and pytest output) can see which
    locator strategies were tried and what was actually found.
    """

    def __init__(self, report: ComplianceReport) -> None:
        self.report = report
        super().__init__(report.format())


class EvidenceNotFoundError(UXComplianceError):
    """No locator strategy produced a visible match."""


class PredicateViolationError(UXComplianceError):
    """Evidence was found but failed the rule's predicate."""


class ToleranceExceededError(UXComplianceError):
    """More elements violated the rule than its tolerance allows."""
