"""
Compliance verdicts and reports.

A rule evaluation always produces a :class:`Verdict`; the engine wraps it in
a :class:`ComplianceReport` with timing and page context.  Callers that want
to aggregate use :class:`ComplianceSummary`; callers that want fail-fast use
the assertion API, which raises from the same report.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from apiq_e2e.context import ContextKey


class Severity(str, Enum):
    """Whether a failing verdict should fail the caller."""

    HARD = "hard"
    ADVISORY = "advisory"


class FailureKind(str, Enum):
    """Why a verdict did not pass."""

    EVIDENCE_NOT_FOUND = "evidence_not_found"
    PREDICATE_VIOLATION = "predicate_violation"
    TOLERANCE_EXCEEDED = "tolerance_exceeded"


@dataclass
class Violation:
    """A single non-conforming element."""

    element: str  # Element description from the inspector
    reason: str
    measured: dict[str, Any] = field(default_factory=dict)

    def format(self) -> str:
        return f"{self.element}: {self.reason}"


@dataclass
class Verdict:
    """Outcome of one rule predicate."""

    passed: bool
    message: str
    violations: list[Violation] = field(default_factory=list)
    severity: Severity = Severity.HARD
    failure: FailureKind | None = None
    tried: list[str] = field(default_factory=list)  # Strategies / patterns sought
    found: list[str] = field(default_factory=list)  # What was actually observed

    @classmethod
    def ok(cls, message: str, violations: list[Violation] | None = None, found: list[str] | None = None) -> Verdict:
        return cls(passed=True, message=message, violations=violations or [], found=found or [])

    @classmethod
    def not_found(
        cls,
        message: str,
        tried: list[str],
        found: list[str] | None = None,
        severity: Severity = Severity.HARD,
    ) -> Verdict:
        return cls(
            passed=False,
            message=message,
            severity=severity,
            failure=FailureKind.EVIDENCE_NOT_FOUND,
            tried=tried,
            found=found or [],
        )

    @classmethod
    def violated(
        cls,
        message: str,
        violations: list[Violation],
        severity: Severity = Severity.HARD,
        tried: list[str] | None = None,
        found: list[str] | None = None,
    ) -> Verdict:
        return cls(
            passed=False,
            message=message,
            violations=violations,
            severity=severity,
            failure=FailureKind.PREDICATE_VIOLATION,
            tried=tried or [],
            found=found or [],
        )

    @classmethod
    def exceeded(cls, message: str, violations: list[Violation], tried: list[str] | None = None) -> Verdict:
        return cls(
            passed=False,
            message=message,
            violations=violations,
            severity=Severity.HARD,
            failure=FailureKind.TOLERANCE_EXCEEDED,
            tried=tried or [],
        )

    @property
    def is_advisory(self) -> bool:
        return not self.passed and self.severity == Severity.ADVISORY

    def fails(self, fail_on_advisory: bool = False) -> bool:
        """Whether this verdict should fail the caller."""
        if self.passed:
            return False
        return self.severity == Severity.HARD or fail_on_advisory


@dataclass
class ComplianceReport:
    """Result of evaluating one rule against the current page."""

    rule_name: str
    verdict: Verdict
    evaluated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    context: ContextKey | None = None
    params: dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0

    @property
    def passed(self) -> bool:
        return self.verdict.passed

    def format(self) -> str:
        """Multi-line failure description: rule, what was sought, what was found."""
        verdict = self.verdict
        status = "passed" if verdict.passed else f"failed ({verdict.severity.value})"
        lines = [f"[{self.rule_name}] {status}: {verdict.message}"]
        if verdict.failure is not None:
            lines.append(f"  failure: {verdict.failure.value}")
        if self.context is not None:
            lines.append(f"  context: {self.context.describe()}")
        if verdict.tried:
            lines.append("  sought:")
            lines.extend(f"    - {item}" for item in verdict.tried)
        if verdict.found:
            lines.append("  found:")
            lines.extend(f"    - {item}" for item in verdict.found)
        elif not verdict.passed:
            lines.append("  found: nothing")
        if verdict.violations:
            lines.append("  violations:")
            lines.extend(f"    - {v.format()}" for v in verdict.violations)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        verdict = self.verdict
        return {
            "rule": self.rule_name,
            "passed": verdict.passed,
            "severity": verdict.severity.value,
            "failure": verdict.failure.value if verdict.failure else None,
            "message": verdict.message,
            "context": self.context.describe() if self.context else None,
            "params": {k: _jsonable(v) for k, v in self.params.items()},
            "evaluated_at": self.evaluated_at.isoformat(),
            "duration_ms": round(self.duration_ms, 1),
            "tried": verdict.tried,
            "found": verdict.found,
            "violations": [
                {"element": v.element, "reason": v.reason, "measured": v.measured}
                for v in verdict.violations
            ],
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, str | int | float | bool) or value is None:
        return value
    if isinstance(value, list | tuple):
        return [_jsonable(v) for v in value]
    pattern = getattr(value, "pattern", None)
    if isinstance(pattern, str):
        return pattern
    return str(value)


@dataclass
class ComplianceSummary:
    """Ordered reports from evaluating several rules on one page."""

    url: str
    reports: list[ComplianceReport] = field(default_factory=list)
    fail_on_advisory: bool = False

    @property
    def failures(self) -> list[ComplianceReport]:
        return [r for r in self.reports if r.verdict.fails(self.fail_on_advisory)]

    @property
    def advisories(self) -> list[ComplianceReport]:
        return [r for r in self.reports if r.verdict.is_advisory]

    @property
    def passed(self) -> bool:
        return not self.failures

    def to_json(self) -> str:
        """Serialise the summary to JSON."""
        return json.dumps(
            {
                "url": self.url,
                "passed": self.passed,
                "total": len(self.reports),
                "failed": len(self.failures),
                "advisories": len(self.advisories),
                "reports": [r.to_dict() for r in self.reports],
            },
            indent=2,
        )

    def to_markdown(self) -> str:
        """Render a human-friendly markdown summary."""
        lines: list[str] = []
        status = "PASS" if self.passed else "FAIL"
        lines.append(f"# UX Compliance Report: {status}")
        lines.append("")
        lines.append(f"`{self.url}`")
        lines.append("")
        passed = sum(1 for r in self.reports if r.passed)
        lines.append(f"**{passed}/{len(self.reports)}** rules passed")
        lines.append("")

        for report in self.reports:
            verdict = report.verdict
            if verdict.passed:
                icon = "pass"
            elif verdict.severity == Severity.ADVISORY:
                icon = "warn"
            else:
                icon = "FAIL"
            lines.append(f"- [{icon}] **{report.rule_name}**: {verdict.message}")
            if not verdict.passed:
                for item in verdict.tried:
                    lines.append(f"    - sought: {item}")
                for item in verdict.found:
                    lines.append(f"    - found: {item}")
            for violation in verdict.violations:
                lines.append(f"    - {violation.format()}")

        return "\n".join(lines)
