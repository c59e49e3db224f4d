"""
Compliance Engine for APIQ E2E Testing.

Evaluates catalog rules against the current page and returns structured
reports.  The engine never raises on a failing rule; the fail-fast
assertion API is built on top of it.

Usage:
    engine = ComplianceEngine(PlaywrightInspector(page))

    report = await engine.evaluate("heading_hierarchy", expected=["Dashboard"])
    if not report.passed:
        print(report.format())

    summary = await engine.evaluate_many(COMPLETE_UX_RULES)
    print(summary.to_markdown())
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from apiq_e2e.adapters.base import PageInspector
from apiq_e2e.config import ComplianceSettings, get_settings
from apiq_e2e.context import resolve_context
from apiq_e2e.errors import InspectionError
from apiq_e2e.locators import LocatorResolver
from apiq_e2e.report import ComplianceReport, ComplianceSummary, Severity, Verdict
from apiq_e2e.rules import CATALOG, COMPLETE_UX_RULES, RuleCatalog, RuleContext

logger = logging.getLogger(__name__)

__all__ = ["COMPLETE_UX_RULES", "ComplianceEngine"]


class ComplianceEngine:
    """
    Evaluates UX compliance rules against one page.

    Holds no per-page state between evaluations: every evaluation re-reads
    the URL and viewport, so the same engine may be reused after navigation.
    """

    def __init__(
        self,
        inspector: PageInspector,
        settings: ComplianceSettings | None = None,
        catalog: RuleCatalog = CATALOG,
    ) -> None:
        """
        Initialize the engine.

        Args:
            inspector: Page inspector for the page under test
            settings: Thresholds and timeouts (defaults to environment settings)
            catalog: Rule catalog to evaluate from
        """
        self.inspector = inspector
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.resolver = LocatorResolver(inspector)

    async def evaluate(self, rule_name: str, **params: Any) -> ComplianceReport:
        """
        Evaluate one rule.

        Args:
            rule_name: Catalog rule name
            **params: Rule parameters (e.g. ``expected`` for heading_hierarchy)

        Returns:
            ComplianceReport; inspection failures become evidence-not-found verdicts

        Raises:
            UnknownRuleError: If the rule is not in the catalog
        """
        rule = self.catalog.get(rule_name)
        ctx = RuleContext(
            inspector=self.inspector,
            resolver=self.resolver,
            settings=self.settings,
            rule=rule,
            context=resolve_context(
                self.inspector.url,
                self.inspector.viewport(),
                complex_threshold=self.settings.complex_page_threshold,
            ),
        )

        start_time = time.time()
        try:
            verdict = await rule.check(ctx, **params)
        except InspectionError as e:
            logger.warning("Rule %s could not inspect page: %s", rule_name, e)
            verdict = Verdict.not_found(
                f"Page could not be inspected: {e}",
                tried=[request.label for request in rule.evidence] or [rule.description],
            )
        duration_ms = (time.time() - start_time) * 1000

        report = ComplianceReport(
            rule_name=rule_name,
            verdict=verdict,
            context=ctx.context,
            params=params,
            duration_ms=duration_ms,
        )
        self._log(report)
        return report

    async def evaluate_many(
        self,
        rules: Iterable[tuple[str, dict[str, Any]]] = COMPLETE_UX_RULES,
    ) -> ComplianceSummary:
        """
        Evaluate several rules in order, never stopping on failure.

        Args:
            rules: ``(rule_name, params)`` pairs

        Returns:
            ComplianceSummary with one report per rule
        """
        summary = ComplianceSummary(url=self.inspector.url, fail_on_advisory=self.settings.fail_on_advisory)
        for rule_name, params in rules:
            summary.reports.append(await self.evaluate(rule_name, **params))

        logger.info(
            "UX compliance on %s: %d/%d passed, %d advisory",
            summary.url,
            sum(1 for r in summary.reports if r.passed),
            len(summary.reports),
            len(summary.advisories),
        )
        return summary

    def _log(self, report: ComplianceReport) -> None:
        verdict = report.verdict
        if verdict.passed:
            logger.info("PASS %s: %s (%.0fms)", report.rule_name, verdict.message, report.duration_ms)
        elif verdict.severity == Severity.ADVISORY:
            logger.info("ADVISORY %s: %s", report.rule_name, verdict.message)
        else:
            logger.warning("FAIL %s: %s", report.rule_name, verdict.message)
