"""
UX compliance CLI.

Commands:
- apiq-e2e rules: List the rule catalog
- apiq-e2e check <url>: Open a page in Chromium and evaluate compliance rules
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated, Any

import typer
from playwright.async_api import Error as PlaywrightError
from rich.console import Console
from rich.table import Table

from apiq_e2e.adapters.playwright_adapter import PlaywrightInspector
from apiq_e2e.browser import open_page
from apiq_e2e.config import ComplianceSettings
from apiq_e2e.context import VIEWPORTS
from apiq_e2e.engine import ComplianceEngine
from apiq_e2e.errors import UnknownRuleError
from apiq_e2e.report import ComplianceSummary, Severity
from apiq_e2e.rules import CATALOG, COMPLETE_UX_RULES, DEFAULT_HEADINGS

app = typer.Typer(
    help="UX compliance checks for APIQ pages.",
    no_args_is_help=True,
)

console = Console()


@app.command(name="rules")
def list_rules(
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List the compliance rules in the catalog."""
    if output_json:
        console.print_json(
            json.dumps(
                [
                    {
                        "name": rule.name,
                        "description": rule.description,
                        "tolerance": rule.tolerance.describe(),
                        "context_sensitive": rule.context_sensitive,
                        "severity": rule.severity.value,
                    }
                    for rule in CATALOG
                ]
            )
        )
        return

    table = Table(title="UX Compliance Rules")
    table.add_column("Rule")
    table.add_column("Description")
    table.add_column("Tolerance", style="dim")
    table.add_column("Context")

    for rule in CATALOG:
        table.add_row(
            rule.name,
            rule.description,
            rule.tolerance.describe(),
            "yes" if rule.context_sensitive else "",
        )

    console.print(table)
    console.print(f"\n[dim]{len(CATALOG)} rule(s)[/dim]")


def build_rule_plan(
    rule_names: list[str] | None,
    headings: list[str] | None,
    error: str | None,
    success: str | None,
    title: str | None,
) -> list[tuple[str, dict[str, Any]]]:
    """
    Turn command-line options into ``(rule_name, params)`` pairs.

    Without ``--rule`` the complete rule set runs; parameterised rules are
    added for each of ``--error``, ``--success`` and ``--title`` given.

    Raises:
        UnknownRuleError: If a ``--rule`` name is not in the catalog
    """
    heading_params = {"expected": headings or DEFAULT_HEADINGS}

    if rule_names:
        plan: list[tuple[str, dict[str, Any]]] = []
        for name in rule_names:
            CATALOG.get(name)
            match name:
                case "heading_hierarchy":
                    plan.append((name, heading_params))
                case "error_container" if error:
                    plan.append((name, {"expected": error}))
                case "success_container" if success:
                    plan.append((name, {"message": success}))
                case "page_title" if title:
                    plan.append((name, {"expected": title}))
                case "error_container" | "success_container" | "page_title" | "loading_state":
                    raise typer.BadParameter(f"Rule {name} needs a value (see --help)", param_hint="--rule")
                case _:
                    plan.append((name, {}))
        return plan

    plan = [
        (name, heading_params if name == "heading_hierarchy" else params)
        for name, params in COMPLETE_UX_RULES
    ]
    if title:
        plan.insert(0, ("page_title", {"expected": title}))
    if error:
        plan.append(("error_container", {"expected": error}))
    if success:
        plan.append(("success_container", {"message": success}))
    return plan


async def _run_check(
    url: str,
    plan: list[tuple[str, dict[str, Any]]],
    settings: ComplianceSettings,
    viewport: tuple[int, int] | None,
    headed: bool,
) -> ComplianceSummary:
    """Async implementation of the check command."""
    async with open_page(viewport=viewport, headless=False if headed else None) as page:
        await page.goto(url)
        inspector = PlaywrightInspector(page, element_timeout=settings.element_timeout_ms)
        await inspector.wait_for_load_state(settings.load_state, settings.wait_timeout_ms)
        engine = ComplianceEngine(inspector, settings)
        return await engine.evaluate_many(plan)


def _print_summary(summary: ComplianceSummary) -> None:
    table = Table(title=f"UX Compliance: {summary.url}")
    table.add_column("Rule")
    table.add_column("Result")
    table.add_column("Context", style="dim")
    table.add_column("Message")

    for report in summary.reports:
        verdict = report.verdict
        if verdict.passed:
            result = "[green]pass[/green]"
        elif verdict.severity == Severity.ADVISORY:
            result = "[yellow]advisory[/yellow]"
        else:
            result = "[red]FAIL[/red]"
        table.add_row(
            report.rule_name,
            result,
            report.context.describe() if report.context else "",
            verdict.message,
        )

    console.print(table)
    for report in summary.failures:
        console.print(f"\n[red]{report.format()}[/red]")

    passed = sum(1 for r in summary.reports if r.passed)
    console.print(
        f"\n[dim]{passed}/{len(summary.reports)} passed, {len(summary.advisories)} advisory[/dim]"
    )


@app.command(name="check")
def check(
    url: Annotated[str, typer.Argument(help="Page URL to check")],
    rule: Annotated[
        list[str] | None, typer.Option("--rule", "-r", help="Rule to run (repeatable)")
    ] = None,
    heading: Annotated[
        list[str] | None, typer.Option("--heading", help="Expected heading (repeatable)")
    ] = None,
    error: Annotated[str | None, typer.Option("--error", help="Expected error message")] = None,
    success: Annotated[str | None, typer.Option("--success", help="Expected success message")] = None,
    title: Annotated[str | None, typer.Option("--title", help="Expected page title")] = None,
    viewport: Annotated[
        str | None,
        typer.Option("--viewport", help=f"Viewport preset: {', '.join(VIEWPORTS)}"),
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    output_markdown: Annotated[bool, typer.Option("--markdown", help="Output as markdown")] = False,
    headed: Annotated[bool, typer.Option("--headed", help="Show the browser window")] = False,
    fail_on_advisory: Annotated[
        bool, typer.Option("--fail-on-advisory", help="Treat advisory verdicts as failures")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    """
    Open URL in Chromium and evaluate UX compliance rules.

    Examples:
        apiq-e2e check http://localhost:3000/login --title APIQ --heading "Sign in to APIQ"
        apiq-e2e check http://localhost:3000/dashboard -r activation_first_ux --viewport mobile
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    size: tuple[int, int] | None = None
    if viewport is not None:
        if viewport not in VIEWPORTS:
            console.print(f"[red]Unknown viewport: {viewport}. Choose from {', '.join(VIEWPORTS)}[/red]")
            raise typer.Exit(2)
        size = VIEWPORTS[viewport]

    try:
        plan = build_rule_plan(rule, heading, error, success, title)
    except UnknownRuleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2) from e

    settings = ComplianceSettings.from_env(fail_on_advisory=True if fail_on_advisory else None)

    try:
        summary = asyncio.run(_run_check(url, plan, settings, size, headed))
    except PlaywrightError as e:
        console.print(f"[red]Could not open {url}: {e.message}[/red]")
        raise typer.Exit(1) from e

    if output_json:
        typer.echo(summary.to_json())
    elif output_markdown:
        typer.echo(summary.to_markdown())
    else:
        _print_summary(summary)

    if not summary.passed:
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
