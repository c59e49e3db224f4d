"""
UX Compliance Rule Catalog for APIQ E2E Testing.

Each rule is an async predicate over evidence gathered from the current page.
Rules are registered once, at import time, in :data:`CATALOG` and never
mutated.  They read the page and never click or fill; the only side effects
are a Tab keypress (keyboard navigation) and temporarily forced viewports
(mobile and responsive checks), which are restored afterwards by default.

Supported rules:
- heading_hierarchy: expected headings are visible in h1/h2/h3/[role=heading]
- form_accessibility: fields have visible labels, required fields are named
- touch_target_size: interactive elements are at least 44x44px (with tolerance)
- error_container: an error message matches, with actionable fallbacks
- success_container: the success message contains the expected text
- activation_first_ux: primary-action conventions, varying by page context
- keyboard_navigation: Tab moves focus to a visible element
- mobile_accessibility: touch targets and field widths at 375x667
- page_title, loading_state, aria_labels, screen_reader, actionable_errors,
  dashboard_navigation, empty_states, confirmation_dialogs,
  button_consistency, responsive_layout
- performance_indicators, workflow_templates, onboarding_flow,
  workflow_status: workflow page elements are visible whenever they are present
- workflow_creation: the creation page shows its input, guidance and Generate action
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from apiq_e2e.adapters.base import PageElement, PageInspector
from apiq_e2e.config import ComplianceSettings
from apiq_e2e.context import (
    ContextKey,
    PageContext,
    ToleranceSpec,
    resolve_context,
    tolerance_for,
)
from apiq_e2e.errors import InspectionError, RuleRegistrationError, UnknownRuleError
from apiq_e2e.locators import (
    EvidenceKind,
    EvidenceRequest,
    IdMatch,
    LocatorResolver,
    LocatorStrategy,
    ResolvedEvidence,
    TextPattern,
    describe_pattern,
    element_text,
    text_matches,
)
from apiq_e2e.report import Severity, Verdict, Violation

logger = logging.getLogger(__name__)

CheckFn = Callable[..., Awaitable[Verdict]]

# =============================================================================
# Rule model and registry
# =============================================================================


@dataclass(frozen=True)
class Rule:
    """A named compliance rule."""

    name: str
    description: str
    check: CheckFn
    tolerance: ToleranceSpec
    evidence: tuple[EvidenceRequest, ...] = ()
    context_sensitive: bool = False
    severity: Severity = Severity.HARD


@dataclass
class RuleContext:
    """
    Everything a rule predicate may consult during one evaluation.

    Created fresh by the engine for every evaluation and discarded afterwards.
    """

    inspector: PageInspector
    resolver: LocatorResolver
    settings: ComplianceSettings
    rule: Rule
    context: ContextKey
    interactive_count: int | None = None

    def refine(self, interactive_count: int | None = None) -> ContextKey:
        """Re-classify the page (after a viewport change or element count)."""
        if interactive_count is not None:
            self.interactive_count = interactive_count
        self.context = resolve_context(
            self.inspector.url,
            self.inspector.viewport(),
            self.interactive_count,
            self.settings.complex_page_threshold,
        )
        return self.context

    def limit(self) -> int:
        """Violation ceiling for this rule in the current context."""
        return self.rule.tolerance.limit_for(self.context)


class RuleCatalog:
    """
    Registry of compliance rules.

    Supports:
    - Registration via the rule() decorator or register()
    - Lookup by name
    - Iteration in registration order
    """

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}

    def register(self, rule: Rule) -> None:
        """
        Register a rule.

        Raises:
            RuleRegistrationError: If the name is taken or check is not callable
        """
        if rule.name in self._rules:
            raise RuleRegistrationError(f"Rule '{rule.name}' is already registered")
        if not callable(rule.check):
            raise RuleRegistrationError(f"Rule '{rule.name}' has no callable check")
        self._rules[rule.name] = rule

    def rule(
        self,
        name: str,
        description: str,
        evidence: tuple[EvidenceRequest, ...] = (),
        context_sensitive: bool = False,
        severity: Severity = Severity.HARD,
    ) -> Callable[[CheckFn], CheckFn]:
        """Decorator registering an async check function as a rule."""

        def decorator(check: CheckFn) -> CheckFn:
            self.register(
                Rule(
                    name=name,
                    description=description,
                    check=check,
                    tolerance=tolerance_for(name),
                    evidence=evidence,
                    context_sensitive=context_sensitive,
                    severity=severity,
                )
            )
            return check

        return decorator

    def get(self, name: str) -> Rule:
        """
        Get a rule by name.

        Raises:
            UnknownRuleError: If no rule has that name
        """
        try:
            return self._rules[name]
        except KeyError:
            raise UnknownRuleError(name, self.names()) from None

    def names(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


CATALOG = RuleCatalog()

# =============================================================================
# Evidence vocabulary
# =============================================================================

HEADING_SELECTOR = 'h1, h2, h3, [role="heading"]'
HEADING_STRATEGIES = (
    LocatorStrategy.css("h1"),
    LocatorStrategy.css("h2"),
    LocatorStrategy.css("h3"),
    LocatorStrategy.css('[role="heading"]'),
)

FORM_FIELD_SELECTOR = "input, select, textarea"
FORM_FIELD_REQUEST = EvidenceRequest(
    kind=EvidenceKind.FORM_FIELD,
    candidates=(LocatorStrategy.css(FORM_FIELD_SELECTOR),),
    description="form fields",
)
UNLABELED_INPUT_TYPES = frozenset({"hidden", "submit", "button", "reset", "image"})

TOUCH_TARGET_SELECTOR = (
    'button:not([disabled]), a[role="button"], input[type="button"], '
    'input[type="submit"], [role="button"], [role="link"]'
)
TOUCH_TARGET_REQUEST = EvidenceRequest(
    kind=EvidenceKind.TOUCH_TARGET,
    candidates=(LocatorStrategy.css(TOUCH_TARGET_SELECTOR),),
    description="interactive elements",
)

MOBILE_TARGET_SELECTOR = (
    'button:not([disabled]), a:not([disabled]), input[type="button"], '
    'input[type="submit"], select, [role="button"], [role="link"]'
)
MOBILE_TARGET_REQUEST = EvidenceRequest(
    kind=EvidenceKind.TOUCH_TARGET,
    candidates=(LocatorStrategy.css(MOBILE_TARGET_SELECTOR),),
    description="mobile interactive elements",
)
MOBILE_FIELD_SELECTOR = (
    'input:not([type="checkbox"]):not([type="radio"]):not([type="hidden"])'
    ':not([type="submit"]):not([type="button"]), select, textarea'
)
MOBILE_FIELD_REQUEST = EvidenceRequest(
    kind=EvidenceKind.FORM_FIELD,
    candidates=(LocatorStrategy.css(MOBILE_FIELD_SELECTOR),),
    description="mobile form fields",
)
MOBILE_MENU_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GENERIC,
    candidates=(LocatorStrategy.test_id("mobile-menu"), LocatorStrategy.css(".mobile-menu")),
    description="mobile menu",
)

ERROR_STRATEGIES = (
    LocatorStrategy.test_id("error-message"),
    LocatorStrategy.test_id("workflow-error-message"),
    LocatorStrategy.test_id("validation-errors"),
    LocatorStrategy.css(".bg-red-50 .text-red-800"),
    LocatorStrategy.role("alert"),
    LocatorStrategy.css(".text-red-600"),
    LocatorStrategy.css(".text-red-800"),
)
ACTIONABLE_ERROR_PATTERNS = (
    "Please enter",
    "Please use",
    "Please select",
    "Please provide",
    "Please check",
    "Required",
    "Invalid",
    "Error",
)
FIELD_ERROR_STRATEGIES = (
    LocatorStrategy.test_id("error", match=IdMatch.CONTAINS),
    LocatorStrategy.css('[id*="error"]'),
    LocatorStrategy.css(".text-red-600"),
    LocatorStrategy.css(".text-red-800"),
)

SUCCESS_CONTAINER_REQUEST = EvidenceRequest(
    kind=EvidenceKind.SUCCESS_MESSAGE,
    candidates=(LocatorStrategy.test_id("success-message"),),
    description="success container",
)
SUCCESS_TEXT_CLASS = ".text-green-800"

PRIMARY_ACTION_PREFIX = "primary-action "
PRIMARY_ACTION_REQUEST = EvidenceRequest(
    kind=EvidenceKind.PRIMARY_ACTION,
    candidates=(LocatorStrategy.test_id(PRIMARY_ACTION_PREFIX, match=IdMatch.PREFIX),),
    description="primary actions",
)
PRIMARY_ACTION_VOCABULARY = (
    "Create Workflow|Add Connection|Create Secret|Sign in|Create account|Generate Workflow|"
    "Save Workflow|Send Reset Link|Reset Password|Import from URL|Test Connection|Refresh|"
    "Sign up|Reset|Execute|Pause|Resume|Cancel|Test|Submit|Update|Delete|Confirm|Back|Add|Import"
)
OVERVIEW_ACTION_VOCABULARY = "Add API Connection|Create Workflow|Chat with AI"
OVERVIEW_ACTION_REQUEST = EvidenceRequest(
    kind=EvidenceKind.ACTION_BUTTON,
    candidates=(LocatorStrategy.css("button"), LocatorStrategy.role("button")),
    match_text=OVERVIEW_ACTION_VOCABULARY,
    description="dashboard overview actions",
)
GUIDANCE_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GUIDANCE,
    candidates=(LocatorStrategy.css("p, .text-gray-600, .text-gray-500, .text-sm"),),
    match_text=re.compile(r".{11,}", re.DOTALL),
    description="guidance text",
)
NEXT_STEP_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GUIDANCE,
    candidates=(LocatorStrategy.text("Next:|Try:|You can:|To get started"),),
    description="next-step guidance",
)

FOCUSABLE_SELECTOR = (
    "button:not([disabled]), a:not([disabled]), input:not([disabled]), "
    'select:not([disabled]), textarea:not([disabled]), [tabindex]:not([tabindex="-1"])'
)
FOCUSABLE_REQUEST = EvidenceRequest(
    kind=EvidenceKind.FOCUSABLE,
    candidates=(LocatorStrategy.css(FOCUSABLE_SELECTOR),),
    description="focusable elements",
)
SKIP_LINK_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GENERIC,
    candidates=(LocatorStrategy.css('[href^="#main"], [href^="#content"]'),),
    description="skip links",
)

LOADING_TEXT = re.compile(r"Loading|Creating|Saving|Generating|Processing|Testing\.\.\.|Success!")

ARIA_LABEL_REQUEST = EvidenceRequest(
    kind=EvidenceKind.ARIA_LABEL,
    candidates=(LocatorStrategy.css("[aria-label]"),),
    visible_only=False,
    description="aria-labelled elements",
)
MAIN_LANDMARK_REQUEST = EvidenceRequest(
    kind=EvidenceKind.LANDMARK,
    candidates=(LocatorStrategy.css("main"), LocatorStrategy.css('[role="main"]')),
    description="main landmark",
)
LIVE_REGION_REQUEST = EvidenceRequest(
    kind=EvidenceKind.LANDMARK,
    candidates=(LocatorStrategy.css("[aria-live]"),),
    visible_only=False,
    description="live regions",
)
IMAGE_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GENERIC,
    candidates=(LocatorStrategy.css("img"),),
    visible_only=False,
    description="images",
)
LIVE_REGION_VALUES = frozenset({"polite", "assertive", "off"})

ERROR_TEXT_REQUEST = EvidenceRequest(
    kind=EvidenceKind.ERROR_MESSAGE,
    candidates=(LocatorStrategy.css('.text-red-600, .text-red-800, [role="alert"]'),),
    description="displayed errors",
)
ACTIONABLE_WORDS = re.compile(r"Try|Check|Please|Contact|Help", re.IGNORECASE)

TAB_REQUEST = EvidenceRequest(
    kind=EvidenceKind.NAVIGATION_TAB,
    candidates=(LocatorStrategy.test_id("tab-", match=IdMatch.PREFIX),),
    description="dashboard tabs",
)
ACTIVE_TAB_REQUEST = EvidenceRequest(
    kind=EvidenceKind.NAVIGATION_TAB,
    candidates=(LocatorStrategy.css('[class*="bg-indigo-100"], [class*="bg-blue-100"]'),),
    description="active tab highlight",
)
BREADCRUMB_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GENERIC,
    candidates=(LocatorStrategy.test_id("breadcrumb-", match=IdMatch.PREFIX),),
    description="breadcrumbs",
)

EMPTY_STATE_REQUEST = EvidenceRequest(
    kind=EvidenceKind.EMPTY_STATE,
    candidates=(LocatorStrategy.text("No workflows|No connections|Get started|Create your first"),),
    description="empty state message",
)
EMPTY_STATE_ACTION_REQUEST = EvidenceRequest(
    kind=EvidenceKind.ACTION_BUTTON,
    candidates=(LocatorStrategy.role("button", "Create|Add|Get started"),),
    description="empty state action",
)

CONFIRMATION_PATTERN = "Are you sure|This action cannot be undone|Confirm"
CONFIRMATION_REQUEST = EvidenceRequest(
    kind=EvidenceKind.CONFIRMATION,
    candidates=(
        LocatorStrategy.role("alertdialog"),
        LocatorStrategy.role("dialog"),
        LocatorStrategy.text("Are you sure|This action cannot be undone"),
    ),
    match_text=CONFIRMATION_PATTERN,
    description="confirmation prompt",
)
CANCEL_ACTION_REQUEST = EvidenceRequest(
    kind=EvidenceKind.ACTION_BUTTON,
    candidates=(LocatorStrategy.role("button", r"^\s*(cancel|no)\b"),),
    description="cancel action",
)

BUTTON_REQUEST = EvidenceRequest(
    kind=EvidenceKind.ACTION_BUTTON,
    candidates=(LocatorStrategy.css("button"),),
    description="buttons",
)
MAX_BUTTON_STYLES = 10

MAIN_CONTENT_REQUEST = EvidenceRequest(
    kind=EvidenceKind.LANDMARK,
    candidates=(
        LocatorStrategy.css("main"),
        LocatorStrategy.css('[role="main"]'),
        LocatorStrategy.css(".main-content"),
    ),
    description="main content",
)
NAV_REQUEST = EvidenceRequest(
    kind=EvidenceKind.LANDMARK,
    candidates=(LocatorStrategy.css("nav"), LocatorStrategy.css('[role="navigation"]')),
    description="navigation",
)
RESPONSIVE_VIEWPORTS: tuple[tuple[int, int], ...] = ((375, 667), (1024, 768))

PERFORMANCE_REQUESTS = (
    EvidenceRequest(
        kind=EvidenceKind.GENERIC,
        candidates=(LocatorStrategy.css('.loading, [class*="loading"], [class*="spinner"]'),),
        description="loading indicator",
    ),
    EvidenceRequest(
        kind=EvidenceKind.GENERIC,
        candidates=(LocatorStrategy.css('.skeleton, [class*="skeleton"], [class*="animate-pulse"]'),),
        description="skeleton placeholder",
    ),
    EvidenceRequest(
        kind=EvidenceKind.GENERIC,
        candidates=(LocatorStrategy.test_id("optimistic-update"),),
        description="optimistic update",
    ),
)

TEMPLATE_CARD_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GENERIC,
    candidates=(LocatorStrategy.test_id("template-card"),),
    description="template cards",
)
TEMPLATE_DETAILS_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GUIDANCE,
    candidates=(LocatorStrategy.text("Difficulty:|Estimated time:"),),
    description="template difficulty or time estimate",
)
TEMPLATE_CONTROL_REQUESTS = (
    EvidenceRequest(
        kind=EvidenceKind.ACTION_BUTTON,
        candidates=(LocatorStrategy.role("button", "Use This Template"),),
        description="use template action",
    ),
    EvidenceRequest(
        kind=EvidenceKind.FORM_FIELD,
        candidates=(LocatorStrategy.placeholder("Search templates"),),
        description="template search",
    ),
    EvidenceRequest(
        kind=EvidenceKind.FORM_FIELD,
        candidates=(LocatorStrategy.css('select[aria-label*="filter"], select[aria-label*="category"]'),),
        description="template filter",
    ),
)

TOUR_STEP_REQUEST = EvidenceRequest(
    kind=EvidenceKind.GUIDANCE,
    candidates=(LocatorStrategy.css('[data-testid="tour-step"], .tour-step'),),
    description="tour step",
)
ONBOARDING_REQUESTS = (
    EvidenceRequest(
        kind=EvidenceKind.GUIDANCE,
        candidates=(LocatorStrategy.css('[data-testid="onboarding-progress"], .progress-indicator'),),
        description="onboarding progress",
    ),
    TOUR_STEP_REQUEST,
    EvidenceRequest(
        kind=EvidenceKind.GUIDANCE,
        candidates=(LocatorStrategy.text("Try these sample workflows|Recommended for you"),),
        description="sample workflows",
    ),
)
TOUR_NEXT_REQUEST = EvidenceRequest(
    kind=EvidenceKind.ACTION_BUTTON,
    candidates=(LocatorStrategy.role("button", "Next"),),
    description="tour next action",
)

WORKFLOW_STATUS_REQUESTS = (
    EvidenceRequest(
        kind=EvidenceKind.GENERIC,
        candidates=(LocatorStrategy.css(".bg-green-100, .bg-red-100, .bg-yellow-100, .bg-blue-100"),),
        description="status indicator",
    ),
    EvidenceRequest(
        kind=EvidenceKind.GENERIC,
        candidates=(LocatorStrategy.test_id("workflow-card"),),
        description="workflow card",
    ),
    EvidenceRequest(
        kind=EvidenceKind.GUIDANCE,
        candidates=(LocatorStrategy.text("Status|Last run|Steps|Execution"),),
        description="execution monitoring",
    ),
)

WORKFLOW_CREATION_REQUESTS = (
    EvidenceRequest(
        kind=EvidenceKind.FORM_FIELD,
        candidates=(LocatorStrategy.placeholder("Describe your workflow in plain English"),),
        description="workflow description input",
    ),
    EvidenceRequest(
        kind=EvidenceKind.GUIDANCE,
        candidates=(LocatorStrategy.text("Start by describing your workflow"),),
        description="creation guidance",
    ),
    EvidenceRequest(
        kind=EvidenceKind.GUIDANCE,
        candidates=(LocatorStrategy.text("When a new GitHub issue is created"),),
        description="example description",
    ),
    EvidenceRequest(
        kind=EvidenceKind.ACTION_BUTTON,
        candidates=(LocatorStrategy.role("button", "Generate"),),
        description="generate action",
    ),
)

# =============================================================================
# Helpers
# =============================================================================


@asynccontextmanager
async def forced_viewport(ctx: RuleContext, width: int, height: int) -> AsyncIterator[None]:
    """Force a viewport for the duration of the block, restoring it afterwards."""
    previous = ctx.inspector.viewport()
    await ctx.inspector.set_viewport(width, height)
    ctx.refine()
    try:
        yield
    finally:
        if ctx.settings.restore_viewport and previous is not None and previous != (width, height):
            await ctx.inspector.set_viewport(*previous)


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


async def _texts(elements: list[PageElement]) -> list[str]:
    texts = []
    for element in elements:
        try:
            text = await element_text(element)
        except InspectionError:
            continue
        if text:
            texts.append(text)
    return texts


async def _hidden_evidence(ctx: RuleContext, requests: tuple[EvidenceRequest, ...]) -> list[Violation]:
    """One violation per request whose elements are in the DOM but none is visible."""
    violations: list[Violation] = []
    for request in requests:
        evidence = await ctx.resolver.resolve(request)
        if evidence.present and not evidence.found:
            violations.append(Violation(element=request.label, reason="present but not visible"))
    return violations


async def _undersized_targets(ctx: RuleContext, evidence: ResolvedEvidence) -> list[Violation]:
    minimum = ctx.settings.min_touch_target
    violations: list[Violation] = []
    for element in evidence.elements[: ctx.settings.max_elements]:
        try:
            box = await element.bounding_box()
            if box is None:
                continue
            if box.width >= minimum and box.height >= minimum:
                continue
            text = await element_text(element)
        except InspectionError as e:
            logger.debug("Skipping unmeasurable element %s: %s", element.describe(), e)
            continue
        violations.append(
            Violation(
                element=element.describe(),
                reason=f"{box.width:.0f}x{box.height:.0f}px is below {minimum}x{minimum}px",
                measured={"width": box.width, "height": box.height, "text": text},
            )
        )
    return violations


async def _measure_touch_targets(ctx: RuleContext, request: EvidenceRequest) -> tuple[ResolvedEvidence, list[Violation]]:
    evidence = await ctx.resolver.resolve(request)
    ctx.refine(interactive_count=evidence.count)
    if not evidence.found:
        return evidence, []
    return evidence, await _undersized_targets(ctx, evidence)


def _tolerance_verdict(
    ctx: RuleContext,
    evidence: ResolvedEvidence,
    violations: list[Violation],
    label: str,
) -> Verdict:
    limit = ctx.limit()
    measured = min(evidence.count, ctx.settings.max_elements)
    if len(violations) > limit:
        return Verdict.exceeded(
            f"{len(violations)} of {measured} {label} are undersized, exceeding tolerance of {limit}",
            violations,
            tried=evidence.attempted,
        )
    return Verdict.ok(
        f"{len(violations)} of {measured} {label} undersized (tolerance {limit})",
        violations=violations,
    )


# =============================================================================
# Core rules
# =============================================================================


@CATALOG.rule(
    "heading_hierarchy",
    "Each expected heading matches a visible h1/h2/h3/[role=heading] element",
)
async def heading_hierarchy(ctx: RuleContext, expected: list[TextPattern] | TextPattern) -> Verdict:
    """Check that every expected heading pattern is visible on the page."""
    patterns = [expected] if isinstance(expected, str | re.Pattern) else list(expected)
    if not patterns:
        return Verdict.ok("No headings expected")

    await ctx.inspector.wait_for_load_state(ctx.settings.load_state, ctx.settings.wait_timeout_ms)
    await ctx.inspector.wait_for_selector(HEADING_SELECTOR, ctx.settings.wait_timeout_ms)

    missing: list[str] = []
    matched: list[str] = []
    available: list[str] = []
    for pattern in patterns:
        request = EvidenceRequest(
            kind=EvidenceKind.HEADING,
            candidates=HEADING_STRATEGIES,
            match_text=pattern,
            description=f"heading {describe_pattern(pattern)}",
        )
        evidence = await ctx.resolver.resolve(request)
        if evidence.found:
            texts = await _texts(evidence.elements[:1])
            matched.append(f"{describe_pattern(pattern)} -> {texts[0] if texts else '?'}")
        else:
            missing.append(describe_pattern(pattern))
            available.extend(t for t in evidence.observed if t not in available)

    if missing:
        return Verdict.not_found(
            f"Expected heading matching {', '.join(missing)} not found in any visible heading element",
            tried=[f"{pattern} in {HEADING_SELECTOR}" for pattern in missing],
            found=[f'heading: "{text}"' for text in available],
        )
    return Verdict.ok(f"All {len(patterns)} expected heading(s) visible", found=matched)


@CATALOG.rule(
    "form_accessibility",
    "Visible form fields with an id have a visible label; required fields have an accessible name",
    evidence=(FORM_FIELD_REQUEST,),
)
async def form_accessibility(ctx: RuleContext) -> Verdict:
    fields = await ctx.resolver.resolve(FORM_FIELD_REQUEST)
    if not fields.found:
        return Verdict.ok("No visible form fields")

    violations: list[Violation] = []
    for element in fields.elements:
        try:
            input_type = (await element.get_attribute("type") or "").lower()
            if input_type in UNLABELED_INPUT_TYPES:
                continue
            field_id = await element.get_attribute("id")
            required = (await element.get_attribute("aria-required") or "").lower() == "true"

            has_label = False
            if field_id:
                label = await ctx.resolver.resolve(
                    EvidenceRequest(
                        kind=EvidenceKind.FORM_FIELD,
                        candidates=(LocatorStrategy.css(f'label[for="{_quote(field_id)}"]'),),
                        description=f"label for #{field_id}",
                    )
                )
                has_label = label.found
                if not has_label:
                    violations.append(
                        Violation(
                            element=element.describe(),
                            reason=f'no visible <label for="{field_id}">',
                            measured={"id": field_id},
                        )
                    )
                    continue

            if required and not has_label:
                aria_label = (await element.get_attribute("aria-label") or "").strip()
                labelled_by = (await element.get_attribute("aria-labelledby") or "").strip()
                if not aria_label and not labelled_by:
                    violations.append(
                        Violation(
                            element=element.describe(),
                            reason="aria-required field has no label, aria-label or aria-labelledby",
                        )
                    )
        except InspectionError as e:
            logger.debug("Skipping field %s: %s", element.describe(), e)

    if violations:
        return Verdict.violated(
            f"{len(violations)} of {fields.count} form field(s) are not accessibly labelled",
            violations,
            tried=fields.attempted,
        )
    return Verdict.ok(f"{fields.count} form field(s) accessibly labelled")


@CATALOG.rule(
    "touch_target_size",
    "Interactive elements are at least 44x44px, within tolerance",
    evidence=(TOUCH_TARGET_REQUEST,),
)
async def touch_target_size(ctx: RuleContext) -> Verdict:
    evidence, violations = await _measure_touch_targets(ctx, TOUCH_TARGET_REQUEST)
    if not evidence.found:
        return Verdict.ok("No visible interactive elements to measure")
    return _tolerance_verdict(ctx, evidence, violations, "interactive elements")


@CATALOG.rule(
    "error_container",
    "An error message matches the expected text, or a generic actionable error pattern",
)
async def error_container(ctx: RuleContext, expected: TextPattern) -> Verdict:
    """
    Look for a visible error message matching *expected*.

    Resolution order:
    1. The prioritized error selectors with the expected pattern
    2. The same selectors with each generic actionable pattern
    3. Field-level error selectors with the expected pattern
    """
    observed: list[str] = []

    def _remember(evidence: ResolvedEvidence) -> None:
        observed.extend(t for t in evidence.observed if t not in observed)

    evidence = await ctx.resolver.resolve(
        EvidenceRequest(
            kind=EvidenceKind.ERROR_MESSAGE,
            candidates=ERROR_STRATEGIES,
            match_text=expected,
            description=f"error {describe_pattern(expected)}",
        )
    )
    if evidence.found:
        texts = await _texts(evidence.elements[:1])
        return Verdict.ok(
            f"Error message matches {describe_pattern(expected)}",
            found=[f"{evidence.strategy.describe() if evidence.strategy else '?'}: {t}" for t in texts],
        )
    _remember(evidence)

    for fallback in ACTIONABLE_ERROR_PATTERNS:
        evidence = await ctx.resolver.resolve(
            EvidenceRequest(
                kind=EvidenceKind.ERROR_MESSAGE,
                candidates=ERROR_STRATEGIES,
                match_text=fallback,
                description=f"error /{fallback}/i",
            )
        )
        if evidence.found:
            texts = await _texts(evidence.elements[:1])
            return Verdict.ok(
                f"Error message matches fallback pattern /{fallback}/i "
                f"(expected {describe_pattern(expected)})",
                found=texts,
            )
        _remember(evidence)

    evidence = await ctx.resolver.resolve(
        EvidenceRequest(
            kind=EvidenceKind.ERROR_MESSAGE,
            candidates=FIELD_ERROR_STRATEGIES,
            match_text=expected,
            description=f"field error {describe_pattern(expected)}",
        )
    )
    if evidence.found:
        texts = await _texts(evidence.elements[:1])
        return Verdict.ok(f"Field error matches {describe_pattern(expected)}", found=texts)
    _remember(evidence)

    tried = [f"selector {s.describe()}" for s in ERROR_STRATEGIES]
    tried += [f"fallback pattern /{p}/i" for p in ACTIONABLE_ERROR_PATTERNS]
    tried += [f"field selector {s.describe()}" for s in FIELD_ERROR_STRATEGIES]
    return Verdict.not_found(
        f"No error message found with expected text {describe_pattern(expected)}",
        tried=tried,
        found=[f'visible text: "{t}"' for t in observed],
    )


@CATALOG.rule(
    "success_container",
    "The success message container shows the expected message",
    evidence=(SUCCESS_CONTAINER_REQUEST,),
)
async def success_container(ctx: RuleContext, message: str) -> Verdict:
    container = await ctx.resolver.resolve(SUCCESS_CONTAINER_REQUEST)
    if not container.found:
        return Verdict.not_found(
            f'No visible success message container for "{message}"',
            tried=container.attempted,
        )

    body = await ctx.resolver.resolve(
        EvidenceRequest(
            kind=EvidenceKind.SUCCESS_MESSAGE,
            candidates=(LocatorStrategy.test_id("success-message", descendant=SUCCESS_TEXT_CLASS),),
            match_text=re.compile(re.escape(message)),
            description="success text",
        )
    )
    if body.found:
        return Verdict.ok(f'Success message contains "{message}"')

    found = body.observed or await _texts(container.elements[:1])
    return Verdict.violated(
        f'Success message does not contain "{message}"',
        [Violation(element=container.elements[0].describe(), reason=f'missing "{message}"')],
        tried=body.attempted,
        found=[f'success text: "{t}"' for t in found],
    )


# -- Activation-first UX -------------------------------------------------------


@dataclass
class PrimaryActions:
    """Primary-action candidates split by whether they qualify."""

    evidence: ResolvedEvidence
    qualifying: list[str] = field(default_factory=list)
    disabled: list[str] = field(default_factory=list)
    off_vocabulary: list[str] = field(default_factory=list)

    def describe_found(self) -> list[str]:
        found = [f'primary action: "{t}"' for t in self.qualifying]
        found += [f'disabled primary action: "{t}"' for t in self.disabled]
        found += [f'primary action outside vocabulary: "{t}"' for t in self.off_vocabulary]
        return found

    def tried(self) -> list[str]:
        return [*self.evidence.attempted, f"text /{PRIMARY_ACTION_VOCABULARY}/i", "visible and enabled"]


async def _collect_primary_actions(ctx: RuleContext) -> PrimaryActions:
    actions = PrimaryActions(evidence=await ctx.resolver.resolve(PRIMARY_ACTION_REQUEST))
    for element in actions.evidence.elements:
        try:
            text = await element_text(element)
            if not text_matches(PRIMARY_ACTION_VOCABULARY, text):
                actions.off_vocabulary.append(text)
            elif not await element.is_enabled():
                actions.disabled.append(text)
            else:
                actions.qualifying.append(text)
        except InspectionError as e:
            logger.debug("Skipping primary action %s: %s", element.describe(), e)
    return actions


async def _require_primary_action(ctx: RuleContext, actions: PrimaryActions) -> Verdict:
    if actions.qualifying:
        return Verdict.ok(
            f"Primary action present on {ctx.context.page.value} page",
            found=actions.describe_found(),
        )
    return Verdict.not_found(
        f"{ctx.context.page.value} page must expose a visible, enabled primary action",
        tried=actions.tried(),
        found=actions.describe_found(),
    )


async def _require_overview_actions(ctx: RuleContext, actions: PrimaryActions) -> Verdict:
    evidence = await ctx.resolver.resolve(OVERVIEW_ACTION_REQUEST)
    if evidence.found:
        return Verdict.ok(
            "Dashboard overview exposes its action buttons",
            found=[f'action: "{t}"' for t in await _texts(evidence.elements)],
        )
    return Verdict.not_found(
        "Dashboard overview has none of its expected action buttons",
        tried=[*evidence.attempted, f"text /{OVERVIEW_ACTION_VOCABULARY}/i"],
        found=[f'button: "{t}"' for t in evidence.observed],
    )


async def _primary_action_optional(ctx: RuleContext, actions: PrimaryActions) -> Verdict:
    if actions.qualifying:
        return Verdict.ok("Primary action present", found=actions.describe_found())
    return Verdict.not_found(
        "No primary action on this page (optional here, but preferred)",
        tried=actions.tried(),
        found=actions.describe_found(),
        severity=Severity.ADVISORY,
    )


# Which requirement applies where.  A dashboard overview legitimately has
# several equal-weight actions instead of one primary action.
ACTIVATION_REQUIREMENTS: dict[PageContext, Callable[[RuleContext, PrimaryActions], Awaitable[Verdict]]] = {
    PageContext.AUTH: _require_primary_action,
    PageContext.DASHBOARD_TAB: _require_primary_action,
    PageContext.DASHBOARD_OVERVIEW: _require_overview_actions,
    PageContext.OTHER: _primary_action_optional,
}


@CATALOG.rule(
    "activation_first_ux",
    "Pages expose the primary action their context requires, plus guidance text",
    evidence=(PRIMARY_ACTION_REQUEST, OVERVIEW_ACTION_REQUEST, GUIDANCE_REQUEST, NEXT_STEP_REQUEST),
    context_sensitive=True,
)
async def activation_first_ux(ctx: RuleContext) -> Verdict:
    actions = await _collect_primary_actions(ctx)
    if actions.disabled:
        return Verdict.violated(
            f"{len(actions.disabled)} visible primary action(s) are disabled",
            [Violation(element=f'"{text}"', reason="primary action is disabled") for text in actions.disabled],
            tried=actions.tried(),
            found=actions.describe_found(),
        )

    requirement = ACTIVATION_REQUIREMENTS[ctx.context.page]
    verdict = await requirement(ctx, actions)
    if not verdict.passed:
        return verdict

    guidance = await ctx.resolver.resolve(GUIDANCE_REQUEST)
    if not guidance.found:
        return Verdict.not_found(
            f"{verdict.message}, but no guidance text (over 10 characters) is visible",
            tried=guidance.attempted,
            found=verdict.found,
        )

    next_steps = await ctx.resolver.resolve(NEXT_STEP_REQUEST)
    if next_steps.present and not next_steps.found:
        return Verdict.violated(
            f"{verdict.message}, but next-step guidance is present and not visible",
            [Violation(element=NEXT_STEP_REQUEST.label, reason="present but not visible")],
            tried=next_steps.attempted,
            found=verdict.found,
        )
    return verdict


@CATALOG.rule(
    "keyboard_navigation",
    "Pressing Tab moves focus to a visible element when focusable elements exist",
    evidence=(FOCUSABLE_REQUEST, SKIP_LINK_REQUEST),
)
async def keyboard_navigation(ctx: RuleContext) -> Verdict:
    await ctx.inspector.press_key("Tab")
    focusable = await ctx.resolver.resolve(FOCUSABLE_REQUEST)
    if not focusable.found:
        logger.info("Keyboard navigation: no focusable elements on %s", ctx.inspector.url)
        return Verdict.not_found(
            "No focusable elements on page",
            tried=focusable.attempted,
            severity=Severity.ADVISORY,
        )

    focused = await ctx.inspector.focused_element()
    try:
        focus_visible = focused is not None and await focused.is_visible()
    except InspectionError:
        focus_visible = False
    if not focus_visible:
        return Verdict.violated(
            "No visible element has focus after pressing Tab",
            [Violation(element="document", reason="focus not on a visible element")],
            tried=["Tab", ":focus"],
            found=[f"{focusable.count} focusable element(s)"],
        )

    skip_links = await ctx.resolver.resolve(SKIP_LINK_REQUEST)
    if skip_links.present and not skip_links.found:
        return Verdict.violated(
            "Skip link exists but is not visible",
            [Violation(element="skip link", reason="not visible")],
            severity=Severity.ADVISORY,
            tried=skip_links.attempted,
        )

    return Verdict.ok(f"Tab focused {focused.describe() if focused else 'element'}")


@CATALOG.rule(
    "mobile_accessibility",
    "At 375x667, touch targets are 44x44px (within tolerance) and fields are wide enough",
    evidence=(MOBILE_TARGET_REQUEST, MOBILE_FIELD_REQUEST, MOBILE_MENU_REQUEST),
)
async def mobile_accessibility(ctx: RuleContext) -> Verdict:
    width, height = ctx.settings.mobile_viewport
    async with forced_viewport(ctx, width, height):
        evidence, touch_violations = await _measure_touch_targets(ctx, MOBILE_TARGET_REQUEST)
        layout_violations = await _narrow_fields(ctx)

        menu = await ctx.resolver.resolve(MOBILE_MENU_REQUEST)
        if menu.present and not menu.found:
            layout_violations.append(Violation(element="mobile menu", reason="present but not visible"))

        limit = ctx.limit()

    if len(touch_violations) > limit:
        return Verdict.exceeded(
            f"{len(touch_violations)} undersized touch targets at {width}x{height} exceed tolerance of {limit}",
            touch_violations + layout_violations,
            tried=evidence.attempted,
        )
    if layout_violations:
        return Verdict.violated(
            f"{len(layout_violations)} mobile layout problem(s) at {width}x{height}",
            layout_violations + touch_violations,
        )
    return Verdict.ok(
        f"{len(touch_violations)} undersized touch target(s) at {width}x{height} (tolerance {limit})",
        violations=touch_violations,
    )


async def _narrow_fields(ctx: RuleContext) -> list[Violation]:
    minimum = ctx.settings.min_mobile_field_width
    fields = await ctx.resolver.resolve(MOBILE_FIELD_REQUEST)
    violations: list[Violation] = []
    for element in fields.elements[: ctx.settings.max_elements]:
        try:
            box = await element.bounding_box()
        except InspectionError as e:
            logger.debug("Skipping unmeasurable field %s: %s", element.describe(), e)
            continue
        if box is not None and box.width < minimum:
            violations.append(
                Violation(
                    element=element.describe(),
                    reason=f"field is {box.width:.0f}px wide, below {minimum}px",
                    measured={"width": box.width},
                )
            )
    return violations


# =============================================================================
# Supplementary rules
# =============================================================================


@CATALOG.rule("page_title", "The document title matches the expected pattern")
async def page_title(ctx: RuleContext, expected: TextPattern) -> Verdict:
    await ctx.inspector.wait_for_load_state(ctx.settings.load_state, ctx.settings.wait_timeout_ms)
    title = await ctx.inspector.title()
    logger.debug("Page title: %r", title)
    if text_matches(expected, title):
        return Verdict.ok(f'Title "{title}" matches {describe_pattern(expected)}')
    return Verdict.violated(
        f"Title does not match {describe_pattern(expected)}",
        [Violation(element="document.title", reason=f'"{title}"')],
        tried=[f"title {describe_pattern(expected)}"],
        found=[f'title: "{title}"'],
    )


@CATALOG.rule("loading_state", "A submitting button is disabled and shows a loading or success label")
async def loading_state(ctx: RuleContext, selector: str) -> Verdict:
    evidence = await ctx.resolver.resolve(
        EvidenceRequest(
            kind=EvidenceKind.ACTION_BUTTON,
            candidates=(LocatorStrategy.css(selector),),
            description="loading button",
        )
    )
    button = evidence.first
    if button is None:
        return Verdict.not_found(f"No visible button for {selector}", tried=evidence.attempted)

    enabled = await button.is_enabled()
    text = await element_text(button)
    violations = []
    if enabled:
        violations.append(Violation(element=button.describe(), reason="button is still enabled"))
    if not LOADING_TEXT.search(text):
        violations.append(Violation(element=button.describe(), reason=f'label "{text}" shows no loading state'))
    if violations:
        return Verdict.violated(
            "Button should be disabled and show a loading state or success",
            violations,
            tried=[f"css={selector}", f"text /{LOADING_TEXT.pattern}/"],
            found=[f'button: "{text}"'],
        )
    return Verdict.ok(f'Button shows loading state "{text}"')


@CATALOG.rule("aria_labels", "Every aria-label attribute is non-empty", evidence=(ARIA_LABEL_REQUEST,))
async def aria_labels(ctx: RuleContext) -> Verdict:
    evidence = await ctx.resolver.resolve(ARIA_LABEL_REQUEST)
    violations = []
    for element in evidence.elements:
        try:
            label = await element.get_attribute("aria-label")
        except InspectionError:
            continue
        if not (label or "").strip():
            violations.append(Violation(element=element.describe(), reason="empty aria-label"))
    if violations:
        return Verdict.violated(f"{len(violations)} empty aria-label(s)", violations, tried=evidence.attempted)
    return Verdict.ok(f"{evidence.count} aria-label(s) non-empty")


@CATALOG.rule(
    "screen_reader",
    "Main landmark is visible, live regions are valid, meaningful images have alt text",
    evidence=(MAIN_LANDMARK_REQUEST, LIVE_REGION_REQUEST, IMAGE_REQUEST),
)
async def screen_reader(ctx: RuleContext) -> Verdict:
    violations: list[Violation] = []

    main = await ctx.resolver.resolve(MAIN_LANDMARK_REQUEST)
    if main.present and not main.found:
        violations.append(Violation(element="main", reason="main landmark present but not visible"))

    regions = await ctx.resolver.resolve(LIVE_REGION_REQUEST)
    for element in regions.elements:
        try:
            value = (await element.get_attribute("aria-live") or "").strip().lower()
        except InspectionError:
            continue
        if value not in LIVE_REGION_VALUES:
            violations.append(Violation(element=element.describe(), reason=f'invalid aria-live="{value}"'))

    images = await ctx.resolver.resolve(IMAGE_REQUEST)
    for element in images.elements:
        try:
            role = await element.get_attribute("role")
            hidden = await element.get_attribute("aria-hidden")
            alt = await element.get_attribute("alt")
        except InspectionError:
            continue
        if role == "presentation" or hidden == "true":
            continue
        if not (alt or "").strip():
            violations.append(Violation(element=element.describe(), reason="image has no alt text"))

    if violations:
        return Verdict.violated(f"{len(violations)} screen reader problem(s)", violations)
    return Verdict.ok("Screen reader structure is sound")


@CATALOG.rule(
    "actionable_errors",
    "Displayed error messages tell the user what to do next",
    evidence=(ERROR_TEXT_REQUEST,),
)
async def actionable_errors(ctx: RuleContext) -> Verdict:
    evidence = await ctx.resolver.resolve(ERROR_TEXT_REQUEST)
    if not evidence.found:
        return Verdict.ok("No error messages displayed")

    violations = []
    for element in evidence.elements:
        try:
            text = await element_text(element)
        except InspectionError:
            continue
        if len(text) > 10 and not ACTIONABLE_WORDS.search(text):
            violations.append(Violation(element=element.describe(), reason=f'"{text}" is not actionable'))
    if violations:
        return Verdict.violated(
            f"{len(violations)} error message(s) lack guidance",
            violations,
            tried=[f"text /{ACTIONABLE_WORDS.pattern}/i"],
        )
    return Verdict.ok(f"{evidence.count} error message(s) are actionable")


@CATALOG.rule(
    "dashboard_navigation",
    "Dashboard tabs are visible; active tab and breadcrumbs are visible when present",
    evidence=(TAB_REQUEST, ACTIVE_TAB_REQUEST, BREADCRUMB_REQUEST),
)
async def dashboard_navigation(ctx: RuleContext) -> Verdict:
    tabs = await ctx.resolver.resolve(TAB_REQUEST)
    if not tabs.found:
        return Verdict.not_found("No visible dashboard tabs", tried=tabs.attempted)

    violations = await _hidden_evidence(ctx, (ACTIVE_TAB_REQUEST, BREADCRUMB_REQUEST))
    if violations:
        return Verdict.violated(
            "Dashboard navigation aids are hidden",
            violations,
            severity=Severity.ADVISORY,
        )
    return Verdict.ok(f"{tabs.count} dashboard tab(s) visible")


@CATALOG.rule(
    "empty_states",
    "A visible empty state offers a way forward",
    evidence=(EMPTY_STATE_REQUEST, EMPTY_STATE_ACTION_REQUEST),
    severity=Severity.ADVISORY,
)
async def empty_states(ctx: RuleContext) -> Verdict:
    empty = await ctx.resolver.resolve(EMPTY_STATE_REQUEST)
    if not empty.found:
        return Verdict.ok("No empty state shown")

    action = await ctx.resolver.resolve(EMPTY_STATE_ACTION_REQUEST)
    if action.found:
        return Verdict.ok("Empty state offers an action", found=await _texts(action.elements[:1]))
    return Verdict.not_found(
        "Empty state has no visible Create/Add/Get started action",
        tried=action.attempted,
        found=[f'empty state: "{t}"' for t in await _texts(empty.elements[:1])],
        severity=Severity.ADVISORY,
    )


@CATALOG.rule(
    "confirmation_dialogs",
    "A visible confirmation prompt offers a way to cancel",
    evidence=(CONFIRMATION_REQUEST, CANCEL_ACTION_REQUEST),
)
async def confirmation_dialogs(ctx: RuleContext) -> Verdict:
    prompt = await ctx.resolver.resolve(CONFIRMATION_REQUEST)
    if not prompt.found:
        return Verdict.ok("No confirmation prompt shown")

    cancel = await ctx.resolver.resolve(CANCEL_ACTION_REQUEST)
    if cancel.found:
        return Verdict.ok("Confirmation prompt offers a cancel action")
    return Verdict.violated(
        "Confirmation prompt offers no visible Cancel/No action",
        [Violation(element=prompt.elements[0].describe(), reason="no cancel action")],
        tried=cancel.attempted,
    )


@CATALOG.rule(
    "button_consistency",
    "Buttons use a small, consistent set of colour styles",
    evidence=(BUTTON_REQUEST,),
    severity=Severity.ADVISORY,
)
async def button_consistency(ctx: RuleContext) -> Verdict:
    evidence = await ctx.resolver.resolve(BUTTON_REQUEST)
    styles: set[str] = set()
    for element in evidence.elements:
        try:
            classes = await element.get_attribute("class")
        except InspectionError:
            continue
        if classes:
            styles.add(" ".join(c for c in classes.split() if "bg-" in c or "text-" in c))

    if len(styles) >= MAX_BUTTON_STYLES:
        return Verdict.violated(
            f"{len(styles)} distinct button styles (expected fewer than {MAX_BUTTON_STYLES})",
            [Violation(element="button", reason=style or "(no colour classes)") for style in sorted(styles)],
            severity=Severity.ADVISORY,
        )
    return Verdict.ok(f"{len(styles)} distinct button style(s)")


@CATALOG.rule(
    "responsive_layout",
    "Main content fits mobile and desktop viewports; navigation stays visible",
    evidence=(MAIN_CONTENT_REQUEST, NAV_REQUEST),
)
async def responsive_layout(ctx: RuleContext, viewports: list[tuple[int, int]] | None = None) -> Verdict:
    hard: list[Violation] = []
    advisory: list[Violation] = []

    for width, height in viewports or RESPONSIVE_VIEWPORTS:
        async with forced_viewport(ctx, width, height):
            main = await ctx.resolver.resolve(MAIN_CONTENT_REQUEST)
            if main.first is not None:
                try:
                    box = await main.first.bounding_box()
                except InspectionError:
                    box = None
                if box is not None and (box.x < 0 or box.width > width):
                    hard.append(
                        Violation(
                            element=main.first.describe(),
                            reason=f"content spans x={box.x:.0f} width={box.width:.0f} at {width}x{height}",
                            measured={"x": box.x, "width": box.width, "viewport": [width, height]},
                        )
                    )

            nav = await ctx.resolver.resolve(NAV_REQUEST)
            if nav.present and not nav.found:
                advisory.append(Violation(element="navigation", reason=f"hidden at {width}x{height}"))

    if hard:
        return Verdict.violated("Main content overflows the viewport", hard + advisory)
    if advisory:
        return Verdict.violated("Navigation hidden at some viewports", advisory, severity=Severity.ADVISORY)
    return Verdict.ok("Layout fits all checked viewports")


# -- Workflow pages ------------------------------------------------------------


@CATALOG.rule(
    "performance_indicators",
    "Progress feedback (spinners, skeletons, optimistic updates) is visible whenever it is in the DOM",
    evidence=PERFORMANCE_REQUESTS,
)
async def performance_indicators(ctx: RuleContext) -> Verdict:
    violations = await _hidden_evidence(ctx, PERFORMANCE_REQUESTS)
    if violations:
        return Verdict.violated(
            f"{len(violations)} progress indicator(s) are in the DOM but hidden",
            violations,
            tried=[request.label for request in PERFORMANCE_REQUESTS],
        )
    return Verdict.ok("Progress feedback is visible where present")


@CATALOG.rule(
    "workflow_templates",
    "Template cards are visible and state difficulty or time; template controls are visible when present",
    evidence=(TEMPLATE_CARD_REQUEST, TEMPLATE_DETAILS_REQUEST, *TEMPLATE_CONTROL_REQUESTS),
)
async def workflow_templates(ctx: RuleContext) -> Verdict:
    """
    Check the template gallery when one is rendered.

    Cards must show a difficulty or time estimate; the "Use This Template"
    action is only checked alongside cards. Search and filter controls are
    checked on any page that has them.
    """
    use_template, search, category = TEMPLATE_CONTROL_REQUESTS
    controls: tuple[EvidenceRequest, ...] = (search, category)
    violations: list[Violation] = []

    cards = await ctx.resolver.resolve(TEMPLATE_CARD_REQUEST)
    if cards.present and not cards.found:
        violations.append(Violation(element=TEMPLATE_CARD_REQUEST.label, reason="present but not visible"))
    elif cards.found:
        details = await ctx.resolver.resolve(TEMPLATE_DETAILS_REQUEST)
        if not details.found:
            return Verdict.not_found(
                "Template cards show no difficulty or estimated time",
                tried=details.attempted,
                found=[f'template card: "{t}"' for t in await _texts(cards.elements[:3])],
            )
        controls = (use_template, *controls)

    violations += await _hidden_evidence(ctx, controls)
    if violations:
        return Verdict.violated(f"{len(violations)} template element(s) are hidden", violations)
    if cards.found:
        return Verdict.ok(f"{cards.count} template card(s) visible with details")
    return Verdict.ok("No template gallery shown")


@CATALOG.rule(
    "onboarding_flow",
    "Onboarding progress, tour steps and sample workflows are visible when present",
    evidence=(*ONBOARDING_REQUESTS, TOUR_NEXT_REQUEST),
)
async def onboarding_flow(ctx: RuleContext) -> Verdict:
    violations = await _hidden_evidence(ctx, ONBOARDING_REQUESTS)

    tour = await ctx.resolver.resolve(TOUR_STEP_REQUEST)
    if tour.found:
        violations += await _hidden_evidence(ctx, (TOUR_NEXT_REQUEST,))

    if violations:
        return Verdict.violated(f"{len(violations)} onboarding element(s) are hidden", violations)
    return Verdict.ok("Onboarding guidance is visible where present")


@CATALOG.rule(
    "workflow_status",
    "Workflow status badges, cards and execution details are visible when present",
    evidence=WORKFLOW_STATUS_REQUESTS,
)
async def workflow_status(ctx: RuleContext) -> Verdict:
    violations = await _hidden_evidence(ctx, WORKFLOW_STATUS_REQUESTS)
    if violations:
        return Verdict.violated(
            f"{len(violations)} workflow status element(s) are hidden",
            violations,
            tried=[request.label for request in WORKFLOW_STATUS_REQUESTS],
        )
    return Verdict.ok("Workflow status is visible where present")


@CATALOG.rule(
    "workflow_creation",
    "The workflow creation page shows its description input, guidance, example and Generate action",
    evidence=WORKFLOW_CREATION_REQUESTS,
)
async def workflow_creation(ctx: RuleContext) -> Verdict:
    missing: list[str] = []
    tried: list[str] = []
    for request in WORKFLOW_CREATION_REQUESTS:
        evidence = await ctx.resolver.resolve(request)
        if not evidence.found:
            missing.append(request.label)
            tried.extend(evidence.attempted)
    if missing:
        return Verdict.not_found(
            f"Workflow creation page is missing: {', '.join(missing)}",
            tried=tried,
        )
    return Verdict.ok("Workflow creation page shows its input, guidance and Generate action")


# =============================================================================
# Aggregate
# =============================================================================

DEFAULT_HEADINGS = ["Dashboard|Workflows|Create Workflow"]

COMPLETE_UX_RULES: tuple[tuple[str, dict[str, Any]], ...] = (
    ("heading_hierarchy", {"expected": DEFAULT_HEADINGS}),
    ("form_accessibility", {}),
    ("keyboard_navigation", {}),
    ("aria_labels", {}),
    ("screen_reader", {}),
    ("mobile_accessibility", {}),
    ("activation_first_ux", {}),
    ("button_consistency", {}),
    ("actionable_errors", {}),
    ("performance_indicators", {}),
    ("workflow_templates", {}),
    ("onboarding_flow", {}),
    ("workflow_status", {}),
    ("dashboard_navigation", {}),
    ("empty_states", {}),
    ("confirmation_dialogs", {}),
)
