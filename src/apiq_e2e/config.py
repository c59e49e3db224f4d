"""Runtime settings for UX compliance checks.

Defaults match the APIQ UX conventions (44px touch targets, 200px mobile
form fields).  Every value can be overridden through the environment:

- ``APIQ_E2E_MIN_TOUCH_TARGET``: minimum touch target edge in px (default: 44)
- ``APIQ_E2E_MIN_MOBILE_FIELD_WIDTH``: minimum form field width on mobile (default: 200)
- ``APIQ_E2E_MAX_ELEMENTS``: cap on elements measured per request (default: 15)
- ``APIQ_E2E_ELEMENT_TIMEOUT_MS``: per-element query timeout (default: 3000)
- ``APIQ_E2E_WAIT_TIMEOUT_MS``: page-level wait timeout (default: 5000)
- ``APIQ_E2E_LOAD_STATE``: load state awaited before checks (default: ``networkidle``)
- ``APIQ_E2E_RESTORE_VIEWPORT``: restore viewport after forcing one (default: ``1``)
- ``APIQ_E2E_FAIL_ON_ADVISORY``: raise on advisory verdicts (default: ``0``)
- ``APIQ_E2E_COMPLEX_PAGE_THRESHOLD``: interactive elements that make a page complex (default: 20)
"""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "APIQ_E2E_"

LoadState = Literal["load", "domcontentloaded", "networkidle"]


def _env_flag(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


class ComplianceSettings(BaseModel):
    """Tunable thresholds and timeouts for the compliance engine."""

    min_touch_target: int = Field(default=44, ge=1)
    min_mobile_field_width: int = Field(default=200, ge=1)
    max_elements: int = Field(default=15, ge=1)
    element_timeout_ms: int = Field(default=3000, ge=0)
    wait_timeout_ms: int = Field(default=5000, ge=0)
    load_state: LoadState = "networkidle"
    restore_viewport: bool = True
    fail_on_advisory: bool = False
    complex_page_threshold: int = Field(default=20, ge=1)
    mobile_viewport: tuple[int, int] = (375, 667)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: object) -> ComplianceSettings:
        """
        Build settings from ``APIQ_E2E_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            **overrides: Explicit values that win over the environment

        Returns:
            Validated ComplianceSettings
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        int_fields = {
            "min_touch_target": "MIN_TOUCH_TARGET",
            "min_mobile_field_width": "MIN_MOBILE_FIELD_WIDTH",
            "max_elements": "MAX_ELEMENTS",
            "element_timeout_ms": "ELEMENT_TIMEOUT_MS",
            "wait_timeout_ms": "WAIT_TIMEOUT_MS",
            "complex_page_threshold": "COMPLEX_PAGE_THRESHOLD",
        }
        for field_name, suffix in int_fields.items():
            raw = env.get(ENV_PREFIX + suffix)
            if raw is not None and raw.strip():
                values[field_name] = int(raw)

        load_state = env.get(ENV_PREFIX + "LOAD_STATE")
        if load_state:
            values["load_state"] = load_state.strip()

        for field_name, suffix in (
            ("restore_viewport", "RESTORE_VIEWPORT"),
            ("fail_on_advisory", "FAIL_ON_ADVISORY"),
        ):
            raw = env.get(ENV_PREFIX + suffix)
            if raw is not None:
                values[field_name] = _env_flag(raw)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)


_default_settings: ComplianceSettings | None = None


def get_settings() -> ComplianceSettings:
    """Get settings loaded from the environment (cached after first call)."""
    global _default_settings
    if _default_settings is None:
        _default_settings = ComplianceSettings.from_env()
    return _default_settings
