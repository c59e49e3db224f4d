"""Chromium page launcher for the ``apiq-e2e check`` command.

Usage::

    async with open_page(viewport=(375, 667)) as page:
        await page.goto(url)

Headless mode comes from ``APIQ_E2E_BROWSER_HEADLESS`` (``1``/``true`` or
``0``/``false``, default ``1``) unless the caller passes ``headless``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import Page, async_playwright

logger = logging.getLogger(__name__)

HEADLESS_ENV = "APIQ_E2E_BROWSER_HEADLESS"


def headless_from_env(environ: Mapping[str, str] | None = None) -> bool:
    """Read the headless default from the environment."""
    env = os.environ if environ is None else environ
    return env.get(HEADLESS_ENV, "1").strip().lower() not in ("0", "false")


@asynccontextmanager
async def open_page(
    viewport: tuple[int, int] | None = None,
    headless: bool | None = None,
) -> AsyncIterator[Page]:
    """Launch Chromium, yield one fresh page, and close the browser on exit."""
    if headless is None:
        headless = headless_from_env()

    context_kwargs: dict[str, Any] = {}
    if viewport is not None:
        context_kwargs["viewport"] = {"width": viewport[0], "height": viewport[1]}

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        logger.debug("Launched Chromium (headless=%s, viewport=%s)", headless, viewport)
        try:
            context = await browser.new_context(**context_kwargs)
            yield await context.new_page()
        finally:
            await browser.close()
