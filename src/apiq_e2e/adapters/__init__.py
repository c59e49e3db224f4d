"""
Page inspectors for APIQ UX compliance checking.

Inspectors adapt a browser driver to the Page Inspection Port consumed by
the compliance engine.
"""

from apiq_e2e.adapters.base import BoundingBox, PageElement, PageInspector
from apiq_e2e.adapters.playwright_adapter import PlaywrightElement, PlaywrightInspector

__all__ = ["BoundingBox", "PageElement", "PageInspector", "PlaywrightElement", "PlaywrightInspector"]
