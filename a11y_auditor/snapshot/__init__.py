"""
Page snapshots and the providers that build them.

Contains the read-only snapshot model, selector generation, a Playwright
provider for live pages and a BeautifulSoup provider for static HTML.
"""

from .models import BoundingBox, ElementNode, PageSnapshot
from .browser import SnapshotBrowser, capture_snapshot
from .html import fetch_html, snapshot_from_html

__all__ = [
    "BoundingBox",
    "ElementNode",
    "PageSnapshot",
    "SnapshotBrowser",
    "capture_snapshot",
    "fetch_html",
    "snapshot_from_html",
]
