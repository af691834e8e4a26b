"""
Live page snapshots using a Playwright browser.

The whole page is read in a single evaluate() call so that every check sees
the same state of the page.
"""

import asyncio
from typing import Optional

from playwright.async_api import async_playwright, Browser, Page, TimeoutError as PlaywrightTimeout

from ..errors import SnapshotReadError
from ..utils.constants import (
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_VIEWPORT,
    MAX_SNAPSHOT_NODES,
)
from ..utils.log import get_logger
from .models import (
    FOCUS_STYLE_PROPERTIES,
    FOCUSABLE_SELECTORS,
    INTERACTIVE_SELECTORS,
    PageSnapshot,
)


STYLE_PROPERTIES = [
    'color',
    'background-color',
    'background-image',
    'font-size',
    'font-weight',
    'display',
    'visibility',
    'opacity',
] + [p for p in FOCUS_STYLE_PROPERTIES if p != 'background-color']

PSEUDO_PROPERTIES = ['content', 'background-color', 'background-image', 'opacity']

SNAPSHOT_SCRIPT = """
(options) => {
    const skip = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE']);
    const elements = [document.documentElement];
    if (document.body) {
        elements.push(document.body);
        for (const el of document.body.querySelectorAll('*')) {
            if (!skip.has(el.tagName)) elements.push(el);
        }
    }
    const limited = elements.slice(0, options.maxNodes);
    const indexOf = new Map(limited.map((el, i) => [el, i]));

    const matchesAny = (el, selectors) => selectors.some((s) => {
        try { return el.matches(s); } catch (e) { return false; }
    });
    const pick = (style, props) => {
        const out = {};
        for (const p of props) out[p] = style.getPropertyValue(p);
        return out;
    };
    const pseudo = (el, which) => {
        const style = getComputedStyle(el, which);
        const content = style.getPropertyValue('content');
        if (!content || content === 'none' || content === 'normal') return null;
        return pick(style, options.pseudoProperties);
    };

    const active = document.activeElement;
    const scrollX = window.scrollX;
    const scrollY = window.scrollY;

    const nodes = limited.map((el) => {
        let parent = el.parentElement;
        while (parent && !indexOf.has(parent)) parent = parent.parentElement;

        const attributes = {};
        for (const attr of Array.from(el.attributes)) attributes[attr.name] = attr.value;

        let directText = '';
        for (const child of el.childNodes) {
            if (child.nodeType === Node.TEXT_NODE) directText += child.textContent;
        }

        const focusable = matchesAny(el, options.focusableSelectors);
        let focusStyle = null;
        if (focusable && typeof el.focus === 'function') {
            el.focus({ preventScroll: true });
            if (document.activeElement === el) {
                focusStyle = pick(getComputedStyle(el), options.focusProperties);
            }
            el.blur();
        }

        const rect = el.getBoundingClientRect();
        return {
            tag: el.tagName.toLowerCase(),
            attributes,
            parent: parent ? indexOf.get(parent) : null,
            text: (el.textContent || '').replace(/\\s+/g, ' ').trim().slice(0, 1000),
            directText: directText.replace(/\\s+/g, ' ').trim(),
            style: pick(getComputedStyle(el), options.styleProperties),
            focusStyle,
            beforeStyle: pseudo(el, '::before'),
            afterStyle: pseudo(el, '::after'),
            box: {
                x: rect.left + scrollX,
                y: rect.top + scrollY,
                width: rect.width,
                height: rect.height,
            },
            interactive: matchesAny(el, options.interactiveSelectors),
            focusable,
        };
    });

    if (active && active !== document.body && typeof active.focus === 'function') {
        active.focus({ preventScroll: true });
    }
    window.scrollTo(scrollX, scrollY);

    return {
        url: location.href,
        canvasColor: 'rgb(255, 255, 255)',
        truncated: elements.length > limited.length,
        nodes,
    };
}
"""


async def capture_snapshot(page: Page, url: Optional[str] = None) -> PageSnapshot:
    """
    Capture a snapshot of a loaded page.

    Args:
        page: Playwright page with the document loaded
        url: URL to record, defaults to the page's current URL

    Returns:
        PageSnapshot of the page

    Raises:
        SnapshotReadError: If the page returns malformed data
    """
    data = await page.evaluate(SNAPSHOT_SCRIPT, {
        'maxNodes': MAX_SNAPSHOT_NODES,
        'styleProperties': STYLE_PROPERTIES,
        'pseudoProperties': PSEUDO_PROPERTIES,
        'focusProperties': FOCUS_STYLE_PROPERTIES,
        'interactiveSelectors': INTERACTIVE_SELECTORS,
        'focusableSelectors': FOCUSABLE_SELECTORS,
    })
    if not isinstance(data, dict):
        raise SnapshotReadError("Snapshot script returned no data")

    if url:
        data['url'] = url
    if data.get('truncated'):
        get_logger("browser").warning(
            f"Snapshot of {data.get('url')} truncated at {MAX_SNAPSHOT_NODES} elements"
        )
    return PageSnapshot.from_dict(data)


class SnapshotBrowser:
    """
    Loads pages in a Playwright browser and captures snapshots of them.

    Use as an async context manager::

        async with SnapshotBrowser() as browser:
            snapshot = await browser.snapshot("https://example.com")
    """

    def __init__(
        self,
        timeout: int = DEFAULT_PAGE_TIMEOUT,
        wait_until: str = "networkidle",
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        """
        Initialize the browser wrapper.

        Args:
            timeout: Page load timeout in milliseconds
            wait_until: Event to wait for ('load', 'domcontentloaded', 'networkidle')
            headless: Run browser in headless mode
            user_agent: User agent string for pages
        """
        self.timeout = timeout
        self.wait_until = wait_until
        self.headless = headless
        self.user_agent = user_agent
        self.logger = get_logger("browser")

        self._playwright = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        """Start the Playwright browser instance."""
        self.logger.info("Starting Playwright browser...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=[
                '--no-sandbox',
                '--disable-setuid-sandbox',
                '--disable-dev-shm-usage',
            ]
        )
        self.logger.info("Browser started successfully")

    async def stop(self) -> None:
        """Stop the Playwright browser instance."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.logger.info("Browser stopped")

    async def snapshot(self, url: str) -> Optional[PageSnapshot]:
        """
        Load a page and capture its snapshot.

        Args:
            url: URL to load

        Returns:
            PageSnapshot, or None if the page could not be loaded
        """
        if not self._browser:
            await self.start()

        context = None
        try:
            context = await self._browser.new_context(
                user_agent=self.user_agent,
                viewport=dict(DEFAULT_VIEWPORT),
                ignore_https_errors=True,
            )
            page = await context.new_page()

            self.logger.debug(f"Loading: {url}")
            response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout)

            if not response:
                self.logger.warning(f"No response for {url}")
                return None

            if response.status >= 400:
                self.logger.warning(f"HTTP {response.status} for {url}")
                return None

            # Wait for any additional dynamic content
            await asyncio.sleep(1)

            snapshot = await capture_snapshot(page, page.url)
            self.logger.debug(f"Captured {len(snapshot)} elements from {page.url}")
            return snapshot

        except PlaywrightTimeout:
            self.logger.warning(f"Timeout loading {url}")
            return None
        except SnapshotReadError as e:
            self.logger.error(f"Could not read snapshot of {url}: {e}")
            return None
        except Exception as e:
            self.logger.error(f"Error loading {url}: {e}")
            return None
        finally:
            if context:
                await context.close()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()
