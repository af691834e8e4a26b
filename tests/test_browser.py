from unittest.mock import AsyncMock, MagicMock

import pytest

from a11y_auditor.errors import SnapshotReadError
from a11y_auditor.snapshot import browser as browser_module
from a11y_auditor.snapshot.browser import SNAPSHOT_SCRIPT, SnapshotBrowser, capture_snapshot
from a11y_auditor.utils.constants import MAX_SNAPSHOT_NODES

from builders import PAGE_URL, button, node


def page_data():
    return {
        'url': PAGE_URL,
        'canvasColor': 'rgb(255, 255, 255)',
        'truncated': False,
        'nodes': [
            node('html'),
            node('body', parent=0),
            button(parent=1, text='Save', box=(10, 10, 80, 30),
                   focus_style={'outline-style': 'auto', 'outline-width': '1px'}),
        ],
    }


def mock_page(data):
    page = MagicMock()
    page.url = PAGE_URL
    page.evaluate = AsyncMock(return_value=data)
    page.goto = AsyncMock(return_value=MagicMock(status=200))
    return page


def mock_browser(page):
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    browser = SnapshotBrowser()
    browser._browser = MagicMock()
    browser._browser.new_context = AsyncMock(return_value=context)
    return browser, context


class TestCaptureSnapshot:

    @pytest.mark.asyncio
    async def test_reads_the_page_in_one_call(self):
        page = mock_page(page_data())
        snapshot = await capture_snapshot(page)

        page.evaluate.assert_awaited_once()
        script, options = page.evaluate.await_args.args
        assert script == SNAPSHOT_SCRIPT
        assert options['maxNodes'] == MAX_SNAPSHOT_NODES
        assert 'outline-style' in options['focusProperties']

        assert len(snapshot) == 3
        saved = snapshot.node(2)
        assert saved.focusable
        assert saved.box.width == 80
        assert saved.focus_style['outline-style'] == 'auto'

    @pytest.mark.asyncio
    async def test_url_override(self):
        snapshot = await capture_snapshot(mock_page(page_data()), 'https://example.com/final')
        assert snapshot.url == 'https://example.com/final'

    @pytest.mark.asyncio
    async def test_malformed_result(self):
        with pytest.raises(SnapshotReadError):
            await capture_snapshot(mock_page(None))


class TestSnapshotBrowser:

    @pytest.mark.asyncio
    async def test_snapshot(self, monkeypatch):
        monkeypatch.setattr(browser_module.asyncio, 'sleep', AsyncMock())
        browser, context = mock_browser(mock_page(page_data()))

        snapshot = await browser.snapshot(PAGE_URL)

        assert snapshot is not None
        assert snapshot.url == PAGE_URL
        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_http_error_yields_no_snapshot(self):
        page = mock_page(page_data())
        page.goto = AsyncMock(return_value=MagicMock(status=404))
        browser, context = mock_browser(page)

        assert await browser.snapshot(PAGE_URL) is None
        page.evaluate.assert_not_awaited()
        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_load_failure_yields_no_snapshot(self):
        page = mock_page(page_data())
        page.goto = AsyncMock(side_effect=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))
        browser, context = mock_browser(page)

        assert await browser.snapshot(PAGE_URL) is None
        context.close.assert_awaited_once()
