"""
Static HTML snapshot provider.

Builds an approximate PageSnapshot from markup alone: inline style
declarations stand in for computed style, a few properties are inherited,
and there is no geometry and no focus style. Checks that need those find
nothing to judge on a static snapshot.
"""

import asyncio
import re
from typing import Dict, List, Optional

import aiohttp
from aiohttp import ClientError, ClientTimeout
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, MAX_SNAPSHOT_NODES
from ..utils.log import get_logger
from .models import (
    DEFAULT_CANVAS_COLOR,
    FOCUSABLE_SELECTORS,
    INTERACTIVE_SELECTORS,
    ElementNode,
    PageSnapshot,
)


# Never rendered, so left out of the snapshot with their subtrees
NON_RENDERED_TAGS = {
    'head', 'script', 'style', 'template', 'noscript', 'meta', 'link', 'title', 'base',
}

INHERITED_PROPERTIES = ('color', 'font-size', 'font-weight', 'visibility')

ROOT_STYLE = {
    'color': 'rgb(0, 0, 0)',
    'font-size': '16px',
    'font-weight': '400',
    'visibility': 'visible',
}

# User agent stylesheet defaults that matter for contrast
TAG_DEFAULTS: Dict[str, Dict[str, str]] = {
    'h1': {'font-size': '32px', 'font-weight': '700'},
    'h2': {'font-size': '24px', 'font-weight': '700'},
    'h3': {'font-size': '18.72px', 'font-weight': '700'},
    'h4': {'font-size': '16px', 'font-weight': '700'},
    'h5': {'font-size': '13.28px', 'font-weight': '700'},
    'h6': {'font-size': '10.72px', 'font-weight': '700'},
    'strong': {'font-weight': '700'},
    'b': {'font-weight': '700'},
    'th': {'font-weight': '700'},
    'a': {'color': 'rgb(0, 0, 238)'},
}

TRANSPARENT = 'rgba(0, 0, 0, 0)'
WHITESPACE_PATTERN = re.compile(r'\s+')

logger = get_logger("html_snapshot")


def parse_inline_style(value: Optional[str]) -> Dict[str, str]:
    """Parse a style attribute into lowercase property names and values."""
    declarations = {}
    for declaration in (value or '').split(';'):
        if ':' not in declaration:
            continue
        prop, _, val = declaration.partition(':')
        prop = prop.strip().lower()
        val = val.replace('!important', '').strip()
        if prop and val:
            declarations[prop] = val
    return declarations


def _expand_background(declarations: Dict[str, str]) -> Dict[str, str]:
    """Split the background shorthand into color and image."""
    background = declarations.pop('background', None)
    if background is None:
        return declarations
    if 'url(' in background or 'gradient(' in background:
        declarations.setdefault('background-image', background)
    else:
        declarations.setdefault('background-color', background)
    return declarations


def _computed_style(tag: Tag, parent_style: Dict[str, str]) -> Dict[str, str]:
    style = {prop: parent_style[prop] for prop in INHERITED_PROPERTIES if prop in parent_style}
    style.update({
        'display': 'block',
        'opacity': '1',
        'background-color': TRANSPARENT,
        'background-image': 'none',
    })
    style.update(TAG_DEFAULTS.get(tag.name, {}))
    style.update(_expand_background(parse_inline_style(tag.get('style'))))

    if tag.has_attr('hidden') or (tag.name == 'input' and tag.get('type') == 'hidden'):
        style['display'] = 'none'
    return style


def _attributes(tag: Tag) -> Dict[str, str]:
    return {
        name: ' '.join(value) if isinstance(value, list) else str(value)
        for name, value in tag.attrs.items()
    }


def _direct_text(tag: Tag) -> str:
    parts = [
        str(child) for child in tag.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    ]
    return WHITESPACE_PATTERN.sub(' ', ''.join(parts)).strip()


def _matching(soup: BeautifulSoup, selectors: List[str]) -> set:
    matched = set()
    for selector in selectors:
        matched.update(id(el) for el in soup.select(selector))
    return matched


def snapshot_from_html(html: str, url: str) -> PageSnapshot:
    """
    Build a snapshot from static HTML.

    Args:
        html: HTML content of the page
        url: URL the HTML came from

    Returns:
        PageSnapshot without geometry or focus styles
    """
    try:
        soup = BeautifulSoup(html, 'lxml')
    except Exception:
        # Fallback to html.parser if lxml fails
        soup = BeautifulSoup(html, 'html.parser')

    interactive = _matching(soup, INTERACTIVE_SELECTORS)
    focusable = _matching(soup, FOCUSABLE_SELECTORS)

    nodes: List[ElementNode] = []
    styles: Dict[int, Dict[str, str]] = {}
    stack = [(child, None) for child in reversed(list(soup.children))]

    while stack:
        tag, parent = stack.pop()
        if not isinstance(tag, Tag) or tag.name in NON_RENDERED_TAGS:
            continue
        if len(nodes) >= MAX_SNAPSHOT_NODES:
            logger.warning(f"Snapshot of {url} truncated at {MAX_SNAPSHOT_NODES} elements")
            break

        index = len(nodes)
        style = _computed_style(tag, styles[parent] if parent is not None else ROOT_STYLE)
        styles[index] = style

        nodes.append(ElementNode(
            index=index,
            tag=tag.name.lower(),
            attributes=_attributes(tag),
            parent=parent,
            text=WHITESPACE_PATTERN.sub(' ', tag.get_text(' ')).strip(),
            direct_text=_direct_text(tag),
            style=style,
            interactive=id(tag) in interactive,
            focusable=id(tag) in focusable,
        ))

        stack.extend((child, index) for child in reversed(list(tag.children)))

    canvas = DEFAULT_CANVAS_COLOR
    for node in nodes:
        if node.tag in ('html', 'body') and node.css('background-color') != TRANSPARENT:
            canvas = node.css('background-color')
            break

    logger.debug(f"Static snapshot of {url}: {len(nodes)} elements")
    return PageSnapshot(url=url, nodes=nodes, canvas_color=canvas)


async def fetch_html(
    url: str,
    timeout: int = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT
) -> Optional[str]:
    """
    Fetch the raw HTML of a page.

    Args:
        url: URL to fetch
        timeout: Total timeout in seconds
        user_agent: User agent string for the request

    Returns:
        HTML content, or None if the request failed
    """
    try:
        async with aiohttp.ClientSession(
            timeout=ClientTimeout(total=timeout),
            headers={"User-Agent": user_agent}
        ) as session:
            async with session.get(url, allow_redirects=True) as response:
                if response.status != 200:
                    logger.warning(f"HTTP {response.status} for {url}")
                    return None
                return await response.text(errors='replace')
    except ClientError as e:
        logger.error(f"Client error fetching {url}: {e}")
        return None
    except asyncio.TimeoutError:
        logger.error(f"Timeout fetching {url}")
        return None
