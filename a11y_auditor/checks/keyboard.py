"""
Keyboard navigation check: focusable inventory and skip links.
"""

from ..config import CheckOptions
from ..findings import Category, CheckResult, Severity
from ..snapshot.models import ElementNode, PageSnapshot
from .base import BaseCheck


SKIP_LINK_TARGETS = ('#main', '#content', '#navigation', '#search')
SKIP_LINK_CLASS = 'skip-link'


class KeyboardCheck(BaseCheck):
    """Checks that the page offers at least one skip link."""

    name = "keyboard"
    category = Category.KEYBOARD_NAVIGATION

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []

        focusable = [
            {
                'tag': node.tag,
                'tabIndex': node.attr('tabindex'),
                'ariaHidden': node.attr('aria-hidden'),
                'hasAriaLabel': bool(node.attr('aria-label')),
                'hasAriaLabelledBy': bool(node.attr('aria-labelledby')),
                'selector': snapshot.selector(node),
            }
            for node in snapshot.focusable_elements()
        ]

        skip_links = [
            {'href': node.attr('href'), 'text': node.text_sample, 'selector': snapshot.selector(node)}
            for node in snapshot.find_all('a')
            if self._is_skip_link(snapshot, node)
        ]

        if not skip_links:
            findings.append(self.finding(
                'missing_skip_links', Severity.MEDIUM,
                "No skip links found",
                "Add skip links for main content and navigation",
            ))

        return self.result(findings, focusable_elements=focusable, skip_links=skip_links)

    def _is_skip_link(self, snapshot: PageSnapshot, node: ElementNode) -> bool:
        if (node.attr('href') or '').strip() in SKIP_LINK_TARGETS:
            return True
        return any(
            SKIP_LINK_CLASS in element.classes
            for element in snapshot.ancestors(node, include_self=True)
        )
