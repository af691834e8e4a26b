"""
Focus visibility check (WCAG 2.4.7).
"""

from typing import Dict, List

from ..config import CheckOptions
from ..findings import Category, CheckResult, FocusStyleContext, Severity
from ..snapshot.models import FOCUS_STYLE_PROPERTIES, ElementNode, PageSnapshot
from .base import BaseCheck


def changed_properties(style: Dict[str, str], focus_style: Dict[str, str]) -> List[str]:
    return [
        prop for prop in FOCUS_STYLE_PROPERTIES
        if prop in focus_style and focus_style.get(prop) != style.get(prop)
    ]


def has_focus_outline(focus_style: Dict[str, str]) -> bool:
    style = focus_style.get('outline-style', 'none')
    width = focus_style.get('outline-width', '0px')
    return style not in ('none', 'hidden', '') and width not in ('0px', '0')


class FocusStyleCheck(BaseCheck):
    """
    Compares each focusable element's default and :focus styles.

    Elements without a captured focus style (static snapshots) are not judged.
    """

    name = "focus_style"
    category = Category.FOCUS_MANAGEMENT

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []
        inventory = []

        for node in snapshot.focusable_elements():
            if node.focus_style is None or not snapshot.is_visible(node):
                continue

            changes = changed_properties(node.style, node.focus_style)
            visible = bool(changes) or has_focus_outline(node.focus_style)
            inventory.append({
                'tag': node.tag,
                'selector': snapshot.selector(node),
                'hasFocusStyle': visible,
                'changedProperties': changes,
            })

            if not visible:
                findings.append(self._missing(snapshot, node))

        return self.result(findings, focus_styles=inventory)

    def _missing(self, snapshot: PageSnapshot, node: ElementNode):
        return self.finding(
            'missing_focus_style', Severity.MEDIUM,
            "Element lacks visible focus indicator",
            "Add visible focus styles (outline, border, or background change)",
            FocusStyleContext(element=node.tag, **self.context_for(snapshot, node)),
        )
