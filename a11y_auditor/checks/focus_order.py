"""
Focus order check (WCAG 2.4.3).
"""

from typing import List, Optional

from ..config import CheckOptions
from ..findings import Category, CheckResult, FocusOrderContext, Severity
from ..snapshot.models import ElementNode, PageSnapshot
from .base import BaseCheck


BACKWARD_JUMP_PX = 200
HORIZONTAL_JUMP_PX = 400
SAME_ROW_PX = 100


def tab_index(node: ElementNode) -> Optional[int]:
    value = node.attr('tabindex')
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def tab_sequence(snapshot: PageSnapshot) -> List[ElementNode]:
    """
    Order focusable elements the way the browser tabs through them.

    Positive tabindex values come first in ascending order (document order
    breaks ties), then tabindex 0 and unset in document order.
    """
    positive = []
    natural = []
    for node in snapshot.focusable_elements():
        if not snapshot.is_visible(node):
            continue
        index = tab_index(node)
        if index is not None and index < 0:
            continue
        if index:
            positive.append(node)
        else:
            natural.append(node)
    positive.sort(key=tab_index)
    return positive + natural


class FocusOrderCheck(BaseCheck):
    """Checks the tab sequence for positive tabindex and large position jumps."""

    name = "focus_order"
    category = Category.FOCUS_ORDER

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []
        sequence = tab_sequence(snapshot)

        if not sequence:
            findings.append(self.finding(
                'no_focusable_elements', Severity.CRITICAL,
                "No focusable elements found on page",
                "Make sure links, buttons and form controls can receive keyboard focus",
            ))
            return self.result(findings, sequence=[])

        for position, node in enumerate(sequence, start=1):
            index = tab_index(node)
            if index and index > 0:
                findings.append(self.finding(
                    'positive_tabindex', Severity.MEDIUM,
                    f"Element uses positive tabindex ({index})",
                    "Use tabindex=\"0\" and document order instead of positive tabindex values",
                    FocusOrderContext(
                        position=position,
                        tab_index=index,
                        **self.context_for(snapshot, node)
                    ),
                ))

        previous = None
        for position, node in enumerate(sequence, start=1):
            if node.box is None:
                continue
            if previous is not None:
                dx = node.box.x - previous.box.x
                dy = node.box.y - previous.box.y
                backward = dy < -BACKWARD_JUMP_PX
                sideways = abs(dx) > HORIZONTAL_JUMP_PX and abs(dy) < SAME_ROW_PX
                if backward or sideways:
                    findings.append(self.finding(
                        'illogical_focus_order', Severity.MEDIUM,
                        f"Focus jumps {'backward' if backward else 'sideways'} "
                        f"at tab stop {position} (dx={dx:g}px, dy={dy:g}px)",
                        "Make the DOM order match the visual reading order",
                        FocusOrderContext(
                            position=position,
                            tab_index=tab_index(node) or 0,
                            previous_selector=snapshot.selector(previous),
                            delta_x=dx,
                            delta_y=dy,
                            **self.context_for(snapshot, node)
                        ),
                    ))
            previous = node

        return self.result(
            findings,
            sequence=[
                {
                    'position': position,
                    'tag': node.tag,
                    'tabIndex': tab_index(node),
                    'selector': snapshot.selector(node),
                }
                for position, node in enumerate(sequence, start=1)
            ],
        )
