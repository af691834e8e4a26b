"""
Target size check (WCAG 2.5.5 / 2.5.8).
"""

from ..config import CheckOptions
from ..findings import (
    Category,
    CheckResult,
    Severity,
    TargetSpacingContext,
    TouchTargetContext,
)
from ..snapshot.models import ElementNode, PageSnapshot
from ..utils.constants import MAX_SPACING_TARGETS
from .base import BaseCheck


MINIMUM_TARGET_SIZE = 24    # AA, 2.5.8
ENHANCED_TARGET_SIZE = 44   # AAA, 2.5.5
MINIMUM_TARGET_SPACING = 8


class TouchTargetCheck(BaseCheck):
    """Checks interactive target sizes and the spacing between targets."""

    name = "touch_targets"
    category = Category.TOUCH_TARGETS

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []
        targets = [
            node for node in snapshot.interactive_elements()
            if node.box is not None
            and (node.attr('type') or '').lower() != 'hidden'
            and snapshot.is_visible(node)
        ]

        inventory = []
        for node in targets:
            width, height = node.box.width, node.box.height
            inventory.append({
                'tag': node.tag,
                'width': width,
                'height': height,
                'selector': snapshot.selector(node),
            })

            if width < MINIMUM_TARGET_SIZE or height < MINIMUM_TARGET_SIZE:
                findings.append(self._size_finding(
                    snapshot, node, 'touch_target_too_small', Severity.MEDIUM,
                    MINIMUM_TARGET_SIZE,
                ))
            elif width < ENHANCED_TARGET_SIZE or height < ENHANCED_TARGET_SIZE:
                findings.append(self._size_finding(
                    snapshot, node, 'touch_target_below_enhanced', Severity.LOW,
                    ENHANCED_TARGET_SIZE,
                ))

        if len(targets) > MAX_SPACING_TARGETS:
            self.logger.debug(
                f"Spacing check limited to the first {MAX_SPACING_TARGETS} of {len(targets)} targets"
            )
        findings.extend(self._spacing_findings(snapshot, targets[:MAX_SPACING_TARGETS]))

        return self.result(findings, targets=inventory)

    def _size_finding(
        self,
        snapshot: PageSnapshot,
        node: ElementNode,
        type: str,
        severity: Severity,
        required: int
    ):
        width, height = node.box.width, node.box.height
        return self.finding(
            type, severity,
            f"Touch target is {width:g}x{height:g}px, smaller than {required}x{required}px",
            f"Make interactive targets at least {required}x{required} CSS pixels",
            TouchTargetContext(
                width=width,
                height=height,
                required_size=required,
                **self.context_for(snapshot, node)
            ),
        )

    def _spacing_findings(self, snapshot: PageSnapshot, targets):
        findings = []
        for i, node in enumerate(targets):
            for other in targets[i + 1:]:
                if node.box.contains(other.box) or other.box.contains(node.box):
                    continue
                distance = node.box.gap_to(other.box)
                if distance < MINIMUM_TARGET_SPACING:
                    other_selector = snapshot.selector(other)
                    findings.append(self.finding(
                        'touch_target_spacing', Severity.LOW,
                        f"Touch target is {distance:.1f}px from {other_selector}",
                        f"Keep at least {MINIMUM_TARGET_SPACING}px between adjacent targets",
                        TargetSpacingContext(
                            other_selector=other_selector,
                            distance=round(distance, 1),
                            **self.context_for(snapshot, node)
                        ),
                    ))
        return findings
