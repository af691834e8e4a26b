"""
Color contrast check.

Scores text against its effective background. Text over background images
is only scored when a dark overlay can be found; otherwise it is handed to
manual review.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from ..color.background import composite, find_dark_overlay, resolve_background
from ..color.contrast import (
    RGB,
    ColorSample,
    check_compliance,
    contrast_ratio,
    is_large_text,
    parse_font_weight,
    parse_rgba,
    round_half_up,
)
from ..config import CheckOptions
from ..errors import ColorParseError
from ..findings import (
    Category,
    CheckResult,
    ContrastContext,
    ManualReviewContext,
    Severity,
)
from ..snapshot.models import ElementNode, PageSnapshot
from .base import BaseCheck


TEXT_TAGS = {
    'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'a', 'button', 'span', 'div',
    'li', 'label', 'td', 'th', 'dt', 'dd', 'blockquote', 'figcaption',
    'strong', 'em', 'b', 'i', 'small', 'legend', 'caption', 'summary',
}

DEFAULT_FONT_SIZE = 16.0
FONT_SIZE_PATTERN = re.compile(r'([\d.]+)px')


@dataclass(frozen=True)
class ContrastCombination:
    """One deduplicated text/background combination and how it scored."""
    text_color: str
    background_color: str
    font_size: float
    font_weight: str
    sample_text: str
    selector: str
    status: str
    contrast_ratio: Optional[float] = None
    required_ratio: Optional[float] = None
    is_large_text: bool = False
    text_rgb: Optional[RGB] = None
    background_rgb: Optional[RGB] = None
    error: Optional[str] = None


def font_size_px(node: ElementNode) -> float:
    match = FONT_SIZE_PATTERN.match(node.css('font-size').strip())
    return float(match.group(1)) if match else DEFAULT_FONT_SIZE


class ContrastCheck(BaseCheck):
    """Checks text color contrast against WCAG 1.4.3 / 1.4.6."""

    name = "contrast"
    category = Category.COLOR_CONTRAST

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []
        combinations: List[ContrastCombination] = []
        seen: Set[Tuple] = set()
        reviewed: Set[Tuple] = set()
        level = options.wcag_level

        for node in snapshot:
            if node.tag not in TEXT_TAGS or not node.direct_text.strip():
                continue
            if not snapshot.is_visible(node):
                continue

            font_size = font_size_px(node)
            font_weight = node.css('font-weight', '400')
            raw_color = node.css('color')

            try:
                text_color = parse_rgba(raw_color)
            except ColorParseError as e:
                if ('error', raw_color) not in seen:
                    seen.add(('error', raw_color))
                    combinations.append(ContrastCombination(
                        text_color=raw_color,
                        background_color='',
                        font_size=font_size,
                        font_weight=font_weight,
                        sample_text=node.text_sample,
                        selector=snapshot.selector(node),
                        status='ERROR',
                        error=str(e),
                    ))
                continue

            if text_color.a == 0:
                continue

            resolution = resolve_background(snapshot, node)
            if resolution.image_ancestor is not None:
                overlay = find_dark_overlay(snapshot, node, resolution.image_ancestor)
                if overlay is None:
                    key = (text_color.rgb, resolution.image_ancestor.index)
                    if key not in reviewed:
                        reviewed.add(key)
                        findings.append(self._manual_review(
                            snapshot, node, text_color, resolution.image_ancestor
                        ))
                    continue
                background = overlay.opaque()
            elif resolution.color is None:
                continue
            else:
                background = resolution.color

            if text_color.a < 1:
                text_color = composite(text_color, background).opaque()

            key = (
                text_color.rgb,
                background.rgb,
                round_half_up(font_size),
                parse_font_weight(font_weight),
            )
            if key in seen:
                continue
            seen.add(key)

            large = is_large_text(font_size, font_weight)
            result = check_compliance(contrast_ratio(text_color, background), large, level)
            ratio = round(result.ratio, 2)

            combinations.append(ContrastCombination(
                text_color=text_color.css(),
                background_color=background.css(),
                font_size=font_size,
                font_weight=font_weight,
                sample_text=node.text_sample,
                selector=snapshot.selector(node),
                status='PASS' if result.passes else 'FAIL',
                contrast_ratio=ratio,
                required_ratio=result.required_ratio,
                is_large_text=large,
                text_rgb=text_color.rgb,
                background_rgb=background.rgb,
            ))

            if not result.passes:
                findings.append(self.finding(
                    'contrast_failure', Severity.CRITICAL,
                    f"Insufficient contrast ratio: {ratio}:1 "
                    f"(required: {result.required_ratio:g}:1)",
                    f"Improve color contrast to meet WCAG {level} standards",
                    ContrastContext(
                        text_color=text_color.css(),
                        background_color=background.css(),
                        contrast_ratio=ratio,
                        required_ratio=result.required_ratio,
                        font_size=font_size,
                        font_weight=font_weight,
                        is_large_text=large,
                        level=level,
                        **self.context_for(snapshot, node)
                    ),
                ))

        return self.result(
            findings,
            combinations=combinations,
            passes=sum(1 for c in combinations if c.status == 'PASS'),
            failures=sum(1 for c in combinations if c.status == 'FAIL'),
            errors=sum(1 for c in combinations if c.status == 'ERROR'),
        )

    def _manual_review(
        self,
        snapshot: PageSnapshot,
        node: ElementNode,
        text_color: ColorSample,
        image_ancestor: ElementNode
    ):
        return self.finding(
            'contrast_manual_review', Severity.HIGH,
            "Text over a background image or gradient; contrast could not be computed",
            "Verify contrast manually, or add a solid or dark overlay behind the text",
            ManualReviewContext(
                text_color=text_color.css(),
                image_selector=snapshot.selector(image_ancestor),
                reason="background-image without a detectable dark overlay",
                **self.context_for(snapshot, node)
            ),
            category=Category.MANUAL_REVIEW,
        )
