"""
Image alternative text check (WCAG 1.1.1).
"""

from ..config import CheckOptions
from ..findings import Category, CheckResult, ImageContext, Severity
from ..snapshot.models import ElementNode, PageSnapshot
from .base import BaseCheck


DECORATIVE_ROLES = ('presentation', 'none')


def is_decorative(node: ElementNode) -> bool:
    return node.role in DECORATIVE_ROLES


class ImageCheck(BaseCheck):
    """
    Flags images with no text alternative at all.

    An empty alt attribute is valid decorative markup and is never flagged;
    only a missing alt with no aria-label on a non-decorative image is.
    """

    name = "images"
    category = Category.IMAGES

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []
        images = []

        for node in snapshot.find_all('img'):
            alt = node.attr('alt')
            aria_label = (node.attr('aria-label') or '').strip()
            decorative = is_decorative(node)

            images.append({
                'src': node.attr('src', ''),
                'alt': alt,
                'ariaLabel': aria_label or None,
                'isDecorative': decorative,
                'selector': snapshot.selector(node),
            })

            if alt is None and not aria_label and not decorative:
                findings.append(self.finding(
                    'missing_alt_text', Severity.CRITICAL,
                    "Image missing alt text",
                    "Add descriptive alt text for all informational images",
                    ImageContext(src=node.attr('src', ''), **self.context_for(snapshot, node)),
                ))

        return self.result(findings, images=images)
