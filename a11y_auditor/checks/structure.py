"""
Semantic structure check: landmarks and heading hierarchy.
"""

from typing import Any, Dict, List

from ..config import CheckOptions
from ..findings import Category, CheckResult, HeadingContext, Severity
from ..snapshot.models import PageSnapshot
from .base import BaseCheck


LANDMARK_TAGS = ['main', 'nav', 'header', 'footer', 'aside', 'section', 'article']
HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']


class StructureCheck(BaseCheck):
    """
    Checks landmarks and heading structure.

    A missing main landmark or h1 is critical; a missing nav is medium.
    Skipped heading levels are only a low-severity recommendation, since
    WCAG does not require a gap-free outline.
    """

    name = "structure"
    category = Category.SEMANTIC_HTML

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []

        landmarks = self._landmarks(snapshot)
        headings = [n for n in snapshot if n.tag in HEADING_TAGS]

        if not any(n.tag == 'h1' for n in headings):
            findings.append(self.finding(
                'missing_h1', Severity.CRITICAL,
                "No H1 heading found on page",
                "Add a descriptive H1 heading for the main page title",
            ))

        if not snapshot.find_all('main') and not snapshot.with_role('main'):
            findings.append(self.finding(
                'missing_main', Severity.CRITICAL,
                "No main landmark found",
                "Add a <main> element to wrap the primary content",
            ))

        if not snapshot.find_all('nav') and not snapshot.with_role('navigation'):
            findings.append(self.finding(
                'missing_nav', Severity.MEDIUM,
                "No navigation landmark found",
                "Add <nav> elements for navigation sections",
            ))

        previous_level = 0
        for heading in headings:
            level = int(heading.tag[1])
            if previous_level and level > previous_level + 1:
                findings.append(self.finding(
                    'heading_hierarchy', Severity.LOW,
                    f"Consider adding intermediate heading levels between "
                    f"H{previous_level} and H{level} for better document structure",
                    "While not required by WCAG, a logical heading sequence "
                    "improves navigation for screen reader users",
                    HeadingContext(
                        previous_level=previous_level,
                        level=level,
                        **self.context_for(snapshot, heading)
                    ),
                ))
            previous_level = level

        return self.result(
            findings,
            landmarks=landmarks,
            headings=[
                {
                    'level': h.tag,
                    'text': h.text[:100],
                    'selector': snapshot.selector(h),
                }
                for h in headings
            ],
        )

    def _landmarks(self, snapshot: PageSnapshot) -> List[Dict[str, Any]]:
        return [
            {
                'tag': node.tag,
                'role': node.role or None,
                'ariaLabel': node.attr('aria-label'),
                'selector': snapshot.selector(node),
            }
            for node in snapshot
            if node.tag in LANDMARK_TAGS
        ]
