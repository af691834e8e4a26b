"""
ARIA check: accessible names, roles and ID references (WCAG 4.1.2).
"""

from typing import Iterator, List

from ..config import CheckOptions
from ..findings import AriaContext, Category, CheckResult, Severity
from ..snapshot.models import ElementNode, PageSnapshot
from .base import BaseCheck


VALID_ROLES = {
    'alert', 'alertdialog', 'application', 'article', 'banner', 'button', 'cell',
    'checkbox', 'columnheader', 'combobox', 'complementary', 'contentinfo',
    'definition', 'dialog', 'directory', 'document', 'feed', 'figure', 'form',
    'grid', 'gridcell', 'group', 'heading', 'img', 'link', 'list', 'listbox',
    'listitem', 'log', 'main', 'marquee', 'math', 'menu', 'menubar', 'menuitem',
    'menuitemcheckbox', 'menuitemradio', 'navigation', 'none', 'note', 'option',
    'presentation', 'progressbar', 'radio', 'radiogroup', 'region', 'row',
    'rowgroup', 'rowheader', 'scrollbar', 'search', 'searchbox', 'separator',
    'slider', 'spinbutton', 'status', 'switch', 'tab', 'table', 'tablist',
    'tabpanel', 'term', 'textbox', 'timer', 'toolbar', 'tooltip', 'tree',
    'treegrid', 'treeitem',
}

REFERENCE_ATTRIBUTES = ('aria-describedby', 'aria-labelledby')

# Ids that are probably created later by scripts or live in a shadow root
DYNAMIC_ID_MARKERS = ('-dynamic-', '-shadow-')
PENDING_ID_MARKERS = ('temp', 'loading')

VALUE_NAMED_INPUT_TYPES = {'submit', 'button', 'reset'}


def descendants(snapshot: PageSnapshot, node: ElementNode) -> Iterator[ElementNode]:
    stack = list(reversed(snapshot.children(node)))
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(snapshot.children(current)))


class AriaCheck(BaseCheck):
    """Checks accessible names, role values and aria-* ID references."""

    name = "aria"
    category = Category.ARIA_LABELS

    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        findings = []
        inventory: List[dict] = []

        labelled_ids = {
            n.attr('for') for n in snapshot.find_all('label') if n.attr('for')
        }

        for node in snapshot.interactive_elements():
            if node.tag == 'input' and (node.attr('type') or '').lower() == 'hidden':
                continue
            if node.attr('aria-hidden') == 'true':
                continue
            if self._has_accessible_name(snapshot, node, labelled_ids):
                continue
            if node.tag == 'input' and (node.attr('placeholder') or '').strip():
                findings.append(self.finding(
                    'placeholder_as_label', Severity.LOW,
                    "INPUT element is only named by its placeholder",
                    "Add a visible label; placeholder text disappears once the user types",
                    AriaContext(
                        element=node.tag,
                        attribute='placeholder',
                        value=node.attr('placeholder'),
                        **self.context_for(snapshot, node)
                    ),
                ))
            else:
                findings.append(self.finding(
                    'missing_accessible_name', Severity.MEDIUM,
                    f"{node.tag.upper()} element without accessible name",
                    "Add aria-label, aria-labelledby, or visible text content",
                    AriaContext(element=node.tag, **self.context_for(snapshot, node)),
                ))

        for node in snapshot:
            aria_attrs = {k: v for k, v in node.attributes.items() if k.startswith('aria-')}
            if not aria_attrs and not node.has_attr('role'):
                continue

            inventory.append({
                'tag': node.tag,
                'role': node.attr('role'),
                'ariaAttrs': aria_attrs,
                'selector': snapshot.selector(node),
            })

            if node.has_attr('role'):
                findings.extend(self._check_role(snapshot, node))

            for attribute in REFERENCE_ATTRIBUTES:
                if attribute in aria_attrs:
                    findings.extend(self._check_references(snapshot, node, attribute))

            if 'aria-expanded' in aria_attrs and 'aria-controls' not in aria_attrs:
                findings.append(self.finding(
                    'aria_expanded_without_controls', Severity.LOW,
                    "Element with aria-expanded should ideally have aria-controls",
                    "Point aria-controls at the element that is expanded or collapsed",
                    AriaContext(
                        element=node.tag,
                        attribute='aria-expanded',
                        value=aria_attrs['aria-expanded'],
                        **self.context_for(snapshot, node)
                    ),
                ))

        return self.result(findings, elements=inventory)

    def _has_accessible_name(
        self,
        snapshot: PageSnapshot,
        node: ElementNode,
        labelled_ids: set
    ) -> bool:
        """Approximate accessible name computation."""
        for attribute in ('aria-label', 'aria-labelledby', 'title'):
            if (node.attr(attribute) or '').strip():
                return True
        if node.text.strip():
            return True
        if node.id and node.id in labelled_ids:
            return True
        if any(a.tag == 'label' for a in snapshot.ancestors(node)):
            return True

        input_type = (node.attr('type') or '').lower()
        if node.tag == 'input':
            if input_type in VALUE_NAMED_INPUT_TYPES and (node.attr('value') or '').strip():
                return True
            if input_type == 'image' and (node.attr('alt') or '').strip():
                return True
        return any(
            child.tag == 'img' and (child.attr('alt') or '').strip()
            for child in descendants(snapshot, node)
        )

    def _check_role(self, snapshot: PageSnapshot, node: ElementNode):
        value = node.attr('role') or ''
        tokens = value.lower().split()
        if any(token in VALID_ROLES for token in tokens):
            return []
        return [self.finding(
            'invalid_aria_role', Severity.MEDIUM,
            f'Invalid ARIA role: "{value}"',
            "Use a role defined by WAI-ARIA, or remove the role attribute",
            AriaContext(
                element=node.tag,
                attribute='role',
                value=value,
                **self.context_for(snapshot, node)
            ),
        )]

    def _check_references(self, snapshot: PageSnapshot, node: ElementNode, attribute: str):
        value = node.attr(attribute) or ''
        missing = [
            ref for ref in value.split()
            if not snapshot.has_id(ref)
            and not any(marker in ref for marker in DYNAMIC_ID_MARKERS)
        ]
        if not missing:
            return []

        context = AriaContext(
            element=node.tag,
            attribute=attribute,
            value=value,
            missing_ids=tuple(missing),
            **self.context_for(snapshot, node)
        )

        if any(not any(m in ref for m in PENDING_ID_MARKERS) for ref in missing):
            return [self.finding(
                'aria_reference_missing', Severity.MEDIUM,
                f"{attribute} references potentially missing elements: {', '.join(missing)}",
                f"Make sure every id listed in {attribute} exists on the page",
                context,
            )]
        return [self.finding(
            'aria_reference_dynamic', Severity.LOW,
            f"{attribute} references elements that may be dynamically loaded: "
            f"{', '.join(missing)}",
            f"Verify that the elements referenced by {attribute} exist once loaded",
            context,
        )]
