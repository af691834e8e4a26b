"""
CSS selector generation for findings.

One builder per snapshot. Preference order:

1. ``#id`` when the id is unique on the page.
2. ``tag.class1.class2``, scoped under the nearest landmark ancestor when
   there is one, with ``:nth-of-type(n)`` appended only when that is needed
   to single the element out.
3. A ``>`` path of ``tag:nth-of-type(n)`` steps anchored at the nearest
   uniquely identified ancestor, or at the document root.

A bare tag name is never returned.
"""

import re
from collections import Counter
from itertools import combinations
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Optional, Tuple

from ..utils.constants import MAX_ANCESTOR_DEPTH

if TYPE_CHECKING:
    from .models import ElementNode, PageSnapshot


LANDMARK_TAGS = ('main', 'nav', 'header', 'footer', 'aside')
LANDMARK_ROLES = (
    'banner', 'navigation', 'main', 'complementary', 'contentinfo', 'search', 'form'
)

CSS_IDENT = re.compile(r'^-?[A-Za-z_][A-Za-z0-9_-]*$')

# ('index', n) for a landmark element, ('tag', t) or ('role', value); None is the whole page
ScopeKey = Optional[Tuple[str, object]]


class SelectorBuilder:
    """Builds and caches report selectors for the elements of one snapshot."""

    def __init__(self, snapshot: "PageSnapshot"):
        self.snapshot = snapshot
        self._cache: Dict[int, str] = {}
        self._nth: Dict[int, int] = {}
        self._nearest: Dict[int, Optional["ElementNode"]] = {}
        self._counts: Counter = Counter()
        self._index()

    def _index(self):
        """Precompute positions, landmark membership and match counts in one pass."""
        for node in self.snapshot:
            seen: Counter = Counter()
            for child in self.snapshot.children(node):
                seen[child.tag] += 1
                self._nth[child.index] = seen[child.tag]

        for node in self.snapshot:
            self._nth.setdefault(node.index, 1)

            scopes: List[ScopeKey] = [None]
            nearest = None
            for ancestor in self.snapshot.ancestors(node):
                keys = self._scope_keys(ancestor)
                if keys and nearest is None:
                    nearest = ancestor
                scopes.extend(keys)
            self._nearest[node.index] = nearest

            position = self._nth[node.index]
            for classes in self._class_subsets(node):
                for scope in set(scopes):
                    self._counts[(scope, node.tag, classes)] += 1
                    self._counts[(scope, node.tag, classes, position)] += 1

    @staticmethod
    def _scope_keys(node: "ElementNode") -> List[ScopeKey]:
        keys: List[ScopeKey] = []
        if node.tag in LANDMARK_TAGS:
            keys.append(('tag', node.tag))
        if node.role in LANDMARK_ROLES:
            keys.append(('role', node.attributes['role']))
        if keys:
            keys.append(('index', node.index))
        return keys

    @staticmethod
    def _class_subsets(node: "ElementNode") -> List[FrozenSet[str]]:
        classes = sorted({c for c in node.classes if CSS_IDENT.match(c)})
        subsets = [frozenset()]
        subsets.extend(frozenset([c]) for c in classes)
        subsets.extend(frozenset(pair) for pair in combinations(classes, 2))
        return subsets

    def build(self, node: "ElementNode") -> str:
        if node.index not in self._cache:
            self._cache[node.index] = self._build(node)
        return self._cache[node.index]

    def _build(self, node: "ElementNode") -> str:
        unique_id = self._unique_id(node)
        if unique_id:
            return unique_id

        compound, classes = self._compound(node)
        scope_key: ScopeKey = None
        selector = compound
        scope = self._landmark_scope(node)
        if scope:
            scope_selector, scope_key = scope
            selector = f"{scope_selector} {compound}"

        if self._counts[(scope_key, node.tag, classes)] == 1 and selector != node.tag:
            return selector

        position = self._nth[node.index]
        if self._counts[(scope_key, node.tag, classes, position)] == 1:
            return f"{selector}:nth-of-type({position})"

        return self._path(node)

    def _unique_id(self, node: "ElementNode") -> Optional[str]:
        element_id = node.id
        if element_id and CSS_IDENT.match(element_id) and self.snapshot.id_count(element_id) == 1:
            return f"#{element_id}"
        return None

    def _compound(self, node: "ElementNode") -> Tuple[str, FrozenSet[str]]:
        classes = [c for c in node.classes if CSS_IDENT.match(c)][:2]
        selector = node.tag + ''.join(f'.{c}' for c in classes)
        return selector, frozenset(classes)

    def _landmark_scope(self, node: "ElementNode") -> Optional[Tuple[str, ScopeKey]]:
        """Selector and scope key of the nearest landmark ancestor."""
        ancestor = self._nearest[node.index]
        if ancestor is None:
            return None

        unique_id = self._unique_id(ancestor)
        if unique_id:
            return unique_id, ('index', ancestor.index)
        if ancestor.tag in LANDMARK_TAGS:
            return ancestor.tag, ('tag', ancestor.tag)
        # attribute values match case-sensitively
        role = ancestor.attributes['role']
        return f'[role="{role}"]', ('role', role)

    def _path(self, node: "ElementNode") -> str:
        steps: List[str] = [f"{node.tag}:nth-of-type({self._nth[node.index]})"]
        current = self.snapshot.parent(node)
        depth = 0
        while current is not None and depth < MAX_ANCESTOR_DEPTH:
            anchor = self._unique_id(current)
            if anchor:
                steps.append(anchor)
                break
            if current.parent is None:
                steps.append(current.tag)
                break
            steps.append(f"{current.tag}:nth-of-type({self._nth[current.index]})")
            current = self.snapshot.parent(current)
            depth += 1
        return ' > '.join(reversed(steps))
