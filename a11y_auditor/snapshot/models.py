"""
Page snapshot model.

A snapshot is an immutable, read-only record of one loaded page: every
element with its attributes, computed style, optional focus and pseudo
element styles, geometry and the interactive/focusable flags computed from
fixed selector lists. All checks read the same snapshot.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..errors import SnapshotReadError
from ..utils.constants import MAX_ANCESTOR_DEPTH, TEXT_SAMPLE_LENGTH
from .selectors import SelectorBuilder


# Selector lists used by snapshot providers to flag elements
INTERACTIVE_SELECTORS = ['button', 'a', 'input', 'select', 'textarea']

FOCUSABLE_SELECTORS = [
    'a[href]',
    'button:not([disabled])',
    'input:not([disabled]):not([type="hidden"])',
    'select:not([disabled])',
    'textarea:not([disabled])',
    '[tabindex]:not([tabindex="-1"])',
    'area[href]',
    'iframe',
]

# Properties compared between the default and :focus styles
FOCUS_STYLE_PROPERTIES = [
    'outline-style',
    'outline-width',
    'outline-color',
    'border-top-style',
    'border-top-width',
    'border-top-color',
    'border-bottom-style',
    'border-bottom-width',
    'border-bottom-color',
    'background-color',
    'box-shadow',
]

DEFAULT_CANVAS_COLOR = "rgb(255, 255, 255)"


@dataclass(frozen=True)
class BoundingBox:
    """Element geometry in document coordinates (CSS pixels)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def gap_to(self, other: "BoundingBox") -> float:
        """Shortest edge-to-edge distance, 0 when the boxes touch or overlap."""
        dx = max(0.0, max(self.x, other.x) - min(self.right, other.right))
        dy = max(0.0, max(self.y, other.y) - min(self.bottom, other.bottom))
        return (dx * dx + dy * dy) ** 0.5

    def contains(self, other: "BoundingBox") -> bool:
        return (
            self.x <= other.x and self.y <= other.y
            and self.right >= other.right and self.bottom >= other.bottom
        )


@dataclass(frozen=True, eq=False)
class ElementNode:
    """One element of a page snapshot."""
    index: int
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    parent: Optional[int] = None
    text: str = ""
    direct_text: str = ""
    style: Dict[str, str] = field(default_factory=dict)
    focus_style: Optional[Dict[str, str]] = None
    before_style: Optional[Dict[str, str]] = None
    after_style: Optional[Dict[str, str]] = None
    box: Optional[BoundingBox] = None
    interactive: bool = False
    focusable: bool = False

    def attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def has_attr(self, name: str) -> bool:
        return name in self.attributes

    def css(self, prop: str, default: str = "") -> str:
        return self.style.get(prop, default)

    @property
    def id(self) -> Optional[str]:
        return self.attributes.get('id') or None

    @property
    def classes(self) -> List[str]:
        return (self.attributes.get('class') or '').split()

    @property
    def role(self) -> str:
        return (self.attributes.get('role') or '').strip().lower()

    @property
    def text_sample(self) -> str:
        return self.text[:TEXT_SAMPLE_LENGTH]


class PageSnapshot:
    """
    Read-only view of one page's DOM, style and geometry at one instant.

    Nodes are stored in document order; a node's index is its position.
    """

    def __init__(
        self,
        url: str,
        nodes: Sequence[ElementNode],
        canvas_color: str = DEFAULT_CANVAS_COLOR
    ):
        """
        Initialize the snapshot.

        Args:
            url: URL of the captured page
            nodes: Elements in document order
            canvas_color: Document background behind everything else

        Raises:
            SnapshotReadError: If node indexes or parent links are inconsistent
        """
        self.url = url
        self.canvas_color = canvas_color or DEFAULT_CANVAS_COLOR
        self._nodes = tuple(nodes)
        self._children: Dict[int, List[ElementNode]] = defaultdict(list)
        self._ids: Dict[str, List[ElementNode]] = defaultdict(list)
        self._selectors = None

        for position, node in enumerate(self._nodes):
            if node.index != position:
                raise SnapshotReadError(
                    f"Node at position {position} has index {node.index}"
                )
            if node.parent is not None:
                if not 0 <= node.parent < position:
                    raise SnapshotReadError(
                        f"Node {position} has invalid parent {node.parent}"
                    )
                self._children[node.parent].append(node)
            if node.id:
                self._ids[node.id].append(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ElementNode]:
        return iter(self._nodes)

    @property
    def nodes(self) -> Sequence[ElementNode]:
        return self._nodes

    def node(self, index: int) -> ElementNode:
        try:
            return self._nodes[index]
        except (IndexError, TypeError):
            raise SnapshotReadError(f"No element at index {index!r}")

    def parent(self, node: ElementNode) -> Optional[ElementNode]:
        if node.parent is None:
            return None
        return self.node(node.parent)

    def ancestors(self, node: ElementNode, include_self: bool = False) -> Iterator[ElementNode]:
        """Yield ancestors from the nearest outwards, bounded by MAX_ANCESTOR_DEPTH."""
        current = node if include_self else self.parent(node)
        depth = 0
        while current is not None and depth < MAX_ANCESTOR_DEPTH:
            yield current
            current = self.parent(current)
            depth += 1

    def children(self, node: ElementNode) -> List[ElementNode]:
        return list(self._children.get(node.index, ()))

    def find_all(self, *tags: str) -> List[ElementNode]:
        wanted = {t.lower() for t in tags}
        return [n for n in self._nodes if n.tag in wanted]

    def with_role(self, *roles: str) -> List[ElementNode]:
        wanted = {r.lower() for r in roles}
        return [n for n in self._nodes if n.role in wanted]

    def find_by_id(self, element_id: str) -> List[ElementNode]:
        return list(self._ids.get(element_id, ()))

    def has_id(self, element_id: str) -> bool:
        return element_id in self._ids

    def id_count(self, element_id: str) -> int:
        return len(self._ids.get(element_id, ()))

    def interactive_elements(self) -> List[ElementNode]:
        return [n for n in self._nodes if n.interactive]

    def focusable_elements(self) -> List[ElementNode]:
        return [n for n in self._nodes if n.focusable]

    def is_visible(self, node: ElementNode) -> bool:
        """
        Check whether an element is rendered and not fully transparent.

        Uses computed display/visibility/opacity, walking ancestors for
        display and opacity, and the bounding box when one was captured.
        """
        if node.css('visibility') in ('hidden', 'collapse'):
            return False
        for element in self.ancestors(node, include_self=True):
            if element.css('display') == 'none':
                return False
            if element.css('opacity') in ('0', '0.0'):
                return False
        if node.box is not None and node.box.is_empty:
            return False
        return True

    def selector(self, node: ElementNode) -> str:
        """Get the report selector for an element."""
        if self._selectors is None:
            self._selectors = SelectorBuilder(self)
        return self._selectors.build(node)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageSnapshot":
        """
        Build a snapshot from its serialized form.

        Args:
            data: Dictionary with 'url', optional 'canvasColor' and 'nodes'

        Returns:
            PageSnapshot

        Raises:
            SnapshotReadError: If the data is malformed
        """
        if not isinstance(data, dict) or not isinstance(data.get('nodes'), list):
            raise SnapshotReadError("Snapshot data must be an object with a 'nodes' list")

        nodes = []
        for position, raw in enumerate(data['nodes']):
            try:
                box = raw.get('box')
                nodes.append(ElementNode(
                    index=position,
                    tag=str(raw['tag']).lower(),
                    attributes={str(k): str(v) for k, v in (raw.get('attributes') or {}).items()},
                    parent=raw.get('parent'),
                    text=raw.get('text') or '',
                    direct_text=raw.get('directText') or '',
                    style=dict(raw.get('style') or {}),
                    focus_style=raw.get('focusStyle'),
                    before_style=raw.get('beforeStyle'),
                    after_style=raw.get('afterStyle'),
                    box=BoundingBox(
                        float(box['x']), float(box['y']),
                        float(box['width']), float(box['height'])
                    ) if box else None,
                    interactive=bool(raw.get('interactive')),
                    focusable=bool(raw.get('focusable')),
                ))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise SnapshotReadError(f"Malformed node {position}: {e}")

        return cls(
            url=str(data.get('url') or ''),
            nodes=nodes,
            canvas_color=data.get('canvasColor') or DEFAULT_CANVAS_COLOR,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the snapshot in the form accepted by from_dict."""
        return {
            'url': self.url,
            'canvasColor': self.canvas_color,
            'nodes': [
                {
                    'tag': n.tag,
                    'attributes': dict(n.attributes),
                    'parent': n.parent,
                    'text': n.text,
                    'directText': n.direct_text,
                    'style': dict(n.style),
                    'focusStyle': n.focus_style,
                    'beforeStyle': n.before_style,
                    'afterStyle': n.after_style,
                    'box': {
                        'x': n.box.x, 'y': n.box.y,
                        'width': n.box.width, 'height': n.box.height,
                    } if n.box else None,
                    'interactive': n.interactive,
                    'focusable': n.focusable,
                }
                for n in self._nodes
            ],
        }
