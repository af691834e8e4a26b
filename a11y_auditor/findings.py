"""
Finding and result types shared by checks, identity, suppression and the
auditor.

Field names in the serialized forms are consumed by report tooling and must
stay as they are.
"""

import dataclasses
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Severity(Enum):
    """Severity of a finding, ordered low < medium < high < critical."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def ordinal(self) -> int:
        return SEVERITY_ORDER[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["Severity"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


SEVERITY_ORDER = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class Category(Enum):
    """Result categories, in report order."""
    SEMANTIC_HTML = "semanticHTML"
    COLOR_CONTRAST = "colorContrast"
    VISION_SIMULATION = "visionSimulation"
    ARIA_LABELS = "ariaLabels"
    KEYBOARD_NAVIGATION = "keyboardNavigation"
    IMAGES = "images"
    FOCUS_MANAGEMENT = "focusManagement"
    TOUCH_TARGETS = "touchTargets"
    FOCUS_ORDER = "focusOrder"
    MANUAL_REVIEW = "manualReview"


_CAMEL_BOUNDARY = re.compile(r'_([a-z])')


def camel_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def to_plain(value: Any) -> Any:
    """Convert dataclasses, enums and tuples into JSON-ready structures."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            camel_case(f.name): to_plain(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {
            (k.value if isinstance(k, Enum) else k): to_plain(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


# Context payloads. Every variant carries the selector and a text sample.

@dataclass(frozen=True)
class FindingContext:
    """Where a finding was observed."""
    selector: str = ""
    text_sample: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass(frozen=True)
class HeadingContext(FindingContext):
    previous_level: int = 0
    level: int = 0


@dataclass(frozen=True)
class ContrastContext(FindingContext):
    text_color: str = ""
    background_color: str = ""
    contrast_ratio: float = 0.0
    required_ratio: float = 0.0
    font_size: float = 0.0
    font_weight: str = ""
    is_large_text: bool = False
    level: str = "AA"


@dataclass(frozen=True)
class ManualReviewContext(FindingContext):
    text_color: str = ""
    image_selector: str = ""
    reason: str = ""


@dataclass(frozen=True)
class VisionContext(FindingContext):
    text_color: str = ""
    background_color: str = ""
    problematic_types: Tuple[str, ...] = ()
    max_impact_percentage: int = 0


@dataclass(frozen=True)
class AriaContext(FindingContext):
    element: str = ""
    attribute: str = ""
    value: str = ""
    missing_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ImageContext(FindingContext):
    src: str = ""


@dataclass(frozen=True)
class FocusStyleContext(FindingContext):
    element: str = ""


@dataclass(frozen=True)
class TouchTargetContext(FindingContext):
    width: float = 0.0
    height: float = 0.0
    required_size: int = 0


@dataclass(frozen=True)
class TargetSpacingContext(FindingContext):
    other_selector: str = ""
    distance: float = 0.0


@dataclass(frozen=True)
class FocusOrderContext(FindingContext):
    position: int = 0
    tab_index: int = 0
    previous_selector: str = ""
    delta_x: float = 0.0
    delta_y: float = 0.0


@dataclass(frozen=True)
class Finding:
    """
    A single accessibility issue.

    Created by a check without id or url; the auditor fills those in and may
    later mark the finding ignored. Both happen through dataclasses.replace.
    """
    category: Category
    type: str
    severity: Severity
    message: str
    recommendation: str = ""
    context: FindingContext = field(default_factory=FindingContext)
    id: Optional[str] = None
    url: Optional[str] = None
    ignored: bool = False

    @property
    def selector(self) -> str:
        return self.context.selector

    @property
    def text(self) -> str:
        """Text used for identity and text matching: the sample, else the message."""
        return self.context.text_sample or self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'url': self.url,
            'category': self.category.value,
            'type': self.type,
            'severity': self.severity.value,
            'message': self.message,
            'recommendation': self.recommendation,
            'context': self.context.to_dict(),
            'ignored': self.ignored,
        }


@dataclass(frozen=True)
class CheckResult:
    """What one check module produced for one snapshot."""
    findings: Tuple[Finding, ...] = ()
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuditSummary:
    """Counts over the non-ignored findings of one page."""
    total_issues: int = 0
    critical_issues: int = 0
    warnings: int = 0
    passes: int = 0
    compliance_level: str = "Compliant"
    ignored_issues: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


@dataclass
class AuditResult:
    """Complete audit result for one page."""
    url: str
    findings: Dict[Category, List[Finding]] = field(
        default_factory=lambda: {c: [] for c in Category}
    )
    data: Dict[str, Any] = field(default_factory=dict)
    summary: AuditSummary = field(default_factory=AuditSummary)
    errors: List[str] = field(default_factory=list)

    def all_findings(self) -> List[Finding]:
        return [f for category in Category for f in self.findings.get(category, [])]

    def active_findings(self) -> List[Finding]:
        return [f for f in self.all_findings() if not f.ignored]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'results': {
                category.value: {
                    'issues': [f.to_dict() for f in self.findings.get(category, [])]
                }
                for category in Category
            },
            'data': to_plain(self.data),
            'summary': self.summary.to_dict(),
            'errors': list(self.errors),
        }
