"""
Audit orchestrator.

Runs every check module against one page snapshot, then assigns stable ids,
applies ignore rules and summarizes. A failing check never aborts the page:
its error is logged and recorded and it contributes no findings.
"""

from typing import Any, List, Optional

from .checks import (
    AriaCheck,
    BaseCheck,
    ContrastCheck,
    FocusOrderCheck,
    FocusStyleCheck,
    ImageCheck,
    KeyboardCheck,
    StructureCheck,
    TouchTargetCheck,
    VisionSimulationCheck,
)
from .config import AuditConfig
from .findings import AuditResult, AuditSummary, Category, Finding, Severity
from .identity import assign_ids
from .ignore import IgnoreRule, apply_suppression, load_ignore_rules
from .snapshot.models import PageSnapshot
from .utils.log import get_logger


WARNING_SEVERITIES = (Severity.MEDIUM, Severity.HIGH)


class AccessibilityAuditor:
    """
    Audits page snapshots.

    Phases run strictly in order against the same snapshot: structure,
    contrast and vision (skipped together), ARIA, keyboard, images
    (skippable), focus style, touch targets and focus order.
    """

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        rules: Optional[List[IgnoreRule]] = None
    ):
        """
        Initialize the auditor.

        Args:
            config: Audit configuration (defaults to AA, all checks)
            rules: Ignore rules to apply; none when omitted
        """
        self.config = config or AuditConfig()
        self.options = self.config.check_options()
        self.rules = list(rules or [])
        self.logger = get_logger("auditor")

        self.structure_check = StructureCheck()
        self.contrast_check = ContrastCheck()
        self.vision_check = VisionSimulationCheck()
        self.aria_check = AriaCheck()
        self.keyboard_check = KeyboardCheck()
        self.image_check = ImageCheck()
        self.focus_style_check = FocusStyleCheck()
        self.touch_target_check = TouchTargetCheck()
        self.focus_order_check = FocusOrderCheck()

    @classmethod
    def from_config(cls, config: AuditConfig) -> "AccessibilityAuditor":
        """Create an auditor with the rules from the configured ignore file."""
        return cls(config, load_ignore_rules(config.ignore_file))

    def audit(self, snapshot: PageSnapshot) -> AuditResult:
        """
        Audit one page snapshot.

        Args:
            snapshot: Snapshot of the page to audit

        Returns:
            AuditResult with grouped findings, supplementary data and summary
        """
        result = AuditResult(url=snapshot.url)
        options = self.options
        raw: List[Finding] = []

        self.logger.info(f"Auditing {snapshot.url} ({len(snapshot)} elements, WCAG {options.wcag_level})")

        raw += self._run_phase(result, "Structure", self.structure_check, snapshot)

        if not options.skip_contrast:
            raw += self._run_phase(result, "Contrast", self.contrast_check, snapshot)
            combinations = result.data.get(self.contrast_check.name, {}).get('combinations', [])
            raw += self._run_phase(
                result, "Vision", self.vision_check, snapshot, combinations=combinations
            )

        raw += self._run_phase(result, "ARIA", self.aria_check, snapshot)
        raw += self._run_phase(result, "Keyboard", self.keyboard_check, snapshot)

        if not options.skip_images:
            raw += self._run_phase(result, "Images", self.image_check, snapshot)

        raw += self._run_phase(result, "Focus style", self.focus_style_check, snapshot)
        raw += self._run_phase(result, "Touch targets", self.touch_target_check, snapshot)
        raw += self._run_phase(result, "Focus order", self.focus_order_check, snapshot)

        findings = self._finalize(result, raw, snapshot.url)
        for finding in findings:
            result.findings[finding.category].append(finding)

        result.summary = self._summarize(result, findings)
        self.logger.info(
            f"{snapshot.url}: {result.summary.total_issues} issues "
            f"({result.summary.critical_issues} critical, "
            f"{result.summary.ignored_issues} ignored)"
        )
        return result

    def _run_phase(
        self,
        result: AuditResult,
        label: str,
        check: BaseCheck,
        snapshot: PageSnapshot,
        **kwargs: Any
    ) -> List[Finding]:
        """Run one check, recording its data or its failure."""
        try:
            check_result = check.run(snapshot, self.options, **kwargs)
        except Exception as e:
            self.logger.error(f"{label} check failed: {e}")
            result.errors.append(f"{label}: {str(e)}")
            return []

        result.data[check.name] = check_result.data
        return list(check_result.findings)

    def _finalize(self, result: AuditResult, raw: List[Finding], url: str) -> List[Finding]:
        """Assign ids and apply ignore rules."""
        try:
            findings = assign_ids(raw, url)
        except Exception as e:
            self.logger.error(f"Id assignment failed: {e}")
            result.errors.append(f"Identity: {str(e)}")
            return raw

        if not self.rules:
            return findings

        try:
            return apply_suppression(findings, self.rules)
        except Exception as e:
            self.logger.error(f"Applying ignore rules failed: {e}")
            result.errors.append(f"Suppression: {str(e)}")
            return findings

    def _summarize(self, result: AuditResult, findings: List[Finding]) -> AuditSummary:
        active = [f for f in findings if not f.ignored]
        critical = sum(1 for f in active if f.severity == Severity.CRITICAL)
        contrast_data = result.data.get(self.contrast_check.name, {})

        return AuditSummary(
            total_issues=len(active),
            critical_issues=critical,
            warnings=sum(1 for f in active if f.severity in WARNING_SEVERITIES),
            passes=contrast_data.get('passes', 0),
            compliance_level="Compliant" if critical == 0 else "Needs Improvement",
            ignored_issues=len(findings) - len(active),
        )


def issues_by_category(result: AuditResult, include_ignored: bool = False) -> dict:
    """Count findings per category name."""
    return {
        category.value: sum(
            1 for f in result.findings.get(category, [])
            if include_ignored or not f.ignored
        )
        for category in Category
    }
