"""
Base class for check modules.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from ..config import CheckOptions
from ..findings import Category, CheckResult, Finding, FindingContext, Severity
from ..snapshot.models import ElementNode, PageSnapshot
from ..utils.log import get_logger


class BaseCheck(ABC):
    """
    A single analysis pass over a page snapshot.

    Checks hold no per-page state: everything they learn goes into the
    CheckResult they return, and the snapshot is only read.
    """

    #: Name used in logs and in the auditor's phase list
    name: str = "check"
    #: Category of the findings this check produces by default
    category: Category = Category.SEMANTIC_HTML

    def __init__(self):
        self.logger = get_logger(self.name)

    @abstractmethod
    def run(self, snapshot: PageSnapshot, options: CheckOptions) -> CheckResult:
        """
        Run the check.

        Args:
            snapshot: Page snapshot to analyze
            options: Audit options

        Returns:
            CheckResult with findings and supplementary data
        """

    def finding(
        self,
        type: str,
        severity: Severity,
        message: str,
        recommendation: str,
        context: Optional[FindingContext] = None,
        category: Optional[Category] = None
    ) -> Finding:
        return Finding(
            category=category or self.category,
            type=type,
            severity=severity,
            message=message,
            recommendation=recommendation,
            context=context or FindingContext(),
        )

    def context_for(self, snapshot: PageSnapshot, node: ElementNode) -> Dict[str, str]:
        """Selector and text sample keyword arguments for a context payload."""
        return {'selector': snapshot.selector(node), 'text_sample': node.text_sample}

    def result(self, findings: Iterable[Finding], **data: Any) -> CheckResult:
        findings = tuple(findings)
        self.logger.debug(f"{self.name}: {len(findings)} findings")
        return CheckResult(findings=findings, data=data)
