"""
Color vision deficiency check over the color pairs found by the contrast check.
"""

from typing import Iterable, List

from ..color.vision import test_all_vision_types, vision_type_name
from ..config import CheckOptions
from ..findings import Category, CheckResult, Severity, VisionContext
from ..snapshot.models import PageSnapshot
from .base import BaseCheck
from .contrast import ContrastCombination


class VisionSimulationCheck(BaseCheck):
    """
    Re-tests each unique text/background pair under simulated color vision
    deficiencies and flags pairs that collapse for at least one type.
    """

    name = "vision"
    category = Category.VISION_SIMULATION

    def run(
        self,
        snapshot: PageSnapshot,
        options: CheckOptions,
        combinations: Iterable[ContrastCombination] = ()
    ) -> CheckResult:
        """
        Run the check.

        Args:
            snapshot: Page snapshot (only used for logging context)
            options: Audit options
            combinations: Combinations produced by the contrast check

        Returns:
            CheckResult with one report per unique color pair
        """
        findings = []
        reports: List[dict] = []
        seen = set()

        for combination in combinations:
            if combination.text_rgb is None or combination.background_rgb is None:
                continue
            pair = (combination.text_rgb, combination.background_rgb)
            if pair in seen:
                continue
            seen.add(pair)

            report = test_all_vision_types(*pair)
            problematic = report.problematic_types
            max_impact = max(
                (report.results[t].impact_percentage for t in problematic),
                default=0,
            )
            reports.append({
                'textColor': combination.text_color,
                'backgroundColor': combination.background_color,
                'isAccessible': report.is_accessible,
                'problematicTypes': [t.value for t in problematic],
            })

            if not report.is_accessible:
                names = ', '.join(vision_type_name(t) for t in problematic)
                findings.append(self.finding(
                    'color_vision_deficiency', Severity.HIGH,
                    f"Colors may be hard to distinguish for users with: {names}",
                    "Increase the lightness difference between text and background "
                    "instead of relying on hue alone",
                    VisionContext(
                        selector=combination.selector,
                        text_sample=combination.sample_text,
                        text_color=combination.text_color,
                        background_color=combination.background_color,
                        problematic_types=tuple(t.value for t in problematic),
                        max_impact_percentage=max_impact,
                    ),
                ))

        self.logger.debug(f"Tested {len(reports)} color pairs on {snapshot.url}")
        return self.result(findings, reports=reports)
