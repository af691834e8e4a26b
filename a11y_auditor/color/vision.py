"""
Color vision deficiency simulation.

Applies fixed linear transforms to sRGB colors and tests whether two colors
stay distinguishable for people with each type of color vision deficiency.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from .contrast import RGB, ColorLike, _channels, round_half_up


class VisionType(Enum):
    """Simulated color vision conditions."""
    NORMAL = "normal"
    PROTANOPIA = "protanopia"          # Red-blind
    DEUTERANOPIA = "deuteranopia"      # Green-blind
    TRITANOPIA = "tritanopia"          # Blue-blind
    PROTANOMALY = "protanomaly"        # Red-weak
    DEUTERANOMALY = "deuteranomaly"    # Green-weak
    TRITANOMALY = "tritanomaly"        # Blue-weak
    ACHROMATOPSIA = "achromatopsia"    # No color perception
    ACHROMATOMALY = "achromatomaly"    # Reduced color perception


# Brettel/Viénot/Mollon style approximations, applied to normalized RGB
COLOR_BLINDNESS_MATRICES: Dict[VisionType, Tuple[Tuple[float, float, float], ...]] = {
    VisionType.PROTANOPIA: (
        (0.567, 0.433, 0.0),
        (0.558, 0.442, 0.0),
        (0.0, 0.242, 0.758),
    ),
    VisionType.DEUTERANOPIA: (
        (0.625, 0.375, 0.0),
        (0.7, 0.3, 0.0),
        (0.0, 0.3, 0.7),
    ),
    VisionType.TRITANOPIA: (
        (0.95, 0.05, 0.0),
        (0.0, 0.433, 0.567),
        (0.0, 0.475, 0.525),
    ),
    VisionType.PROTANOMALY: (
        (0.817, 0.183, 0.0),
        (0.333, 0.667, 0.0),
        (0.0, 0.125, 0.875),
    ),
    VisionType.DEUTERANOMALY: (
        (0.8, 0.2, 0.0),
        (0.258, 0.742, 0.0),
        (0.0, 0.142, 0.858),
    ),
    VisionType.TRITANOMALY: (
        (0.967, 0.033, 0.0),
        (0.0, 0.733, 0.267),
        (0.0, 0.183, 0.817),
    ),
    VisionType.ACHROMATOPSIA: (
        (0.299, 0.587, 0.114),
        (0.299, 0.587, 0.114),
        (0.299, 0.587, 0.114),
    ),
    VisionType.ACHROMATOMALY: (
        (0.618, 0.320, 0.062),
        (0.163, 0.775, 0.062),
        (0.163, 0.320, 0.516),
    ),
}

DEFICIENCY_TYPES: Tuple[VisionType, ...] = tuple(COLOR_BLINDNESS_MATRICES)

VISION_TYPE_NAMES = {
    VisionType.PROTANOPIA: "Protanopia (Red-blind)",
    VisionType.DEUTERANOPIA: "Deuteranopia (Green-blind)",
    VisionType.TRITANOPIA: "Tritanopia (Blue-blind)",
    VisionType.PROTANOMALY: "Protanomaly (Red-weak)",
    VisionType.DEUTERANOMALY: "Deuteranomaly (Green-weak)",
    VisionType.TRITANOMALY: "Tritanomaly (Blue-weak)",
    VisionType.ACHROMATOPSIA: "Achromatopsia (Complete color blindness)",
    VisionType.ACHROMATOMALY: "Achromatomaly (Partial color blindness)",
}

DEFAULT_THRESHOLD = 30


@dataclass(frozen=True)
class DistinguishabilityResult:
    """How one color pair looks under one vision type."""
    vision_type: VisionType
    original_difference: int
    simulated_difference: int
    is_distinguishable: bool
    threshold: float
    simulated_colors: Tuple[RGB, RGB]
    impact_percentage: int


@dataclass(frozen=True)
class VisionReport:
    """Distinguishability of one color pair across all deficiency types."""
    color1: RGB
    color2: RGB
    results: Dict[VisionType, DistinguishabilityResult] = field(default_factory=dict)

    @property
    def problematic_types(self) -> List[VisionType]:
        return [t for t, r in self.results.items() if not r.is_distinguishable]

    @property
    def is_accessible(self) -> bool:
        return not self.problematic_types


def simulate_color_blindness(r: int, g: int, b: int, vision_type: VisionType) -> RGB:
    """
    Apply a color blindness transform to an RGB color.

    Args:
        r: Red value (0-255)
        g: Green value (0-255)
        b: Blue value (0-255)
        vision_type: Condition to simulate

    Returns:
        Transformed (r, g, b), unchanged for normal vision
    """
    matrix = COLOR_BLINDNESS_MATRICES.get(vision_type)
    if matrix is None:
        return (r, g, b)

    normalized = (r / 255, g / 255, b / 255)
    transformed = []
    for row in matrix:
        value = sum(weight * channel for weight, channel in zip(row, normalized))
        transformed.append(round_half_up(max(0.0, min(255.0, value * 255))))
    return (transformed[0], transformed[1], transformed[2])


def color_difference(color1: ColorLike, color2: ColorLike) -> float:
    """Euclidean distance in RGB space, a rough stand-in for perceptual difference."""
    c1 = _channels(color1)
    c2 = _channels(color2)
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(c1, c2)))


def test_distinguishability(
    color1: ColorLike,
    color2: ColorLike,
    vision_type: VisionType,
    threshold: float = DEFAULT_THRESHOLD
) -> DistinguishabilityResult:
    """
    Test whether two colors stay distinguishable for a vision type.

    Args:
        color1: First color
        color2: Second color
        vision_type: Condition to simulate
        threshold: Minimum simulated RGB distance to count as distinguishable

    Returns:
        DistinguishabilityResult for the pair
    """
    c1 = _channels(color1)
    c2 = _channels(color2)
    original = color_difference(c1, c2)

    sim1 = simulate_color_blindness(*c1, vision_type)
    sim2 = simulate_color_blindness(*c2, vision_type)
    simulated = color_difference(sim1, sim2)

    impact = round_half_up((1 - simulated / original) * 100) if original else 0

    return DistinguishabilityResult(
        vision_type=vision_type,
        original_difference=round_half_up(original),
        simulated_difference=round_half_up(simulated),
        is_distinguishable=simulated >= threshold,
        threshold=threshold,
        simulated_colors=(sim1, sim2),
        impact_percentage=impact,
    )


# Not test cases, even when imported into a test module.
test_distinguishability.__test__ = False


def test_all_vision_types(color1: ColorLike, color2: ColorLike) -> VisionReport:
    """
    Test a color pair against every deficiency type.

    Returns:
        VisionReport; is_accessible is True when no type fails
    """
    c1 = _channels(color1)
    c2 = _channels(color2)
    results = {
        vision_type: test_distinguishability(c1, c2, vision_type)
        for vision_type in DEFICIENCY_TYPES
    }
    return VisionReport(color1=c1, color2=c2, results=results)


test_all_vision_types.__test__ = False


def vision_type_name(vision_type: VisionType) -> str:
    """Get a human-readable name for a vision type."""
    return VISION_TYPE_NAMES.get(vision_type, vision_type.value)
