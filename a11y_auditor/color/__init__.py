"""
Color science: WCAG contrast, effective background resolution and color
vision deficiency simulation.
"""

from .contrast import (
    ColorSample,
    ContrastResult,
    analyze_contrast,
    check_compliance,
    contrast_ratio,
    is_large_text,
    luminance,
    parse_color,
    parse_rgba,
)
from .vision import VisionType, simulate_color_blindness, test_all_vision_types

__all__ = [
    "ColorSample",
    "ContrastResult",
    "analyze_contrast",
    "check_compliance",
    "contrast_ratio",
    "is_large_text",
    "luminance",
    "parse_color",
    "parse_rgba",
    "VisionType",
    "simulate_color_blindness",
    "test_all_vision_types",
]
