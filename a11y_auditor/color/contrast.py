"""
Color science helpers for WCAG contrast checking.

Parses CSS color strings, computes relative luminance and contrast ratios,
and classifies results against the WCAG 2.1 thresholds.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

from ..errors import ColorParseError


RGB = Tuple[int, int, int]

# Color extraction patterns (comma or space separated, optional alpha)
RGB_PATTERN = re.compile(
    r'rgba?\(\s*([\d.]+)\s*[,\s]\s*([\d.]+)\s*[,\s]\s*([\d.]+)'
    r'(?:\s*[,/]\s*([\d.]+%?))?\s*\)'
)
HSL_PATTERN = re.compile(
    r'hsla?\(\s*([\d.]+)(?:deg)?\s*[,\s]\s*([\d.]+)%\s*[,\s]\s*([\d.]+)%'
    r'(?:\s*[,/]\s*([\d.]+%?))?\s*\)'
)
HEX_PATTERN = re.compile(r'#([0-9a-f]{3}|[0-9a-f]{6})')

# CSS keywords understood by parse_color. 'transparent' resolves to white,
# the page canvas most text ends up sitting on.
NAMED_COLORS: Dict[str, RGB] = {
    'black': (0, 0, 0), 'white': (255, 255, 255), 'red': (255, 0, 0),
    'green': (0, 128, 0), 'blue': (0, 0, 255), 'yellow': (255, 255, 0),
    'cyan': (0, 255, 255), 'magenta': (255, 0, 255), 'gray': (128, 128, 128),
    'grey': (128, 128, 128), 'silver': (192, 192, 192), 'maroon': (128, 0, 0),
    'olive': (128, 128, 0), 'lime': (0, 255, 0), 'aqua': (0, 255, 255),
    'teal': (0, 128, 128), 'navy': (0, 0, 128), 'purple': (128, 0, 128),
    'transparent': (255, 255, 255),
}

REQUIRED_RATIOS: Dict[str, Dict[str, float]] = {
    'AA': {'normal': 4.5, 'large': 3.0},
    'AAA': {'normal': 7.0, 'large': 4.5},
}

LARGE_TEXT_SIZE = 18
LARGE_BOLD_TEXT_SIZE = 14
BOLD_WEIGHT = 700

FONT_WEIGHT_KEYWORDS = {'normal': 400, 'bold': 700, 'lighter': 300, 'bolder': 700}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def _clamp_channel(value: float) -> int:
    return max(0, min(255, round_half_up(value)))


@dataclass(frozen=True)
class ColorSample:
    """An sRGB color with alpha. Channels are clamped on construction."""
    r: int
    g: int
    b: int
    a: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, 'r', _clamp_channel(self.r))
        object.__setattr__(self, 'g', _clamp_channel(self.g))
        object.__setattr__(self, 'b', _clamp_channel(self.b))
        object.__setattr__(self, 'a', max(0.0, min(1.0, float(self.a))))

    @property
    def rgb(self) -> RGB:
        return (self.r, self.g, self.b)

    def opaque(self) -> "ColorSample":
        return ColorSample(self.r, self.g, self.b, 1.0)

    def css(self) -> str:
        """Format as the rgb()/rgba() string a browser would report."""
        if self.a >= 1:
            return f"rgb({self.r}, {self.g}, {self.b})"
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"


ColorLike = Union[ColorSample, Sequence[int]]


@dataclass(frozen=True)
class ContrastResult:
    """Outcome of checking one contrast ratio against a WCAG level."""
    ratio: float
    required_ratio: float
    passes: bool
    level: str
    is_large_text: bool = False


@dataclass(frozen=True)
class ContrastAnalysis:
    """Contrast of a text/background string pair, or the reason it failed."""
    text_color: str
    background_color: str
    text_rgb: Optional[RGB] = None
    background_rgb: Optional[RGB] = None
    result: Optional[ContrastResult] = None
    error: Optional[str] = None

    @property
    def status(self) -> str:
        if self.error or not self.result:
            return 'ERROR'
        return 'PASS' if self.result.passes else 'FAIL'


def _channels(color: ColorLike) -> RGB:
    if isinstance(color, ColorSample):
        return color.rgb
    return (int(color[0]), int(color[1]), int(color[2]))


def luminance(r: float, g: float, b: float) -> float:
    """
    Calculate WCAG relative luminance of an sRGB color.

    Args:
        r: Red component (0-255)
        g: Green component (0-255)
        b: Blue component (0-255)

    Returns:
        Relative luminance between 0 (black) and 1 (white)
    """
    linear = []
    for c in (r, g, b):
        c = c / 255
        linear.append(c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4)
    return 0.2126 * linear[0] + 0.7152 * linear[1] + 0.0722 * linear[2]


def contrast_ratio(color1: ColorLike, color2: ColorLike) -> float:
    """
    Calculate the contrast ratio between two colors.

    Args:
        color1: First color as ColorSample or (r, g, b)
        color2: Second color as ColorSample or (r, g, b)

    Returns:
        Contrast ratio (1.0 to 21.0)
    """
    l1 = luminance(*_channels(color1))
    l2 = luminance(*_channels(color2))

    lighter = max(l1, l2)
    darker = min(l1, l2)

    return (lighter + 0.05) / (darker + 0.05)


def _parse_alpha(raw: Optional[str]) -> float:
    if raw is None:
        return 1.0
    if raw.endswith('%'):
        return float(raw[:-1]) / 100
    return float(raw)


def _hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Convert HSL (degrees, percent, percent) to RGB."""
    h = (h % 360) / 360
    s = min(s, 100) / 100
    l = min(l, 100) / 100

    if s == 0:
        r = g = b = l
    else:
        def hue_to_rgb(p, q, t):
            if t < 0:
                t += 1
            if t > 1:
                t -= 1
            if t < 1/6:
                return p + (q - p) * 6 * t
            if t < 1/2:
                return q
            if t < 2/3:
                return p + (q - p) * (2/3 - t) * 6
            return p

        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = hue_to_rgb(p, q, h + 1/3)
        g = hue_to_rgb(p, q, h)
        b = hue_to_rgb(p, q, h - 1/3)

    return (round_half_up(r * 255), round_half_up(g * 255), round_half_up(b * 255))


def _parse(value: str) -> Tuple[RGB, float]:
    text = (value or '').strip().lower()

    if text.startswith(('rgb(', 'rgba(')):
        match = RGB_PATTERN.match(text)
        if match:
            rgb = tuple(_clamp_channel(float(match.group(i))) for i in (1, 2, 3))
            return rgb, _parse_alpha(match.group(4))
    elif text.startswith('#'):
        match = HEX_PATTERN.fullmatch(text)
        if match:
            hex_val = match.group(1)
            if len(hex_val) == 3:
                hex_val = ''.join(c * 2 for c in hex_val)
            rgb = tuple(int(hex_val[i:i+2], 16) for i in (0, 2, 4))
            return rgb, 1.0
    elif text.startswith(('hsl(', 'hsla(')):
        match = HSL_PATTERN.match(text)
        if match:
            rgb = _hsl_to_rgb(
                float(match.group(1)), float(match.group(2)), float(match.group(3))
            )
            return rgb, _parse_alpha(match.group(4))
    elif text in NAMED_COLORS:
        return NAMED_COLORS[text], 1.0

    raise ColorParseError(value)


def parse_color(value: str) -> RGB:
    """
    Parse a CSS color string into an (r, g, b) tuple.

    Alpha is ignored. Named 'transparent' yields white.

    Args:
        value: Color in rgb()/rgba(), #hex, hsl()/hsla() or keyword form

    Returns:
        (r, g, b) tuple

    Raises:
        ColorParseError: If the string is not a recognised color
    """
    rgb, _ = _parse(value)
    return rgb


def parse_rgba(value: str) -> ColorSample:
    """
    Parse a computed-style color string, keeping its alpha.

    Unlike parse_color, 'transparent' is fully transparent here, which is
    what a browser means when it reports it as a background.

    Raises:
        ColorParseError: If the string is not a recognised color
    """
    if (value or '').strip().lower() == 'transparent':
        return ColorSample(0, 0, 0, 0.0)
    rgb, alpha = _parse(value)
    return ColorSample(rgb[0], rgb[1], rgb[2], alpha)


def parse_font_weight(weight: Union[str, int, float, None]) -> int:
    """Interpret a CSS font-weight value as a number."""
    if weight is None:
        return 400
    if isinstance(weight, (int, float)):
        return int(weight)
    text = str(weight).strip().lower()
    if text in FONT_WEIGHT_KEYWORDS:
        return FONT_WEIGHT_KEYWORDS[text]
    try:
        return int(float(text))
    except ValueError:
        return 400


def is_large_text(font_size: float, font_weight: Union[str, int, float, None]) -> bool:
    """
    Check if text qualifies as large text under WCAG.

    Args:
        font_size: Font size in pixels
        font_weight: Numeric weight or CSS keyword

    Returns:
        True for 18px+ text, or 14px+ text at weight 700 or more
    """
    weight = parse_font_weight(font_weight)
    return font_size >= LARGE_TEXT_SIZE or (
        font_size >= LARGE_BOLD_TEXT_SIZE and weight >= BOLD_WEIGHT
    )


def required_ratio(large_text: bool, level: str = 'AA') -> float:
    """Get the minimum contrast ratio for a text size at a WCAG level."""
    return REQUIRED_RATIOS[level]['large' if large_text else 'normal']


def check_compliance(ratio: float, large_text: bool, level: str = 'AA') -> ContrastResult:
    """
    Check a contrast ratio against WCAG requirements.

    A ratio exactly at the threshold passes.

    Args:
        ratio: Calculated contrast ratio
        large_text: Whether the text is large
        level: WCAG level, 'AA' or 'AAA'

    Returns:
        ContrastResult with the requirement and pass status
    """
    needed = required_ratio(large_text, level)
    return ContrastResult(
        ratio=ratio,
        required_ratio=needed,
        passes=ratio >= needed,
        level=level,
        is_large_text=large_text,
    )


def analyze_contrast(
    text_color: str,
    background_color: str,
    large_text: bool = False,
    level: str = 'AA'
) -> ContrastAnalysis:
    """
    Analyze text color contrast against a background color.

    Parse failures are reported on the returned analysis instead of raised.

    Args:
        text_color: Text color string
        background_color: Background color string
        large_text: Whether the text is large
        level: WCAG level

    Returns:
        ContrastAnalysis with either a result or an error
    """
    try:
        text_rgb = parse_color(text_color)
        background_rgb = parse_color(background_color)
    except ColorParseError as e:
        return ContrastAnalysis(
            text_color=text_color,
            background_color=background_color,
            error=str(e),
        )

    ratio = contrast_ratio(text_rgb, background_rgb)
    return ContrastAnalysis(
        text_color=text_color,
        background_color=background_color,
        text_rgb=text_rgb,
        background_rgb=background_rgb,
        result=check_compliance(ratio, large_text, level),
    )
