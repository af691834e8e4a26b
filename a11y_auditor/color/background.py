"""
Effective background resolution.

Approximates the color a piece of text is painted on by compositing the
background colors of the element and its ancestors. Backgrounds with
images or gradients are not resolved; for those, a separate heuristic
looks for a dark overlay that makes light text readable.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from ..errors import ColorParseError
from ..snapshot.models import ElementNode, PageSnapshot
from .contrast import ColorSample, parse_rgba


OPAQUE_ALPHA = 0.999
NEAR_BLACK_MAX = 30
OVERLAY_MIN_ALPHA = 0.55

TRANSPARENT = ColorSample(0, 0, 0, 0.0)
WHITE = ColorSample(255, 255, 255, 1.0)

COLOR_FUNCTION_PATTERN = re.compile(r'(?:rgba?|hsla?)\([^)]*\)')


@dataclass(frozen=True)
class BackgroundResolution:
    """Result of resolving an element's effective background."""
    color: Optional[ColorSample] = None
    image_ancestor: Optional[ElementNode] = None

    @property
    def resolved(self) -> bool:
        return self.color is not None


def composite(top: ColorSample, bottom: ColorSample) -> ColorSample:
    """
    Composite one color over another ("source over").

    Args:
        top: Color painted last
        bottom: Color beneath it

    Returns:
        The blended color with the combined alpha
    """
    out_a = top.a + bottom.a * (1 - top.a)
    if out_a <= 0:
        return TRANSPARENT

    def channel(t: int, b: int) -> float:
        return (t * top.a + b * bottom.a * (1 - top.a)) / out_a

    return ColorSample(
        channel(top.r, bottom.r),
        channel(top.g, bottom.g),
        channel(top.b, bottom.b),
        out_a,
    )


def has_background_image(style: Optional[Dict[str, str]]) -> bool:
    if not style:
        return False
    value = style.get('background-image', '').strip().lower()
    return bool(value) and value != 'none'


def background_color(style: Optional[Dict[str, str]]) -> ColorSample:
    """Read a background color from a style map, transparent when unusable."""
    if not style:
        return TRANSPARENT
    try:
        return parse_rgba(style.get('background-color', ''))
    except ColorParseError:
        return TRANSPARENT


def canvas_color(snapshot: PageSnapshot) -> ColorSample:
    """The opaque document canvas, white unless the page says otherwise."""
    try:
        canvas = parse_rgba(snapshot.canvas_color)
    except ColorParseError:
        return WHITE
    return composite(canvas, WHITE).opaque()


def resolve_background(snapshot: PageSnapshot, node: ElementNode) -> BackgroundResolution:
    """
    Resolve the opaque background color behind an element.

    Walks from the element towards the root, compositing each background
    color underneath what has been accumulated so far, and stops once the
    result is opaque. Finishes on the document canvas otherwise.

    Args:
        snapshot: Page snapshot
        node: Element whose background is wanted

    Returns:
        BackgroundResolution with an opaque color, or with image_ancestor set
        (and no color) when a visited element has a background image
    """
    accumulated = TRANSPARENT
    for element in snapshot.ancestors(node, include_self=True):
        if has_background_image(element.style):
            return BackgroundResolution(image_ancestor=element)

        accumulated = composite(accumulated, background_color(element.style))
        if accumulated.a >= OPAQUE_ALPHA:
            return BackgroundResolution(color=accumulated.opaque())

    return BackgroundResolution(
        color=composite(accumulated, canvas_color(snapshot)).opaque()
    )


def is_near_black(color: ColorSample) -> bool:
    return color.r <= NEAR_BLACK_MAX and color.g <= NEAR_BLACK_MAX and color.b <= NEAR_BLACK_MAX


def _is_dark_layer(color: ColorSample) -> bool:
    return is_near_black(color) and color.a >= OVERLAY_MIN_ALPHA


def gradient_dark_stop(background_image: str) -> Optional[ColorSample]:
    """
    Find a dark first color stop in a background-image value.

    The stop must be near-black, at least 55% opaque, and appear before any
    url() layer, i.e. the gradient is painted above the image.
    """
    value = (background_image or '').lower()
    if 'gradient(' not in value:
        return None

    match = COLOR_FUNCTION_PATTERN.search(value)
    if not match:
        return None

    url_position = value.find('url(')
    if url_position != -1 and match.start() > url_position:
        return None

    try:
        stop = parse_rgba(match.group(0))
    except ColorParseError:
        return None
    return stop if _is_dark_layer(stop) else None


def _layer_overlay(style: Optional[Dict[str, str]], include_fill: bool = True) -> Optional[ColorSample]:
    if not style:
        return None
    if include_fill:
        fill = background_color(style)
        if _is_dark_layer(fill):
            return fill
    return gradient_dark_stop(style.get('background-image', ''))


def _between(
    snapshot: PageSnapshot,
    node: ElementNode,
    image_ancestor: ElementNode
) -> Iterator[ElementNode]:
    for element in snapshot.ancestors(node, include_self=True):
        yield element
        if element is image_ancestor:
            return


def find_dark_overlay(
    snapshot: PageSnapshot,
    node: ElementNode,
    image_ancestor: ElementNode
) -> Optional[ColorSample]:
    """
    Look for a dark layer between text and the image behind it.

    Scans the element and every ancestor up to the image ancestor, their
    ::before/::after layers, and the image ancestor's own background-image
    value.

    Args:
        snapshot: Page snapshot
        node: Text element
        image_ancestor: Nearest element with a background image

    Returns:
        The overlay color, or None when no qualifying overlay exists
    """
    for element in _between(snapshot, node, image_ancestor):
        is_image = element is image_ancestor
        # The image ancestor's own background color sits beneath its image.
        overlay = _layer_overlay(element.style, include_fill=not is_image)
        if overlay:
            return overlay
        for pseudo in (element.before_style, element.after_style):
            overlay = _layer_overlay(pseudo)
            if overlay:
                return overlay
    return None
