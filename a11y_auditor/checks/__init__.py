"""Check modules: independent analysis passes over a page snapshot."""

from .aria import AriaCheck
from .base import BaseCheck
from .contrast import ContrastCheck, ContrastCombination
from .focus_order import FocusOrderCheck
from .focus_style import FocusStyleCheck
from .images import ImageCheck
from .keyboard import KeyboardCheck
from .structure import StructureCheck
from .touch_targets import TouchTargetCheck
from .vision import VisionSimulationCheck

__all__ = [
    'AriaCheck',
    'BaseCheck',
    'ContrastCheck',
    'ContrastCombination',
    'FocusOrderCheck',
    'FocusStyleCheck',
    'ImageCheck',
    'KeyboardCheck',
    'StructureCheck',
    'TouchTargetCheck',
    'VisionSimulationCheck',
]
