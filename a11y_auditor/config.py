"""
Audit configuration.

Configuration is always passed in by the caller; nothing here reads the
environment.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .utils.constants import DEFAULT_IGNORE_FILE
from .utils.log import get_logger


WCAG_LEVELS = ('AA', 'AAA')


@dataclass(frozen=True)
class CheckOptions:
    """Options every check module receives."""
    wcag_level: str = 'AA'
    skip_contrast: bool = False
    skip_images: bool = False


@dataclass(frozen=True)
class AuditConfig:
    """Settings for one audit run."""
    wcag_level: str = 'AA'
    skip_contrast: bool = False
    skip_images: bool = False
    ignore_file: str = DEFAULT_IGNORE_FILE

    def __post_init__(self):
        level = str(self.wcag_level or '').strip().upper()
        if level not in WCAG_LEVELS:
            get_logger("config").warning(
                f"Unknown WCAG level {self.wcag_level!r}, using AA"
            )
            level = 'AA'
        object.__setattr__(self, 'wcag_level', level)

    def check_options(self) -> CheckOptions:
        return CheckOptions(
            wcag_level=self.wcag_level,
            skip_contrast=self.skip_contrast,
            skip_images=self.skip_images,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditConfig":
        """Build a config from camelCase or snake_case keys."""
        def pick(*keys, default=None):
            for key in keys:
                if key in data:
                    return data[key]
            return default

        return cls(
            wcag_level=pick('wcagLevel', 'wcag_level', default='AA'),
            skip_contrast=bool(pick('skipContrast', 'skip_contrast', default=False)),
            skip_images=bool(pick('skipImages', 'skip_images', default=False)),
            ignore_file=pick('ignoreFile', 'ignore_file', default=DEFAULT_IGNORE_FILE),
        )
