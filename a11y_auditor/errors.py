"""
Exception types raised by the accessibility auditor.
"""


class AuditError(Exception):
    """Base class for auditor errors."""


class ColorParseError(AuditError, ValueError):
    """A color string could not be interpreted."""

    def __init__(self, value: str):
        super().__init__(f"Invalid color format: {value!r}")
        self.value = value


class SnapshotReadError(AuditError):
    """A snapshot read hit malformed or missing data."""


class IgnoreRuleError(AuditError):
    """An ignore rule failed validation."""
