"""
Accessibility Auditor - WCAG checks for rendered web pages.

This package takes one snapshot of a page, runs color, structure and
interaction checks against it, gives every finding a stable id and applies
human-curated ignore rules before summarizing.
"""

__version__ = "1.0.0"
__author__ = "Accessibility Auditor Team"
