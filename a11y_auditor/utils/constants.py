"""
Shared constants for the accessibility auditor.

Contains common configuration values and iteration ceilings used across
multiple modules.
"""

# User agent sent by the browser and the static fetcher
DEFAULT_USER_AGENT = "AccessibilityAuditTool/1.0.0"

# Default request timeout in seconds (static fetch)
DEFAULT_TIMEOUT = 30

# Default page load timeout in milliseconds (for Playwright)
DEFAULT_PAGE_TIMEOUT = 30000

# Viewport used for snapshots; touch-target and focus-order geometry depend on it
DEFAULT_VIEWPORT = {"width": 1280, "height": 800}

# Ignore rules file read when none is given
DEFAULT_IGNORE_FILE = "config/ignore.json"

# Ancestor walk ceiling for background resolution and selector scoping
MAX_ANCESTOR_DEPTH = 256

# Elements recorded per snapshot
MAX_SNAPSHOT_NODES = 5000

# Ignore rules evaluated per run
MAX_IGNORE_RULES = 10000

# Targets compared pairwise by the spacing check
MAX_SPACING_TARGETS = 300

# Characters kept from element text in findings
TEXT_SAMPLE_LENGTH = 50
