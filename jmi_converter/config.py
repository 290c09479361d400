"""Configuration constants, format tokens, and .env loading.

WHY: Identifier rules (delimiter, segment length, allowed characters),
the canonical root id, and the JSON output style are deployment
choices, not logic. Keeping them as plain module constants makes them
easy to find and override without touching the codec or converter.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from the environment with safe defaults.
format_level() maps the public format tokens onto converter levels.

RULES:
- ID_DELIMITER separates org, project, branch and local id segments
- ID_MAX_LENGTH bounds every single segment, not the composite string
- ID_PATTERN must match every segment (full match)
- ROOT_ID is the local id of the one element allowed a null parent
- VALID_FORMATS is the closed set of format tokens ("jmi1".."jmi3")
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from jmi_converter.core.errors import UnsupportedFormat

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Identifier rules
# ---------------------------------------------------------------------------

ID_DELIMITER = os.getenv("JMI_ID_DELIMITER", ":")
ID_MAX_LENGTH = int(os.getenv("JMI_ID_MAX_LENGTH", "36"))
ID_PATTERN = os.getenv("JMI_ID_PATTERN", r"[_a-z0-9][-_a-z0-9.]*")

ROOT_ID = os.getenv("JMI_ROOT_ID", "model")
"""Local id of the canonical model root (the only element with parent=None)."""

# ---------------------------------------------------------------------------
# Conversion defaults
# ---------------------------------------------------------------------------

DEFAULT_KEY_FIELD = os.getenv("JMI_DEFAULT_KEY_FIELD", "id")
JSON_INDENT = int(os.getenv("JMI_JSON_INDENT", "2"))

VALID_FORMATS: dict[str, int] = {
    "jmi1": 1,
    "jmi2": 2,
    "jmi3": 3,
}
"""Public format tokens mapped to JMI representation levels."""


def format_level(token: object) -> int:
    """Map a format token or level number to a JMI level.

    WHY: Callers name formats as "jmi1".."jmi3" at the query boundary
    and as plain integers inside the converter. Both must funnel through
    one check so an unknown format is always rejected the same way.

    HOW: Integers are accepted when they are a known level; strings are
    looked up in VALID_FORMATS (case-sensitive, as sent on the wire).

    RULES:
    - 1, 2, 3 and "jmi1", "jmi2", "jmi3" are valid
    - Booleans are not levels, even though bool is an int subclass
    - Anything else raises UnsupportedFormat carrying the offending name
    """
    if isinstance(token, int) and not isinstance(token, bool):
        if token in VALID_FORMATS.values():
            return token
    elif isinstance(token, str) and token in VALID_FORMATS:
        return VALID_FORMATS[token]
    raise UnsupportedFormat(str(token))
