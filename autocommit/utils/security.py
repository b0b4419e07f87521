"""
Sensitive path detection.

Files matching these patterns never have their contents sent to a text
backend; they only show up as a redaction marker.
"""

import re
from typing import Optional, Tuple


SENSITIVE_MARKER = "[SENSITIVE FILE EXCLUDED]"

SENSITIVE_PATTERNS: Tuple[str, ...] = (
    # Credentials and secrets
    r'\.env$',
    r'\.pem$',
    r'\.key$',
    r'\.cert$',
    r'\.p12$',
    r'\.pfx$',
    r'credentials\.',
    r'secret',
    r'password',
    r'token',

    # Configuration files that commonly hold secrets
    r'config\.json$',
    r'settings\.json$',
    r'\.htpasswd$',
    r'\.netrc$',

    # Database files
    r'\.sql$',
    r'\.sqlite$',
    r'\.db$',

    # Logs
    r'\.log$',

    # Backups and editor swap files
    r'\.bak$',
    r'\.backup$',
    r'\.swp$',
)

_COMPILED = tuple(re.compile(pattern) for pattern in SENSITIVE_PATTERNS)


def matching_pattern(path: str) -> Optional[str]:
    """Return the first sensitive pattern that matches ``path``."""
    for pattern in _COMPILED:
        if pattern.search(path):
            return pattern.pattern
    return None


def is_sensitive(path: str) -> bool:
    return matching_pattern(path) is not None


def sensitive_marker(path: str) -> str:
    return f"{SENSITIVE_MARKER} {path}"
