"""
Utilities for rendering tokens and raw text as displayable strings.
"""

import unicodedata


def escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control characters with their escape sequences."""
    cleaned = []
    for c in s:
        # control category codes vary: Cc, Cf, Cn etc.
        # so check via first character
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)
