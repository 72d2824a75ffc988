"""String helpers."""

from __future__ import annotations

import re

_REGEX_SPECIAL = re.compile(r"[.*+?^${}()|\[\]\\]")


def capitalize(text: str) -> str:
    """Upper-case the first character, leaving the rest untouched.

    Unlike ``str.capitalize`` the tail is not lower-cased.
    """
    return text[:1].upper() + text[1:]


def escape_regex(text: str) -> str:
    """Escape regex metacharacters so *text* matches literally."""
    return _REGEX_SPECIAL.sub(r"\\\g<0>", text)
