from puzzl.utils.numbers import clamp, intersect, is_between
from puzzl.utils.text import capitalize, escape_regex

__all__ = ["capitalize", "clamp", "escape_regex", "intersect", "is_between"]
