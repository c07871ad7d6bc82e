#
# Descry Tools & Formatters
#

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any


# Methods --------------------------------------------------------------------------------------------------------------

def fmt_type(obj: Any, *, max_repr: int = 120) -> str:
    """Format type information of an object or a class for exception messages and logs.

    Args:
        obj: Any object or type.
        max_repr: Maximum length of the type name before truncation.

    Returns:
        A token like "<type: int>".

    Examples:
        >>> fmt_type(42)
        '<type: int>'
        >>> fmt_type(dict)
        '<type: dict>'
    """
    target = obj if isinstance(obj, type) else type(obj)

    try:
        type_name = target.__name__
    except AttributeError:
        type_name = str(target)

    return _fmt_format_pair("type", truncate(type_name, max_repr))


def fmt_value(x: Any, *, max_repr: int = 120) -> str:
    """
    Format a single value as a type-value pair.

    Survives broken __repr__ implementations, so it is safe to call on arbitrary user
    objects while parsing them. Angle brackets inside the repr are escaped.

    Examples:
        >>> fmt_value(42)
        '<int: 42>'
        >>> fmt_value("hello world", max_repr=8)
        "<str: 'hell'...>"
    """
    t = type(x).__name__

    try:
        base_repr = repr(x)
    except Exception as e:
        base_repr = f"<{t} object (repr failed: {type(e).__name__})>"

    base_repr = base_repr.replace(">", "\\>")
    return _fmt_format_pair(t, truncate(base_repr, max_repr))


def truncate(s: str, max_len: int, ellipsis: str = "...") -> str:
    """
    Cut s to at most max_len characters and append the ellipsis.

    Quoted reprs keep their quotes, the ellipsis goes outside the closing quote.
    A non-positive max_len yields an empty string.
    """
    if max_len <= 0:
        return ""
    if len(s) <= max_len:
        return s

    if len(s) >= 2 and s[0] in ("'", '"') and s[-1] == s[0]:
        inner = s[1:1 + max(1, max_len - 4)]
        return f"{s[0]}{inner}{s[0]}{ellipsis}"

    return s[:max_len] + ellipsis


# Private Methods ------------------------------------------------------------------------------------------------------

def _fmt_format_pair(type_name: str, value_repr: str) -> str:
    return f"<{type_name}: {value_repr}>"
