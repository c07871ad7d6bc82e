"""
Descry utilities shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any


# Methods --------------------------------------------------------------------------------------------------------------

def class_name(obj: Any, fully_qualified: bool = False) -> str:
    """
    Get the class name of an object or a class.

    Returns the class name whether given an instance or the class itself, so both
    `class_name(10)` and `class_name(int)` return 'int'. Nested classes keep their
    dotted qualified name.

    Parameters:
        obj (Any): An object or a class.
        fully_qualified (bool): If true, prefix non-builtin classes with their module.

    Returns:
        str: The class name.

    Examples:
        >>> class_name(10)
        'int'
        >>> class Outer:
        ...     class Inner: ...
        >>> class_name(Outer.Inner())
        'Outer.Inner'
    """
    cls = obj if isinstance(obj, type) else type(obj)
    name = getattr(cls, "__qualname__", cls.__name__)

    if fully_qualified and cls.__module__ != "builtins":
        return f"{cls.__module__}.{name}"
    return name


def unmangle(attr_name: str, cls: type) -> str | None:
    """
    Return the source spelling of a name-mangled attribute of cls, or None.

    >>> class Box: ...
    >>> unmangle("_Box__secret", Box)
    '__secret'
    """
    owner = cls.__name__.lstrip("_")
    if not owner:
        return None
    prefix = "_" + owner
    if attr_name.startswith(prefix + "__") and not attr_name.endswith("__"):
        return attr_name[len(prefix):]
    return None


def mangle(name: str, cls: type) -> str:
    """Return the attribute name Python stores for `name` declared in the body of cls."""
    owner = cls.__name__.lstrip("_")
    if owner and name.startswith("__") and not name.endswith("__"):
        return "_" + owner + name
    return name
