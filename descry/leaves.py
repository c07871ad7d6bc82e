"""
Value classification and leaf strategies.

Leaf strategies describe non-composite values. Each receives (value, node, ...) and populates
the node in place; none of them calls back into the parser.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import io
import mmap
import selectors
import socket

from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .nodes import Kind, ValueNode
from .tools import fmt_value, truncate
from .utils import class_name

RESOURCE_TYPES: tuple[type, ...] = (io.IOBase, socket.socket, selectors.BaseSelector, mmap.mmap)

BLOB_ENCODINGS: tuple[str, ...] = ("ascii", "utf-8")

# Sequences described by their repr instead of item by item
OPAQUE_TYPES: tuple[type, ...] = (range, memoryview)


# Methods --------------------------------------------------------------------------------------------------------------

def classify(value: Any) -> Kind:
    """
    Return the Kind of a Python value.

    Examples:
        >>> classify(None), classify(True), classify(3), classify("x")
        (<Kind.NULL: 'null'>, <Kind.BOOLEAN: 'boolean'>, <Kind.INTEGER: 'integer'>, <Kind.STRING: 'string'>)
        >>> classify([1]), classify(object())
        (<Kind.ARRAY: 'array'>, <Kind.UNKNOWN: 'unknown'>)
    """
    if value is None:
        return Kind.NULL
    if isinstance(value, bool):
        return Kind.BOOLEAN
    if isinstance(value, int):
        return Kind.INTEGER
    if isinstance(value, float):
        return Kind.FLOAT
    if isinstance(value, (str, bytes, bytearray)):
        return Kind.STRING
    if isinstance(value, RESOURCE_TYPES):
        return Kind.RESOURCE
    if isinstance(value, OPAQUE_TYPES):
        return Kind.UNKNOWN
    if isinstance(value, (abc.Mapping, abc.Sequence, abc.Set, abc.MappingView)):
        return Kind.ARRAY
    if _has_state(value):
        return Kind.OBJECT
    return Kind.UNKNOWN


def parse_generic(value: Any, node: ValueNode) -> ValueNode:
    """Describe null, boolean, integer and float values: the value is the payload."""
    node.type_name = class_name(value)
    node.value = value
    return node


def parse_blob(value: str | bytes | bytearray, node: ValueNode, max_length: int | None = 256) -> ValueNode:
    """
    Describe textual blobs.

    Text payloads are truncated to max_length characters (None disables truncation). Bytes are
    decoded with the first of BLOB_ENCODINGS that succeeds; undecodable bytes keep
    encoding=None and their repr as payload.
    """
    node.type_name = class_name(value)
    node.size = len(value)

    if isinstance(value, str):
        node.encoding = "utf-8"
        text = value
    else:
        text = None
        for encoding in BLOB_ENCODINGS:
            try:
                text = bytes(value).decode(encoding)
            except UnicodeDecodeError:
                continue
            node.encoding = encoding
            break
        if text is None:
            text = repr(bytes(value))

    node.value = text if max_length is None else truncate(text, max_length)
    if node.value != text:
        node.add_hint("truncated")
    return node


def parse_resource(value: Any, node: ValueNode) -> ValueNode:
    """Describe open handles: files, sockets, selectors and memory maps."""
    node.type_name = class_name(value)

    info: dict[str, Any] = {}
    for attr in ("name", "mode"):
        try:
            attr_value = getattr(value, attr)
        except Exception:
            continue
        if isinstance(attr_value, (str, bytes, int)):
            info[attr] = attr_value

    closed = _is_closed(value)
    if closed:
        node.add_hint("closed")
    else:
        try:
            info["fileno"] = value.fileno()
        except Exception:
            pass

    node.value = info
    return node


def parse_unknown(value: Any, node: ValueNode) -> ValueNode:
    """Describe anything else by its formatted repr."""
    node.type_name = class_name(value)
    node.value = fmt_value(value)
    return node


# Private Methods ------------------------------------------------------------------------------------------------------

def _has_state(value: Any) -> bool:
    """True if value carries per-instance state: a __dict__ or __slots__ somewhere in its MRO."""
    try:
        object.__getattribute__(value, "__dict__")
        return True
    except (AttributeError, TypeError):
        pass
    return any("__slots__" in vars(cls) and cls is not object for cls in getattr(type(value), "__mro__", ()))


def _is_closed(value: Any) -> bool:
    try:
        closed = getattr(value, "closed")
    except Exception:
        closed = None
    if isinstance(closed, bool):
        return closed
    try:
        return value.fileno() < 0
    except Exception:
        return False
