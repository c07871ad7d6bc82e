"""
Descriptor nodes produced by the parser.

A ValueNode describes one value: its kind, where it was found (key, owner class, access level)
and how it can be re-obtained from its parent (access_path). Containers and objects carry their
members as child nodes.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass, field
from enum import Enum, IntFlag, unique
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import class_name


# Classes --------------------------------------------------------------------------------------------------------------

@unique
class Kind(str, Enum):
    """Closed set of value kinds the parser distinguishes."""
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    RESOURCE = "resource"
    UNKNOWN = "unknown"

    @property
    def is_composite(self) -> bool:
        return self in (Kind.ARRAY, Kind.OBJECT)


@unique
class Access(str, Enum):
    """
    Member access level.

    Python spells access by naming convention:
        - "name": public
        - "_name": protected
        - "__name" (stored as "_Owner__name"): private
    """
    NONE = "none"
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class Trigger(IntFlag):
    """
    Lifecycle points at which hooks run.

        BEGIN: before the kind-specific step
        SUCCESS: after the node was parsed completely
        RECURSION: after parsing was cancelled because the value is already on the active path
        DEPTH_LIMIT: after parsing was cancelled by the depth limit
        COMPLETE: SUCCESS | RECURSION | DEPTH_LIMIT
    """
    NONE = 0
    BEGIN = 1
    SUCCESS = 2
    RECURSION = 4
    DEPTH_LIMIT = 8
    COMPLETE = SUCCESS | RECURSION | DEPTH_LIMIT


TERMINAL_TRIGGERS: tuple[Trigger, ...] = (Trigger.SUCCESS, Trigger.RECURSION, Trigger.DEPTH_LIMIT)


@dataclass(eq=False)
class ValueNode:
    """
    Descriptor of a single value in the parsed tree.

    Nodes are created by the caller (or by the parser for children) and populated in place.
    Equality is identity, the tree may be large and nodes are compared by reference only.

    Attributes:
        name: Display name, e.g. "value", "['key']" or "attr".
        key: Key of this node inside its parent (mapping key, index, attribute name).
        kind: Kind of the described value.
        type_name: Class name of the described value.
        access: Access level of a member; Access.NONE for container items and roots.
        owner: Declaring class of a member, None for container items and roots.
        is_static: Member declared at class level.
        is_const: Class level member meant to stay constant (Final or UPPER_CASE).
        access_path: Python expression re-obtaining the value from the root, or None.
        depth: Distance from the top-level node.
        children: Ordered child nodes, None for leaves.
        value: Leaf payload set by leaf strategies.
        size: Length of blobs and containers.
        encoding: Detected encoding of textual blobs.
        object_id: id() of object kind values.
        hints: Free-form markers for renderers (e.g. "recursion", "blacklist").
        state: Terminal lifecycle state, Trigger.NONE until the node is finished.
    """
    name: str = "value"
    key: Any = None
    kind: Kind | None = None
    type_name: str | None = None
    access: Access = Access.NONE
    owner: type | None = None
    is_static: bool = False
    is_const: bool = False
    access_path: str | None = None
    depth: int = 0
    children: list["ValueNode"] | None = None
    value: Any = None
    size: int | None = None
    encoding: str | None = None
    object_id: int | None = None
    hints: list[str] = field(default_factory=list)
    state: Trigger = Trigger.NONE

    @classmethod
    def root(cls, name: str = "value", access_path: str | None = None) -> "ValueNode":
        """Create a top-level node; access_path defaults to the name."""
        return cls(name=name, access_path=name if access_path is None else access_path)

    def child(self, key: Any, name: str | None = None) -> "ValueNode":
        """Create an empty node one level below this one, it is not attached."""
        return ValueNode(name=name if name is not None else repr(key), key=key, depth=self.depth + 1)

    def add_child(self, node: "ValueNode") -> "ValueNode":
        if self.children is None:
            self.children = []
        self.children.append(node)
        return node

    def items(self) -> Iterator[tuple[Any, "ValueNode"]]:
        """Iterate (key, child) pairs in insertion order."""
        for node in self.children or ():
            yield node.key, node

    def add_hint(self, hint: str) -> None:
        if hint not in self.hints:
            self.hints.append(hint)

    @property
    def owner_name(self) -> str | None:
        return class_name(self.owner) if self.owner is not None else None

    @property
    def is_recursion(self) -> bool:
        return self.state == Trigger.RECURSION

    @property
    def is_depth_limit(self) -> bool:
        return self.state == Trigger.DEPTH_LIMIT

    def to_dict(self) -> dict[str, Any]:
        """
        Export this node and its descendants as plain dictionaries.

        Empty and default fields are omitted to keep the export readable.
        """
        dict_: dict[str, Any] = {"name": self.name, "kind": self.kind.value if self.kind else None}
        if self.type_name is not None:
            dict_["type"] = self.type_name
        if self.access is not Access.NONE:
            dict_["access"] = self.access.value
        if self.owner is not None:
            dict_["owner"] = self.owner_name
        if self.is_static:
            dict_["static"] = True
        if self.is_const:
            dict_["const"] = True
        if self.access_path is not None:
            dict_["access_path"] = self.access_path
        if self.value is not None:
            dict_["value"] = self.value
        if self.size is not None:
            dict_["size"] = self.size
        if self.encoding is not None:
            dict_["encoding"] = self.encoding
        if self.hints:
            dict_["hints"] = list(self.hints)
        if self.state is not Trigger.NONE:
            dict_["state"] = self.state.name.lower()
        if self.children is not None:
            dict_["children"] = [node.to_dict() for node in self.children]
        return dict_
