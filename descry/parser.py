"""
Descry Parser

Turns any Python value, self-referencing ones included, into a depth-bounded tree of
ValueNode descriptors.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import logging

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .cycles import CycleTracker
from .hooks import Hook, HookRegistry
from .leaves import classify, parse_blob, parse_generic, parse_resource, parse_unknown
from .members import get_members
from .nodes import Kind, Trigger, ValueNode
from .tools import fmt_type, fmt_value
from .utils import class_name
from .visibility import MroRelations, TypeRelations, child_has_path

logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------

class ParseInProgressError(RuntimeError):
    """Parser configuration was changed from inside a running parse."""


@dataclass
class ParserOptions:
    """
    Parser configuration.

    Attributes:
        depth_limit: Maximum depth of real child nodes below the root, None for unbounded.
                     Children deeper than the limit become DEPTH_LIMIT placeholders.
        caller_class: Class the data is inspected from; decides which protected and private
                      members get an access path. None for module level code.
        max_blob_length: Truncation limit of text payloads, None to keep them whole.

    Examples:
        >>> parser = Parser.from_options(ParserOptions.debug_options())
        >>> parser.depth_limit
        3
    """
    depth_limit: int | None = None
    caller_class: type | None = None
    max_blob_length: int | None = 256

    @classmethod
    def debug_options(cls) -> "ParserOptions":
        """Shallow inspection with short text payloads."""
        return cls(depth_limit=3, max_blob_length=80)

    @classmethod
    def shallow_options(cls) -> "ParserOptions":
        """Only the direct members of the top-level value."""
        return cls(depth_limit=1)


class Parser:
    """
    Recursive value-to-node converter with hooks, cycle detection and a depth limit.

    Lifecycle of every node:
        1. The value's Kind is stored on the node and BEGIN hooks run. A BEGIN hook returning
           False owns the node: parse() returns it as is and fires no terminal hooks.
        2. Containers and objects are walked member by member, other kinds go to a leaf strategy.
        3. The terminal hook set runs: SUCCESS, or RECURSION / DEPTH_LIMIT when the walk was
           cancelled, and node.state records which one.

    Configuration (depth_limit, caller_class, hooks) is fixed while a parse runs; changing it
    from a hook raises ParseInProgressError. Like any other hook failure, an error the hook does
    not catch is reported as a RuntimeWarning and the parse goes on with the old configuration.

    Terminal hooks of arrays and objects run while the value is still on the active path, so
    dicts still hold the recursion marker there; use get_clean_array() to read them.

    Examples:
        >>> data = {"a": [1, 2]}
        >>> data["self"] = data
        >>> node = Parser(depth_limit=5).parse(data, ValueNode.root("data"))
        >>> [child.name for child in node.children]
        ["'a'", "'self'"]
        >>> node.children[1].is_recursion, node.children[1].access_path
        (True, "data['self']")
    """

    def __init__(self,
                 depth_limit: int | None = None,
                 caller_class: type | None = None,
                 *,
                 relations: TypeRelations | None = None,
                 max_blob_length: int | None = 256) -> None:
        self._depth_limit = _validate_depth_limit(depth_limit)
        self._caller_class = _validate_caller_class(caller_class)
        self._max_blob_length = _validate_depth_limit(max_blob_length, name="max_blob_length")

        if relations is not None and not isinstance(relations, TypeRelations):
            raise TypeError(f"relations must implement TypeRelations, got {fmt_type(relations)}")
        self._relations = relations or MroRelations()

        self._tracker = CycleTracker()
        self._hooks = HookRegistry()
        self._hooks.halt_flag = lambda: self._halted

        self._active = 0
        self._halted = False

    @classmethod
    def from_options(cls, options: ParserOptions, **kwargs) -> "Parser":
        if not isinstance(options, ParserOptions):
            raise TypeError(f"options must be a ParserOptions instance, but found {fmt_type(options)}")
        return cls(options.depth_limit, options.caller_class, max_blob_length=options.max_blob_length, **kwargs)

    # Configuration ------------------------------------

    @property
    def depth_limit(self) -> int | None:
        return self._depth_limit

    @depth_limit.setter
    def depth_limit(self, value: int | None) -> None:
        self._no_active_parse("depth_limit")
        self._depth_limit = _validate_depth_limit(value)

    @property
    def caller_class(self) -> type | None:
        return self._caller_class

    @caller_class.setter
    def caller_class(self, value: type | None) -> None:
        self._no_active_parse("caller_class")
        self._caller_class = _validate_caller_class(value)

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    @property
    def is_parsing(self) -> bool:
        return self._active > 0

    def add_hook(self, hook: Hook) -> bool:
        """
        Register a hook with this parser.

        Returns:
            False if the hook declares no kinds or no triggers, True if registered.

        Raises:
            ParseInProgressError: If called from inside a parse.
        """
        self._no_active_parse("add_hook")
        return self._hooks.register(hook, parser=self)

    def clear_hooks(self) -> None:
        self._no_active_parse("clear_hooks")
        self._hooks.clear()

    @property
    def halted(self) -> bool:
        """Whether halt() was called during the current top-level parse."""
        return self._halted

    def halt(self) -> None:
        """
        Stop adding children for the rest of the current top-level parse.

        Called from a hook it also halts that hook's chain, like returning False.
        """
        self._halted = True

    # Parsing ------------------------------------------

    def parse(self, value: Any, node: ValueNode) -> ValueNode:
        """
        Describe value in node and return the node.

        Never raises for any data: values already on the active path end as RECURSION nodes and
        values past the depth limit as DEPTH_LIMIT nodes.

        Args:
            value: Any Python value.
            node: Node to populate, usually ValueNode.root() for top-level calls.

        Returns:
            The populated node.
        """
        if not isinstance(node, ValueNode):
            raise TypeError(f"node must be a ValueNode, but found {fmt_type(node)}")

        with self._parsing():
            return self._parse(value, node)

    def parse_deep(self, value: Any, node: ValueNode) -> ValueNode:
        """
        Parse with the depth limit disabled for this single call.

        Use with care, a wide and deep value yields a very large tree. The limit is restored
        even if parsing fails.
        """
        depth_limit = self._depth_limit
        self._depth_limit = None
        try:
            return self.parse(value, node)
        finally:
            self._depth_limit = depth_limit

    def parse_child(self, value: Any, child: ValueNode) -> ValueNode:
        """
        Parse a member node created by a hook, honouring the depth limit.

        The child must come from parent.child() so its depth is set. Past the depth limit it
        becomes a DEPTH_LIMIT placeholder, or RECURSION if the value is on the active path.
        """
        if not isinstance(child, ValueNode):
            raise TypeError(f"child must be a ValueNode, but found {fmt_type(child)}")

        with self._parsing():
            return self._parse_child(value, child)

    def child_has_path(self, parent: ValueNode, child: ValueNode) -> bool:
        """Whether the caller class may reach child from parent by direct access."""
        return child_has_path(parent, child, caller_class=self._caller_class, relations=self._relations)

    def get_clean_array(self, container: abc.Iterable) -> Any:
        """
        Return a shallow copy of container without this parser's recursion marker.

        Safe to call from hooks on dicts that are still on the active path.
        """
        return self._tracker.strip(container)

    # Private Methods ----------------------------------

    def _parse(self, value: Any, node: ValueNode) -> ValueNode:
        kind = classify(value)
        node.kind = kind

        if not self._hooks.run(kind, Trigger.BEGIN, value, node):
            return node

        if kind.is_composite:
            return self._parse_composite(value, node)

        if kind is Kind.STRING:
            parse_blob(value, node, max_length=self._max_blob_length)
        elif kind is Kind.RESOURCE:
            parse_resource(value, node)
        elif kind in (Kind.NULL, Kind.BOOLEAN, Kind.INTEGER, Kind.FLOAT):
            parse_generic(value, node)
        else:
            parse_unknown(value, node)

        return self._finish(value, node, Trigger.SUCCESS)

    def _parse_composite(self, value: Any, node: ValueNode) -> ValueNode:
        """Walk an array or object; it stays on the active path until its terminal hooks are done."""
        node.type_name = class_name(value)
        if node.kind is Kind.OBJECT:
            node.object_id = id(value)

        with self._tracker.visit(value) as entered:
            if not entered:
                return self._finish(value, node, Trigger.RECURSION)

            if node.kind is Kind.ARRAY:
                self._parse_array(value, node)
            else:
                self._parse_object(value, node)

            return self._finish(value, node, Trigger.SUCCESS)

    def _finish(self, value: Any, node: ValueNode, state: Trigger) -> ValueNode:
        node.state = state
        if state is Trigger.RECURSION:
            logger.debug("Recursion at %s", node.access_path or node.name)
        elif state is Trigger.DEPTH_LIMIT:
            logger.debug("Depth limit at %s", node.access_path or node.name)
        self._hooks.run(node.kind, state, value, node)
        return node

    def _parse_array(self, value: Any, node: ValueNode) -> None:
        items = self._array_items(value, node)
        node.children = []
        node.size = len(items)
        for key, child_value, path in items:
            if self._halted:
                break
            child = node.child(key, name=_key_name(key))
            child.access_path = path
            node.add_child(self._parse_child(child_value, child))

    def _parse_object(self, value: Any, node: ValueNode) -> None:
        node.children = []
        for member in get_members(value):
            if self._halted:
                break
            child = node.child(member.attr, name=member.name)
            child.access = member.access
            child.owner = member.owner
            child.is_static = member.is_static
            child.is_const = member.is_const
            if self.child_has_path(node, child):
                child.access_path = f"{node.access_path}.{member.name}"
            node.add_child(self._parse_child(member.value, child))

    def _parse_child(self, value: Any, child: ValueNode) -> ValueNode:
        """Parse a child or, past the depth limit, turn it into a placeholder."""
        if self._depth_limit is None or child.depth <= self._depth_limit:
            return self._parse(value, child)

        child.kind = classify(value)
        child.type_name = class_name(value)
        state = Trigger.RECURSION if self._tracker.is_active(value) else Trigger.DEPTH_LIMIT
        return self._finish(value, child, state)

    def _array_items(self, value: Any, node: ValueNode) -> list[tuple[Any, Any, str | None]]:
        """Snapshot of container items as (key, value, access_path) triples."""
        base = node.access_path

        if isinstance(value, abc.Mapping):
            items = []
            for k, v in self._tracker.clean_items(value):
                text = _key_repr(k)
                path = f"{base}[{text}]" if base is not None and text is not None else None
                items.append((k, v, path))
            return items
        if isinstance(value, abc.Sequence):
            return [(i, item, f"{base}[{i}]" if base is not None else None)
                    for i, item in enumerate(list(value))]

        # Sets and views have no item access
        return [(i, item, None) for i, item in enumerate(list(value))]

    @contextmanager
    def _parsing(self) -> Iterator[None]:
        if self._active == 0:
            self._halted = False
        self._active += 1
        try:
            yield
        finally:
            self._active -= 1

    def _no_active_parse(self, what: str) -> None:
        if self._active:
            raise ParseInProgressError(f"{type(self).__name__}.{what} cannot be changed from inside a parse")


# Methods --------------------------------------------------------------------------------------------------------------

def parse(value: Any,
          name: str = "value",
          *,
          depth_limit: int | None = None,
          caller_class: type | None = None,
          hooks: abc.Iterable[Hook] = ()) -> ValueNode:
    """
    Parse value into a fresh tree with a one-off Parser.

    Args:
        value: Any Python value.
        name: Name and access path of the root node.
        depth_limit: Maximum depth of real child nodes, None for unbounded.
        caller_class: Class the data is inspected from.
        hooks: Hooks to register, in order.

    Returns:
        Root ValueNode.

    Examples:
        >>> class Point:
        ...     def __init__(self):
        ...         self.x, self._y = 1, 2
        >>> root = parse(Point(), "p")
        >>> [(c.name, c.access_path) for c in root.children]
        [('x', 'p.x'), ('_y', None)]
    """
    parser = Parser(depth_limit=depth_limit, caller_class=caller_class)
    for hook in hooks:
        parser.add_hook(hook)
    return parser.parse(value, ValueNode.root(name))


# Private Methods ------------------------------------------------------------------------------------------------------

def _validate_depth_limit(value: Any, name: str = "depth_limit") -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int or None, but found {fmt_type(value)}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, but found {fmt_value(value)}")
    return value


def _validate_caller_class(value: Any) -> type | None:
    if value is not None and not isinstance(value, type):
        raise TypeError(f"caller_class must be a class or None, but found {fmt_type(value)}")
    return value


def _key_repr(key: Any) -> str | None:
    """repr() of a container key, None if its __repr__ raises."""
    try:
        return repr(key)
    except Exception:
        return None


def _key_name(key: Any) -> str:
    text = _key_repr(key)
    return text if text is not None else fmt_value(key)
