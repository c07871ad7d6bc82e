"""
Bundled parser hooks.

    - BlacklistHook: stop the parser from expanding objects of given classes
    - ClassStaticsHook: add class level data members of objects as static children
    - RecursionHintHook, DepthLimitHintHook: tag cancelled nodes for renderers
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .hooks import Hook
from .members import get_class_members
from .nodes import Kind, Trigger, ValueNode
from .tools import fmt_type
from .utils import class_name


# Classes --------------------------------------------------------------------------------------------------------------

class BlacklistHook(Hook):
    """
    Leave objects of the given classes (and their subclasses) unexpanded.

    The node keeps its kind and type name, gets the "blacklist" hint and is marked SUCCESS by the
    hook itself; the parser adds no members and fires no terminal hooks for it.

    Examples:
        >>> import threading
        >>> from descry.parser import Parser
        >>> parser = Parser()
        >>> parser.add_hook(BlacklistHook(threading.Thread))
        True
    """
    kinds = (Kind.OBJECT,)
    triggers = Trigger.BEGIN

    def __init__(self, *types: type) -> None:
        for typ in types:
            if not isinstance(typ, type):
                raise TypeError(f"types must be classes, got {fmt_type(typ)}")
        self.types = tuple(types)

    def parse(self, value: Any, node: ValueNode, trigger: Trigger) -> bool | None:
        if not isinstance(value, self.types):
            return None

        node.type_name = class_name(value)
        node.object_id = id(value)
        node.add_hint("blacklist")
        node.state = Trigger.SUCCESS
        return False


class ClassStaticsHook(Hook):
    """
    Append class level data members of objects as static children.

    Runs after the instance members were parsed. Constants (Final annotated or UPPER_CASE names)
    are flagged is_const. A static member the caller class may reach gets an access path through
    its owner class, e.g. "Config.TIMEOUT", even when the object itself has no access path.
    """
    kinds = (Kind.OBJECT,)
    triggers = Trigger.SUCCESS

    def parse(self, value: Any, node: ValueNode, trigger: Trigger) -> bool | None:
        parser = self.parser
        if parser is None:
            return None

        seen = {child.key for child in node.children or ()}
        for member in get_class_members(value):
            if parser.halted:
                break
            if member.attr in seen:
                continue  # Shadowed by an instance member

            child = node.child(member.attr, name=member.name)
            child.access = member.access
            child.owner = member.owner
            child.is_static = True
            child.is_const = member.is_const
            if parser.child_has_path(node, child):
                child.access_path = f"{class_name(member.owner)}.{member.name}"

            node.add_child(parser.parse_child(member.value, child))

        return None


class RecursionHintHook(Hook):
    """Add the "recursion" hint to nodes of values already on the active path."""
    kinds = tuple(Kind)
    triggers = Trigger.RECURSION

    def parse(self, value: Any, node: ValueNode, trigger: Trigger) -> bool | None:
        node.add_hint("recursion")
        return None


class DepthLimitHintHook(Hook):
    """Add the "depth_limit" hint to nodes past the depth limit."""
    kinds = tuple(Kind)
    triggers = Trigger.DEPTH_LIMIT

    def parse(self, value: Any, node: ValueNode, trigger: Trigger) -> bool | None:
        node.add_hint("depth_limit")
        return None
