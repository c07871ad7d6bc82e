#
# Descry - Bundled Hook Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import threading
import warnings
from typing import Final

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from descry.extensions import BlacklistHook, ClassStaticsHook, DepthLimitHintHook, RecursionHintHook
from descry.nodes import Access, Kind, Trigger, ValueNode
from descry.parser import Parser

from conftest import Base, Child, Unrelated


# Helpers --------------------------------------------------------------------------------------------------------------

class Config:
    TIMEOUT: Final = 30
    _registry = {"a": 1}
    __salt = "pepper"

    def __init__(self) -> None:
        self.name = "cfg"


class Shadowed:
    limit = 1

    def __init__(self) -> None:
        self.limit = 2


class Holder:
    def __init__(self, payload) -> None:
        self.payload = payload


class Singleton:
    instance = None

    def __init__(self) -> None:
        self.name = "one"


Singleton.instance = Singleton()


def child_named(node: ValueNode, name: str) -> ValueNode:
    return next(c for c in node.children if c.name == name)


# Tests ----------------------------------------------------------------------------------------------------------------

class TestBlacklistHook:

    def test_blacklisted_object(self, root):
        """Blacklisted objects are not expanded and fire no terminal hooks."""
        finished = []
        parser = Parser()
        parser.add_hook(BlacklistHook(Base))
        parser.add_hook(RecursionHintHook())

        class Finished(RecursionHintHook):
            triggers = Trigger.COMPLETE

            def parse(self, value, node, trigger):
                finished.append(node.name)

        parser.add_hook(Finished())
        node = parser.parse({"blocked": Child(), "open": Unrelated()}, root)

        blocked = child_named(node, "'blocked'")
        assert blocked.kind is Kind.OBJECT
        assert blocked.type_name == "Child"
        assert blocked.children is None
        assert blocked.hints == ["blacklist"]
        assert blocked.state is Trigger.SUCCESS
        assert "'blocked'" not in finished
        assert "'open'" in finished

    def test_thread(self, root):
        parser = Parser()
        parser.add_hook(BlacklistHook(threading.Thread))
        node = parser.parse(threading.Thread(target=lambda: None), root)
        assert node.children is None
        assert node.object_id is not None

    def test_requires_classes(self):
        with pytest.raises(TypeError, match="classes"):
            BlacklistHook("Base")


class TestClassStaticsHook:

    def test_static_members(self, root):
        """Class level data members follow the instance members."""
        parser = Parser(caller_class=Config)
        parser.add_hook(ClassStaticsHook())
        node = parser.parse(Config(), root)

        assert [c.name for c in node.children] == ["name", "TIMEOUT", "_registry", "__salt"]

        timeout = child_named(node, "TIMEOUT")
        assert timeout.is_static and timeout.is_const
        assert timeout.access_path == "Config.TIMEOUT"
        assert timeout.value == 30

        salt = child_named(node, "__salt")
        assert salt.access is Access.PRIVATE
        assert salt.key == "_Config__salt"
        assert salt.access_path == "Config.__salt"

        registry = child_named(node, "_registry")
        assert registry.kind is Kind.ARRAY
        assert registry.children[0].access_path == "Config._registry['a']"

    def test_visibility_without_caller(self, root):
        parser = Parser()
        parser.add_hook(ClassStaticsHook())
        node = parser.parse(Config(), root)
        assert child_named(node, "TIMEOUT").access_path == "Config.TIMEOUT"
        assert child_named(node, "_registry").access_path is None
        assert child_named(node, "__salt").access_path is None

    def test_shadowed_by_instance(self, root):
        parser = Parser()
        parser.add_hook(ClassStaticsHook())
        node = parser.parse(Shadowed(), root)
        assert [(c.name, c.value, c.is_static) for c in node.children] == [("limit", 2, False)]

    def test_depth_limit_applies(self, root):
        """Static members past the depth limit become placeholders."""
        parser = Parser(depth_limit=1)
        parser.add_hook(ClassStaticsHook())
        node = parser.parse(Holder(Config()), root)

        inner = child_named(node, "payload")
        assert inner.state is Trigger.SUCCESS
        timeout = child_named(inner, "TIMEOUT")
        assert timeout.depth == 2
        assert timeout.is_depth_limit
        assert timeout.value is None

    def test_depth_limit_below_statics(self):
        parser = Parser(depth_limit=2)
        parser.add_hook(ClassStaticsHook())
        node = parser.parse(Holder(Config()), ValueNode.root("h"))

        inner = child_named(node, "payload")
        timeout = child_named(inner, "TIMEOUT")
        assert timeout.state is Trigger.SUCCESS
        assert timeout.value == 30
        assert child_named(inner, "_registry").children[0].is_depth_limit

    def test_self_referencing_static(self, root):
        """A class static pointing back at the parsed instance ends as RECURSION."""
        parser = Parser()
        parser.add_hook(ClassStaticsHook())

        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            node = parser.parse(Singleton.instance, root)

        assert [c.name for c in node.children] == ["name", "instance"]
        instance = child_named(node, "instance")
        assert instance.is_static
        assert instance.is_recursion
        assert instance.children is None

    def test_static_cycle_through_other_instance(self, root):
        """Statics of a second instance terminate one level down."""
        parser = Parser()
        parser.add_hook(ClassStaticsHook())

        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            node = parser.parse(Singleton(), root)

        instance = child_named(node, "instance")
        assert instance.state is Trigger.SUCCESS
        assert child_named(instance, "instance").is_recursion
        assert max(n.depth for n in (node, instance, *instance.children)) == 2

    def test_unregistered_hook_is_noop(self):
        node = ValueNode(kind=Kind.OBJECT, children=[])
        assert ClassStaticsHook().parse(Config(), node, Trigger.SUCCESS) is None
        assert node.children == []


class TestHintHooks:

    def test_recursion_hint(self, root):
        parser = Parser()
        parser.add_hook(RecursionHintHook())
        data: dict = {}
        data["me"] = data
        node = parser.parse(data, root)
        assert node.children[0].hints == ["recursion"]
        assert node.hints == []

    def test_depth_limit_hint(self, root):
        parser = Parser(depth_limit=1)
        parser.add_hook(DepthLimitHintHook())
        node = parser.parse([[1, 2]], root)
        assert [c.hints for c in node.children[0].children] == [["depth_limit"], ["depth_limit"]]
        assert node.children[0].hints == []
