#
# Pytest Fixtures
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from descry.nodes import ValueNode
from descry.parser import Parser


# Classes --------------------------------------------------------------------------------------------------------------

class Base:
    public: int
    _protected: int

    def __init__(self) -> None:
        self.public = 1
        self._protected = 2
        self.__private = 3


class Child(Base):
    def __init__(self) -> None:
        super().__init__()
        self.__own = 4


class Sibling(Base):
    pass


class Unrelated:
    pass


class Slotted:
    __slots__ = ("x", "_y", "__z")

    def __init__(self) -> None:
        self.x = 1
        self._y = 2
        self.__z = 3


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def parser() -> Parser:
    """Parser with no depth limit and no caller class."""
    return Parser()


@pytest.fixture
def root() -> ValueNode:
    """Fresh root node named 'var'."""
    return ValueNode.root("var")


@pytest.fixture
def nested():
    """Build a uniformly nested list of the given depth and branching factor."""

    def _build(depth: int, branching: int = 1) -> list:
        value: list = [0] * branching
        for _ in range(depth - 1):
            value = [value] * branching if branching > 1 else [value]
        return value

    return _build
