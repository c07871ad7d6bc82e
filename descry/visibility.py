"""
Member visibility rules.

Decides whether a caller class may reach an object member through a direct access expression,
which is what makes a child's access_path meaningful.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Protocol, runtime_checkable

# Local ----------------------------------------------------------------------------------------------------------------
from .nodes import Access, Kind, ValueNode


# Classes --------------------------------------------------------------------------------------------------------------

@runtime_checkable
class TypeRelations(Protocol):
    """Ancestry lookup used by the protected access rule."""

    def is_subclass(self, cls: type, parent: type) -> bool:
        """Return True if cls strictly derives from parent (cls itself excluded)."""
        ...


class MroRelations:
    """TypeRelations over the classes' method resolution order."""

    def is_subclass(self, cls: type, parent: type) -> bool:
        if cls is parent:
            return False
        try:
            return parent in cls.__mro__
        except AttributeError:
            return False


# Methods --------------------------------------------------------------------------------------------------------------

def child_has_path(parent: ValueNode,
                   child: ValueNode,
                   caller_class: type | None = None,
                   relations: TypeRelations | None = None) -> bool:
    """
    Return True if child can be re-obtained from parent by a direct access expression.

    The parent must describe an object and either have an access path itself or the child must be
    a static or constant member. On top of that the caller must be entitled to the member:

        - public: always
        - private: caller_class is exactly the owner class
        - protected: caller_class is the owner, a subclass of the owner, or a base of the owner

    Protected access is granted in both inheritance directions.

    Args:
        parent: Node of the object holding the member.
        child: Node of the member, with access and owner populated.
        caller_class: Class the parsed data is inspected from, None for module level code.
        relations: Ancestry lookup, MroRelations by default.

    Returns:
        Whether child gets an access path.

    Examples:
        >>> class Base: ...
        >>> parent = ValueNode(kind=Kind.OBJECT, access_path="obj")
        >>> child_has_path(parent, ValueNode(access=Access.PRIVATE, owner=Base))
        False
        >>> child_has_path(parent, ValueNode(access=Access.PRIVATE, owner=Base), caller_class=Base)
        True
    """
    if parent.kind is not Kind.OBJECT:
        return False
    if parent.access_path is None and not (child.is_static or child.is_const):
        return False

    if child.access is Access.PUBLIC:
        return True

    if caller_class is None or child.owner is None:
        return False

    if child.access is Access.PRIVATE:
        return caller_class is child.owner

    if child.access is Access.PROTECTED:
        if caller_class is child.owner:
            return True
        relations = relations or MroRelations()
        return (relations.is_subclass(caller_class, child.owner)
                or relations.is_subclass(child.owner, caller_class))

    return False
