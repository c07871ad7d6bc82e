"""
Member enumeration for object kind values.

Python has no access modifiers, the naming convention stands in for them:

    - "name": public
    - "_name": protected
    - "__name", stored as "_Owner__name": private to Owner

The declaring class (owner) of a member is resolved over the MRO of the object's class, the
most-derived declaration wins.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import inspect
import typing

from dataclasses import dataclass
from typing import Any, Final, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .nodes import Access
from .utils import mangle, unmangle


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Member:
    """
    A member found on an object or a class.

    Attributes:
        name: Source spelling, e.g. "x", "_x" or "__x".
        attr: Name the value is stored under, e.g. "_Owner__x" for private members.
        value: Current value.
        owner: Declaring class.
        access: Access level derived from the name.
        is_static: Declared at class level.
        is_const: Class level constant: annotated Final or spelled UPPER_CASE.
    """
    name: str
    attr: str
    value: Any
    owner: type
    access: Access
    is_static: bool = False
    is_const: bool = False


# Methods --------------------------------------------------------------------------------------------------------------

def access_of(name: str) -> Access:
    """
    Access level implied by a source name.

    >>> access_of("x"), access_of("_x"), access_of("__x"), access_of("__x__")
    (<Access.PUBLIC: 'public'>, <Access.PROTECTED: 'protected'>, <Access.PRIVATE: 'private'>, <Access.PUBLIC: 'public'>)
    """
    if name.startswith("__") and not name.endswith("__"):
        return Access.PRIVATE
    if name.startswith("_") and not name.endswith("__"):
        return Access.PROTECTED
    return Access.PUBLIC


def get_members(obj: Any) -> list[Member]:
    """
    Instance members of obj: entries of its __dict__ and filled __slots__ over the MRO.

    Members are deduplicated by stored name with the most-derived declaration winning. Slot
    members come first in MRO order, then __dict__ entries in insertion order. Slots that were
    never assigned, and slots whose descriptor raises, are skipped.

    Args:
        obj: Any object; classes and modules yield no instance members.

    Returns:
        List of Member, is_static and is_const are always False here.
    """
    if inspect.isclass(obj) or inspect.ismodule(obj):
        return []

    cls = type(obj)
    mro = _mro(cls)
    members: dict[str, Member] = {}

    for owner, slot in _iter_slots(mro):
        attr = mangle(slot, owner)
        if attr in members:
            continue
        try:
            value = object.__getattribute__(obj, attr)
        except AttributeError:
            continue
        except Exception:
            continue  # Skip slots whose descriptor raises
        members[attr] = Member(name=slot, attr=attr, value=value, owner=owner, access=access_of(slot))

    instance_dict = _instance_dict(obj)
    for attr, value in list(instance_dict.items()):
        if not isinstance(attr, str) or attr in members:
            continue
        name, owner = _resolve_owner(attr, mro)
        members[attr] = Member(name=name, attr=attr, value=value, owner=owner, access=access_of(name))

    return list(members.values())


def get_class_members(obj: Any) -> list[Member]:
    """
    Class level data members of obj's class (or of obj itself when it is a class).

    Methods, properties and other descriptors, dunder names and callables are skipped. Members
    are deduplicated by stored name with the most-derived class winning.

    Returns:
        List of Member with is_static set, and is_const set for constants.
    """
    cls = obj if inspect.isclass(obj) else type(obj)
    members: dict[str, Member] = {}

    for owner in _mro(cls):
        if owner is object:
            continue
        finals = _final_names(owner)
        for attr, raw in list(vars(owner).items()):
            if attr in members or (attr.startswith("__") and attr.endswith("__")):
                continue
            if _is_descriptor(raw) or callable(raw):
                continue
            name = unmangle(attr, owner) or attr
            members[attr] = Member(
                name=name,
                attr=attr,
                value=raw,
                owner=owner,
                access=access_of(name),
                is_static=True,
                is_const=attr in finals or _is_constant_name(name),
            )

    return list(members.values())


# Private Methods ------------------------------------------------------------------------------------------------------

def _mro(cls: type) -> tuple[type, ...]:
    try:
        return tuple(cls.__mro__)
    except AttributeError:
        return (cls,)


def _iter_slots(mro: tuple[type, ...]) -> Iterator[tuple[type, str]]:
    for owner in mro:
        slots = vars(owner).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            yield owner, slot


def _instance_dict(obj: Any) -> dict:
    try:
        dict_ = object.__getattribute__(obj, "__dict__")
    except (AttributeError, TypeError):
        return {}
    return dict_ if isinstance(dict_, dict) else {}


def _resolve_owner(attr: str, mro: tuple[type, ...]) -> tuple[str, type]:
    """Return (source name, declaring class) of an instance __dict__ entry."""
    for owner in mro:
        name = unmangle(attr, owner)
        if name is not None:
            return name, owner

    for owner in mro:
        if attr in _annotations(owner):
            return attr, owner

    return attr, mro[0]


def _annotations(cls: type) -> dict:
    """Annotations declared in the body of cls itself, empty if they cannot be evaluated."""
    try:
        return inspect.get_annotations(cls)
    except Exception:
        return {}


def _final_names(cls: type) -> set[str]:
    names = set()
    for attr, hint in _annotations(cls).items():
        if hint is Final or typing.get_origin(hint) is Final:
            names.add(attr)
        elif isinstance(hint, str) and (hint == "Final" or hint.startswith(("Final[", "typing.Final"))):
            names.add(attr)
    return names


def _is_descriptor(raw: Any) -> bool:
    return isinstance(raw, (property, staticmethod, classmethod)) or hasattr(type(raw), "__get__")


def _is_constant_name(name: str) -> bool:
    stripped = name.lstrip("_")
    return bool(stripped) and stripped.isupper()
