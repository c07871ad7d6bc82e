"""
Cycle tracking for the parser.

Plain dicts on the active path are tagged with a per-tracker RecursionMarker key, so a dict
that already holds the marker is a dict seen higher on the stack. Every other composite
(lists, tuples, sets, read-only mappings, objects) is tracked in an identity side-table.
Both schemes are scoped by CycleTracker.visit(), which always releases on exit.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import uuid

from contextlib import contextmanager
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .tools import fmt_type


# Classes --------------------------------------------------------------------------------------------------------------

class RecursionMarker:
    """
    Unique token tagging dicts currently on the active parse path.

    Unlike module sentinels this is not a singleton: every tracker owns a fresh marker, so two
    parsers never recognise each other's tags. Comparison and hashing are identity based and the
    marker can never be equal to user data.
    """
    __slots__ = ('_token',)

    def __init__(self) -> None:
        self._token = uuid.uuid4().hex

    @property
    def token(self) -> str:
        return self._token

    def __repr__(self) -> str:
        return f'<RecursionMarker {self._token[:8]}>'

    def __eq__(self, other: Any) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "RecursionMarker":
        return self

    def __deepcopy__(self, memo: dict) -> "RecursionMarker":
        return self

    def __reduce__(self) -> tuple:
        raise TypeError("RecursionMarker cannot be pickled")


class CycleTracker:
    """
    Detects composite values that are already on the active recursion path.

    Examples:
        >>> tracker = CycleTracker()
        >>> data = {"a": 1}
        >>> with tracker.visit(data) as entered:
        ...     entered, tracker.is_active(data), tracker.marker in data
        (True, True, True)
        >>> tracker.marker in data
        False
    """

    def __init__(self, marker: RecursionMarker | None = None) -> None:
        self._marker = marker if marker is not None else RecursionMarker()
        # id -> value, the value reference keeps the id from being reused while on the path
        self._active: dict[int, Any] = {}
        self._tagged = 0

    @property
    def marker(self) -> RecursionMarker:
        return self._marker

    @property
    def active_count(self) -> int:
        """Number of composites currently on the path."""
        return len(self._active) + self._tagged

    def is_active(self, value: Any) -> bool:
        """Return True if value is a composite currently on the active path."""
        if self._is_taggable(value):
            return dict.__contains__(value, self._marker)
        return id(value) in self._active

    @contextmanager
    def visit(self, value: Any) -> Iterator[bool]:
        """
        Enter value for the duration of the with block.

        Yields False, without entering, if value is already on the active path.
        """
        if self.is_active(value):
            yield False
            return

        if self._is_taggable(value):
            dict.__setitem__(value, self._marker, self._marker)
            self._tagged += 1
            try:
                yield True
            finally:
                self._tagged -= 1
                dict.pop(value, self._marker, None)
        else:
            self._active[id(value)] = value
            try:
                yield True
            finally:
                del self._active[id(value)]

    def strip(self, container: abc.Iterable) -> Any:
        """
        Return a shallow copy of container without the recursion marker.

        Do not feed the returned copy back into a running parse in place of the original, it is a
        different object and the parse would not recognise it as being on the path.

        Raises:
            TypeError: If container is not iterable.
        """
        if isinstance(container, abc.Mapping):
            return {k: v for k, v in container.items() if k is not self._marker}
        if isinstance(container, (str, bytes, bytearray)):
            return container
        if isinstance(container, abc.Iterable):
            items = [item for item in container if item is not self._marker]
            if isinstance(container, tuple):
                return tuple(items)
            if isinstance(container, abc.Set):
                return set(items) if not isinstance(container, frozenset) else frozenset(items)
            return items
        raise TypeError(f"container must be iterable, but found {fmt_type(container)}")

    def clean_items(self, mapping: abc.Mapping) -> list[tuple[Any, Any]]:
        """Snapshot of mapping items excluding the marker."""
        return [(k, v) for k, v in list(mapping.items()) if k is not self._marker]

    @staticmethod
    def _is_taggable(value: Any) -> bool:
        return isinstance(value, dict)
