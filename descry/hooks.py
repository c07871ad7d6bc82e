"""
Parser hooks and their registry.

A hook declares the value kinds it applies to and a Trigger mask of lifecycle points. The
registry files every hook under each (kind, trigger) pair it declared and runs the bucket in
registration order.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import warnings

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, TYPE_CHECKING

# Local ----------------------------------------------------------------------------------------------------------------
from .nodes import Kind, TERMINAL_TRIGGERS, Trigger, ValueNode
from .tools import fmt_type

if TYPE_CHECKING:
    from .parser import Parser

logger = logging.getLogger(__name__)

_POINTS: tuple[Trigger, ...] = (Trigger.BEGIN, *TERMINAL_TRIGGERS)


# Classes --------------------------------------------------------------------------------------------------------------

class Hook(ABC):
    """
    Base class of parser extensions.

    Subclasses set `kinds` and `triggers` and implement parse(). Returning False from parse()
    halts the node: later hooks of the same point are skipped and, at Trigger.BEGIN, the
    kind-specific parsing step is skipped too, leaving the hook in charge of the node.

    Examples:
        >>> class Uppercase(Hook):
        ...     kinds = (Kind.STRING,)
        ...     triggers = Trigger.SUCCESS
        ...     def parse(self, value, node, trigger):
        ...         node.value = node.value.upper()
    """
    kinds: Iterable[Kind] = ()
    triggers: Trigger = Trigger.NONE

    _parser: "Parser | None" = None

    @property
    def parser(self) -> "Parser | None":
        """Parser this hook was registered with, None until registered."""
        return self._parser

    @parser.setter
    def parser(self, value: "Parser | None") -> None:
        self._parser = value

    @abstractmethod
    def parse(self, value: Any, node: ValueNode, trigger: Trigger) -> bool | None:
        """Inspect value and update node. Return False to halt, anything else continues."""
        raise NotImplementedError


class FunctionHook(Hook):
    """Hook wrapping a plain callable (value, node, trigger) -> bool | None."""

    def __init__(self,
                 fn: Callable[[Any, ValueNode, Trigger], bool | None],
                 kinds: Iterable[Kind],
                 triggers: Trigger) -> None:
        if not callable(fn):
            raise TypeError(f"fn must be callable, got {fmt_type(fn)}")
        self._fn = fn
        self.kinds = tuple(kinds)
        self.triggers = Trigger(triggers)

    def parse(self, value: Any, node: ValueNode, trigger: Trigger) -> bool | None:
        return self._fn(value, node, trigger)

    def __repr__(self) -> str:
        return f"FunctionHook({getattr(self._fn, '__name__', self._fn)!r}, triggers={self.triggers!r})"


class HookRegistry:
    """
    Hooks indexed by (kind, trigger), in registration order.

    Attributes:
        halt_flag: Returns the parser's halt flag. A hook raising the flag while it runs halts
                   the bucket like a False result.
    """

    def __init__(self) -> None:
        self._buckets: dict[Kind, dict[Trigger, list[Hook]]] = {}
        self._hooks: list[Hook] = []
        self.halt_flag: Callable[[], bool] | None = None

    def __len__(self) -> int:
        return len(self._hooks)

    def __contains__(self, hook: Any) -> bool:
        return any(h is hook for h in self._hooks)

    def __iter__(self):
        return iter(self._hooks)

    def register(self, hook: Hook, parser: "Parser | None" = None) -> bool:
        """
        Add hook under every (kind, trigger) pair it declares.

        Returns:
            False, leaving the registry unchanged, if the hook declares no kinds or no triggers;
            True otherwise.

        Raises:
            TypeError: If hook is not a Hook instance.
        """
        if not isinstance(hook, Hook):
            raise TypeError(f"hook must be a Hook instance, got {fmt_type(hook)}")

        kinds = [Kind(k) for k in (hook.kinds or ())]
        triggers = Trigger(hook.triggers or Trigger.NONE)
        if not kinds:
            logger.debug("Hook %s rejected: no kinds declared", type(hook).__name__)
            return False
        if not triggers & (Trigger.BEGIN | Trigger.COMPLETE):
            logger.debug("Hook %s rejected: no triggers declared", type(hook).__name__)
            return False

        hook.parser = parser

        for kind in dict.fromkeys(kinds):
            bucket = self._buckets.setdefault(kind, {point: [] for point in _POINTS})
            for point in _POINTS:
                if triggers & point:
                    bucket[point].append(hook)

        self._hooks.append(hook)
        logger.debug("Hook %s registered for %s on %s",
                     type(hook).__name__, [k.value for k in kinds], triggers)
        return True

    def clear(self) -> None:
        """Drop every registration."""
        self._buckets = {}
        self._hooks = []

    def hooks_for(self, kind: Kind, trigger: Trigger) -> list[Hook]:
        """Hooks of a single (kind, trigger) bucket; a copy, safe to iterate."""
        return list(self._buckets.get(kind, {}).get(trigger, ()))

    def run(self, kind: Kind, trigger: Trigger, value: Any, node: ValueNode) -> bool:
        """
        Run the (kind, trigger) bucket in order.

        A hook raising an exception does not stop the parse: the error is reported as a
        RuntimeWarning and the next hook runs.

        Returns:
            True to continue, False if a hook halted.
        """
        for hook in self.hooks_for(kind, trigger):
            halted = self._halted()
            try:
                result = hook.parse(value, node, trigger)
            except Exception as e:
                logger.warning("Hook %s failed on %s: %s: %s",
                               type(hook).__name__, trigger.name, type(e).__name__, e)
                warnings.warn(
                    f"Hook {type(hook).__module__}.{type(hook).__name__} failed on {trigger.name}: "
                    f"{type(e).__name__}: {e}",
                    RuntimeWarning,
                    stacklevel=2
                )
                result = None

            if result is False or (not halted and self._halted()):
                return False

        return True

    def _halted(self) -> bool:
        return bool(self.halt_flag()) if self.halt_flag is not None else False
