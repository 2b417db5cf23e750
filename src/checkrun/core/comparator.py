"""Comparator interface and the dispatch that picks one for two operands."""
from __future__ import annotations

import inspect
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type

import numpy as np

from checkrun.reporting.output import OutputLine

from .errors import UsageError

MessageRenderer = Callable[[OutputLine, str, str], None]
ComparatorFactory = Callable[[type], "Comparator"]


@dataclass
class ComparisonOutcome:
    """Result of one comparator invocation."""

    equal: bool
    renderer: MessageRenderer

    def render(self, out: OutputLine, actual_label: str, expected_label: str) -> None:
        self.renderer(out, actual_label, expected_label)


class Comparator:
    """Base interface for comparators.

    Subclasses implement ``__call__`` returning whether the operands are
    equal, keeping references to whatever they need for
    ``print_error_message``. Operands are never copied.
    """

    def __call__(self, actual: Any, expected: Any) -> bool:
        raise NotImplementedError

    def print_error_message(self, out: OutputLine, actual_label: str, expected_label: str) -> None:
        raise NotImplementedError

    def compare(self, actual: Any, expected: Any) -> ComparisonOutcome:
        equal = bool(self(actual, expected))
        return ComparisonOutcome(equal=equal, renderer=self.print_error_message)


class EqualityComparator(Comparator):
    """Default comparator using ``==``."""

    def __init__(self, as_type: Optional[type] = None) -> None:
        self.as_type = as_type
        self._actual: Any = None
        self._expected: Any = None

    def __call__(self, actual: Any, expected: Any) -> bool:
        self._actual = actual
        self._expected = expected
        return bool(actual == expected)

    def print_error_message(self, out: OutputLine, actual_label: str, expected_label: str) -> None:
        out.write("Values", actual_label, "and", expected_label, "are not the same, actual is")
        out.value(self._actual).write("but expected").value(self._expected)


class ComparatorRegistry:
    """Maps operand types to comparator factories, resolved through the MRO."""

    def __init__(self) -> None:
        self._factories: Dict[type, ComparatorFactory] = {}

    def register(self, type_: type, factory: ComparatorFactory) -> ComparatorFactory:
        if not isinstance(type_, type):
            raise TypeError(f"Comparators are registered for classes, got {type_!r}")
        self._factories[type_] = factory
        return factory

    def unregister(self, type_: type) -> None:
        self._factories.pop(type_, None)

    def factory_for(self, type_: type) -> ComparatorFactory:
        for klass in inspect.getmro(type_):
            factory = self._factories.get(klass)
            if factory is not None:
                return factory
        return EqualityComparator

    def handles(self, type_: type) -> bool:
        """Whether a comparator is registered for ``type_`` or one of its bases."""

        return any(klass in self._factories for klass in inspect.getmro(type_))

    def create(self, type_: type) -> Comparator:
        return self.factory_for(type_)(type_)

    def __contains__(self, type_: type) -> bool:
        return type_ in self._factories


comparators = ComparatorRegistry()


def register_comparator(type_: type, factory: Optional[ComparatorFactory] = None):
    """Register ``factory`` for ``type_``; usable as a class decorator."""

    if factory is not None:
        return comparators.register(type_, factory)

    def decorator(cls: ComparatorFactory) -> ComparatorFactory:
        return comparators.register(type_, cls)

    return decorator


def _is_numeric(value: Any) -> bool:
    return isinstance(value, numbers.Number)


def common_type(actual: Any, expected: Any) -> type:
    """Type both operands are compared as when none is given explicitly.

    Prefers the expected operand's type when the actual one already is an
    instance of it, then numeric promotion, then a type with a registered
    comparator the other operand converts to (expected's type first), then
    the actual operand's type, then the nearest shared base class.
    """

    actual_type = type(actual)
    expected_type = type(expected)
    if actual_type is expected_type or isinstance(actual, expected_type):
        return expected_type
    if _is_numeric(actual) and _is_numeric(expected):
        promoted = np.result_type(actual_type, expected_type).type
        if promoted is not np.object_:
            return promoted
    for target, value in ((expected_type, actual), (actual_type, expected)):
        if comparators.handles(target) and _converts(value, target):
            return target
    if isinstance(expected, actual_type):
        return actual_type
    for klass in inspect.getmro(actual_type):
        if isinstance(expected, klass):
            return klass
    return object


def _converts(value: Any, target: type) -> bool:
    # text is never parsed into another type, arrays never collapse to scalars
    if isinstance(value, (str, bytes)) and not issubclass(target, (str, bytes)):
        return False
    if isinstance(value, np.ndarray) and not issubclass(target, np.ndarray):
        return False
    try:
        convert(value, target)
    except (TypeError, ValueError, OverflowError):
        return False
    return True


def convert(value: Any, as_type: Optional[type]) -> Any:
    """Return ``value`` as ``as_type``, passing it through untouched if it already is one."""

    if as_type is None or as_type is object or isinstance(value, as_type):
        return value
    if issubclass(as_type, np.ndarray):
        return np.asarray(value)
    return as_type(value)


@dataclass
class ResolvedComparison:
    """Comparator picked for a check plus the type operands are converted to."""

    comparator: Comparator
    as_type: Optional[type] = None

    def evaluate(self, actual: Any, expected: Any) -> ComparisonOutcome:
        return self.comparator.compare(convert(actual, self.as_type), convert(expected, self.as_type))


def resolve(
    actual: Any,
    expected: Any,
    *,
    as_type: Optional[Type[Any]] = None,
    comparator: Optional[Comparator] = None,
) -> ResolvedComparison:
    """Pick the comparator for a check.

    An explicit ``comparator`` instance wins, then an explicit ``as_type``
    (either a type with a registered comparator or a ``Comparator``
    subclass), then the common type of the operands.
    """

    if comparator is not None:
        if as_type is not None:
            raise UsageError("Pass either a comparator instance or a type, not both")
        return ResolvedComparison(comparator)
    if as_type is not None:
        if not isinstance(as_type, type):
            raise UsageError(f"Cannot compare as {as_type!r}, expected a class")
        if issubclass(as_type, Comparator):
            return ResolvedComparison(as_type())
        return ResolvedComparison(comparators.create(as_type), as_type)
    resolved = common_type(actual, expected)
    return ResolvedComparison(comparators.create(resolved), resolved)
