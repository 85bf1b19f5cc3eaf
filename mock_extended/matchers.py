"""Argument matchers and the argument patterns built from them.

A pattern entry is either a LiteralValue (strict equality) or a Matcher
(predicate). Every value handed to ``called_with()`` is normalised into one
of the two by ``to_pattern_entry``, which also rejects matcher objects
belonging to other libraries.
"""

import logging
import numbers
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from mock_extended.config import MockExtended
from mock_extended.errors import UnsupportedMatcherError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Matcher:
    """A predicate usable wherever a literal argument is expected.

    ``asymmetric_match(actual)`` decides whether an actual argument is
    accepted. ``==`` delegates to the predicate, so matchers also work
    with ``Mock.assert_called_with``.
    """

    predicate: Callable[[Any], bool]
    expected: Any = None
    description: str = "matcher"

    def asymmetric_match(self, actual: Any) -> bool:
        return bool(self.predicate(actual))

    def __eq__(self, other: object) -> bool:
        return self.asymmetric_match(other)

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return self.description


@dataclass(frozen=True, eq=False, repr=False)
class ArgumentCaptor(Matcher):
    """Matches anything and records every value it was offered."""

    predicate: Callable[[Any], bool] = lambda actual: True
    description: str = "captor()"
    values: list[Any] = field(default_factory=list, repr=False)

    def asymmetric_match(self, actual: Any) -> bool:
        self.values.append(actual)
        return True

    @property
    def value(self) -> Any:
        """The most recently captured value, or None."""
        return self.values[-1] if self.values else None


@dataclass(frozen=True, eq=False)
class LiteralValue:
    """A pattern entry compared by strict equality.

    Strict means the same object, or the same concrete type and ``==``:
    ``1`` does not match ``True`` or ``1.0``.
    """

    value: Any

    def asymmetric_match(self, actual: Any) -> bool:
        if actual is self.value:
            return True
        return type(actual) is type(self.value) and actual == self.value

    def __repr__(self) -> str:
        return repr(self.value)


PatternEntry = LiteralValue | Matcher


def is_foreign_matcher(value: Any) -> bool:
    """Check whether a value is a matcher owned by another library.

    Args:
        value: Any argument passed to called_with()

    Returns:
        True if any class in the value's MRO matches a configured prefix
    """
    prefixes = tuple(MockExtended.config.foreign_matchers)
    if not prefixes:
        return False
    for klass in type(value).__mro__:
        if f"{klass.__module__}.{klass.__qualname__}".startswith(prefixes):
            return True
    return False


def _defines_asymmetric_match(value: Any) -> bool:
    # Looked up on the type so Mock instances, which answer every
    # attribute, are not mistaken for matchers.
    return callable(getattr(type(value), "asymmetric_match", None))


def to_pattern_entry(value: Any) -> PatternEntry:
    """Normalise one called_with() argument into a pattern entry.

    Raises:
        UnsupportedMatcherError: If the value is a foreign matcher
    """
    if isinstance(value, (Matcher, LiteralValue)):
        return value
    if is_foreign_matcher(value):
        raise _unsupported([value])
    if _defines_asymmetric_match(value):
        return Matcher(value.asymmetric_match, expected=value, description=repr(value))
    return LiteralValue(value)


def _unsupported(foreign: list[Any]) -> UnsupportedMatcherError:
    names = ", ".join(repr(m) for m in foreign)
    logger.warning(f"Rejected foreign matchers in called_with(): {names}")
    return UnsupportedMatcherError(
        f"called_with() does not support matchers from other libraries ({names}). "
        "Use this library's matchers instead: anything(), any_number(), "
        "any_string(), etc.",
        matcher=foreign[0],
    )


@dataclass(frozen=True)
class ArgumentPattern:
    """The arguments one binding responds to.

    Positional entries are matched by index and actual arguments past the
    end of the pattern are ignored. Keyword entries must be present in the
    call. Extra keyword arguments are ignored.
    """

    args: tuple[PatternEntry, ...] = ()
    kwargs: Mapping[str, PatternEntry] = field(default_factory=dict)

    @classmethod
    def build(cls, args: Iterable[Any], kwargs: Mapping[str, Any]) -> "ArgumentPattern":
        """Build a pattern from the raw arguments given to called_with().

        Every argument is checked before anything is built, so a rejected
        pattern leaves no trace.

        Raises:
            UnsupportedMatcherError: If any argument is a foreign matcher
        """
        args = tuple(args)
        foreign = [v for v in (*args, *kwargs.values()) if is_foreign_matcher(v)]
        if foreign:
            raise _unsupported(foreign)
        return cls(
            args=tuple(to_pattern_entry(value) for value in args),
            kwargs={name: to_pattern_entry(value) for name, value in kwargs.items()},
        )

    def matches(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> bool:
        """Check whether an actual call satisfies every entry."""
        if len(args) < len(self.args):
            return False
        for entry, actual in zip(self.args, args):
            if not entry.asymmetric_match(actual):
                return False
        for name, entry in self.kwargs.items():
            if name not in kwargs or not entry.asymmetric_match(kwargs[name]):
                return False
        return True

    def __str__(self) -> str:
        parts = [repr(entry) for entry in self.args]
        parts += [f"{name}={entry!r}" for name, entry in self.kwargs.items()]
        return f"({', '.join(parts)})"


# Built-in matchers


def anything() -> Matcher:
    return Matcher(lambda actual: True, description="anything()")


def is_a(klass: type | tuple[type, ...]) -> Matcher:
    """Match instances of a type (or any of a tuple of types)."""
    name = getattr(klass, "__name__", repr(klass))
    return Matcher(
        lambda actual: isinstance(actual, klass),
        expected=klass,
        description=f"is_a({name})",
    )


def any_number() -> Matcher:
    """Match any number except booleans."""
    return Matcher(
        lambda actual: isinstance(actual, numbers.Number) and not isinstance(actual, bool),
        description="any_number()",
    )


def any_string() -> Matcher:
    return Matcher(lambda actual: isinstance(actual, str), description="any_string()")


def any_bool() -> Matcher:
    return Matcher(lambda actual: isinstance(actual, bool), description="any_bool()")


def any_list() -> Matcher:
    return Matcher(lambda actual: isinstance(actual, list), description="any_list()")


def any_dict() -> Matcher:
    return Matcher(lambda actual: isinstance(actual, dict), description="any_dict()")


def any_callable() -> Matcher:
    return Matcher(callable, description="any_callable()")


def is_none() -> Matcher:
    return Matcher(lambda actual: actual is None, description="is_none()")


def not_none() -> Matcher:
    return Matcher(lambda actual: actual is not None, description="not_none()")


def is_in(values: Iterable[Any]) -> Matcher:
    """Match an argument equal to one of the given values."""
    values = tuple(values)
    return Matcher(
        lambda actual: actual in values,
        expected=values,
        description=f"is_in({values!r})",
    )


def contains(item: Any) -> Matcher:
    """Match a container holding the given item."""

    def predicate(actual: Any) -> bool:
        try:
            return item in actual
        except TypeError:
            return False

    return Matcher(predicate, expected=item, description=f"contains({item!r})")


def arg_that(predicate: Callable[[Any], bool]) -> Matcher:
    """Match arguments accepted by an arbitrary predicate."""
    name = getattr(predicate, "__name__", "predicate")
    return Matcher(predicate, description=f"arg_that({name})")


def not_(value: Any) -> Matcher:
    """Invert a matcher, or match anything not strictly equal to a literal."""
    entry = to_pattern_entry(value)
    return Matcher(
        lambda actual: not entry.asymmetric_match(actual),
        expected=entry,
        description=f"not_({entry!r})",
    )


def captor() -> ArgumentCaptor:
    return ArgumentCaptor()
