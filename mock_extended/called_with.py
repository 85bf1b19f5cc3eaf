"""Mock functions whose behaviour depends on the arguments they receive.

A CalledWithMock is a ``unittest.mock.Mock`` with a stack of bindings.
``called_with(*pattern)`` pushes a binding and returns its delegate, a fresh
Mock configured like any other. When the router is called, the newest
binding whose pattern matches handles the call; otherwise the fallback
implementation does, or the call returns the router's return_value (None
unless configured).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from unittest.mock import DEFAULT, Mock

from mock_extended.matchers import ArgumentPattern

logger = logging.getLogger(__name__)


class DispatchState(Enum):
    """Whether the dispatcher is installed as the router's side effect."""

    UNWIRED = "unwired"
    WIRED = "wired"


@dataclass(frozen=True)
class Binding:
    """One argument pattern and the delegate that answers for it."""

    pattern: ArgumentPattern
    delegate: Mock = field(compare=False)


class CalledWithMock(Mock):
    """A Mock that routes calls to per-argument delegates.

    Usage:
        fn = CalledWithMock()
        fn.called_with(1, any_string()).return_value = "one"
        fn(1, "x")  # "one"
        fn(2, "x")  # None, or fn.return_value if configured

    Every call is recorded on the router itself, matched or not, and on
    the delegate that handled it.
    """

    def __init__(
        self,
        *args: Any,
        fallback_implementation: Callable[..., Any] | None = None,
        **kwargs: Any,
    ):
        if "side_effect" in kwargs:
            raise TypeError(
                f"{type(self).__name__} does not accept side_effect; "
                "pass fallback_implementation for calls no binding matches"
            )
        kwargs.setdefault("return_value", None)
        super().__init__(*args, side_effect=fallback_implementation, **kwargs)
        # Written to __dict__ so a Mock fallback is not adopted as a child
        self.__dict__["_fallback_implementation"] = fallback_implementation
        self.__dict__["_bindings"] = []
        self.__dict__["_dispatch_state"] = DispatchState.UNWIRED
        self.__dict__["_dispatcher"] = self._dispatch

    def _get_child_mock(self, /, **kw: Any) -> Mock:
        return Mock(**kw)

    @property
    def fallback_implementation(self) -> Callable[..., Any] | None:
        return self._fallback_implementation

    @property
    def dispatch_state(self) -> DispatchState:
        self._check_wiring()
        return self._dispatch_state

    @property
    def called_with_bindings(self) -> tuple[Binding, ...]:
        """Snapshot of the binding stack, newest first."""
        return tuple(self._bindings)

    def called_with(self, *args: Any, **kwargs: Any) -> Mock:
        """Register behaviour for calls matching the given arguments.

        Args:
            *args: Positional pattern entries (literals or matchers)
            **kwargs: Keyword pattern entries (literals or matchers)

        Returns:
            The delegate Mock. Configure its return_value or side_effect;
            it only answers calls matching this pattern.

        Raises:
            UnsupportedMatcherError: If a pattern entry is a matcher from
                another library. No binding is registered.
        """
        pattern = ArgumentPattern.build(args, kwargs)
        delegate = self._new_delegate()
        self._bindings.insert(0, Binding(pattern=pattern, delegate=delegate))
        logger.debug(
            f"Registered binding {pattern} ({len(self._bindings)} on stack)"
        )
        self._check_wiring()
        if self._dispatch_state is DispatchState.UNWIRED:
            self._wire()
        return delegate

    def _new_delegate(self) -> Mock:
        # A configured return_value or side_effect wins over a wrapped callable
        if self._fallback_implementation is not None:
            return Mock(wraps=self._fallback_implementation)
        return Mock(return_value=None)

    def _check_wiring(self) -> None:
        if (
            self._dispatch_state is DispatchState.WIRED
            and self.side_effect is not self._dispatcher
        ):
            logger.debug("side_effect was replaced; dispatcher will be reinstalled")
            self.__dict__["_dispatch_state"] = DispatchState.UNWIRED

    def _wire(self) -> None:
        self.side_effect = self._dispatcher
        self.__dict__["_dispatch_state"] = DispatchState.WIRED
        logger.debug("Dispatcher installed")

    def _dispatch(self, *args: Any, **kwargs: Any) -> Any:
        for binding in self._bindings:
            if binding.pattern.matches(args, kwargs):
                logger.debug(f"Call matched binding {binding.pattern}")
                return binding.delegate(*args, **kwargs)

        logger.debug(f"No binding matched call with {len(args)} positional arguments")
        if self._fallback_implementation is not None:
            return self._fallback_implementation(*args, **kwargs)
        return DEFAULT

    def reset_mock(
        self, visited: Any = None, *, return_value: bool = False, side_effect: bool = False
    ) -> None:
        """Reset the Mock state and drop every binding.

        The fallback implementation is reinstalled as the side effect, and
        a reset return value goes back to None rather than a child Mock.
        """
        super().reset_mock(visited, return_value=return_value, side_effect=side_effect)
        if return_value:
            self.return_value = None
        self._bindings.clear()
        self.__dict__["_dispatch_state"] = DispatchState.UNWIRED
        self.side_effect = self._fallback_implementation
        logger.debug("Binding stack cleared")


def called_with_fn(
    fallback_implementation: Callable[..., Any] | None = None,
) -> CalledWithMock:
    """Create a standalone mock function supporting called_with().

    Args:
        fallback_implementation: Called for arguments no binding matches

    Returns:
        A new CalledWithMock
    """
    return CalledWithMock(fallback_implementation=fallback_implementation)


mock_fn = called_with_fn
