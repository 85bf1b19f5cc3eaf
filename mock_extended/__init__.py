"""Argument-aware mock functions and lazily built deep mocks."""

from mock_extended.called_with import (
    Binding,
    CalledWithMock,
    DispatchState,
    called_with_fn,
    mock_fn,
)
from mock_extended.config import GlobalConfig, MockExtended
from mock_extended.errors import (
    LifecycleRestrictionError,
    MockExtendedError,
    UnsupportedMatcherError,
)
from mock_extended.matchers import (
    ArgumentCaptor,
    ArgumentPattern,
    LiteralValue,
    Matcher,
    any_bool,
    any_callable,
    any_dict,
    any_list,
    any_number,
    any_string,
    anything,
    arg_that,
    captor,
    contains,
    is_a,
    is_in,
    is_none,
    not_,
    not_none,
)
from mock_extended.proxy import (
    DeepCalledWithMock,
    MockProxy,
    Stub,
    mock,
    mock_clear,
    mock_deep,
    mock_reset,
    stub,
)
from mock_extended.shape import MemberShape

__all__ = [
    # Call routing
    "CalledWithMock",
    "Binding",
    "DispatchState",
    "called_with_fn",
    "mock_fn",
    # Proxies
    "MockProxy",
    "DeepCalledWithMock",
    "MemberShape",
    "Stub",
    "mock",
    "mock_deep",
    "stub",
    "mock_clear",
    "mock_reset",
    # Matchers
    "Matcher",
    "LiteralValue",
    "ArgumentCaptor",
    "ArgumentPattern",
    "anything",
    "is_a",
    "any_number",
    "any_string",
    "any_bool",
    "any_list",
    "any_dict",
    "any_callable",
    "is_none",
    "not_none",
    "is_in",
    "contains",
    "arg_that",
    "not_",
    "captor",
    # Configuration
    "GlobalConfig",
    "MockExtended",
    # Errors
    "MockExtendedError",
    "UnsupportedMatcherError",
    "LifecycleRestrictionError",
]
