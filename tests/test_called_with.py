"""Tests for argument-aware mock functions."""

from unittest.mock import ANY, Mock, call

import pytest

from mock_extended.called_with import CalledWithMock, DispatchState, called_with_fn
from mock_extended.errors import UnsupportedMatcherError
from mock_extended.matchers import Matcher, any_number, any_string


def raise_not_mocked(*args, **kwargs):
    raise RuntimeError("not mocked")


class DuckMatcher:
    """A matcher from user code that follows the asymmetric_match protocol."""

    def asymmetric_match(self, actual):
        return isinstance(actual, str) and actual.startswith("user:")


class TestCalledWithMock:
    def given_router(self, fallback=None):
        self.fn = called_with_fn(fallback)

    def given_binding(self, *args, returns, **kwargs):
        self.delegate = self.fn.called_with(*args, **kwargs)
        self.delegate.return_value = returns

    def when_called(self, *args, **kwargs):
        self.result = self.fn(*args, **kwargs)

    def when_call_fails(self, exception_type, *args):
        with pytest.raises(exception_type) as exc_info:
            self.fn(*args)
        self.error = exc_info.value

    def when_registration_fails(self, *args, **kwargs):
        with pytest.raises(UnsupportedMatcherError) as exc_info:
            self.fn.called_with(*args, **kwargs)
        self.error = exc_info.value

    def then_result_is(self, expected):
        assert self.result == expected

    def then_result_is_none(self):
        assert self.result is None

    def then_binding_count_is(self, count):
        assert len(self.fn.called_with_bindings) == count

    def then_state_is(self, state):
        assert self.fn.dispatch_state is state

    def test_literal_arguments_match_by_strict_equality(self):
        """Literal pattern entries only match equal values."""
        self.given_router()
        self.given_binding(5, "x", returns="hit")
        self.when_called(5, "x")
        self.then_result_is("hit")
        self.when_called(5, "y")
        self.then_result_is_none()

    def test_literal_does_not_match_equal_value_of_another_type(self):
        """1 matches neither True nor 1.0."""
        self.given_router()
        self.given_binding(1, returns="int")
        self.when_called(True)
        self.then_result_is_none()
        self.when_called(1.0)
        self.then_result_is_none()

    def test_matcher_matches_by_predicate(self):
        """A matcher accepts any value its predicate accepts."""
        self.given_router()
        self.given_binding(
            Matcher(lambda v: isinstance(v, (int, float))), returns="number"
        )
        self.when_called(3)
        self.then_result_is("number")
        self.when_called(2.5)
        self.then_result_is("number")
        self.when_called("3")
        self.then_result_is_none()

    def test_newest_binding_shadows_older_overlapping_binding(self):
        """Bindings are scanned newest first."""
        self.given_router()
        self.given_binding(any_number(), returns="general")
        self.given_binding(1, returns="specific")
        self.when_called(1)
        self.then_result_is("specific")
        self.when_called(2)
        self.then_result_is("general")

    def test_identical_patterns_are_kept_separately(self):
        """Registering the same pattern twice keeps both; the newest wins."""
        self.given_router()
        self.given_binding(1, returns="first")
        self.given_binding(1, returns="second")
        self.when_called(1)
        self.then_result_is("second")
        self.then_binding_count_is(2)

    def test_unmatched_call_uses_fallback(self):
        """The fallback receives the arguments of unmatched calls."""
        self.given_router(fallback=lambda *args: f"fallback{args}")
        self.given_binding(1, returns="one")
        self.when_called(2)
        self.then_result_is("fallback(2,)")

    def test_fallback_exception_propagates_without_bindings(self):
        """A raising fallback raises from the mocked function."""
        self.given_router(fallback=raise_not_mocked)
        self.when_call_fails(RuntimeError)
        assert str(self.error) == "not mocked"

    def test_fallback_exception_propagates_for_unmatched_call(self):
        """A raising fallback still applies once bindings exist."""
        self.given_router(fallback=raise_not_mocked)
        self.given_binding(1, returns="one")
        self.when_called(1)
        self.then_result_is("one")
        self.when_call_fails(RuntimeError, 2)

    def test_unmatched_call_without_fallback_returns_none(self):
        """Without a fallback an unmatched call returns None."""
        self.given_router()
        self.when_called("anything")
        self.then_result_is_none()

    def test_trailing_arguments_are_ignored_but_forwarded(self):
        """Arguments past the pattern do not affect matching."""
        self.given_router()
        self.given_binding(1, returns="hit")
        self.when_called(1, 2, 3)
        self.then_result_is("hit")
        assert self.delegate.call_args == call(1, 2, 3)

    def test_pattern_longer_than_call_does_not_match(self):
        """A missing positional argument never matches."""
        self.given_router()
        self.given_binding(1, 2, returns="hit")
        self.when_called(1)
        self.then_result_is_none()

    def test_keyword_arguments_are_matched_by_name(self):
        """Keyword entries must be present; extra keywords are ignored."""
        self.given_router()
        self.given_binding("a", mode="fast", returns="hit")
        self.when_called("a", mode="fast")
        self.then_result_is("hit")
        self.when_called("a", mode="fast", retries=3)
        self.then_result_is("hit")
        self.when_called("a")
        self.then_result_is_none()

    def test_calls_are_recorded_on_router_and_delegate(self):
        """The router records every call, the delegate only its matches."""
        self.given_router()
        self.given_binding(1, returns="one")
        self.when_called(1)
        self.when_called(2)
        assert self.fn.call_args_list == [call(1), call(2)]
        assert self.delegate.call_count == 1

    def test_delegate_side_effect_is_used(self):
        """Delegates are ordinary mocks and honour side_effect."""
        self.given_router()
        self.fn.called_with(0).side_effect = ZeroDivisionError
        self.when_call_fails(ZeroDivisionError, 0)

    def test_dispatcher_is_installed_once(self):
        """Only the first registration installs the dispatcher."""
        self.given_router()
        self.then_state_is(DispatchState.UNWIRED)
        self.given_binding(1, returns="one")
        self.then_state_is(DispatchState.WIRED)
        dispatcher = self.fn.side_effect
        self.given_binding(2, returns="two")
        assert self.fn.side_effect is dispatcher

    def test_foreign_matcher_is_rejected(self):
        """unittest.mock.ANY is refused and nothing is registered."""
        self.given_router()
        self.given_binding(1, returns="one")
        self.when_registration_fails(ANY)
        self.then_binding_count_is(1)
        assert self.error.matcher is ANY

    def test_foreign_matcher_in_keyword_is_rejected(self):
        """Keyword pattern entries are validated too."""
        self.given_router()
        self.when_registration_fails(1, key=ANY)
        self.then_binding_count_is(0)
        self.then_state_is(DispatchState.UNWIRED)

    def test_rejection_error_is_a_type_error(self):
        """UnsupportedMatcherError can be caught as TypeError."""
        self.given_router()
        self.when_registration_fails(ANY)
        assert isinstance(self.error, TypeError)
        assert "anything()" in str(self.error)

    def test_duck_typed_matcher_is_accepted(self):
        """Objects defining asymmetric_match act as matchers."""
        self.given_router()
        self.given_binding(DuckMatcher(), returns="user")
        self.when_called("user:42")
        self.then_result_is("user")
        self.when_called("admin:1")
        self.then_result_is_none()

    def test_mock_argument_is_a_literal(self):
        """A Mock passed as an argument is compared by identity."""
        self.given_router()
        handle = Mock()
        self.given_binding(handle, returns="handle")
        self.when_called(handle)
        self.then_result_is("handle")
        self.when_called(Mock())
        self.then_result_is_none()

    def test_reset_mock_empties_binding_stack(self):
        """reset_mock() drops bindings and call history."""
        self.given_router()
        self.given_binding(1, returns="one")
        self.when_called(1)
        self.fn.reset_mock()
        self.then_binding_count_is(0)
        self.then_state_is(DispatchState.UNWIRED)
        assert self.fn.call_count == 0
        self.when_called(1)
        self.then_result_is_none()

    def test_reset_mock_restores_fallback(self):
        """After a reset unmatched calls go to the fallback again."""
        self.given_router(fallback=lambda *args: "fallback")
        self.given_binding(1, returns="one")
        self.fn.reset_mock(return_value=True, side_effect=True)
        self.when_called(1)
        self.then_result_is("fallback")

    def test_reset_return_value_goes_back_to_none(self):
        """A reset return value is None, not a child mock."""
        self.given_router()
        self.fn.return_value = 5
        self.fn.reset_mock(return_value=True)
        self.when_called()
        self.then_result_is_none()

    def test_registration_after_reset_rewires(self):
        """The dispatcher is installed again after a reset."""
        self.given_router()
        self.given_binding(1, returns="one")
        self.fn.reset_mock()
        self.given_binding(2, returns="two")
        self.when_called(2)
        self.then_result_is("two")
        self.then_state_is(DispatchState.WIRED)

    def test_matchers_work_with_assert_called_with(self):
        """Matchers compare equal to the values they accept."""
        self.given_router()
        self.when_called("abc")
        self.fn.assert_called_with(any_string())

    def test_attributes_are_plain_mocks(self):
        """Child mocks of a router are ordinary Mock objects."""
        self.given_router()
        child = self.fn.some_attribute
        assert isinstance(child, Mock)
        assert not isinstance(child, CalledWithMock)

    def test_mock_fallback_is_not_adopted_as_child(self):
        """A Mock used as fallback keeps its own call history."""
        fallback = Mock(return_value="fallback")
        self.given_router(fallback=fallback)
        self.when_called(1)
        self.then_result_is("fallback")
        fallback.assert_called_once_with(1)
        assert self.fn.mock_calls == [call(1)]

    def test_unconfigured_delegate_falls_through_to_fallback(self):
        """A registered pattern with no return value still uses the fallback."""
        self.given_router(fallback=raise_not_mocked)
        self.delegate = self.fn.called_with(1)
        self.when_call_fails(RuntimeError, 1)
        assert str(self.error) == "not mocked"
        assert self.delegate.call_count == 1

    def test_configured_delegate_overrides_fallback(self):
        """return_value on the delegate wins over the fallback."""
        self.given_router(fallback=raise_not_mocked)
        self.given_binding(1, returns=3)
        self.when_called(1)
        self.then_result_is(3)

    def test_unmatched_call_keeps_router_return_value(self):
        """Registering a pattern does not change what other calls return."""
        self.given_router()
        self.fn.return_value = 5
        self.when_called(2)
        self.then_result_is(5)
        self.given_binding(1, returns=3)
        self.when_called(2)
        self.then_result_is(5)
        self.when_called(1)
        self.then_result_is(3)

    def test_side_effect_argument_is_rejected(self):
        """The fallback is the only way to set a default implementation."""
        with pytest.raises(TypeError, match="fallback_implementation"):
            CalledWithMock(side_effect=lambda: 1)

    def test_registration_rewires_after_side_effect_is_replaced(self):
        """A hand-set side_effect is replaced at the next registration."""
        self.given_router()
        self.given_binding(1, returns="one")
        self.fn.side_effect = lambda *args: "manual"
        self.then_state_is(DispatchState.UNWIRED)
        self.when_called(1)
        self.then_result_is("manual")
        self.given_binding(2, returns="two")
        self.then_state_is(DispatchState.WIRED)
        self.when_called(1)
        self.then_result_is("one")
        self.when_called(2)
        self.then_result_is("two")
