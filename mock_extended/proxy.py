"""Mock objects whose attributes are built on first access.

``mock()`` returns a proxy where every attribute is a CalledWithMock.
``mock_deep()`` returns a proxy tree: attributes are routers that can carry
their own attributes, or nested proxies when a spec says the member is an
object. Every materialised attribute is cached, so ``m.a.b is m.a.b``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from unittest.mock import Mock

from mock_extended.called_with import CalledWithMock
from mock_extended.config import MockExtended
from mock_extended.errors import LifecycleRestrictionError
from mock_extended.shape import MemberShape, classify_member, spec_class

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class TreeOptions:
    """Settings fixed when the root of a tree is built."""

    deep: bool = False
    func_prop_support: bool = False
    fallback_implementation: Callable[..., Any] | None = None


def _materialize(
    children: dict[str, Any],
    name: str,
    spec: Any,
    options: TreeOptions,
    path: str,
) -> Any:
    """Return the cached child ``name``, building it on first access."""
    child = children.get(name, _MISSING)
    if child is not _MISSING:
        return child

    if name in MockExtended.config.ignore_props:
        raise AttributeError(f"{path!r} ignores attribute {name!r}")

    info = classify_member(spec, name)
    child_path = f"{path}.{name}"
    if not options.deep:
        child = CalledWithMock(
            fallback_implementation=options.fallback_implementation,
            name=child_path,
        )
    elif info.shape is MemberShape.OBJECT:
        child = MockProxy(spec=info.spec, options=options, path=child_path)
    else:
        child = DeepCalledWithMock(options=options, shape=info.shape, path=child_path)

    logger.debug(f"Materialised {child_path} as {type(child).__name__} ({info.shape.value})")
    return children.setdefault(name, child)


class MockProxy:
    """A non-callable mock object with lazily built, cached attributes.

    Public attribute reads materialise children; assignments replace them;
    names starting with an underscore are never materialised.
    """

    def __init__(
        self,
        spec: Any = None,
        options: TreeOptions | None = None,
        path: str = "mock",
        attributes: dict[str, Any] | None = None,
    ):
        object.__setattr__(self, "_spec", spec)
        object.__setattr__(self, "_options", options or TreeOptions())
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_children", dict(attributes or {}))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return _materialize(self._children, name, self._spec, self._options, self._path)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self._children[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        try:
            del self._children[name]
        except KeyError:
            raise AttributeError(name) from None

    def __dir__(self) -> list[str]:
        return sorted(set(object.__dir__(self)) | set(self._children))

    @property
    def __class__(self) -> type:
        return spec_class(self._spec) or type(self)

    def __repr__(self) -> str:
        kind = "DeepMockProxy" if self._options.deep else "MockProxy"
        spec = spec_class(self._spec)
        spec_part = f" spec={spec.__name__!r}" if spec else ""
        return f"<{kind} name={self._path!r}{spec_part} id='{id(self)}'>"


class DeepCalledWithMock(CalledWithMock):
    """A router inside a deep tree that may also carry attributes.

    With ``func_prop_support`` the node is callable and property-bearing
    for its whole life. Without it, the first use decides: calling it makes
    it a function, reading an attribute makes it an object, and the other
    use raises.
    """

    def __init__(
        self,
        *args: Any,
        options: TreeOptions,
        shape: MemberShape = MemberShape.UNKNOWN,
        path: str = "mock",
        **kwargs: Any,
    ):
        kwargs.setdefault("name", path)
        super().__init__(
            *args, fallback_implementation=options.fallback_implementation, **kwargs
        )
        self.__dict__["_options"] = options
        self.__dict__["_shape"] = shape
        self.__dict__["_path"] = path
        self.__dict__["_children"] = {}

    @property
    def shape(self) -> MemberShape:
        return self._shape

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattr__(name)
        if self._shape is MemberShape.FUNCTION and not self._options.func_prop_support:
            logger.warning(f"Attribute {name!r} read on mocked function {self._path}")
            raise AttributeError(
                f"{self._path!r} is a mocked function and has no attribute {name!r}; "
                "use mock_deep(func_prop_support=True) for functions with attributes"
            )
        child = _materialize(self._children, name, None, self._options, self._path)
        if self._shape is MemberShape.UNKNOWN:
            self.__dict__["_shape"] = MemberShape.OBJECT
        return child

    def __delattr__(self, name: str) -> None:
        if name in self.__dict__.get("_children", {}):
            del self._children[name]
            return
        super().__delattr__(name)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._children))

    def _use_as_function(self) -> None:
        if self._shape is MemberShape.OBJECT and not self._options.func_prop_support:
            logger.warning(f"Mocked object {self._path} used as a function")
            raise TypeError(
                f"{self._path!r} is a mocked object and is not callable; "
                "use mock_deep(func_prop_support=True) for functions with attributes"
            )
        if self._shape is MemberShape.UNKNOWN:
            self.__dict__["_shape"] = MemberShape.FUNCTION

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self._use_as_function()
        return super().__call__(*args, **kwargs)

    def called_with(self, *args: Any, **kwargs: Any) -> Mock:
        self._use_as_function()
        return super().called_with(*args, **kwargs)

    def reset_mock(self, *args: Any, **kwargs: Any) -> None:
        raise _restricted(self, "reset_mock")


def _restricted(target: Any, operation: str) -> LifecycleRestrictionError:
    logger.warning(f"Refused {operation}() on deep mock {target!r}")
    return LifecycleRestrictionError(
        f"{operation}() cannot be applied to deep mock {target!r}; "
        "build a new mock_deep() instead",
        operation=operation,
    )


def _is_deep(target: Any) -> bool:
    if isinstance(target, DeepCalledWithMock):
        return True
    return isinstance(target, MockProxy) and target._options.deep


def mock(
    spec: Any = None,
    *,
    fallback_implementation: Callable[..., Any] | None = None,
    **attributes: Any,
) -> Any:
    """Create a mock object whose attributes are CalledWithMock functions.

    Args:
        spec: Optional class or instance; attributes it lacks raise
            AttributeError and ``isinstance(m, spec)`` holds
        fallback_implementation: Given to every materialised function
        **attributes: Initial attribute values

    Returns:
        A MockProxy
    """
    options = TreeOptions(fallback_implementation=fallback_implementation)
    return MockProxy(spec=spec, options=options, attributes=attributes)


def mock_deep(
    spec: Any = None,
    *,
    func_prop_support: bool = False,
    fallback_implementation: Callable[..., Any] | None = None,
    **attributes: Any,
) -> Any:
    """Create a deep mock: attributes of attributes are mocks too.

    Args:
        spec: Optional class or instance used to tell functions from
            nested objects
        func_prop_support: Let mocked functions also carry attributes
        fallback_implementation: Given to every function in the tree
        **attributes: Initial attribute values of the root

    Returns:
        The root MockProxy of the tree
    """
    options = TreeOptions(
        deep=True,
        func_prop_support=func_prop_support,
        fallback_implementation=fallback_implementation,
    )
    return MockProxy(spec=spec, options=options, attributes=attributes)


class Stub:
    """An object answering every unknown attribute with a fresh Mock.

    Unlike a proxy nothing is cached: assign an attribute to keep it.
    """

    def __init__(self, **attributes: Any):
        self.__dict__.update(attributes)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return Mock(return_value=None)


def stub(**attributes: Any) -> Stub:
    return Stub(**attributes)


def _mocks_in(target: Any, operation: str) -> list[Mock]:
    if _is_deep(target):
        raise _restricted(target, operation)
    if isinstance(target, MockProxy):
        return [child for child in target._children.values() if isinstance(child, Mock)]
    if isinstance(target, Mock):
        return [target]
    raise TypeError(f"{operation}() expects a mock, got {type(target).__name__}")


def mock_clear(target: Any) -> None:
    """Forget recorded calls, keeping bindings and configured behaviour.

    Args:
        target: A CalledWithMock, a Mock, or a proxy built by mock()

    Raises:
        LifecycleRestrictionError: If target belongs to a deep mock
    """
    for child in _mocks_in(target, "mock_clear"):
        # Mock.reset_mock keeps return_value and side_effect
        Mock.reset_mock(child)
        if isinstance(child, CalledWithMock):
            for binding in child.called_with_bindings:
                binding.delegate.reset_mock()


def mock_reset(target: Any) -> None:
    """Forget recorded calls, bindings and configured behaviour.

    Args:
        target: A CalledWithMock, a Mock, or a proxy built by mock()

    Raises:
        LifecycleRestrictionError: If target belongs to a deep mock
    """
    for child in _mocks_in(target, "mock_reset"):
        child.reset_mock(return_value=True, side_effect=True)
