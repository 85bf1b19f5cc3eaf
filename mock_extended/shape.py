"""Decide whether a member of a spec is a function or a nested object."""

import collections.abc
import functools
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


class MemberShape(Enum):
    """How a proxy materialises a member."""

    FUNCTION = "function"
    OBJECT = "object"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class MemberInfo:
    """Shape of a member and, for objects, the spec of the nested node."""

    shape: MemberShape
    spec: Any = None


UNKNOWN_MEMBER = MemberInfo(MemberShape.UNKNOWN)


def spec_class(spec: Any) -> type | None:
    """Return the class a spec describes (the spec itself if it is a class)."""
    if spec is None:
        return None
    return spec if isinstance(spec, type) else type(spec)


def _annotations(klass: type) -> dict[str, Any]:
    found: dict[str, Any] = {}
    for base in reversed(klass.__mro__):
        try:
            found.update(inspect.get_annotations(base, eval_str=True))
        except (NameError, AttributeError, SyntaxError, TypeError) as e:
            # Forward references that cannot be resolved stay as strings
            logger.debug(f"Could not evaluate annotations of {base.__qualname__}: {e}")
            found.update(inspect.get_annotations(base))
    return found


def classify_annotation(annotation: Any) -> MemberInfo:
    """Classify a type annotation.

    Examples::

        Callable[[int], str] -> FUNCTION
        Repository           -> OBJECT (spec=Repository)
        Repository | None    -> OBJECT (spec=Repository)
        "Repository"         -> UNKNOWN
    """
    origin = typing.get_origin(annotation)
    if annotation is collections.abc.Callable or origin is collections.abc.Callable:
        return MemberInfo(MemberShape.FUNCTION)
    if origin in (typing.Union, types.UnionType):
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return classify_annotation(members[0])
        return UNKNOWN_MEMBER
    if origin is not None and isinstance(origin, type):
        # list[int], dict[str, Foo] and friends
        return MemberInfo(MemberShape.OBJECT, origin)
    if isinstance(annotation, type):
        return MemberInfo(MemberShape.OBJECT, annotation)
    return UNKNOWN_MEMBER


def _classify_value(value: Any) -> MemberInfo:
    if isinstance(value, property):
        getter = value.fget
    elif isinstance(value, functools.cached_property):
        getter = value.func
    else:
        getter = None

    if getter is not None:
        returns = getattr(getter, "__annotations__", {}).get("return", _MISSING)
        if returns is _MISSING:
            return MemberInfo(MemberShape.OBJECT)
        info = classify_annotation(returns)
        if info.shape is MemberShape.UNKNOWN:
            return MemberInfo(MemberShape.OBJECT)
        return info

    if callable(value):
        return MemberInfo(MemberShape.FUNCTION)
    return MemberInfo(MemberShape.OBJECT, type(value))


def classify_member(spec: Any, name: str) -> MemberInfo:
    """Classify the member ``name`` of a spec.

    Args:
        spec: A class, an instance, or None for no spec
        name: Attribute name being materialised

    Returns:
        MemberInfo describing the member. UNKNOWN when there is no spec.

    Raises:
        AttributeError: If the spec has no such member
    """
    klass = spec_class(spec)
    if klass is None:
        return UNKNOWN_MEMBER

    if not isinstance(spec, type):
        instance_vars = getattr(spec, "__dict__", {})
        if name in instance_vars:
            return _classify_value(instance_vars[name])

    value = getattr(klass, name, _MISSING)
    annotations = _annotations(klass)

    if value is not _MISSING and (
        callable(value) or isinstance(value, (property, functools.cached_property))
    ):
        return _classify_value(value)
    if name in annotations:
        info = classify_annotation(annotations[name])
        if info.shape is not MemberShape.UNKNOWN or value is _MISSING:
            return info
    if value is not _MISSING:
        return _classify_value(value)

    raise AttributeError(f"Mock spec {klass.__name__!r} has no attribute {name!r}")
