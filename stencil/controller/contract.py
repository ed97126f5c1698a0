"""Controller method contract checks.

A controller exposes a zero-argument method returning a mapping, and may
expose ``set_properties(properties)`` to receive configured properties.
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Literal

from ..errors import ContractViolation, MethodNotFound

logger = logging.getLogger(__name__)

PROPERTY_SETTER_NAME = "set_properties"

MethodKind = Literal["instance", "static", "class"]


@dataclass(frozen=True)
class MethodHandle:
    """A validated controller method."""

    owner: type
    name: str
    kind: MethodKind
    function: Callable[..., Any]

    @property
    def is_static(self) -> bool:
        """True when the method is called without an instance."""
        return self.kind != "instance"

    def bind(self, instance: object | None) -> Callable[..., Any]:
        target = self.owner if self.is_static else instance
        return getattr(target, self.name)


def _lookup(owner: type, name: str) -> tuple[MethodKind, Callable[..., Any]] | None:
    try:
        raw = inspect.getattr_static(owner, name)
    except AttributeError:
        return None
    if isinstance(raw, staticmethod):
        return "static", raw.__func__
    if isinstance(raw, classmethod):
        return "class", raw.__func__
    if inspect.isfunction(raw) or inspect.ismethoddescriptor(raw):
        return "instance", raw
    return None


def _parameters(kind: MethodKind, function: Callable[..., Any]) -> list[inspect.Parameter]:
    try:
        params = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return []
    # Drop self/cls.
    if kind != "static" and params:
        params = params[1:]
    return params


def _required(params: list[inspect.Parameter]) -> list[inspect.Parameter]:
    return [
        p
        for p in params
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def is_mapping_type(annotation: Any) -> bool:
    """Return True if values of ``annotation`` can be used as a mapping."""
    if annotation in (inspect.Signature.empty, Any, object):
        return True
    if isinstance(annotation, (str, typing.TypeVar)):
        # Unresolved forward reference or generic; checked at runtime instead.
        return True
    if annotation is None or annotation is type(None):
        return False

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        return bool(members) and all(is_mapping_type(a) for a in members)

    if typing.is_typeddict(annotation):
        return True
    candidate = origin or annotation
    return isinstance(candidate, type) and issubclass(candidate, Mapping)


def _return_annotation(function: Callable[..., Any]) -> Any:
    try:
        hints = typing.get_type_hints(function)
    except Exception as e:
        logger.debug(f"Unable to resolve annotations of {function!r}: {e}")
        return inspect.signature(function).return_annotation
    return hints.get("return", inspect.Signature.empty)


def get_invocable_method(owner: type, method_name: str) -> MethodHandle:
    """Locate and validate the contracted controller method.

    Args:
        owner: Controller class
        method_name: Name of the zero-argument data method

    Returns:
        Validated method handle

    Raises:
        MethodNotFound: No zero-argument method with that name exists
        ContractViolation: The declared return type is not a mapping
    """
    class_name = f"{owner.__module__}.{owner.__qualname__}"
    found = _lookup(owner, method_name)
    if found is None:
        raise MethodNotFound(
            f"{class_name} has no method named {method_name!r}",
            class_name=class_name,
            method_name=method_name,
        )

    kind, function = found
    required = _required(_parameters(kind, function))
    if required:
        names = ", ".join(p.name for p in required)
        raise MethodNotFound(
            f"{class_name}.{method_name} is not a zero-argument method (requires: {names})",
            class_name=class_name,
            method_name=method_name,
        )

    annotation = _return_annotation(function)
    if not is_mapping_type(annotation):
        raise ContractViolation(
            f"The return type of the method {method_name} was not of type "
            f"Mapping[str, Any] (declared: {annotation!r})",
            class_name=class_name,
            method_name=method_name,
        )

    return MethodHandle(owner=owner, name=method_name, kind=kind, function=function)


def find_property_setter(owner: type) -> MethodHandle | None:
    """Locate ``set_properties(properties)``; None when absent or mis-shaped."""
    found = _lookup(owner, PROPERTY_SETTER_NAME)
    if found is None:
        return None

    kind, function = found
    params = _parameters(kind, function)
    positional = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(positional) != 1 or len(_required(params)) > 1:
        logger.warning(
            f"Ignoring {owner.__qualname__}.{PROPERTY_SETTER_NAME}: "
            "expected exactly one properties argument"
        )
        return None

    try:
        hints = typing.get_type_hints(function)
    except Exception as e:
        logger.debug(f"Unable to resolve annotations of {function!r}: {e}")
        hints = {}
    annotation = hints.get(positional[0].name, inspect.Signature.empty)
    if not is_mapping_type(annotation):
        logger.warning(
            f"Ignoring {owner.__qualname__}.{PROPERTY_SETTER_NAME}: "
            f"argument is not a mapping ({annotation!r})"
        )
        return None

    return MethodHandle(owner=owner, name=PROPERTY_SETTER_NAME, kind=kind, function=function)
