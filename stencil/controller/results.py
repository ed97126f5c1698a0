"""Installation of controller results into the render context."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import ContractViolation, NonStringKey, NullResult
from ..rendering.context import RenderContext


def apply_results(
    result: Any, context: RenderContext, *, class_name: str, method_name: str
) -> int:
    """Validate a controller result and add each entry to the context.

    All keys are checked before the first entry is installed, so a rejected
    result leaves the context untouched.

    Returns:
        Number of installed attributes
    """
    if result is None:
        raise NullResult(
            f"The result invoking {class_name}.{method_name} was null.",
            class_name=class_name,
            method_name=method_name,
        )
    if not isinstance(result, Mapping):
        raise ContractViolation(
            f"{class_name}.{method_name} returned {type(result).__name__}, not a mapping",
            class_name=class_name,
            method_name=method_name,
        )

    for key in result:
        if not isinstance(key, str):
            raise NonStringKey(
                f"A non-String key of type {type(key).__name__} was found in the "
                f"{class_name}.{method_name} results.",
                key=key,
                class_name=class_name,
                method_name=method_name,
            )

    for key, value in result.items():
        context.add(key, value)
    return len(result)
