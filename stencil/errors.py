"""Exception hierarchy for the generation pipeline."""

from __future__ import annotations

from typing import Any


class GenerationError(Exception):
    """Base class for every failure raised while generating a unit."""


class ConfigurationError(GenerationError):
    """Raised when the build or unit configuration is invalid."""


class ControllerError(GenerationError):
    """Raised when a controller cannot be resolved, validated or invoked."""

    def __init__(
        self, message: str, *, class_name: str = "", method_name: str = ""
    ) -> None:
        super().__init__(message)
        self.class_name = class_name
        self.method_name = method_name


class TypeNotFound(ControllerError):
    """The controller class is not present in the supplied roots."""


class ControllerConfigurationError(ConfigurationError, ControllerError):
    """The controller class is missing and compilation is disabled."""


class LoadError(ControllerError):
    """The controller class exists but could not be loaded."""


class CompilationFailure(ControllerError):
    """The compile step for a missing controller failed."""


class MethodNotFound(ControllerError):
    """No zero-argument method with the configured name exists."""


class ContractViolation(ControllerError):
    """The controller method does not honour the mapping return contract."""


class InstantiationFailure(ControllerError):
    """The controller class could not be constructed."""


class InvocationFailure(ControllerError):
    """Controller code raised while being invoked."""


class NullResult(ControllerError):
    """The controller method returned ``None``."""


class NonStringKey(ControllerError):
    """The controller result contains a key that is not a string."""

    def __init__(
        self, message: str, *, key: Any, class_name: str = "", method_name: str = ""
    ) -> None:
        super().__init__(message, class_name=class_name, method_name=method_name)
        self.key = key


class RenderFailure(GenerationError):
    """The template could not be loaded or rendered."""


class OutputWriteFailure(GenerationError):
    """The rendered output could not be written."""


class UnitFailedError(GenerationError):
    """A generation unit failed; wraps the underlying cause."""

    def __init__(self, unit_name: str, cause: BaseException) -> None:
        super().__init__(f"Generation of '{unit_name}' failed: {cause}")
        self.unit_name = unit_name
        self.cause = cause


__all__ = [
    "CompilationFailure",
    "ConfigurationError",
    "ContractViolation",
    "ControllerConfigurationError",
    "ControllerError",
    "GenerationError",
    "InstantiationFailure",
    "InvocationFailure",
    "LoadError",
    "MethodNotFound",
    "NonStringKey",
    "NullResult",
    "OutputWriteFailure",
    "RenderFailure",
    "TypeNotFound",
    "UnitFailedError",
]
