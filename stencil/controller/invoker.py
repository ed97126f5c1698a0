"""Controller instantiation and method invocation."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..errors import InstantiationFailure, InvocationFailure
from .contract import MethodHandle

logger = logging.getLogger(__name__)


class ControllerInvoker:
    """Invokes methods of one controller class for a single generation unit.

    At most one instance is constructed, lazily, the first time a non-static
    method has to be called; later calls reuse it.
    """

    def __init__(self, controller_class: type) -> None:
        self.controller_class = controller_class
        self._instance: object | None = None

    @property
    def class_name(self) -> str:
        return f"{self.controller_class.__module__}.{self.controller_class.__qualname__}"

    @property
    def is_bound(self) -> bool:
        return self._instance is not None

    def instance(self, method_name: str = "") -> object:
        if self._instance is None:
            logger.debug(f"Instantiating controller: {self.class_name}")
            try:
                self._instance = self.controller_class()
            except Exception as e:
                raise InstantiationFailure(
                    f"Unable to instantiate {self.class_name}: {e}",
                    class_name=self.class_name,
                    method_name=method_name,
                ) from e
        return self._instance

    def call(self, method: MethodHandle, *args: Any) -> Any:
        target = None if method.is_static else self.instance(method.name)
        try:
            return method.bind(target)(*args)
        except Exception as e:
            raise InvocationFailure(
                f"Unable to invoke controller: {self.class_name}.{method.name}() "
                f"({type(e).__name__}: {e})",
                class_name=self.class_name,
                method_name=method.name,
            ) from e

    def invoke(
        self,
        method: MethodHandle,
        property_setter: MethodHandle | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> Any:
        """Apply properties if possible, then call the contracted method.

        Args:
            method: The contracted zero-argument method
            property_setter: Optional ``set_properties`` handle
            properties: Properties configured for the controller

        Returns:
            Whatever the method returned
        """
        if property_setter is not None and properties:
            logger.debug(f"Applying {len(properties)} property value(s) to {self.class_name}")
            self.call(property_setter, dict(properties))
        elif properties:
            logger.warning(
                f"{self.class_name} has no set_properties method; "
                "controller properties ignored"
            )

        logger.info(f"Invoking controller: {self.class_name}.{method.name}()")
        return self.call(method)
