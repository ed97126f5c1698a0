"""Named-value store handed to the template engine."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

logger = logging.getLogger(__name__)


class RenderContext(Mapping[str, Any]):
    """Ordered attributes visible to a template.

    Adding an attribute that already exists replaces the earlier value.
    """

    def __init__(self) -> None:
        self._attributes: dict[str, Any] = {}

    def add(self, name: str, value: Any) -> None:
        if name in self._attributes:
            logger.debug(f"Overriding template attribute: {name}")
        self._attributes[name] = value

    def update_from(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self.add(name, value)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._attributes)

    def __getitem__(self, name: str) -> Any:
        return self._attributes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)
