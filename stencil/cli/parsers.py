"""CLI argument parsers and validators."""

from __future__ import annotations

import typer


def parse_define(value: str) -> tuple[str, str]:
    """Parse a property argument in format NAME=VALUE."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be NAME=VALUE, got: {value!r}")
    name, val = value.split("=", 1)
    if not name:
        raise typer.BadParameter(f"Property name is empty: {value!r}")
    return name, val


def parse_file_mode(value: str) -> int:
    """Parse octal file mode string."""
    try:
        return int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid octal mode: {value!r}") from e
