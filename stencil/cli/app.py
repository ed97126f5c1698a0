"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from .. import generation
from ..build.compiler import PyCompileService
from ..core.loader import load_config
from ..core.settings import StencilSettings
from ..errors import GenerationError
from .parsers import parse_define, parse_file_mode

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="stencil",
    help="Render Jinja2 templates with data supplied by controller classes.",
)


@app.callback()
def _root() -> None:
    """Stencil command group."""


@app.command()
def render(
    config_file: Annotated[
        str,
        typer.Option(
            "--config",
            "-c",
            help="Build file describing the project and templates (default: stencil.yaml).",
            metavar="FILE",
        ),
    ] = "",
    basedir: Annotated[
        str,
        typer.Option(
            "--basedir",
            help="Override the project base directory from the build file.",
            metavar="DIR",
        ),
    ] = "",
    file_mode: Annotated[
        str,
        typer.Option(
            "--mode",
            help="File permissions in octal (default: 0644).",
            metavar="OCTAL",
        ),
    ] = "",
    only: Annotated[
        list[str],
        typer.Option(
            "--only",
            help="Render only the named template(s). Repeatable.",
            metavar="NAME",
        ),
    ] = [],
    defines: Annotated[
        list[str],
        typer.Option(
            "--define",
            "-D",
            help="Add a static property to every template (format: NAME=VALUE). Repeatable.",
            metavar="NAME=VALUE",
        ),
    ] = [],
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Resolve controllers and render the configured templates."""
    settings = StencilSettings()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if verbose or settings.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    logger.debug("Starting stencil")

    # Parse configuration
    mode = parse_file_mode(file_mode) if file_mode else settings.file_mode
    properties = dict(map(parse_define, defines))
    config_path = Path(config_file) if config_file else settings.config_file

    try:
        config = load_config(config_path)
        if basedir:
            config.project.basedir = Path(basedir).resolve()
        for unit in config.templates:
            unit.properties.update(properties)

        outputs = generation.generate_all(
            config,
            file_mode=mode,
            only=only,
            compiler=PyCompileService(settings.python_executable),
        )
    except GenerationError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    logger.debug(f"Completed: {len(outputs)} file(s) rendered")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
