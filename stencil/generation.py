"""Processing of configured generation units."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .build.artifacts import DependencyResolver
from .build.compiler import CompilerService
from .controller.pipeline import invoke_controller
from .core.models import BuildProject, GenerationConfig, GenerationUnit
from .errors import GenerationError, UnitFailedError
from .rendering import engine
from .rendering.context import RenderContext

logger = logging.getLogger(__name__)


def generate_unit(
    unit: GenerationUnit,
    project: BuildProject,
    *,
    file_mode: int = 0o644,
    compiler: CompilerService | None = None,
    resolver: DependencyResolver | None = None,
) -> Path:
    """Render one generation unit.

    Args:
        unit: Unit to render
        project: Build project shared by all units
        file_mode: Output file permissions
        compiler: Compiler used when a controller has to be compiled
        resolver: Dependency resolver providing classpath roots

    Returns:
        Output file path
    """
    template = engine.load_template(unit, project)
    context = RenderContext()

    if unit.controller is not None:
        installed = invoke_controller(
            unit.controller, project, context, compiler=compiler, resolver=resolver
        )
        logger.debug(f"Installed {installed} controller attribute(s)")

    context.update_from(unit.properties)

    return engine.render_unit(unit, template, context, project, file_mode)


def generate_all(
    config: GenerationConfig,
    *,
    file_mode: int = 0o644,
    only: Iterable[str] | None = None,
    compiler: CompilerService | None = None,
    resolver: DependencyResolver | None = None,
) -> list[Path]:
    """Render all configured units in order, stopping at the first failure.

    Args:
        config: Generation configuration
        file_mode: Output file permissions
        only: Optional template names to restrict the run to
        compiler: Compiler used when a controller has to be compiled
        resolver: Dependency resolver providing classpath roots

    Returns:
        List of output file paths
    """
    selected = set(only or [])
    units = [u for u in config.templates if not selected or u.name in selected]
    logger.info(f"Generating {len(units)} template(s)")

    outputs: list[Path] = []
    for unit in units:
        try:
            outputs.append(
                generate_unit(
                    unit,
                    config.project,
                    file_mode=file_mode,
                    compiler=compiler,
                    resolver=resolver,
                )
            )
        except GenerationError as e:
            raise UnitFailedError(unit.name, e) from e

    logger.info(f"Successfully rendered {len(outputs)} file(s)")
    return outputs
