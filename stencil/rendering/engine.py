"""Template rendering engine."""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError

from ..core.models import BuildProject, GenerationUnit
from ..errors import OutputWriteFailure, RenderFailure
from .context import RenderContext
from .io import atomic_write_text, register_compile_source_root

logger = logging.getLogger(__name__)


def create_environment(
    template_dir: Path, delimiters: tuple[str, str] | None = None
) -> Environment:
    """Create a Jinja2 environment rooted at ``template_dir``.

    Args:
        template_dir: Directory the loader searches
        delimiters: Optional variable start/end strings replacing ``{{``/``}}``

    Returns:
        Configured environment
    """
    options = {}
    if delimiters is not None:
        options["variable_start_string"], options["variable_end_string"] = delimiters

    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        **options,
    )


def load_template(unit: GenerationUnit, project: BuildProject) -> Template:
    """Load the Jinja2 template of a generation unit.

    Args:
        unit: Generation unit naming the template
        project: Build project relative directories are anchored to

    Returns:
        Compiled Jinja2 template
    """
    template_dir = project.resolve_path(unit.directory)
    if not template_dir.is_dir():
        raise RenderFailure(f"Template directory not found: {template_dir}")

    env = create_environment(template_dir, unit.delimiters)
    try:
        return env.get_template(unit.template_file)
    except TemplateError as e:
        raise RenderFailure(
            f"Unable to load template {unit.template_file} from {template_dir}: {e}"
        ) from e


def output_path_for(unit: GenerationUnit, project: BuildProject) -> Path:
    return project.resolve_path(unit.target)


def render_unit(
    unit: GenerationUnit,
    template: Template,
    context: RenderContext,
    project: BuildProject,
    file_mode: int = 0o644,
) -> Path:
    """Render a loaded template and write the output file.

    Args:
        unit: Generation unit being rendered
        template: Template returned by :func:`load_template`
        context: Attributes visible to the template
        project: Build project
        file_mode: File permissions

    Returns:
        Output file path
    """
    logger.debug(f"Rendering template: {unit.template_file}")
    try:
        rendered_text = template.render(context.as_dict())
    except Exception as e:
        raise RenderFailure(f"Unable to render template {unit.template_file}: {e}") from e

    output_path = output_path_for(unit, project)
    try:
        atomic_write_text(output_path, rendered_text, mode=file_mode)
    except OSError as e:
        raise OutputWriteFailure(
            f"Unable to write output file: {output_path}. ({e})"
        ) from e
    logger.info(f"Rendered {unit.template_file} → {output_path}")

    register_compile_source_root(output_path, project)
    return output_path
