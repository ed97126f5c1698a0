"""Compile step used when a controller class is not yet loadable."""

from __future__ import annotations

import ast
import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Protocol

from .._utils import run_logged
from ..core.models import BuildProject
from ..errors import CompilationFailure

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".py"

# Refuses targets newer than the compiling interpreter, then byte-compiles argv[1].
_COMPILE_SCRIPT = """\
import py_compile, sys
target = tuple(int(part) for part in sys.argv[2].split(".")[:2])
if sys.version_info[:2] < target:
    sys.exit("interpreter %d.%d is older than target %s" % (sys.version_info[:2] + (sys.argv[2],)))
py_compile.compile(sys.argv[1], doraise=True)
"""


def _parse_version(value: str) -> tuple[int, int]:
    try:
        major, minor = (int(part) for part in value.split(".")[:2])
    except ValueError as e:
        raise CompilationFailure(f"Invalid language version: {value!r}") from e
    return major, minor


def source_path_for(class_name: str) -> Path:
    """Relative source unit path for a dotted class name.

    ``pkg.mod.Controller`` maps to ``pkg/mod.py``.
    """
    module_parts = class_name.split(".")[:-1]
    return Path(*module_parts[:-1], module_parts[-1] + SOURCE_SUFFIX)


class CompilerService(Protocol):
    """Compiles exactly one source unit into an output directory."""

    def compile(
        self,
        source_root: Path,
        relative_path: Path,
        output_directory: Path,
        *,
        source_version: str,
        target_version: str,
    ) -> None: ...


class PyCompileService:
    """Copies a module into the output directory and byte-compiles it."""

    def __init__(self, python_executable: str | None = None) -> None:
        self.python_executable = python_executable or sys.executable

    def compile(
        self,
        source_root: Path,
        relative_path: Path,
        output_directory: Path,
        *,
        source_version: str,
        target_version: str,
    ) -> None:
        source = source_root / relative_path
        _parse_version(target_version)
        try:
            ast.parse(
                source.read_text(encoding="utf-8"),
                filename=str(source),
                feature_version=_parse_version(source_version),
            )
        except SyntaxError as e:
            raise CompilationFailure(
                f"{relative_path} is not valid Python {source_version}: {e}"
            ) from e

        destination = output_directory / relative_path
        destination.parent.mkdir(parents=True, exist_ok=True)
        self._copy_package_markers(source_root, relative_path, output_directory)
        shutil.copy2(source, destination)

        try:
            run_logged(
                [self.python_executable, "-c", _COMPILE_SCRIPT, str(destination), target_version]
            )
        except (OSError, subprocess.CalledProcessError) as e:
            destination.unlink(missing_ok=True)
            raise CompilationFailure(f"Compilation of {relative_path} failed: {e}") from e

    @staticmethod
    def _copy_package_markers(
        source_root: Path, relative_path: Path, output_directory: Path
    ) -> None:
        package = Path()
        for part in relative_path.parent.parts:
            package = package / part
            marker = source_root / package / "__init__.py"
            target = output_directory / package / "__init__.py"
            if marker.exists() and not target.exists():
                shutil.copy2(marker, target)


class CompileFallback:
    """Compiles the source unit of a controller class that could not be found."""

    def __init__(
        self, project: BuildProject, service: CompilerService | None = None
    ) -> None:
        self.project = project
        self.service = service or PyCompileService()

    def find_source_root(self, relative_path: Path) -> Path:
        for root in self.project.all_source_roots():
            if (root / relative_path).is_file():
                return root
        searched = ", ".join(str(r) for r in self.project.all_source_roots()) or "none"
        raise CompilationFailure(
            f"Source unit {relative_path} not found in source roots: {searched}"
        )

    def compile(
        self, class_name: str, *, source_version: str = "3.10", target_version: str = "3.10"
    ) -> None:
        relative_path = source_path_for(class_name)
        logger.info(f"Adding {relative_path} to compiler include list...")
        output_directory = self.project.resolve_path(self.project.output_directory)
        try:
            source_root = self.find_source_root(relative_path)
            logger.info("Compiling...")
            self.service.compile(
                source_root,
                relative_path,
                output_directory,
                source_version=source_version,
                target_version=target_version,
            )
        except CompilationFailure as e:
            e.class_name = class_name
            raise
