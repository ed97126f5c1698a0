"""Shared fixtures: on-disk controller modules, projects and fake compilers."""

from __future__ import annotations

import shutil
import textwrap
import uuid
from pathlib import Path
from typing import Callable

import pytest

from stencil.core.models import BuildProject


class RecordingCompiler:
    """Compiler double that records requests and copies the source tree."""

    def __init__(self, produce: bool = True) -> None:
        self.produce = produce
        self.calls: list[tuple[Path, str, str]] = []

    def compile(
        self,
        source_root: Path,
        relative_path: Path,
        output_directory: Path,
        *,
        source_version: str,
        target_version: str,
    ) -> None:
        self.calls.append((relative_path, source_version, target_version))
        if self.produce:
            shutil.copytree(source_root, output_directory, dirs_exist_ok=True)


@pytest.fixture
def pkg() -> str:
    """Unique top-level package name so imports never hit sys.modules."""
    return f"ctl_{uuid.uuid4().hex[:12]}"


@pytest.fixture
def write_module() -> Callable[[Path, str, str], Path]:
    def _write(root: Path, module: str, source: str) -> Path:
        parts = module.split(".")
        directory = root
        directory.mkdir(parents=True, exist_ok=True)
        for part in parts[:-1]:
            directory = directory / part
            directory.mkdir(exist_ok=True)
            (directory / "__init__.py").touch()
        path = directory / f"{parts[-1]}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project(tmp_path: Path) -> BuildProject:
    return BuildProject(
        basedir=tmp_path,
        output_directory=Path("build/lib"),
        source_roots=[Path("src")],
    )


@pytest.fixture
def compiler() -> RecordingCompiler:
    return RecordingCompiler()


GREETER_SOURCE = """
class Greeter:
    instances = 0

    def __init__(self):
        type(self).instances += 1
        self.properties = {}

    def set_properties(self, properties):
        self.properties = properties

    def data(self) -> dict:
        return {
            "name": self.properties.get("name", "World"),
            "instances": type(self).instances,
        }
"""


@pytest.fixture
def greeter_source() -> str:
    return GREETER_SOURCE


@pytest.fixture
def barren_compiler() -> RecordingCompiler:
    """Compiler double that succeeds without producing any output."""
    return RecordingCompiler(produce=False)
