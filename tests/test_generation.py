"""End-to-end tests for generation units."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from stencil.build.compiler import PyCompileService
from stencil.core.models import ControllerSpec, GenerationConfig, GenerationUnit
from stencil.errors import (
    ControllerConfigurationError,
    NonStringKey,
    RenderFailure,
    UnitFailedError,
)
from stencil.generation import generate_all, generate_unit


@pytest.fixture
def templates(tmp_path: Path) -> Path:
    directory = tmp_path / "templates"
    directory.mkdir()
    (directory / "Greeting.j2").write_text("Hello, <name>!", encoding="utf-8")
    (directory / "Plain.j2").write_text("{{ title }} by {{ author }}\n", encoding="utf-8")
    return directory


def greeting_unit(pkg: str, **controller) -> GenerationUnit:
    return GenerationUnit(
        directory=Path("templates"),
        name="Greeting",
        target=Path("out/greeting.txt"),
        delimiters=("<", ">"),
        controller=ControllerSpec(
            class_name=f"{pkg}.greeting.Greeter", method="data", **controller
        ),
    )


def test_greeting_end_to_end(project, compiler, templates, tmp_path, pkg, write_module) -> None:
    write_module(
        tmp_path / "build/lib",
        f"{pkg}.greeting",
        "class Greeter:\n    def data(self):\n        return {'name': 'World'}\n",
    )

    output = generate_unit(greeting_unit(pkg), project, compiler=compiler)

    assert output == tmp_path / "out/greeting.txt"
    assert output.read_text(encoding="utf-8") == "Hello, World!"


def test_missing_controller_without_compile_creates_no_output(project, compiler, templates, tmp_path, pkg) -> None:
    config = GenerationConfig(project=project, templates=[greeting_unit(pkg, compile=False)])

    with pytest.raises(UnitFailedError) as excinfo:
        generate_all(config, compiler=compiler)

    assert isinstance(excinfo.value.cause, ControllerConfigurationError)
    assert f"{pkg}.greeting.Greeter" in str(excinfo.value)
    assert not (tmp_path / "out/greeting.txt").exists()
    assert compiler.calls == []


def test_failure_leaves_existing_output_untouched(project, compiler, templates, tmp_path, pkg, write_module) -> None:
    target = tmp_path / "out/greeting.txt"
    target.parent.mkdir()
    target.write_text("previous", encoding="utf-8")
    write_module(
        tmp_path / "build/lib",
        f"{pkg}.greeting",
        "class Greeter:\n    def data(self):\n        return {'name': 'World', 7: 'x'}\n",
    )

    with pytest.raises(UnitFailedError) as excinfo:
        generate_all(GenerationConfig(project=project, templates=[greeting_unit(pkg)]), compiler=compiler)

    assert isinstance(excinfo.value.cause, NonStringKey)
    assert target.read_text(encoding="utf-8") == "previous"


def test_unit_without_controller_uses_properties(project, templates, tmp_path) -> None:
    unit = GenerationUnit(
        directory=Path("templates"),
        name="Plain",
        target=Path("out/plain.txt"),
        properties={"title": "Guide", "author": "Ada"},
    )
    assert generate_unit(unit, project).read_text(encoding="utf-8") == "Guide by Ada\n"


def test_unit_properties_override_controller_values(project, compiler, templates, tmp_path, pkg, write_module) -> None:
    write_module(
        tmp_path / "build/lib",
        f"{pkg}.greeting",
        "class Greeter:\n    def data(self):\n        return {'title': 'Draft', 'author': 'Controller'}\n",
    )
    unit = GenerationUnit(
        directory=Path("templates"),
        name="Plain",
        target=Path("out/plain.txt"),
        properties={"author": "Config"},
        controller=ControllerSpec(class_name=f"{pkg}.greeting.Greeter", method="data"),
    )

    output = generate_unit(unit, project, compiler=compiler)

    assert output.read_text(encoding="utf-8") == "Draft by Config\n"


def test_undefined_attribute_is_render_failure(project, templates, tmp_path) -> None:
    unit = GenerationUnit(directory=Path("templates"), name="Plain", target=Path("out/plain.txt"))
    with pytest.raises(RenderFailure, match="title"):
        generate_unit(unit, project)
    assert not (tmp_path / "out/plain.txt").exists()


def test_missing_template_is_render_failure(project, templates) -> None:
    unit = GenerationUnit(directory=Path("templates"), name="Absent", target=Path("out/x.txt"))
    with pytest.raises(RenderFailure, match="Absent.j2"):
        generate_unit(unit, project)


def test_missing_template_directory_is_render_failure(project) -> None:
    unit = GenerationUnit(directory=Path("nowhere"), name="Greeting", target=Path("out/x.txt"))
    with pytest.raises(RenderFailure, match="directory not found"):
        generate_unit(unit, project)


def test_units_run_in_order_and_stop_at_first_failure(project, templates, tmp_path) -> None:
    ok = GenerationUnit(
        directory=Path("templates"),
        name="Plain",
        target=Path("out/first.txt"),
        properties={"title": "One", "author": "A"},
    )
    broken = GenerationUnit(directory=Path("templates"), name="Plain", target=Path("out/second.txt"))
    never = ok.model_copy(update={"target": Path("out/third.txt")})

    with pytest.raises(UnitFailedError) as excinfo:
        generate_all(GenerationConfig(project=project, templates=[ok, broken, never]))

    assert excinfo.value.unit_name == "Plain"
    assert (tmp_path / "out/first.txt").exists()
    assert not (tmp_path / "out/second.txt").exists()
    assert not (tmp_path / "out/third.txt").exists()


def test_only_filter_selects_units(project, templates, tmp_path) -> None:
    plain = GenerationUnit(
        directory=Path("templates"),
        name="Plain",
        target=Path("out/plain.txt"),
        properties={"title": "T", "author": "A"},
    )
    greeting = GenerationUnit(directory=Path("templates"), name="Greeting", target=Path("out/g.txt"))

    outputs = generate_all(GenerationConfig(project=project, templates=[plain, greeting]), only=["Plain"])

    assert outputs == [tmp_path / "out/plain.txt"]


def test_generated_module_feeds_later_compile(project, templates, tmp_path, pkg) -> None:
    (templates / "Module.py.j2").write_text(
        "class {{ class_name }}:\n"
        "    def data(self) -> dict:\n"
        "        return {'name': '{{ greeting_name }}'}\n",
        encoding="utf-8",
    )
    generator = GenerationUnit(
        directory=Path("templates"),
        name="Module.py.j2",
        target=Path(f"build/generated-sources/stencil/{pkg}.py"),
        properties={"class_name": "Greeter", "greeting_name": "Generated"},
    )
    consumer = GenerationUnit(
        directory=Path("templates"),
        name="Greeting",
        target=Path("out/greeting.txt"),
        delimiters=("<", ">"),
        controller=ControllerSpec(class_name=f"{pkg}.Greeter", method="data"),
    )
    target = f"{sys.version_info[0]}.{sys.version_info[1]}"
    consumer.controller.target_version = target

    generate_all(
        GenerationConfig(project=project, templates=[generator, consumer]),
        compiler=PyCompileService(sys.executable),
    )

    assert project.compile_source_roots == [tmp_path / "build/generated-sources/stencil"]
    assert (tmp_path / "build/lib" / f"{pkg}.py").exists()
    assert (tmp_path / "out/greeting.txt").read_text(encoding="utf-8") == "Hello, Generated!"
