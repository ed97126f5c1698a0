"""Tests for the compile step used when a controller is missing."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from stencil.build.compiler import CompileFallback, PyCompileService, source_path_for
from stencil.errors import CompilationFailure


def test_source_path_for_dotted_class_name() -> None:
    assert source_path_for("pkg.sub.mod.Greeter") == Path("pkg/sub/mod.py")
    assert source_path_for("mod.Greeter") == Path("mod.py")


def test_fallback_delegates_one_source_unit(project, compiler, tmp_path, pkg, write_module, greeter_source) -> None:
    write_module(tmp_path / "src", f"{pkg}.greeting", greeter_source)

    CompileFallback(project, compiler).compile(
        f"{pkg}.greeting.Greeter", source_version="3.10", target_version="3.11"
    )

    assert compiler.calls == [(Path(pkg, "greeting.py"), "3.10", "3.11")]
    assert (tmp_path / "build/lib" / pkg / "greeting.py").exists()


def test_fallback_searches_registered_source_roots(project, compiler, tmp_path, pkg, write_module) -> None:
    generated = tmp_path / "build/generated-sources/stencil"
    write_module(generated, f"{pkg}.generated", "class Greeter:\n    pass\n")
    project.compile_source_roots.append(generated)

    fallback = CompileFallback(project, compiler)

    assert fallback.find_source_root(Path(pkg, "generated.py")) == generated


def test_missing_source_unit_is_compilation_failure(project, compiler, pkg) -> None:
    with pytest.raises(CompilationFailure, match="not found in source roots") as excinfo:
        CompileFallback(project, compiler).compile(f"{pkg}.absent.Greeter")
    assert excinfo.value.class_name == f"{pkg}.absent.Greeter"
    assert compiler.calls == []


def test_py_compile_service_copies_and_byte_compiles(tmp_path, pkg, write_module, greeter_source) -> None:
    source_root = tmp_path / "src"
    write_module(source_root, f"{pkg}.sub.greeting", greeter_source)
    output = tmp_path / "out"

    PyCompileService(sys.executable).compile(
        source_root,
        Path(pkg, "sub", "greeting.py"),
        output,
        source_version="3.10",
        target_version=f"{sys.version_info[0]}.{sys.version_info[1]}",
    )

    assert (output / pkg / "__init__.py").exists()
    assert (output / pkg / "sub" / "__init__.py").exists()
    assert (output / pkg / "sub" / "greeting.py").read_text() == (
        source_root / pkg / "sub" / "greeting.py"
    ).read_text()


def test_py_compile_service_rejects_invalid_source(tmp_path, pkg, write_module) -> None:
    source_root = tmp_path / "src"
    write_module(source_root, f"{pkg}.broken", "def oops(:\n")

    with pytest.raises(CompilationFailure, match="not valid Python"):
        PyCompileService().compile(
            source_root,
            Path(pkg, "broken.py"),
            tmp_path / "out",
            source_version="3.10",
            target_version="3.10",
        )
    assert not (tmp_path / "out" / pkg / "broken.py").exists()


def test_py_compile_service_rejects_future_target(tmp_path, pkg, write_module) -> None:
    source_root = tmp_path / "src"
    write_module(source_root, f"{pkg}.mod", "X = 1\n")

    with pytest.raises(CompilationFailure, match="Compilation of"):
        PyCompileService().compile(
            source_root,
            Path(pkg, "mod.py"),
            tmp_path / "out",
            source_version="3.10",
            target_version="99.0",
        )
    assert not (tmp_path / "out" / pkg / "mod.py").exists()


def test_invalid_version_string(tmp_path, pkg, write_module) -> None:
    write_module(tmp_path / "src", f"{pkg}.mod", "X = 1\n")
    with pytest.raises(CompilationFailure, match="Invalid language version"):
        PyCompileService().compile(
            tmp_path / "src",
            Path(pkg, "mod.py"),
            tmp_path / "out",
            source_version="three",
            target_version="3.10",
        )
