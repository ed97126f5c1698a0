"""Domain models for generation units, controllers and the build project."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Scope = Literal["compile", "runtime", "provided", "test", "system"]


class Artifact(BaseModel):
    """A resolved dependency of the build project."""

    name: str = Field(..., min_length=1, description="Artifact identifier")
    path: Path = Field(..., description="Directory or archive holding the artifact")
    version: str | None = Field(default=None, description="Artifact version")
    scope: Scope = Field(default="compile", description="Dependency scope")
    direct: bool = Field(
        default=True, description="Declared by the project (not transitive)"
    )


class BuildProject(BaseModel):
    """The host build: layout, resolved dependencies and source roots."""

    basedir: Path = Field(default_factory=Path.cwd, description="Project base directory")
    output_directory: Path = Field(
        default=Path("build/lib"), description="Compiled module output directory"
    )
    source_roots: list[Path] = Field(
        default_factory=lambda: [Path("src")], description="Controller source roots"
    )
    dependencies: list[Artifact] = Field(
        default_factory=list, description="Full resolved dependency set"
    )
    compile_source_roots: list[Path] = Field(
        default_factory=list, description="Source roots registered by generated output"
    )
    # Currently visible artifact set; narrowed while a controller is resolved.
    artifacts: list[Artifact] | None = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _default_visible_artifacts(self) -> BuildProject:
        if self.artifacts is None:
            self.artifacts = list(self.dependencies)
        return self

    def resolve_path(self, path: Path) -> Path:
        """Return ``path`` anchored at the project base directory."""
        return path if path.is_absolute() else self.basedir / path

    def dependency_artifacts(self) -> list[Artifact]:
        """Artifacts the project declares directly."""
        return [artifact for artifact in self.dependencies if artifact.direct]

    def all_source_roots(self) -> list[Path]:
        roots = [self.resolve_path(root) for root in self.source_roots]
        roots.extend(self.resolve_path(root) for root in self.compile_source_roots)
        return roots


class ControllerSpec(BaseModel):
    """Identifies the controller that supplies data to a template."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    class_name: str = Field(..., min_length=1, description="Dotted class name")
    method: str = Field(..., min_length=1, description="Method to invoke")
    compile: bool = Field(default=True, description="Compile the controller if missing")
    source_version: str = Field(default="3.10", description="Source language version")
    target_version: str = Field(default="3.10", description="Target interpreter version")
    artifact_view: Literal["direct", "runtime"] = Field(
        default="direct", description="Dependency view used while resolving"
    )
    properties: dict[str, str] = Field(
        default_factory=dict, description="Properties passed to the controller"
    )

    @field_validator("class_name")
    @classmethod
    def _check_class_name(cls, value: str) -> str:
        parts = value.split(".")
        if len(parts) < 2 or not all(part.isidentifier() for part in parts):
            raise ValueError(
                f"class_name must be a dotted 'module.Class' name, got: {value!r}"
            )
        return value

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"method must be an identifier, got: {value!r}")
        return value

    @property
    def module_name(self) -> str:
        return self.class_name.rsplit(".", 1)[0]

    @property
    def simple_name(self) -> str:
        return self.class_name.rsplit(".", 1)[1]


class GenerationUnit(BaseModel):
    """A single template-to-output rendering task."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    directory: Path = Field(..., description="Template directory")
    name: str = Field(..., min_length=1, description="Logical template name")
    target: Path = Field(..., description="Output file path")
    controller: ControllerSpec | None = Field(
        default=None, description="Controller providing template data"
    )
    properties: dict[str, str] = Field(
        default_factory=dict, description="Static template attributes"
    )
    delimiters: tuple[str, str] | None = Field(
        default=None, description="Variable start/end strings, e.g. ('<', '>')"
    )
    suffix: str = Field(default=".j2", description="Template file suffix")

    @property
    def template_file(self) -> str:
        if Path(self.name).suffix:
            return self.name
        return f"{self.name}{self.suffix}"


class GenerationConfig(BaseModel):
    """Configuration for a whole generation run."""

    project: BuildProject = Field(default_factory=BuildProject)
    templates: list[GenerationUnit] = Field(
        ..., min_length=1, description="Generation units in processing order"
    )
