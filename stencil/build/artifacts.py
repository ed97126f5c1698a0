"""Dependency views and classpath construction for controller resolution."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Literal, Protocol

from ..core.models import Artifact, BuildProject

logger = logging.getLogger(__name__)

RUNTIME_SCOPES = frozenset({"compile", "runtime"})

ViewMode = Literal["direct", "runtime"]


class DependencyResolver(Protocol):
    """Provides artifact file locations for a project and scope filter."""

    def resolve(self, project: BuildProject, scopes: Iterable[str]) -> list[Path]: ...


class ProjectDependencyResolver:
    """Resolves files from the project's currently visible artifacts."""

    def resolve(self, project: BuildProject, scopes: Iterable[str]) -> list[Path]:
        wanted = set(scopes)
        files: list[Path] = []
        for artifact in project.artifacts or []:
            if artifact.scope not in wanted:
                continue
            path = project.resolve_path(artifact.path)
            logger.debug(
                f"Artifact {artifact.name}:{artifact.version or 'unversioned'} ({artifact.scope}) -> {path}"
            )
            if path not in files:
                files.append(path)
        return files


class ArtifactView:
    """Narrows the project's visible artifacts and puts them back afterwards.

    The visible artifact set is shared by everything holding the project, so
    a narrowed view must always be restored before another unit resolves.
    """

    def __init__(self, project: BuildProject, mode: ViewMode = "direct") -> None:
        self.project = project
        self.mode = mode

    def narrow(self) -> list[Artifact]:
        """Replace the visible artifacts with the narrowed subset.

        Returns:
            The previously visible artifacts, for :meth:`restore`
        """
        original = list(self.project.artifacts or [])
        if self.mode == "direct":
            narrowed = self.project.dependency_artifacts()
        else:
            narrowed = [a for a in original if a.scope in RUNTIME_SCOPES]
        logger.debug(
            f"Narrowed artifacts ({self.mode}): {len(original)} -> {len(narrowed)}"
        )
        self.project.artifacts = narrowed
        return original

    def restore(self, original: list[Artifact]) -> None:
        self.project.artifacts = list(original)


def runtime_classpath(
    project: BuildProject, resolver: DependencyResolver | None = None
) -> list[Path]:
    """Output directory followed by the runtime-scoped artifact files."""
    resolver = resolver or ProjectDependencyResolver()
    roots = [project.resolve_path(project.output_directory)]
    for path in resolver.resolve(project, RUNTIME_SCOPES):
        if path not in roots:
            roots.append(path)
    return roots


@contextmanager
def resolution_window(
    project: BuildProject,
    mode: ViewMode = "direct",
    resolver: DependencyResolver | None = None,
) -> Iterator[list[Path]]:
    """Narrow the dependency view for one resolution and always restore it.

    Yields:
        Classpath roots computed from the narrowed view
    """
    view = ArtifactView(project, mode)
    logger.info("Configuring classpath...")
    original = view.narrow()
    try:
        yield runtime_classpath(project, resolver)
    finally:
        logger.info("Resetting classpath...")
        view.restore(original)
