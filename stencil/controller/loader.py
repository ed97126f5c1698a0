"""Symbolic controller class lookup over an explicit set of roots."""

from __future__ import annotations

import importlib
import importlib.abc
import logging
import os
import sys
import zipimport
from importlib.machinery import (
    BYTECODE_SUFFIXES,
    EXTENSION_SUFFIXES,
    SOURCE_SUFFIXES,
    ExtensionFileLoader,
    FileFinder,
    ModuleSpec,
    SourceFileLoader,
    SourcelessFileLoader,
)
from pathlib import Path
from typing import Iterable, Sequence

from ..errors import LoadError, TypeNotFound

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = frozenset({".zip", ".whl", ".egg"})

_LOADER_DETAILS = (
    (ExtensionFileLoader, EXTENSION_SUFFIXES),
    (SourceFileLoader, SOURCE_SUFFIXES),
    (SourcelessFileLoader, BYTECODE_SUFFIXES),
)


def _entry_finder(entry: str):
    """Fresh finder for one path entry, bypassing ``sys.path_importer_cache``."""
    if Path(entry).is_dir():
        return FileFinder(entry, *_LOADER_DETAILS)
    try:
        return zipimport.zipimporter(entry)
    except zipimport.ZipImportError:
        return None


class RootsFinder(importlib.abc.MetaPathFinder):
    """Meta path finder that only searches the supplied roots."""

    def __init__(self, roots: Sequence[Path]) -> None:
        self.roots = [str(root) for root in roots]
        self.loaded: list[str] = []

    def _owns(self, entry: str) -> bool:
        return any(
            entry == root or entry.startswith(root + os.sep) for root in self.roots
        )

    def find_spec(
        self, fullname: str, path: Sequence[str] | None = None, target: object = None
    ) -> ModuleSpec | None:
        if path is None:
            entries = self.roots
        else:
            entries = [entry for entry in path if self._owns(entry)]

        for entry in entries:
            finder = _entry_finder(entry)
            if finder is None:
                continue
            spec = finder.find_spec(fullname)
            if spec is not None and (spec.loader is not None or spec.submodule_search_locations):
                self.loaded.append(fullname)
                return spec
        return None


def _is_same_or_parent(name: str, module_name: str) -> bool:
    return module_name == name or module_name.startswith(name + ".")


def _stash_namespace(top_level: str) -> dict[str, object]:
    """Remove and return every imported module under ``top_level``."""
    stashed = {
        name: module
        for name, module in sys.modules.items()
        if _is_same_or_parent(top_level, name)
    }
    for name in stashed:
        del sys.modules[name]
    return stashed


class SymbolLoader:
    """Resolves dotted class names against an ordered set of roots."""

    def prepare_roots(self, roots: Iterable[Path]) -> list[Path]:
        """Validate roots, dropping those that do not exist yet.

        Raises:
            LoadError: A root exists but is neither a directory nor an archive
        """
        prepared: list[Path] = []
        for root in roots:
            root = Path(root).absolute()
            if not root.exists():
                logger.debug(f"Skipping missing classpath root: {root}")
                continue
            if root.is_file():
                if root.suffix not in ARCHIVE_SUFFIXES:
                    raise LoadError(f"Malformed classpath entry: {root}")
                try:
                    zipimport.zipimporter(str(root))
                except zipimport.ZipImportError as e:
                    raise LoadError(f"Malformed classpath entry: {root} ({e})") from e
            prepared.append(root)
        return prepared

    def resolve(self, class_name: str, roots: Iterable[Path]) -> type:
        """Load ``class_name`` from the given roots.

        Args:
            class_name: Dotted ``module.Class`` name
            roots: Ordered classpath roots

        Returns:
            The controller class

        Raises:
            TypeNotFound: Module or class is not present in the roots
            LoadError: The module was found but failed to load
        """
        module_name, _, simple_name = class_name.rpartition(".")
        if not module_name:
            raise LoadError(f"Not a dotted class name: {class_name!r}", class_name=class_name)

        try:
            prepared = self.prepare_roots(roots)
        except LoadError as e:
            e.class_name = class_name
            raise
        logger.debug(f"Classpath roots: {[str(r) for r in prepared]}")

        finder = RootsFinder(prepared)
        top_level = module_name.partition(".")[0]
        stashed = _stash_namespace(top_level)
        if stashed:
            logger.debug(f"Hiding {len(stashed)} previously imported module(s) during lookup")
        importlib.invalidate_caches()
        sys.meta_path.insert(0, finder)
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if e.name and _is_same_or_parent(e.name, module_name):
                raise TypeNotFound(
                    f"Class {class_name} not found: no module named {e.name!r}",
                    class_name=class_name,
                ) from e
            raise LoadError(
                f"Unable to load {module_name}: {e}", class_name=class_name
            ) from e
        except Exception as e:
            raise LoadError(
                f"Unable to load {module_name}: {e}", class_name=class_name
            ) from e
        finally:
            sys.meta_path.remove(finder)
            for name in finder.loaded:
                sys.modules.pop(name, None)
            if stashed:
                _stash_namespace(top_level)
                sys.modules.update(stashed)

        controller_class = getattr(module, simple_name, None)
        if controller_class is None:
            raise TypeNotFound(
                f"Class {class_name} not found: module {module_name} has no attribute {simple_name!r}",
                class_name=class_name,
            )
        if not isinstance(controller_class, type):
            raise LoadError(
                f"{class_name} is a {type(controller_class).__name__}, not a class",
                class_name=class_name,
            )
        return controller_class
