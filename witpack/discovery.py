"""Enumeration of WIT sources under a project's interface directory."""

from __future__ import annotations

from pathlib import Path
from typing import List

from .errors import MissingPackageDeclaration
from .models import SOURCE_SUFFIX, PackageReference, SourceFile
from .references import read_package_file


def discover_sources(wit_dir: Path) -> List[Path]:
    """Return `.wit` files directly under `wit_dir` and one directory below it.

    Top-level files come first, then nested ones, each group sorted by path.
    """
    if not wit_dir.is_dir():
        return []
    top_level = sorted(
        path for path in wit_dir.glob(f"*{SOURCE_SUFFIX}") if path.is_file()
    )
    nested = sorted(
        path for path in wit_dir.glob(f"*/*{SOURCE_SUFFIX}") if path.is_file()
    )
    return top_level + nested


def load_source(path: Path) -> SourceFile:
    """Read the package declaration of `path` into a `SourceFile`."""
    declaration = read_package_file(path)
    if not declaration:
        raise MissingPackageDeclaration(path)
    return SourceFile(path=path, reference=PackageReference.parse(declaration))


__all__ = ["discover_sources", "load_source"]
