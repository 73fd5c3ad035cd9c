"""Recursive materialisation of a package's transitive dependencies."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set

from ..errors import MissingDependency, SanitizedCollision, UnreadableSource
from ..logging import get_logger
from ..models import PACKAGE_FILENAME, SOURCE_SUFFIX, PackageReference
from ..references import read_package_file, read_source, scan_references

DEPS_DIRNAME = "deps"


@dataclass
class ResolutionContext:
    """Per-staging bookkeeping: references already placed and their tokens."""

    visited: Set[str] = field(default_factory=set)
    tokens: Dict[str, str] = field(default_factory=dict)

    def seen(self, reference: PackageReference) -> bool:
        return str(reference) in self.visited

    def claim(self, reference: PackageReference) -> bool:
        """Mark `reference` as placed; False when it already was.

        Raises `SanitizedCollision` when a different reference already owns the
        same sanitized token.
        """
        canonical = str(reference)
        if canonical in self.visited:
            return False
        token = reference.sanitized
        owner = self.tokens.get(token)
        if owner is not None and owner != canonical:
            raise SanitizedCollision(token, owner, canonical)
        self.tokens[token] = canonical
        self.visited.add(canonical)
        return True


@dataclass(frozen=True)
class PackageSource:
    """Location of a dependency's source: a single file or a package directory."""

    path: Path

    @property
    def files(self) -> List[Path]:
        if self.path.is_dir():
            return sorted(
                item for item in self.path.glob(f"*{SOURCE_SUFFIX}") if item.is_file()
            )
        return [self.path]


class DependencyResolver:
    """Locates dependency sources under a WIT directory and copies them into place."""

    def __init__(self, wit_dir: Path) -> None:
        self.wit_dir = wit_dir
        self.logger = get_logger("resolver")

    def locate(self, reference: PackageReference) -> PackageSource:
        """Return where the source for `reference` lives.

        Lookup order: `<stem>.wit`, then a `<stem>/` package directory, then any
        top-level file whose package declaration names the reference.
        """
        expected = self.wit_dir / f"{reference.source_stem}{SOURCE_SUFFIX}"
        if expected.is_file():
            return PackageSource(expected)

        package_dir = self.wit_dir / reference.source_stem
        if package_dir.is_dir() and any(package_dir.glob(f"*{SOURCE_SUFFIX}")):
            return PackageSource(package_dir)

        canonical = str(reference)
        if self.wit_dir.is_dir():
            for candidate in sorted(self.wit_dir.glob(f"*{SOURCE_SUFFIX}")):
                if not candidate.is_file():
                    continue
                try:
                    declared = read_package_file(candidate)
                except UnreadableSource as exc:
                    self.logger.debug("Skipping %s while resolving %s: %s", candidate, canonical, exc)
                    continue
                if declared == canonical:
                    self.logger.debug("Resolved %s via declaration in %s", canonical, candidate)
                    return PackageSource(candidate)

        raise MissingDependency(canonical, expected)

    def dependencies_of(self, paths: List[Path], *, owner: str) -> List[PackageReference]:
        """Return the sorted versioned dependencies declared across `paths`."""
        versioned: Set[str] = set()
        unversioned: Set[str] = set()
        for path in paths:
            scan = scan_references(read_source(path))
            versioned.update(scan.versioned)
            unversioned.update(scan.unversioned)
        for package in sorted(unversioned):
            self.logger.debug(
                "Ignoring unversioned reference %s in %s; only versioned packages are resolvable",
                package,
                owner,
            )
        if not versioned and not unversioned:
            self.logger.debug("%s declares no dependencies", owner)
        return [PackageReference.parse(item) for item in sorted(versioned)]

    def materialize(
        self,
        reference: PackageReference,
        deps_root: Path,
        context: ResolutionContext,
    ) -> None:
        """Copy `reference` and, recursively, its dependencies under `deps_root`."""
        if context.seen(reference):
            self.logger.debug("%s already staged; reusing first copy", reference)
            return
        source = self.locate(reference)
        context.claim(reference)

        dest_dir = deps_root / reference.sanitized
        if dest_dir.exists():
            return
        dest_dir.mkdir(parents=True)
        self._copy_source(source, dest_dir)

        children = self.dependencies_of(source.files, owner=str(reference))
        if not children:
            return
        nested_root = dest_dir / DEPS_DIRNAME
        nested_root.mkdir(exist_ok=True)
        for child in children:
            self.materialize(child, nested_root, context)

    def plan(
        self, reference: PackageReference, context: ResolutionContext
    ) -> List[PackageReference]:
        """Walk the dependency graph of `reference` without writing anything.

        Returns the references that `materialize` would place, in placement order,
        and raises the same errors it would.
        """
        if context.seen(reference):
            return []
        source = self.locate(reference)
        context.claim(reference)
        placed = [reference]
        for child in self.dependencies_of(source.files, owner=str(reference)):
            placed.extend(self.plan(child, context))
        return placed

    @staticmethod
    def _copy_source(source: PackageSource, dest_dir: Path) -> None:
        if source.path.is_dir():
            for item in source.files:
                shutil.copyfile(item, dest_dir / item.name)
        else:
            shutil.copyfile(source.path, dest_dir / PACKAGE_FILENAME)


__all__ = ["DEPS_DIRNAME", "DependencyResolver", "PackageSource", "ResolutionContext"]
