"""Assembly of self-contained package directories for external WIT tools."""

from __future__ import annotations

import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from ..logging import get_logger
from ..models import PACKAGE_FILENAME, PackageReference, SourceFile
from .resolver import DEPS_DIRNAME, DependencyResolver, ResolutionContext


class StagingBuilder:
    """Builds `package.wit` + `deps/` trees for one primary source at a time.

    The primary package's own reference seeds the visited set, so a dependency
    that loops back to the primary is never copied underneath it.
    """

    def __init__(self, resolver: DependencyResolver) -> None:
        self.resolver = resolver
        self.logger = get_logger("staging")

    @contextmanager
    def stage(self, source: SourceFile) -> Iterator[Path]:
        """Yield an ephemeral staging root for `source`.

        The temporary directory is removed on every exit path, including when
        dependency resolution fails part-way.
        """
        with tempfile.TemporaryDirectory(prefix="witpack-") as tmp:
            root = Path(tmp)
            self.populate(source, root)
            yield root

    def populate(self, source: SourceFile, root: Path) -> List[PackageReference]:
        """Write the staged layout for `source` into `root` and return placed dependencies."""
        root.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source.path, root / PACKAGE_FILENAME)

        context = self._context_for(source)
        direct = self.resolver.dependencies_of([source.path], owner=str(source.path))
        if not direct:
            return []

        deps_root = root / DEPS_DIRNAME
        deps_root.mkdir(exist_ok=True)
        for reference in direct:
            self.resolver.materialize(reference, deps_root, context)
        placed = sorted(context.visited - {str(source.reference)})
        self.logger.debug("Staged %s with %d dependencies", source.reference, len(placed))
        return [PackageReference.parse(item) for item in placed]

    def check(self, source: SourceFile) -> List[PackageReference]:
        """Resolve the whole dependency graph of `source` without touching disk."""
        context = self._context_for(source)
        placed: List[PackageReference] = []
        for reference in self.resolver.dependencies_of([source.path], owner=str(source.path)):
            placed.extend(self.resolver.plan(reference, context))
        return placed

    @staticmethod
    def _context_for(source: SourceFile) -> ResolutionContext:
        context = ResolutionContext()
        context.claim(source.reference)
        return context


__all__ = ["StagingBuilder"]
