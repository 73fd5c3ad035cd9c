"""Stage driver: persist staged package trees for binding generators."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from ..errors import UnsafeStagingDir, WitpackError
from ..models import FileOutcome, SourceFile
from .base import Pipeline


class StagePipeline(Pipeline):
    """Writes `<staging_dir>/<sanitized-ref>/package.wit` plus `deps/` for each source.

    World packages are already self-contained directories and are left in place.
    """

    name = "stage"

    def check_prerequisites(self) -> None:
        self._check_staging_dir()
        super().check_prerequisites()

    def before_batch(self, sources: List[Path]) -> None:
        if self.dry_run:
            return
        if self.config.staging_dir.exists():
            shutil.rmtree(self.config.staging_dir)
        self.config.staging_dir.mkdir(parents=True)

    def process(self, source: SourceFile) -> FileOutcome:
        if source.is_world:
            return self.skipped(source, "world package staged in place")

        dest = self.config.staging_dir / source.reference.sanitized
        if self.dry_run:
            placed = self.staging.check(source)
            self.logger.info(
                "(dry-run) stage %s -> %s (%d dependencies)", source.reference, dest, len(placed)
            )
            return self.ok(source, message="dry-run")

        if dest.exists():
            raise WitpackError(f"{source.reference} was already staged by another source")

        self.logger.info("Staging %s -> %s", source.reference, dest)
        try:
            self.staging.populate(source, dest)
        except (WitpackError, OSError):
            shutil.rmtree(dest, ignore_errors=True)
            raise
        return self.ok(source, artifact=dest)

    def _check_staging_dir(self) -> None:
        """Refuse a staging directory whose removal would delete project sources."""
        staging = self.config.staging_dir.expanduser().resolve()
        for protected in (self.config.root, self.config.wit_dir):
            protected = protected.expanduser().resolve()
            if staging == protected or staging in protected.parents:
                raise UnsafeStagingDir(
                    f"Refusing to clear {staging}: it contains {protected}"
                )
        wit_dir = self.config.wit_dir.expanduser().resolve()
        if wit_dir in staging.parents:
            raise UnsafeStagingDir(f"Refusing to stage into {staging}: it lies inside {wit_dir}")


__all__ = ["StagePipeline"]
