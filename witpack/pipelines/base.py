"""Shared discovery and per-file error isolation for pipeline drivers."""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional

from ..config import WitpackConfig
from ..discovery import discover_sources, load_source
from ..errors import MissingPrerequisite, RegistryLoginError, WitpackError
from ..logging import get_logger
from ..models import (
    OUTCOME_FAILED,
    OUTCOME_OK,
    OUTCOME_SKIPPED,
    BatchResult,
    FileOutcome,
    PackageReference,
    SourceFile,
)
from ..staging import DependencyResolver, StagingBuilder
from ..tools import Runner, require_tools

Which = Callable[[str], Optional[str]]


class Pipeline(ABC):
    """Runs one step over every discovered WIT source and aggregates the outcomes.

    A failure for one file is logged and recorded; it never stops the batch.
    Missing prerequisites are checked before any file is touched and abort the
    whole run.
    """

    name = "pipeline"

    def __init__(
        self,
        config: WitpackConfig,
        *,
        runner: Runner | None = None,
        which: Which | None = None,
        staging: StagingBuilder | None = None,
    ) -> None:
        self.config = config
        self.runner = runner
        self.which = which or shutil.which
        self.staging = staging or StagingBuilder(DependencyResolver(config.wit_dir))
        self.logger = get_logger(self.name)

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    def required_tools(self) -> List[str]:
        return []

    def check_prerequisites(self) -> None:
        # Dry runs never invoke tools, so their presence is not required.
        if not self.dry_run:
            require_tools(self.required_tools(), which=self.which)

    def run(self) -> BatchResult:
        self.check_prerequisites()
        result = self.start_batch()
        sources = discover_sources(self.config.wit_dir)
        if not sources:
            self.logger.info("No WIT files found under %s.", self.config.wit_dir)
            return result

        self.before_batch(sources)
        for path in sources:
            result.add(self._process_path(path))
        self.after_batch(result)
        return result

    def start_batch(self) -> BatchResult:
        return BatchResult(pipeline=self.name)

    def before_batch(self, sources: List[Path]) -> None:
        """Hook run once after discovery when at least one source exists."""

    def after_batch(self, result: BatchResult) -> None:
        """Hook run once after every source has been processed."""

    @abstractmethod
    def process(self, source: SourceFile) -> FileOutcome:
        """Handle a single source file."""

    # ------------------------------------------------------------------
    # Helpers

    def is_excluded(self, source: SourceFile) -> bool:
        if self.config.is_excluded(str(source.reference)):
            return True
        if not source.is_world:
            return False
        return source.package_dir.name in self._excluded_stems()

    def display(self, path: Path) -> str:
        try:
            return path.relative_to(self.config.root).as_posix()
        except ValueError:
            return str(path)

    def ok(self, source: SourceFile, *, message: str = "", artifact: Path | None = None) -> FileOutcome:
        return FileOutcome(
            path=source.path,
            status=OUTCOME_OK,
            reference=str(source.reference),
            message=message,
            artifact=artifact,
        )

    def skipped(self, source: SourceFile, message: str) -> FileOutcome:
        return FileOutcome(
            path=source.path,
            status=OUTCOME_SKIPPED,
            reference=str(source.reference),
            message=message,
        )

    def failed(self, source: SourceFile, message: str) -> FileOutcome:
        return FileOutcome(
            path=source.path,
            status=OUTCOME_FAILED,
            reference=str(source.reference),
            message=message,
        )

    def _process_path(self, path: Path) -> FileOutcome:
        try:
            source = load_source(path)
        except WitpackError as exc:
            self.logger.error("Skipping %s: %s", self.display(path), exc)
            return FileOutcome(path=path, status=OUTCOME_FAILED, message=str(exc))

        try:
            return self.process(source)
        except (MissingPrerequisite, RegistryLoginError):
            raise
        except WitpackError as exc:
            self.logger.error("  %s (%s): %s", source.reference, self.display(path), exc)
            return self.failed(source, str(exc))
        except OSError as exc:
            # Copy or directory errors while staging one file stay local to it.
            self.logger.error("  %s (%s): %s", source.reference, self.display(path), exc)
            return self.failed(source, f"{exc.__class__.__name__}: {exc}")

    def _excluded_stems(self) -> set[str]:
        stems = set()
        for item in self.config.excluded:
            try:
                stems.add(PackageReference.parse(item).source_stem)
            except WitpackError:
                stems.add(item)
        return stems


__all__ = ["Pipeline", "Which"]
