"""Package driver: build a binary WIT package for every discovered source."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..config import WitpackConfig
from ..errors import ExternalToolFailure
from ..models import BatchResult, FileOutcome, PackageReference, SourceFile
from ..tools import ComponentBuilder, ToolResult, describe
from .base import Pipeline

ARTIFACT_SUFFIX = ".wasm"


def artifact_path(config: WitpackConfig, reference: PackageReference) -> Path:
    """Return where the packaged artifact for `reference` is written."""
    return config.out_dir / f"{reference.sanitized}{ARTIFACT_SUFFIX}"


class PackagePipeline(Pipeline):
    """Stages each source and hands it to the component builder."""

    name = "package"

    def __init__(self, config: WitpackConfig, *, builder: ComponentBuilder | None = None, **kwargs) -> None:
        super().__init__(config, **kwargs)
        self.builder = builder or ComponentBuilder(config.tools, runner=self.runner)

    def required_tools(self) -> List[str]:
        return [self.config.tools.wasm_tools, self.config.tools.wkg]

    def before_batch(self, sources: List[Path]) -> None:
        if not self.dry_run:
            self.config.out_dir.mkdir(parents=True, exist_ok=True)

    def after_batch(self, result: BatchResult) -> None:
        self.logger.info("Artifacts written to %s", self.config.out_dir)

    def process(self, source: SourceFile) -> FileOutcome:
        output = artifact_path(self.config, source.reference)
        self.logger.info("Packaging %s -> %s", source.reference, output)

        if self.is_excluded(source):
            self.logger.info("  Skipping packaging for upstream dependency %s", source.reference)
            return self.skipped(source, "upstream dependency")

        if source.is_world:
            if self.dry_run:
                command = self.builder.world_command(source.package_dir, output)
                self.logger.info("  (dry-run) %s", describe(command))
                return self.ok(source, message="dry-run")
            return self._record(source, self.builder.build_world(source.package_dir, output))

        if self.dry_run:
            self.staging.check(source)
            command = self.builder.staged_command(Path("<staged>"), output)
            self.logger.info("  (dry-run) %s", describe(command))
            return self.ok(source, message="dry-run")

        with self.staging.stage(source) as staged:
            result = self.builder.build_staged(staged, output)
        return self._record(source, result)

    def _record(self, source: SourceFile, result: ToolResult) -> FileOutcome:
        if result.ok:
            return self.ok(source, artifact=result.artifact)
        failure = ExternalToolFailure("component build", result.output)
        self.logger.error("  Failed to package %s", source.reference)
        if result.output.strip():
            self.logger.error("%s", result.output.rstrip())
        return self.failed(source, str(failure))


__all__ = ["ARTIFACT_SUFFIX", "PackagePipeline", "artifact_path"]
