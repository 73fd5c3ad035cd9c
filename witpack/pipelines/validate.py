"""Validate driver: generate binding docs and compile-check every source."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from ..config import WitpackConfig
from ..errors import ExternalToolFailure
from ..models import FileOutcome, SourceFile
from ..tools import BindingValidator, CompileChecker, describe
from .base import Pipeline


class ValidatePipeline(Pipeline):
    """Runs the binding validator and the compile checker against each package."""

    name = "validate"

    def __init__(
        self,
        config: WitpackConfig,
        *,
        validator: BindingValidator | None = None,
        checker: CompileChecker | None = None,
        **kwargs,
    ) -> None:
        super().__init__(config, **kwargs)
        self.validator = validator or BindingValidator(config.tools, runner=self.runner)
        self.checker = checker or CompileChecker(config.tools, runner=self.runner)

    def required_tools(self) -> List[str]:
        return [self.config.tools.wit_bindgen, self.config.tools.wasm_tools]

    def process(self, source: SourceFile) -> FileOutcome:
        label = self.display(source.path)
        self.logger.info("Checking %s", label)

        if self.is_excluded(source):
            self.logger.info("  Skipping validation for upstream dependency %s", source.reference)
            return self.skipped(source, "upstream dependency")

        if source.is_world:
            world = self.config.worlds.get(source.package_dir.name)
            return self._validate(source, source.package_dir, world)

        if self.dry_run:
            self.staging.check(source)
            return self._validate(source, Path("<staged>"), None)

        with self.staging.stage(source) as staged:
            return self._validate(source, staged, None)

    def _validate(self, source: SourceFile, package_dir: Path, world: Optional[str]) -> FileOutcome:
        label = self.display(source.path)
        if self.dry_run:
            docs_command = self.validator.command(package_dir, Path("<docs>"), world)
            check_command = self.checker.command(package_dir, Path("<check>.wasm"))
            self.logger.info("  (dry-run) %s", describe(docs_command))
            self.logger.info("  (dry-run) %s", describe(check_command))
            return self.ok(source, message="dry-run")

        failures: List[str] = []
        docs = self.validator.check(package_dir, world)
        if not docs.ok:
            self.logger.error("  wit-bindgen validation failed for %s", label)
            failures.append(str(ExternalToolFailure(self.config.tools.wit_bindgen, docs.output)))

        compiled = self.checker.check(package_dir)
        if not compiled.ok:
            self.logger.error("  wasm-tools packaging failed for %s", label)
            failures.append(str(ExternalToolFailure(self.config.tools.wasm_tools, compiled.output)))

        if failures:
            return self.failed(source, "\n".join(failures))
        return self.ok(source)


__all__ = ["ValidatePipeline"]
