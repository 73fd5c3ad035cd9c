"""Publish driver: push packaged WIT artifacts to an OCI registry."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Mapping, Optional

from ..config import Credentials, WitpackConfig
from ..errors import RegistryLoginError
from ..models import BatchResult, FileOutcome, SourceFile
from ..tools import RegistryClient, describe, image_reference
from .base import Pipeline
from .package import PackagePipeline, artifact_path


class PublishPipeline(Pipeline):
    """Optionally packages everything, logs in once, then pushes each artifact.

    Dependencies are not re-derived here: each source only contributes its
    package declaration, which names both the artifact and the image.
    """

    name = "publish"

    def __init__(
        self,
        config: WitpackConfig,
        *,
        env: Optional[Mapping[str, str]] = None,
        skip_package: bool = False,
        client: RegistryClient | None = None,
        package_pipeline: PackagePipeline | None = None,
        **kwargs,
    ) -> None:
        super().__init__(config, **kwargs)
        self.env = os.environ if env is None else env
        self.skip_package = skip_package
        self.client = client or RegistryClient(config.tools, runner=self.runner)
        self.package_pipeline = package_pipeline
        self.credentials: Credentials | None = None

    def required_tools(self) -> List[str]:
        return [self.config.tools.wkg, self.config.tools.docker]

    def check_prerequisites(self) -> None:
        self.credentials = self.config.credentials(self.env)
        super().check_prerequisites()

    def start_batch(self) -> BatchResult:
        upstream = None
        if not self.skip_package:
            packager = self.package_pipeline or PackagePipeline(
                self.config,
                runner=self.runner,
                which=self.which,
                staging=self.staging,
            )
            upstream = packager.run()
            if upstream.failed:
                self.logger.error("Packaging reported failures; publishing the artifacts that exist")
        return BatchResult(pipeline=self.name, upstream=upstream)

    def before_batch(self, sources: List[Path]) -> None:
        if not self.dry_run:
            self.config.out_dir.mkdir(parents=True, exist_ok=True)
        self._login()

    def process(self, source: SourceFile) -> FileOutcome:
        reference = source.reference
        artifact = artifact_path(self.config, reference)

        if self.is_excluded(source):
            self.logger.info("Skipping publish for upstream package %s", reference)
            return self.skipped(source, "upstream package")

        image = image_reference(
            self.config.publish.registry,
            self._account,
            self.config.publish.repo_prefix,
            reference,
        )

        if self.dry_run:
            self.logger.info("Preparing %s", reference)
            self.logger.info("  (dry-run) ensure artifact: %s", artifact)
            # Without --skip-package the artifact would come from the (dry-run) package step.
            if self.skip_package and not artifact.is_file():
                return self._missing_artifact(source, artifact)
            self.logger.info("  (dry-run) %s", describe(self.client.push_command(image, artifact)))
            return self.ok(source, message=image)

        if not artifact.is_file():
            return self._missing_artifact(source, artifact)

        result = self.client.push(image, artifact)
        if not result.ok:
            if result.output.strip():
                self.logger.error("%s", result.output.rstrip())
            self.logger.error("  Failed to publish %s", reference)
            return self.failed(source, result.output.strip() or f"push to {image} failed")

        if result.output.strip():
            self.logger.info("%s", result.output.rstrip())
        return self.ok(source, message=image, artifact=artifact)

    @property
    def _account(self) -> str:
        return self.credentials.user if self.credentials else ""

    def _login(self) -> None:
        registry = self.config.publish.registry
        command = self.client.login_command(registry, self._account)
        if self.dry_run:
            self.logger.info(
                '(dry-run) echo "$%s" | %s', self.config.publish.token_env, describe(command)
            )
            return
        credentials = self.credentials or self.config.credentials(self.env)
        self.logger.info("Logging into %s as %s", registry, credentials.user)
        result = self.client.login(registry, credentials)
        if not result.ok:
            raise RegistryLoginError(f"{self.config.tools.docker} login", result.output)

    def _missing_artifact(self, source: SourceFile, artifact: Path) -> FileOutcome:
        message = f"Artifact {artifact} not found; run without --skip-package."
        self.logger.error("  %s", message)
        return self.failed(source, message)


__all__ = ["PublishPipeline"]
