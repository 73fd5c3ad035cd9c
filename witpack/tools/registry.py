"""OCI registry login and push via docker and wkg."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..config import Credentials, ToolsConfig
from ..models import PackageReference
from .runner import Runner, ToolResult, run_tool


def image_reference(
    registry: str, account: str, prefix: str, reference: PackageReference
) -> str:
    """Return `<registry>/<account>/<prefix>/<namespace>/<name>:<tag>`."""
    return f"{registry}/{account}/{prefix}/{reference.namespace}/{reference.name}:{reference.tag}"


class RegistryClient:
    """Thin wrapper over `docker login` and `wkg oci push`."""

    def __init__(self, tools: ToolsConfig, runner: Runner | None = None) -> None:
        self.tools = tools
        self._runner = runner or run_tool

    def login_command(self, registry: str, user: str) -> List[str]:
        return [self.tools.docker, "login", registry, "-u", user, "--password-stdin"]

    def login(self, registry: str, credentials: Credentials) -> ToolResult:
        # The token is passed on stdin only, never on the command line.
        return self._runner(
            self.login_command(registry, credentials.user),
            input_text=credentials.token,
        )

    def push_command(self, image: str, artifact: Path) -> List[str]:
        return [self.tools.wkg, "oci", "push", image, str(artifact)]

    def push(self, image: str, artifact: Path) -> ToolResult:
        return self._runner(self.push_command(image, artifact))


__all__ = ["RegistryClient", "image_reference"]
