"""Error types raised while resolving, staging and shipping WIT packages."""

from __future__ import annotations

from pathlib import Path


class WitpackError(RuntimeError):
    """Base class for witpack failures."""


class InvalidReference(WitpackError):
    """Raised when a string is not a `namespace:name[@version]` reference."""


class MissingPackageDeclaration(WitpackError):
    """Raised when a source file carries no `package` declaration."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path}: package declaration not found")


class UnreadableSource(WitpackError):
    """Raised when a source file cannot be read or is not valid UTF-8."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: cannot read source ({reason})")


class UnsafeStagingDir(WitpackError):
    """Raised when clearing the staging directory would remove project sources."""


class MissingDependency(WitpackError):
    """Raised when a referenced package has no source file on disk."""

    def __init__(self, reference: str, expected: Path) -> None:
        self.reference = reference
        self.expected = expected
        super().__init__(f"Missing dependency {reference} (expected {expected})")


class SanitizedCollision(WitpackError):
    """Raised when two distinct references sanitize to the same token."""

    def __init__(self, token: str, existing: str, incoming: str) -> None:
        self.token = token
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"References {existing} and {incoming} both sanitize to '{token}'"
        )


class ExternalToolFailure(WitpackError):
    """Raised when an external tool exits unsuccessfully."""

    def __init__(self, tool: str, output: str = "") -> None:
        self.tool = tool
        self.output = output
        message = f"{tool} failed"
        if output.strip():
            message = f"{message}:\n{output.rstrip()}"
        super().__init__(message)


class RegistryLoginError(ExternalToolFailure):
    """Raised when the registry login step fails; fatal for a publish run."""


class MissingPrerequisite(WitpackError):
    """Raised when a required tool binary or credential is unavailable."""


__all__ = [
    "ExternalToolFailure",
    "InvalidReference",
    "MissingDependency",
    "MissingPackageDeclaration",
    "MissingPrerequisite",
    "RegistryLoginError",
    "SanitizedCollision",
    "UnreadableSource",
    "UnsafeStagingDir",
    "WitpackError",
]
