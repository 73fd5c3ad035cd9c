"""Core data models shared across witpack components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import InvalidReference
from .references import sanitize

WORLD_FILENAME = "world.wit"
PACKAGE_FILENAME = "package.wit"
SOURCE_SUFFIX = ".wit"


@dataclass(frozen=True, order=True)
class PackageReference:
    """A `namespace:name@version` package identifier.

    Equality is plain string identity of the three parts; versions are never
    compared semantically. An empty version means "unversioned".
    """

    namespace: str
    name: str
    version: str = ""

    @classmethod
    def parse(cls, text: str) -> "PackageReference":
        raw = text.strip().rstrip(";").strip()
        package, _, version = raw.partition("@")
        namespace, sep, name = package.partition(":")
        if not sep or not namespace or not name:
            raise InvalidReference(f"Invalid package reference: {text!r}")
        return cls(namespace=namespace, name=name, version=version)

    def __str__(self) -> str:
        if self.version:
            return f"{self.package}@{self.version}"
        return self.package

    @property
    def package(self) -> str:
        return f"{self.namespace}:{self.name}"

    @property
    def sanitized(self) -> str:
        return sanitize(str(self))

    @property
    def source_stem(self) -> str:
        """File or directory stem under which this package's source is kept."""
        return f"{self.package.replace(':', '-')}@{self.version}"

    @property
    def tag(self) -> str:
        """Registry tag for the version, `latest` when unversioned."""
        return sanitize(self.version) or "latest"


@dataclass(frozen=True)
class SourceFile:
    """One discovered WIT source and the package it declares."""

    path: Path
    reference: PackageReference

    @property
    def is_world(self) -> bool:
        return self.path.name == WORLD_FILENAME

    @property
    def package_dir(self) -> Path:
        return self.path.parent


OUTCOME_OK = "ok"
OUTCOME_FAILED = "failed"
OUTCOME_SKIPPED = "skipped"


@dataclass
class FileOutcome:
    """Result of running one pipeline step for one source file."""

    path: Path
    status: str
    reference: Optional[str] = None
    message: str = ""
    artifact: Optional[Path] = None

    @property
    def failed(self) -> bool:
        return self.status == OUTCOME_FAILED


@dataclass
class BatchResult:
    """Accumulated outcomes of one pipeline run."""

    pipeline: str
    outcomes: List[FileOutcome] = field(default_factory=list)
    upstream: Optional["BatchResult"] = None

    def add(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def failed(self) -> bool:
        if self.upstream is not None and self.upstream.failed:
            return True
        return any(outcome.failed for outcome in self.outcomes)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)


__all__ = [
    "BatchResult",
    "FileOutcome",
    "OUTCOME_FAILED",
    "OUTCOME_OK",
    "OUTCOME_SKIPPED",
    "PACKAGE_FILENAME",
    "PackageReference",
    "SOURCE_SUFFIX",
    "SourceFile",
    "WORLD_FILENAME",
]
