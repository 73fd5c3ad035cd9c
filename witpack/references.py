"""Parsing and sanitising of WIT package references."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import UnreadableSource

_PACKAGE_TOKEN = r"[A-Za-z0-9-]+(?::[A-Za-z0-9-]+)+"

_VERSIONED_USE = re.compile(
    rf"^\s*(?:use|import)\s+({_PACKAGE_TOKEN})/[A-Za-z0-9_.-]+@([0-9A-Za-z._-]*[0-9A-Za-z_-])"
)
_UNVERSIONED_USE = re.compile(rf"^\s*(?:use|import)\s+({_PACKAGE_TOKEN})/[A-Za-z0-9_-]+")
_PACKAGE_DECLARATION = re.compile(r"^\s*package\s+([^\s;]+)\s*;?")

_SANITIZE_TABLE = str.maketrans({":": "-", "@": "-"})


@dataclass
class ReferenceScan:
    """References found in one source, split by whether they carry a version."""

    versioned: List[str] = field(default_factory=list)
    unversioned: List[str] = field(default_factory=list)


def scan_references(text: str) -> ReferenceScan:
    """Collect cross-package `use`/`import` references from WIT source text.

    Both lists are deduplicated and sorted so the order of declarations in the
    file never changes the result.
    """
    versioned: set[str] = set()
    unversioned: set[str] = set()
    for line in text.splitlines():
        match = _VERSIONED_USE.match(line)
        if match:
            versioned.add(f"{match.group(1)}@{match.group(2)}")
            continue
        loose = _UNVERSIONED_USE.match(line)
        if loose:
            unversioned.add(loose.group(1))
    return ReferenceScan(versioned=sorted(versioned), unversioned=sorted(unversioned))


def parse_dependencies(text: str) -> List[str]:
    """Return the sorted, distinct `namespace:name@version` dependencies of a source."""
    return scan_references(text).versioned


def read_package_declaration(text: str) -> Optional[str]:
    """Return the reference named by the first `package` line, if any."""
    for line in text.splitlines():
        match = _PACKAGE_DECLARATION.match(line)
        if match:
            return match.group(1)
    return None


def read_source(path: Path) -> str:
    """Return the text of a WIT source, raising `UnreadableSource` on I/O or decode errors."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise UnreadableSource(path, f"not valid UTF-8 at byte {exc.start}") from exc
    except OSError as exc:
        raise UnreadableSource(path, exc.strerror or str(exc)) from exc


def read_package_file(path: Path) -> Optional[str]:
    return read_package_declaration(read_source(path))


def sanitize(reference: str) -> str:
    """Map a reference onto a token usable as a path component or registry tag."""
    return reference.translate(_SANITIZE_TABLE)


__all__ = [
    "ReferenceScan",
    "parse_dependencies",
    "read_package_declaration",
    "read_package_file",
    "read_source",
    "sanitize",
    "scan_references",
]
