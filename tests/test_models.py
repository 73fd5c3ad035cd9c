"""Tests for witpack.models."""

from __future__ import annotations

from pathlib import Path

import pytest

from witpack.errors import InvalidReference
from witpack.models import (
    OUTCOME_FAILED,
    OUTCOME_OK,
    OUTCOME_SKIPPED,
    BatchResult,
    FileOutcome,
    PackageReference,
    SourceFile,
)


def test_package_reference_round_trips_canonical_form() -> None:
    reference = PackageReference.parse("wasix:mcp@0.0.5;")

    assert reference == PackageReference("wasix", "mcp", "0.0.5")
    assert str(reference) == "wasix:mcp@0.0.5"
    assert reference.sanitized == "wasix-mcp-0.0.5"
    assert reference.source_stem == "wasix-mcp@0.0.5"
    assert reference.tag == "0.0.5"


def test_unversioned_reference_uses_latest_tag() -> None:
    reference = PackageReference.parse("greentic:types")

    assert reference.version == ""
    assert str(reference) == "greentic:types"
    assert reference.tag == "latest"


@pytest.mark.parametrize("text", ["", "nonamespace@1.0", ":name@1.0", "ns:@1.0"])
def test_invalid_reference_raises(text: str) -> None:
    with pytest.raises(InvalidReference):
        PackageReference.parse(text)


def test_source_file_world_detection() -> None:
    reference = PackageReference.parse("a:pkg@1.0")

    assert SourceFile(Path("wit/a-pkg@1.0/world.wit"), reference).is_world
    assert not SourceFile(Path("wit/a-pkg@1.0.wit"), reference).is_world


def test_batch_result_fails_when_any_file_fails() -> None:
    result = BatchResult(pipeline="package")
    result.add(FileOutcome(path=Path("a.wit"), status=OUTCOME_OK))
    result.add(FileOutcome(path=Path("b.wit"), status=OUTCOME_SKIPPED))
    assert result.exit_code == 0

    result.add(FileOutcome(path=Path("c.wit"), status=OUTCOME_FAILED))
    assert result.failed
    assert result.exit_code == 1
    assert result.count(OUTCOME_OK) == 1


def test_batch_result_inherits_upstream_failure() -> None:
    upstream = BatchResult(pipeline="package")
    upstream.add(FileOutcome(path=Path("a.wit"), status=OUTCOME_FAILED))

    result = BatchResult(pipeline="publish", upstream=upstream)

    assert result.failed
