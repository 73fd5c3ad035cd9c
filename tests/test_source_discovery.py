"""Tests for source discovery and loading."""

from __future__ import annotations

import pytest

from tests._fixtures.wit_builder import WitTreeBuilder
from witpack.discovery import discover_sources, load_source
from witpack.errors import MissingPackageDeclaration
from witpack.models import PackageReference


def test_discover_sources_covers_root_and_one_level(wit_tree: WitTreeBuilder) -> None:
    wit_tree.write(
        {
            "b-pkg@2.0.wit": "package b:pkg@2.0;\n",
            "a-pkg@1.0.wit": "package a:pkg@1.0;\n",
            "wasix-mcp@0.0.5/world.wit": "package wasix:mcp@0.0.5;\n",
            "deep/nested/ignored.wit": "package x:y@1.0;\n",
            "notes.md": "not a source\n",
        }
    )

    found = [path.relative_to(wit_tree.wit_dir).as_posix() for path in discover_sources(wit_tree.wit_dir)]

    assert found == ["a-pkg@1.0.wit", "b-pkg@2.0.wit", "wasix-mcp@0.0.5/world.wit"]


def test_discover_sources_missing_directory(tmp_path) -> None:
    assert discover_sources(tmp_path / "absent") == []


def test_load_source_reads_declaration(wit_tree: WitTreeBuilder) -> None:
    path = wit_tree.package("a:pkg@1.0")

    source = load_source(path)

    assert source.reference == PackageReference("a", "pkg", "1.0")
    assert not source.is_world


def test_load_source_without_declaration(wit_tree: WitTreeBuilder) -> None:
    wit_tree.write({"c:pkg@1.0.wit": "interface api {}\n"})

    with pytest.raises(MissingPackageDeclaration):
        load_source(wit_tree.wit_dir / "c:pkg@1.0.wit")
