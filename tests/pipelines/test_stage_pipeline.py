"""Tests for the stage driver."""

from __future__ import annotations

import pytest

from tests._fixtures.wit_builder import WitTreeBuilder
from witpack.errors import UnsafeStagingDir
from witpack.models import OUTCOME_FAILED, OUTCOME_OK, OUTCOME_SKIPPED
from witpack.pipelines import StagePipeline


def test_stage_writes_persistent_trees(wit_tree: WitTreeBuilder) -> None:
    wit_tree.package("a:pkg@1", "b:pkg@1")
    wit_tree.package("b:pkg@1")
    wit_tree.write({"wasix-mcp@0.0.5/world.wit": "package wasix:mcp@0.0.5;\n"})
    config = wit_tree.config()
    config.staging_dir.mkdir(parents=True)
    (config.staging_dir / "stale.txt").write_text("old", encoding="utf-8")

    result = StagePipeline(config).run()

    assert [outcome.status for outcome in result.outcomes] == [OUTCOME_OK, OUTCOME_OK, OUTCOME_SKIPPED]
    staged = sorted(path.relative_to(config.staging_dir).as_posix() for path in config.staging_dir.rglob("*.wit"))
    assert staged == [
        "a-pkg-1/deps/b-pkg-1/package.wit",
        "a-pkg-1/package.wit",
        "b-pkg-1/package.wit",
    ]
    assert not (config.staging_dir / "stale.txt").exists()
    assert result.outcomes[0].artifact == config.staging_dir / "a-pkg-1"


def test_stage_failure_leaves_no_partial_tree(wit_tree: WitTreeBuilder) -> None:
    wit_tree.package("a:pkg@1", "ghost:pkg@1")
    wit_tree.package("b:pkg@1")
    config = wit_tree.config()

    result = StagePipeline(config).run()

    assert [outcome.status for outcome in result.outcomes] == [OUTCOME_FAILED, OUTCOME_OK]
    assert not (config.staging_dir / "a-pkg-1").exists()


def test_duplicate_declarations_fail_the_second_source(wit_tree: WitTreeBuilder) -> None:
    wit_tree.package("a:pkg@1")
    wit_tree.package("a:pkg@1", filename="copy.wit")

    result = StagePipeline(wit_tree.config()).run()

    assert [outcome.status for outcome in result.outcomes] == [OUTCOME_OK, OUTCOME_FAILED]


def test_stage_dry_run_writes_nothing(wit_tree: WitTreeBuilder) -> None:
    wit_tree.package("a:pkg@1", "b:pkg@1")
    wit_tree.package("b:pkg@1")
    config = wit_tree.config(dry_run=True)

    result = StagePipeline(config).run()

    assert result.exit_code == 0
    assert not config.staging_dir.exists()


@pytest.mark.parametrize("target", ["wit", "root", "parent", "inside-wit"])
@pytest.mark.parametrize("dry_run", [False, True])
def test_refuses_staging_dir_that_would_remove_sources(
    wit_tree: WitTreeBuilder, target: str, dry_run: bool
) -> None:
    source = wit_tree.package("a:pkg@1")
    staging_dir = {
        "wit": wit_tree.wit_dir,
        "root": wit_tree.root,
        "parent": wit_tree.root.parent,
        "inside-wit": wit_tree.wit_dir / "staged",
    }[target]
    config = wit_tree.config(staging_dir=staging_dir, dry_run=dry_run)

    with pytest.raises(UnsafeStagingDir):
        StagePipeline(config).run()

    assert source.is_file()
