"""Tests for the validate driver."""

from __future__ import annotations

import pytest

from tests._fixtures.fake_tools import FakeRunner, which_all, which_none
from tests._fixtures.wit_builder import WitTreeBuilder
from witpack.errors import MissingPrerequisite
from witpack.models import OUTCOME_FAILED, OUTCOME_OK, OUTCOME_SKIPPED
from witpack.pipelines import ValidatePipeline


def test_runs_both_checks_against_staged_tree(wit_tree: WitTreeBuilder, fake_runner: FakeRunner) -> None:
    wit_tree.package("a:pkg@1", "b:pkg@1")
    wit_tree.package("b:pkg@1")

    result = ValidatePipeline(wit_tree.config(), runner=fake_runner, which=which_all).run()

    assert result.exit_code == 0
    assert fake_runner.tools_called() == ["wit-bindgen", "wasm-tools", "wit-bindgen", "wasm-tools"]
    staged_dir = fake_runner.calls[0][2]
    assert "deps/b-pkg-1/package.wit" in fake_runner.snapshots[0][staged_dir]


def test_either_check_failing_fails_the_file(wit_tree: WitTreeBuilder) -> None:
    wit_tree.package("a:pkg@1")
    wit_tree.package("b:pkg@1")
    docs_calls = []

    def fail_first_docs(command: list[str]) -> bool:
        if command[0] != "wit-bindgen":
            return False
        docs_calls.append(command)
        return len(docs_calls) == 1

    runner = FakeRunner(fail_when=fail_first_docs)

    result = ValidatePipeline(wit_tree.config(), runner=runner, which=which_all).run()

    statuses = [outcome.status for outcome in result.outcomes]
    assert statuses == [OUTCOME_FAILED, OUTCOME_OK]
    assert "wit-bindgen failed" in result.outcomes[0].message
    # The compile check still runs after the binding check fails.
    assert runner.tools_called()[:2] == ["wit-bindgen", "wasm-tools"]


def test_compile_failure_fails_the_file(wit_tree: WitTreeBuilder) -> None:
    wit_tree.package("a:pkg@1")
    runner = FakeRunner(fail_when=lambda command: command[0] == "wasm-tools")

    result = ValidatePipeline(wit_tree.config(), runner=runner, which=which_all).run()

    assert result.exit_code == 1
    assert "wasm-tools failed" in result.outcomes[0].message


def test_world_directories_use_configured_world(wit_tree: WitTreeBuilder, fake_runner: FakeRunner) -> None:
    wit_tree.write(
        {
            "wasix-mcp@0.0.5/world.wit": "package wasix:mcp@0.0.5;\n",
            "greentic-host@1.0/world.wit": "package greentic:host@1.0;\n",
        }
    )
    config = wit_tree.config(worlds={"greentic-host@1.0": "host"})

    result = ValidatePipeline(config, runner=fake_runner, which=which_all).run()

    statuses = {outcome.reference: outcome.status for outcome in result.outcomes}
    assert statuses == {"greentic:host@1.0": OUTCOME_OK, "wasix:mcp@0.0.5": OUTCOME_SKIPPED}
    docs_call = fake_runner.calls[0]
    assert docs_call[2] == str(wit_tree.wit_dir / "greentic-host@1.0")
    assert docs_call[-2:] == ["--world", "host"]


def test_missing_declaration_is_a_failure(wit_tree: WitTreeBuilder, fake_runner: FakeRunner) -> None:
    wit_tree.write({"broken.wit": "interface nothing {}\n"})

    result = ValidatePipeline(wit_tree.config(), runner=fake_runner, which=which_all).run()

    assert result.exit_code == 1
    assert fake_runner.calls == []


def test_dry_run_checks_resolution_only(wit_tree: WitTreeBuilder, fake_runner: FakeRunner) -> None:
    wit_tree.package("a:pkg@1", "ghost:pkg@1")
    wit_tree.package("b:pkg@1")

    result = ValidatePipeline(
        wit_tree.config(dry_run=True), runner=fake_runner, which=which_none
    ).run()

    assert fake_runner.calls == []
    assert [outcome.status for outcome in result.outcomes] == [OUTCOME_FAILED, OUTCOME_OK]


def test_missing_validator_is_fatal(wit_tree: WitTreeBuilder, fake_runner: FakeRunner) -> None:
    wit_tree.package("a:pkg@1")

    with pytest.raises(MissingPrerequisite, match="wit-bindgen"):
        ValidatePipeline(wit_tree.config(), runner=fake_runner, which=which_none).run()


def test_default_world_applies_once_package_is_not_excluded(
    wit_tree: WitTreeBuilder, fake_runner: FakeRunner
) -> None:
    wit_tree.write({"wasix-mcp@0.0.5/world.wit": "package wasix:mcp@0.0.5;\n"})
    config = wit_tree.config(excluded=[])

    result = ValidatePipeline(config, runner=fake_runner, which=which_all).run()

    assert [outcome.status for outcome in result.outcomes] == [OUTCOME_OK]
    assert fake_runner.calls[0][-2:] == ["--world", "mcp-secrets"]
