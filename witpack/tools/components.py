"""Component builder, binding validator and compile checker adapters."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import List, Optional

from ..config import ToolsConfig
from .runner import Runner, ToolResult, run_tool


class ComponentBuilder:
    """Produces binary WIT packages from staged trees or world directories."""

    def __init__(self, tools: ToolsConfig, runner: Runner | None = None) -> None:
        self.tools = tools
        self._runner = runner or run_tool

    def staged_command(self, package_dir: Path, output: Path) -> List[str]:
        return [
            self.tools.wasm_tools,
            "component",
            "wit",
            str(package_dir),
            "--wasm",
            "-o",
            str(output),
        ]

    def world_command(self, package_dir: Path, output: Path) -> List[str]:
        return [self.tools.wkg, "wit", "build", "--wit-dir", str(package_dir), "-o", str(output)]

    def build_staged(self, package_dir: Path, output: Path) -> ToolResult:
        return self._build(self.staged_command(package_dir, output), output)

    def build_world(self, package_dir: Path, output: Path) -> ToolResult:
        return self._build(self.world_command(package_dir, output), output)

    def _build(self, command: List[str], output: Path) -> ToolResult:
        result = self._runner(command)
        if result.ok:
            return ToolResult(ok=True, output=result.output, artifact=output)
        return result


class BindingValidator:
    """Runs `wit-bindgen markdown` to confirm a package generates bindings."""

    def __init__(self, tools: ToolsConfig, runner: Runner | None = None) -> None:
        self.tools = tools
        self._runner = runner or run_tool

    def command(self, package_dir: Path, out_dir: Path, world: Optional[str] = None) -> List[str]:
        command = [self.tools.wit_bindgen, "markdown", str(package_dir), "--out-dir", str(out_dir)]
        if world:
            command.extend(["--world", world])
        return command

    def check(self, package_dir: Path, world: Optional[str] = None) -> ToolResult:
        with tempfile.TemporaryDirectory(prefix="witpack-docs-") as out_dir:
            return self._runner(self.command(package_dir, Path(out_dir), world))


class CompileChecker:
    """Compiles a package to a throwaway component to prove it is well formed."""

    def __init__(self, tools: ToolsConfig, runner: Runner | None = None) -> None:
        self.tools = tools
        self._runner = runner or run_tool

    def command(self, package_dir: Path, output: Path) -> List[str]:
        return [
            self.tools.wasm_tools,
            "component",
            "wit",
            str(package_dir),
            "--wasm",
            "-o",
            str(output),
        ]

    def check(self, package_dir: Path) -> ToolResult:
        with tempfile.TemporaryDirectory(prefix="witpack-check-") as tmp:
            return self._runner(self.command(package_dir, Path(tmp) / "check.wasm"))


__all__ = ["BindingValidator", "CompileChecker", "ComponentBuilder"]
