"""Subprocess execution returning tagged results instead of raising."""

from __future__ import annotations

import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from ..errors import MissingPrerequisite


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one external tool invocation."""

    ok: bool
    output: str = ""
    artifact: Optional[Path] = None


Runner = Callable[..., ToolResult]

INSTALL_HINTS = {
    "wasm-tools": "Install via 'cargo install wasm-tools'.",
    "wkg": "Install via 'cargo install wkg'.",
    "wit-bindgen": "Install via 'cargo install wit-bindgen-cli'.",
    "docker": "Docker CLI is required for registry login.",
}


def run_tool(
    args: Iterable[str],
    *,
    cwd: Path | None = None,
    input_text: str | None = None,
) -> ToolResult:
    """Run `args` to completion, capturing stdout and stderr together."""
    command = list(args)
    try:
        completed = subprocess.run(
            command,
            cwd=str(cwd) if cwd is not None else None,
            input=input_text,
            text=True,
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        return ToolResult(ok=False, output=f"{command[0]}: {exc}")
    output = (completed.stdout or "") + (completed.stderr or "")
    return ToolResult(ok=completed.returncode == 0, output=output)


def describe(args: Iterable[str]) -> str:
    """Render a command line for dry-run and diagnostic output."""
    return shlex.join(str(arg) for arg in args)


def require_tools(
    names: Iterable[str],
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> None:
    """Fail with `MissingPrerequisite` unless every binary in `names` is on PATH."""
    for name in names:
        if which(name) is None:
            hint = INSTALL_HINTS.get(Path(name).name, "")
            message = f"Error: {name} not found in PATH."
            if hint:
                message = f"{message} {hint}"
            raise MissingPrerequisite(message)


__all__ = ["INSTALL_HINTS", "Runner", "ToolResult", "describe", "require_tools", "run_tool"]
