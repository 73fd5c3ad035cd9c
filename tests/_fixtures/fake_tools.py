"""Recording stand-ins for the external tool runner."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from witpack.tools import ToolResult


class FakeRunner:
    """Records every command, snapshots directory arguments, fakes outputs.

    Commands carrying `-o PATH` get a small file written at PATH so later steps
    find the artifact. `fail_when` decides which commands report failure.
    """

    def __init__(self, fail_when: Optional[Callable[[List[str]], bool]] = None) -> None:
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self.snapshots: List[Dict[str, List[str]]] = []
        self._fail_when = fail_when

    def __call__(
        self,
        args: Iterable[str],
        *,
        cwd: Path | None = None,
        input_text: str | None = None,
    ) -> ToolResult:
        command = [str(arg) for arg in args]
        self.calls.append(command)
        self.inputs.append(input_text)
        self.snapshots.append(_snapshot(command))

        if self._fail_when is not None and self._fail_when(command):
            return ToolResult(ok=False, output=f"{command[0]}: simulated failure\n")

        if "-o" in command:
            output = Path(command[command.index("-o") + 1])
            if output.parent.is_dir():
                output.write_bytes(b"\x00asm")
        return ToolResult(ok=True, output="")

    def tools_called(self) -> List[str]:
        return [call[0] for call in self.calls]


def _snapshot(command: List[str]) -> Dict[str, List[str]]:
    trees: Dict[str, List[str]] = {}
    for arg in command:
        path = Path(arg)
        if path.is_absolute() and path.is_dir():
            trees[arg] = sorted(item.relative_to(path).as_posix() for item in path.rglob("*"))
    return trees


def which_all(name: str) -> str:
    return f"/usr/bin/{name}"


def which_none(name: str) -> None:
    return None


__all__ = ["FakeRunner", "which_all", "which_none"]
