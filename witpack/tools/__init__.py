"""Adapters around the external WIT toolchain and the OCI registry."""

from .components import BindingValidator, CompileChecker, ComponentBuilder
from .registry import RegistryClient, image_reference
from .runner import Runner, ToolResult, describe, require_tools, run_tool

__all__ = [
    "BindingValidator",
    "CompileChecker",
    "ComponentBuilder",
    "RegistryClient",
    "Runner",
    "ToolResult",
    "describe",
    "image_reference",
    "require_tools",
    "run_tool",
]
