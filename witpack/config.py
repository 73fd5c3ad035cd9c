"""Configuration loading for witpack (.witpack.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import MissingPrerequisite

CONFIG_FILENAME = ".witpack.yml"

DEFAULT_REGISTRY = "ghcr.io"
DEFAULT_REPO_PREFIX = "wit"
DEFAULT_EXCLUDED = ("wasix:mcp@0.0.5",)
# Used only for world packages that are not excluded.
DEFAULT_WORLDS = {"wasix-mcp@0.0.5": "mcp-secrets"}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToolsConfig:
    """Executable names of the external tools."""

    wasm_tools: str = "wasm-tools"
    wkg: str = "wkg"
    wit_bindgen: str = "wit-bindgen"
    docker: str = "docker"


@dataclass
class PublishConfig:
    """Registry destination and credential sources for publishing."""

    registry: str = DEFAULT_REGISTRY
    repo_prefix: str = DEFAULT_REPO_PREFIX
    user_env: str = "GHCR_USER"
    token_env: str = "GHCR_TOKEN"


@dataclass(frozen=True)
class Credentials:
    user: str
    token: str


@dataclass
class WitpackConfig:
    """Represents the settings for one witpack run."""

    root: Path
    wit_dir: Path
    out_dir: Path
    staging_dir: Path
    excluded: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED))
    worlds: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_WORLDS))
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    dry_run: bool = False

    @classmethod
    def defaults(cls, root: Path) -> "WitpackConfig":
        root = root.expanduser().resolve()
        return cls(
            root=root,
            wit_dir=root / "wit",
            out_dir=root / "target" / "wit-packages",
            staging_dir=root / "target" / "wit-staged",
        )

    def is_excluded(self, reference: str) -> bool:
        return reference in self.excluded

    def credentials(self, env: Optional[Mapping[str, str]] = None) -> Credentials:
        """Return registry credentials or fail before any work is done."""
        source = os.environ if env is None else env
        user = (source.get(self.publish.user_env) or "").strip()
        token = (source.get(self.publish.token_env) or "").strip()
        if not user or not token:
            raise MissingPrerequisite(
                f"Set {self.publish.user_env} and {self.publish.token_env} "
                "environment variables before publishing."
            )
        return Credentials(user=user, token=token)


def load_config(
    root: Path, env: Optional[Mapping[str, str]] = None
) -> WitpackConfig:
    """Load configuration for the project rooted at `root`."""
    config = WitpackConfig.defaults(root)
    config_file = config.root / CONFIG_FILENAME
    data = _read_config(config_file) if config_file.exists() else {}
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    for key in ("wit_dir", "out_dir", "staging_dir"):
        value = _as_str(data.get(key))
        if value:
            setattr(config, key, _resolve_path(config.root, value))

    if "excluded" in data:
        config.excluded = _as_str_list(data.get("excluded"))

    worlds = data.get("worlds")
    if worlds is not None:
        if not isinstance(worlds, dict):
            raise ConfigError("'worlds' must map package directories to world names")
        config.worlds = {str(key): str(value) for key, value in worlds.items()}

    tools_data = _as_dict(data.get("tools"))
    for key in ("wasm_tools", "wkg", "wit_bindgen", "docker"):
        value = _as_str(tools_data.get(key))
        if value:
            setattr(config.tools, key, value)

    publish_data = _as_dict(data.get("publish"))
    for key in ("registry", "repo_prefix", "user_env", "token_env"):
        value = _as_str(publish_data.get(key))
        if value:
            setattr(config.publish, key, value)

    config.dry_run = bool(_as_bool(data.get("dry_run")))
    source = os.environ if env is None else env
    dry_run_env = source.get("DRY_RUN")
    if dry_run_env is not None and dry_run_env.strip():
        parsed = _as_bool(dry_run_env)
        if parsed is None:
            raise ConfigError(f"DRY_RUN must be 0 or 1, got {dry_run_env!r}")
        config.dry_run = parsed

    return config


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _resolve_path(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "Credentials",
    "PublishConfig",
    "ToolsConfig",
    "WitpackConfig",
    "load_config",
]
