"""Configuration loading for labspace (.labspace.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".labspace.yml"

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_MAX_DEPTH = 3
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_SERVICE_HOST = "0.0.0.0"
DEFAULT_SERVICE_PORT = 3001
DEFAULT_DOWNLOAD_DIR = Path("/tmp")

TOKEN_ENV_KEYS: tuple[str, ...] = ("LABSPACE_GITHUB_TOKEN", "GITHUB_TOKEN")
PORT_ENV_KEYS: tuple[str, ...] = ("LABSPACE_PORT", "PORT")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitHubConfig:
    """Repository hosting API settings."""

    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None
    max_depth: int = DEFAULT_MAX_DEPTH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class ServiceConfig:
    """HTTP service settings."""

    host: str = DEFAULT_SERVICE_HOST
    port: int = DEFAULT_SERVICE_PORT
    download_dir: Path = DEFAULT_DOWNLOAD_DIR


@dataclass
class LabspaceConfig:
    """Represents the settings defined in .labspace.yml plus environment overrides."""

    source: Optional[Path] = None
    github: GitHubConfig = field(default_factory=GitHubConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> LabspaceConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)

    data: Dict[str, Any] = {}
    source: Optional[Path] = None
    if config_file.exists():
        data = _read_config(config_file)
        source = config_file

    github_data = _as_dict(data.get("github"))
    github = GitHubConfig(
        api_url=(_as_str(github_data.get("api_url")) or DEFAULT_API_URL).rstrip("/"),
        token=_as_str(github_data.get("token")),
        max_depth=_as_int(github_data.get("max_depth")) or DEFAULT_MAX_DEPTH,
        request_timeout=_as_float(github_data.get("request_timeout")) or DEFAULT_REQUEST_TIMEOUT,
    )
    env_token = _first_env_value(env, TOKEN_ENV_KEYS)
    if env_token:
        github.token = env_token

    service_data = _as_dict(data.get("service"))
    download_dir = _as_str(service_data.get("download_dir"))
    service = ServiceConfig(
        host=_as_str(service_data.get("host")) or DEFAULT_SERVICE_HOST,
        port=_as_int(service_data.get("port")) or DEFAULT_SERVICE_PORT,
        download_dir=Path(download_dir).expanduser() if download_dir else DEFAULT_DOWNLOAD_DIR,
    )
    env_port = _as_int(_first_env_value(env, PORT_ENV_KEYS))
    if env_port:
        service.port = env_port

    return LabspaceConfig(source=source, github=github, service=service)


def _resolve_config_path(config_path: Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / CONFIG_FILENAME).resolve()
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _first_env_value(env: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = env.get(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GitHubConfig",
    "LabspaceConfig",
    "ServiceConfig",
    "load_config",
]
