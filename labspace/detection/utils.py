"""Best-effort manifest parsers used by the stack rules."""

from __future__ import annotations

import json
import re
from typing import Dict, List, Optional

# Presentation limits for the profile, not a completeness guarantee.
MAX_RUNTIME_DEPENDENCIES = 8
MAX_DEV_DEPENDENCIES = 5

_REQUIREMENT_NAME = re.compile(r"[<>=!~;\[\s@]")
_GO_DIRECTIVE = re.compile(r"^\s*go\s+(\d+\.\d+(?:\.\d+)?)\b", re.MULTILINE)
_RUBY_DIRECTIVE = re.compile(r"""^\s*ruby\s+['"]([^'"]+)['"]""", re.MULTILINE)
_VERSION_TOKEN = re.compile(r"\d+(?:\.\d+)*")


# Node.js helpers


def load_package_json(content: str) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def node_dependency_names(package: Dict[str, object], key: str, limit: int) -> List[str]:
    """Return the first ``limit`` dependency names under ``key`` in manifest order."""
    deps = package.get(key)
    if not isinstance(deps, dict):
        return []
    return [str(name) for name in deps][:limit]


def node_engine_version(package: Dict[str, object]) -> Optional[str]:
    engines = package.get("engines")
    if not isinstance(engines, dict):
        return None
    node = engines.get("node")
    if isinstance(node, str) and node.strip():
        return node.strip()
    return None


def node_scripts(package: Dict[str, object]) -> Dict[str, str]:
    scripts = package.get("scripts")
    if not isinstance(scripts, dict):
        return {}
    return {str(name): command for name, command in scripts.items() if isinstance(command, str)}


# Python helpers


def parse_requirements(content: str, limit: int = MAX_RUNTIME_DEPENDENCIES) -> List[str]:
    """Collect requirement names, dropping specifiers, extras and markers."""
    packages: List[str] = []
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        name = _REQUIREMENT_NAME.split(stripped, 1)[0].strip()
        if name:
            packages.append(name)
        if len(packages) >= limit:
            break
    return packages


# Go / Ruby helpers


def parse_go_version(content: str) -> Optional[str]:
    match = _GO_DIRECTIVE.search(content)
    return match.group(1) if match else None


def parse_ruby_version(content: str) -> Optional[str]:
    """Return the numeric token of a ``ruby "~> 3.2.0"`` style declaration."""
    match = _RUBY_DIRECTIVE.search(content)
    if not match:
        return None
    token = _VERSION_TOKEN.search(match.group(1))
    return token.group(0) if token else None


__all__ = [
    "MAX_DEV_DEPENDENCIES",
    "MAX_RUNTIME_DEPENDENCIES",
    "load_package_json",
    "node_dependency_names",
    "node_engine_version",
    "node_scripts",
    "parse_go_version",
    "parse_requirements",
    "parse_ruby_version",
]
