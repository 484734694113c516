"""Core data models shared across labspace components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import InvalidInput

# Characters GitHub allows in an owner or repository name.
REPOSITORY_SEGMENT = re.compile(r"[A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class RepositoryHandle:
    """Owner/name pair identifying a hosted repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class FileEntry:
    """Metadata for an individual repository file."""

    path: str
    name: str
    size: int = 0


@dataclass(frozen=True)
class TechStackEntry:
    """A detected technology along with the facts its manifest exposed."""

    name: str
    icon: str
    version: str
    dependencies: Tuple[str, ...] = ()
    dev_dependencies: Tuple[str, ...] = ()
    build_tool: Optional[str] = None
    scripts: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceEntry:
    """A runtime service inferred from the file tree."""

    name: str
    type: str
    port: int


@dataclass(frozen=True)
class StackProfile:
    """Normalized analysis result consumed by the synthesizer."""

    repository: RepositoryHandle
    description: str
    files: Tuple[FileEntry, ...]
    tech_stack: Tuple[TechStackEntry, ...]
    services: Tuple[ServiceEntry, ...]
    ports: Tuple[int, ...]
    has_containerfile: bool
    has_tests: bool
    estimated_setup_time: str


@dataclass(frozen=True)
class GeneratedArtifact:
    """A rendered file destined for the labspace bundle."""

    path: str
    content: str


FileListing = Tuple[FileEntry, ...]
ManifestSet = Mapping[str, str]


def profile_to_dict(profile: StackProfile) -> Dict[str, Any]:
    """Return a JSON-friendly representation of ``profile``."""
    return {
        "owner": profile.repository.owner,
        "name": profile.repository.name,
        "description": profile.description,
        "files": [
            {"path": entry.path, "name": entry.name, "size": entry.size}
            for entry in profile.files
        ],
        "tech_stack": [_stack_entry_to_dict(entry) for entry in profile.tech_stack],
        "services": [
            {"name": service.name, "type": service.type, "port": service.port}
            for service in profile.services
        ],
        "ports": list(profile.ports),
        "has_containerfile": profile.has_containerfile,
        "has_tests": profile.has_tests,
        "estimated_setup_time": profile.estimated_setup_time,
    }


def profile_from_dict(data: Mapping[str, Any]) -> StackProfile:
    """Rebuild a profile previously produced by :func:`profile_to_dict`.

    Raises ``InvalidInput`` when required fields are missing or malformed.
    """
    if not isinstance(data, Mapping):
        raise InvalidInput("Profile payload must be a mapping")
    owner = data.get("owner")
    name = data.get("name")
    if not isinstance(owner, str) or not isinstance(name, str) or not owner or not name:
        raise InvalidInput("Profile payload requires 'owner' and 'name'")
    for label, value in (("owner", owner), ("name", name)):
        if not REPOSITORY_SEGMENT.fullmatch(value):
            raise InvalidInput(f"Profile {label} contains unsupported characters: {value!r}")

    try:
        files = tuple(
            FileEntry(
                path=str(item["path"]),
                name=str(item.get("name") or str(item["path"]).rsplit("/", 1)[-1]),
                size=int(item.get("size", 0)),
            )
            for item in _as_list(data.get("files"))
        )
        tech_stack = tuple(_stack_entry_from_dict(item) for item in _as_list(data.get("tech_stack")))
        services = tuple(
            ServiceEntry(name=str(item["name"]), type=str(item["type"]), port=int(item["port"]))
            for item in _as_list(data.get("services"))
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise InvalidInput(f"Malformed profile payload: {exc}") from exc

    # Ports always mirror the services; a submitted list is ignored.
    return StackProfile(
        repository=RepositoryHandle(owner=owner, name=name),
        description=str(data.get("description") or ""),
        files=files,
        tech_stack=tech_stack,
        services=services,
        ports=tuple(service.port for service in services),
        has_containerfile=bool(data.get("has_containerfile", False)),
        has_tests=bool(data.get("has_tests", False)),
        estimated_setup_time=str(data.get("estimated_setup_time") or ""),
    )


def _stack_entry_to_dict(entry: TechStackEntry) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": entry.name,
        "icon": entry.icon,
        "version": entry.version,
    }
    if entry.dependencies:
        payload["dependencies"] = list(entry.dependencies)
    if entry.dev_dependencies:
        payload["dev_dependencies"] = list(entry.dev_dependencies)
    if entry.build_tool:
        payload["build_tool"] = entry.build_tool
    if entry.scripts:
        payload["scripts"] = dict(entry.scripts)
    return payload


def _stack_entry_from_dict(item: Mapping[str, Any]) -> TechStackEntry:
    scripts = item.get("scripts") or {}
    return TechStackEntry(
        name=str(item["name"]),
        icon=str(item.get("icon", "")),
        version=str(item.get("version") or "latest"),
        dependencies=tuple(str(dep) for dep in _as_list(item.get("dependencies"))),
        dev_dependencies=tuple(str(dep) for dep in _as_list(item.get("dev_dependencies"))),
        build_tool=item.get("build_tool") or None,
        scripts={str(key): str(value) for key, value in dict(scripts).items()},
    )


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    raise TypeError(f"expected a list, got {type(value).__name__}")
