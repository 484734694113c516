"""One rendering function per artifact slot.

Every generator receives the same immutable profile and a ``RenderContext``
carrying the resolved application port, so the orchestration file, guide and
startup script cannot disagree about where the application listens.
"""

from __future__ import annotations

import json
import shlex
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..detection import WEB_SERVICE_TYPE
from ..detection import stacks as stack_names
from ..models import StackProfile, TechStackEntry
from . import constants as c
from .overlays import StackOverlay, resolve_overlay

TEMPLATES_DIR = Path(__file__).with_name("templates")

_BASE_EDITOR_SETTINGS: Dict[str, object] = {
    "editor.tabSize": 2,
    "editor.insertSpaces": True,
    "files.autoSave": "onDelay",
    "files.autoSaveDelay": 1000,
    "terminal.integrated.cwd": "${workspaceFolder}",
}
_BASE_CONTAINER_EXTENSIONS = ("ms-vscode.vscode-json",)
_GENERAL_EXTENSIONS = ("ms-vscode.vscode-json", "redhat.vscode-yaml", "ms-vscode.vscode-eslint")


@dataclass(frozen=True)
class RenderContext:
    """Values derived once per synthesis run and shared by every generator."""

    app_port: int
    generated_at: datetime
    environment: Environment

    @property
    def app_url(self) -> str:
        return f"http://localhost:{self.app_port}"


def resolve_app_port(profile: StackProfile) -> int:
    """Return the port of the first web service, else the default."""
    for service in profile.services:
        if service.type == WEB_SERVICE_TYPE:
            return service.port
    return c.DEFAULT_APP_PORT


def create_environment() -> Environment:
    environment = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    environment.filters["shell_quote"] = shlex.quote
    return environment


def _overlays(profile: StackProfile) -> List[Tuple[TechStackEntry, StackOverlay]]:
    pairs: List[Tuple[TechStackEntry, StackOverlay]] = []
    for entry in profile.tech_stack:
        overlay = resolve_overlay(entry)
        if overlay is not None:
            pairs.append((entry, overlay))
    return pairs


def _dedupe(items: List[str]) -> List[str]:
    seen: set[str] = set()
    ordered: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def post_create_command(profile: StackProfile) -> str:
    commands = [
        overlay.install_command
        for _, overlay in _overlays(profile)
        if overlay.install_command
    ]
    return c.POST_CREATE_SEPARATOR.join(commands)


# docker-compose.yml


def _database_block() -> Dict[str, object]:
    return {
        "image": c.DATABASE_IMAGE,
        "environment": list(c.DATABASE_ENVIRONMENT),
        "ports": [f"{c.DATABASE_PORT}:{c.DATABASE_PORT}"],
        "volumes": [f"{c.DATABASE_VOLUME}:/var/lib/postgresql/data"],
    }


def _cache_block() -> Dict[str, object]:
    return {
        "image": c.CACHE_IMAGE,
        "ports": [f"{c.CACHE_PORT}:{c.CACHE_PORT}"],
    }


_BACKING_SERVICES: Dict[str, tuple[str, Callable[[], Dict[str, object]]]] = {
    c.DATABASE_SERVICE_NAME: (c.DATABASE_SERVICE, _database_block),
    c.CACHE_SERVICE_NAME: (c.CACHE_SERVICE, _cache_block),
}


def render_compose(profile: StackProfile, context: RenderContext) -> str:
    environment = ["APP_ENV=development", f"PORT={context.app_port}"]
    if any(entry.name == stack_names.NODE for entry in profile.tech_stack):
        environment.append("NODE_ENV=development")

    depends_on: List[str] = []
    app: Dict[str, object] = {
        "build": ".",
        "ports": [f"{context.app_port}:{context.app_port}"],
        "volumes": [f".:{c.WORKSPACE_FOLDER}"],
        "environment": environment,
        "depends_on": depends_on,
    }
    services: Dict[str, object] = {c.APP_SERVICE: app}

    for service in profile.services:
        backing = _BACKING_SERVICES.get(service.name)
        if backing is None:
            continue
        key, build_block = backing
        if key in services:
            continue
        services[key] = build_block()
        depends_on.append(key)

    compose: Dict[str, object] = {"version": c.COMPOSE_VERSION, "services": services}
    if c.DATABASE_SERVICE in services:
        compose["volumes"] = {c.DATABASE_VOLUME: {}}

    header = (
        "# Generated Labspace Docker Compose\n"
        f"# Repository: {profile.repository.full_name}\n"
        f"# Generated: {context.generated_at.isoformat()}\n\n"
    )
    body = yaml.safe_dump(compose, sort_keys=False, default_flow_style=False, allow_unicode=True)
    return header + body


# .devcontainer/devcontainer.json


def render_devcontainer(profile: StackProfile, context: RenderContext) -> str:
    extensions = list(_BASE_CONTAINER_EXTENSIONS)
    for _, overlay in _overlays(profile):
        extensions.extend(overlay.container_extensions)

    descriptor: Dict[str, object] = {
        "name": f"{profile.repository.name} Development Environment",
        "dockerComposeFile": f"../{c.ARTIFACT_PATHS[c.COMPOSE]}",
        "service": c.APP_SERVICE,
        "workspaceFolder": c.WORKSPACE_FOLDER,
        "customizations": {
            "vscode": {
                "settings": {"terminal.integrated.defaultProfile.linux": "bash"},
                "extensions": _dedupe(extensions),
            }
        },
        "forwardPorts": list(profile.ports),
    }
    command = post_create_command(profile)
    if command:
        descriptor["postCreateCommand"] = command
    descriptor["remoteUser"] = "root"
    return _to_json(descriptor)


# .vscode/settings.json and .vscode/extensions.json


def render_editor_settings(profile: StackProfile, context: RenderContext) -> str:
    settings = dict(_BASE_EDITOR_SETTINGS)
    for _, overlay in _overlays(profile):
        settings.update(overlay.settings)
    return _to_json(settings)


def render_editor_extensions(profile: StackProfile, context: RenderContext) -> str:
    recommendations: List[str] = []
    for _, overlay in _overlays(profile):
        recommendations.extend(overlay.extensions)
    recommendations.extend(_GENERAL_EXTENSIONS)
    return _to_json({"recommendations": _dedupe(recommendations)})


# LABSPACE.md


def render_guide(profile: StackProfile, context: RenderContext) -> str:
    overlays = _overlays(profile)
    web_services = [service for service in profile.services if service.type == WEB_SERVICE_TYPE]
    backing_services = [
        service for service in profile.services if service.type != WEB_SERVICE_TYPE
    ]
    template = context.environment.get_template("guide.md.j2")
    return template.render(
        repository=profile.repository,
        description=profile.description.strip(),
        tech_stack=profile.tech_stack,
        web_services=web_services,
        backing_services=backing_services,
        app_url=context.app_url,
        install_commands=[o.install_command for _, o in overlays if o.install_command],
        test_commands=_dedupe([o.test_command for _, o in overlays if o.test_command]),
        has_tests=profile.has_tests,
        estimated_setup_time=profile.estimated_setup_time,
        output_paths=c.OUTPUT_PATHS,
        compose_path=c.ARTIFACT_PATHS[c.COMPOSE],
        devcontainer_path=c.ARTIFACT_PATHS[c.DEVCONTAINER],
        script_path=c.ARTIFACT_PATHS[c.STARTUP_SCRIPT],
        generated_at=context.generated_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


# scripts/start.sh


@dataclass(frozen=True)
class StartupBlock:
    icon: str
    label: str
    guard: str
    install: Optional[str]
    run: Optional[str]


def startup_blocks(profile: StackProfile, app_port: int) -> List[StartupBlock]:
    blocks: List[StartupBlock] = []
    for entry, overlay in _overlays(profile):
        block = _startup_block(entry.icon, overlay, overlay.run_command_for(entry, app_port))
        if block is not None:
            blocks.append(block)
    return blocks


def _startup_block(icon: str, overlay: StackOverlay, run: Optional[str]) -> Optional[StartupBlock]:
    guard = overlay.guard_expression()
    if guard is None or not (overlay.install_command or run):
        return None
    return StartupBlock(
        icon=icon,
        label=overlay.label,
        guard=guard,
        install=overlay.install_command,
        run=run,
    )


def render_startup_script(profile: StackProfile, context: RenderContext) -> str:
    template = context.environment.get_template("start.sh.j2")
    return template.render(
        repository=profile.repository,
        blocks=startup_blocks(profile, context.app_port),
        app_url=context.app_url,
    )


def _to_json(payload: object) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


Generator = Callable[[StackProfile, RenderContext], str]

GENERATORS: Dict[str, Generator] = {
    c.COMPOSE: render_compose,
    c.DEVCONTAINER: render_devcontainer,
    c.EDITOR_SETTINGS: render_editor_settings,
    c.EDITOR_EXTENSIONS: render_editor_extensions,
    c.GUIDE: render_guide,
    c.STARTUP_SCRIPT: render_startup_script,
}


__all__ = [
    "GENERATORS",
    "RenderContext",
    "StartupBlock",
    "create_environment",
    "post_create_command",
    "resolve_app_port",
    "startup_blocks",
]
