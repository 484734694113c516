"""Shared constants for labspace artifact generation."""

from __future__ import annotations

COMPOSE = "compose"
DEVCONTAINER = "devcontainer"
EDITOR_SETTINGS = "editor_settings"
EDITOR_EXTENSIONS = "editor_extensions"
GUIDE = "guide"
STARTUP_SCRIPT = "startup_script"

ARTIFACT_SLOTS: tuple[str, ...] = (
    COMPOSE,
    DEVCONTAINER,
    EDITOR_SETTINGS,
    EDITOR_EXTENSIONS,
    GUIDE,
    STARTUP_SCRIPT,
)

ARTIFACT_PATHS: dict[str, str] = {
    COMPOSE: "docker-compose.yml",
    DEVCONTAINER: ".devcontainer/devcontainer.json",
    EDITOR_SETTINGS: ".vscode/settings.json",
    EDITOR_EXTENSIONS: ".vscode/extensions.json",
    GUIDE: "LABSPACE.md",
    STARTUP_SCRIPT: "scripts/start.sh",
}

OUTPUT_PATHS: tuple[str, ...] = tuple(ARTIFACT_PATHS[slot] for slot in ARTIFACT_SLOTS)

DEFAULT_APP_PORT = 3000
APP_SERVICE = "app"
WORKSPACE_FOLDER = "/workspace"
COMPOSE_VERSION = "3.8"

DATABASE_SERVICE = "db"
DATABASE_SERVICE_NAME = "Database"
DATABASE_IMAGE = "postgres:13.13"
DATABASE_PORT = 5432
DATABASE_VOLUME = "db_data"
DATABASE_ENVIRONMENT: tuple[str, ...] = (
    "POSTGRES_DB=appdb",
    "POSTGRES_USER=user",
    "POSTGRES_PASSWORD=password",
)

CACHE_SERVICE = "redis"
CACHE_SERVICE_NAME = "Redis"
CACHE_IMAGE = "redis:6.2-alpine"
CACHE_PORT = 6379

POST_CREATE_SEPARATOR = " && "


__all__ = [
    "APP_SERVICE",
    "ARTIFACT_PATHS",
    "ARTIFACT_SLOTS",
    "CACHE_IMAGE",
    "CACHE_PORT",
    "CACHE_SERVICE",
    "CACHE_SERVICE_NAME",
    "COMPOSE_VERSION",
    "DATABASE_ENVIRONMENT",
    "DATABASE_IMAGE",
    "DATABASE_PORT",
    "DATABASE_SERVICE",
    "DATABASE_SERVICE_NAME",
    "DATABASE_VOLUME",
    "DEFAULT_APP_PORT",
    "OUTPUT_PATHS",
    "POST_CREATE_SEPARATOR",
    "WORKSPACE_FOLDER",
]
