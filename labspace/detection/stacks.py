"""Ordered stack detection rules.

Each rule pairs a trigger with a builder. Rules are evaluated in table order
and every satisfied rule contributes one entry, so a polyglot repository
surfaces several stacks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import FileEntry, TechStackEntry
from .utils import (
    MAX_DEV_DEPENDENCIES,
    MAX_RUNTIME_DEPENDENCIES,
    load_package_json,
    node_dependency_names,
    node_engine_version,
    node_scripts,
    parse_go_version,
    parse_requirements,
    parse_ruby_version,
)

LATEST = "latest"

PACKAGE_JSON = "package.json"
REQUIREMENTS_TXT = "requirements.txt"
GEMFILE = "Gemfile"
GO_MOD = "go.mod"
POM_XML = "pom.xml"
BUILD_GRADLE = "build.gradle"
CARGO_TOML = "Cargo.toml"
COMPOSER_JSON = "composer.json"
PUBSPEC_YAML = "pubspec.yaml"
CONTAINERFILE = "Dockerfile"

RECOGNIZED_MANIFESTS: Tuple[str, ...] = (
    PACKAGE_JSON,
    REQUIREMENTS_TXT,
    GEMFILE,
    GO_MOD,
    POM_XML,
    BUILD_GRADLE,
    CARGO_TOML,
    COMPOSER_JSON,
    PUBSPEC_YAML,
)

NODE = "Node.js"
PYTHON = "Python"
DOCKER = "Docker"
JAVA = "Java"
GO = "Go"
RUBY = "Ruby"
PHP = "PHP"
RUST = "Rust"
DOTNET = ".NET"
DART = "Dart/Flutter"

_DOTNET_SUFFIXES = (".cs", ".csproj", ".fsproj", ".sln")

Trigger = Callable[[Sequence[FileEntry], Mapping[str, str]], bool]
Builder = Callable[[Sequence[FileEntry], Mapping[str, str]], TechStackEntry]

logger = get_logger("detection.stacks")


@dataclass(frozen=True)
class StackRule:
    """Trigger/builder pair plus the fallback entry used when building fails."""

    name: str
    icon: str
    default_version: str
    trigger: Trigger
    builder: Optional[Builder] = None

    def fallback(self) -> TechStackEntry:
        return TechStackEntry(name=self.name, icon=self.icon, version=self.default_version)

    def build(self, files: Sequence[FileEntry], manifests: Mapping[str, str]) -> TechStackEntry:
        if self.builder is None:
            return self.fallback()
        try:
            return self.builder(files, manifests)
        except Exception as exc:  # manifest content is untrusted input
            logger.debug("Falling back to defaults for %s: %s", self.name, exc)
            return self.fallback()


# Triggers


def _manifest_present(*names: str) -> Trigger:
    def _trigger(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> bool:
        return any(name in manifests for name in names)

    return _trigger


def _path_suffix(*suffixes: str) -> Trigger:
    def _trigger(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> bool:
        return any(entry.path.endswith(suffixes) for entry in files)

    return _trigger


def _top_level_file(name: str) -> Trigger:
    def _trigger(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> bool:
        return any(entry.path == name for entry in files)

    return _trigger


def _either(*triggers: Trigger) -> Trigger:
    def _trigger(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> bool:
        return any(trigger(files, manifests) for trigger in triggers)

    return _trigger


# Builders


def _build_node(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> TechStackEntry:
    package = load_package_json(manifests[PACKAGE_JSON])
    return TechStackEntry(
        name=NODE,
        icon="🟢",
        version=node_engine_version(package) or ">=16.0.0",
        dependencies=tuple(node_dependency_names(package, "dependencies", MAX_RUNTIME_DEPENDENCIES)),
        dev_dependencies=tuple(
            node_dependency_names(package, "devDependencies", MAX_DEV_DEPENDENCIES)
        ),
        scripts=node_scripts(package),
    )


def _build_python(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> TechStackEntry:
    return TechStackEntry(
        name=PYTHON,
        icon="🐍",
        version="3.9+",
        dependencies=tuple(parse_requirements(manifests[REQUIREMENTS_TXT])),
    )


def _build_java(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> TechStackEntry:
    return TechStackEntry(
        name=JAVA,
        icon="☕",
        version="11+",
        build_tool="Maven" if POM_XML in manifests else "Gradle",
    )


def _build_go(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> TechStackEntry:
    return TechStackEntry(
        name=GO, icon="🐹", version=parse_go_version(manifests[GO_MOD]) or LATEST
    )


def _build_ruby(files: Sequence[FileEntry], manifests: Mapping[str, str]) -> TechStackEntry:
    return TechStackEntry(
        name=RUBY, icon="💎", version=parse_ruby_version(manifests[GEMFILE]) or LATEST
    )


STACK_RULES: Tuple[StackRule, ...] = (
    StackRule(NODE, "🟢", ">=16.0.0", _manifest_present(PACKAGE_JSON), _build_node),
    StackRule(PYTHON, "🐍", "3.9+", _manifest_present(REQUIREMENTS_TXT), _build_python),
    StackRule(DOCKER, "🐳", LATEST, _top_level_file(CONTAINERFILE)),
    StackRule(JAVA, "☕", "11+", _manifest_present(POM_XML, BUILD_GRADLE), _build_java),
    StackRule(GO, "🐹", LATEST, _manifest_present(GO_MOD), _build_go),
    StackRule(RUBY, "💎", LATEST, _manifest_present(GEMFILE), _build_ruby),
    StackRule(
        PHP, "🐘", "8.1+", _either(_manifest_present(COMPOSER_JSON), _path_suffix(".php"))
    ),
    StackRule(RUST, "🦀", LATEST, _manifest_present(CARGO_TOML)),
    StackRule(DOTNET, "💜", "6.0+", _path_suffix(*_DOTNET_SUFFIXES)),
    StackRule(DART, "🎯", LATEST, _manifest_present(PUBSPEC_YAML)),
)


def detect_stacks(
    files: Sequence[FileEntry],
    manifests: Mapping[str, str],
    rules: Sequence[StackRule] = STACK_RULES,
) -> List[TechStackEntry]:
    """Evaluate ``rules`` in order and return one entry per satisfied trigger."""
    entries: List[TechStackEntry] = []
    for rule in rules:
        if rule.trigger(files, manifests):
            entries.append(rule.build(files, manifests))
    return entries


__all__ = [
    "CONTAINERFILE",
    "RECOGNIZED_MANIFESTS",
    "STACK_RULES",
    "StackRule",
    "detect_stacks",
]
