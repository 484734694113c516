"""Path keyword heuristics for runtime services.

These predicates look at file paths only. They over-match (any path with
``db`` in it counts as a database) and under-match (a database configured
purely in code is missed); both behaviours are kept for compatibility.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from ..models import FileEntry, ServiceEntry

DATABASE = ServiceEntry(name="Database", type="postgres", port=5432)
CACHE = ServiceEntry(name="Redis", type="redis", port=6379)
WEB = ServiceEntry(name="Web Server", type="web", port=3000)

WEB_SERVICE_TYPE = WEB.type

_DATABASE_FRAGMENTS = ("database", "db", "migration")
_CACHE_FRAGMENTS = ("redis",)
_WEB_FRAGMENTS = ("server", "app")
_WEB_ENTRY_NAMES = frozenset({"index.js", "main.py", "app.py"})


@dataclass(frozen=True)
class ServiceRule:
    service: ServiceEntry
    matches: Callable[[FileEntry], bool]


def _path_contains(*fragments: str) -> Callable[[FileEntry], bool]:
    def _match(entry: FileEntry) -> bool:
        return any(fragment in entry.path for fragment in fragments)

    return _match


def _is_web_entry(entry: FileEntry) -> bool:
    return _path_contains(*_WEB_FRAGMENTS)(entry) or entry.name in _WEB_ENTRY_NAMES


SERVICE_RULES: Tuple[ServiceRule, ...] = (
    ServiceRule(DATABASE, _path_contains(*_DATABASE_FRAGMENTS)),
    ServiceRule(CACHE, _path_contains(*_CACHE_FRAGMENTS)),
    ServiceRule(WEB, _is_web_entry),
)


def detect_services(
    files: Sequence[FileEntry],
    rules: Sequence[ServiceRule] = SERVICE_RULES,
) -> List[ServiceEntry]:
    """Return at most one service per rule, in rule order."""
    return [rule.service for rule in rules if any(rule.matches(entry) for entry in files)]


__all__ = [
    "CACHE",
    "DATABASE",
    "SERVICE_RULES",
    "WEB",
    "WEB_SERVICE_TYPE",
    "ServiceRule",
    "detect_services",
]
