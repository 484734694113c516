"""Aggregates stack and service detection into a StackProfile."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..errors import InvalidInput
from ..logging import get_logger
from ..models import FileEntry, FileListing, ManifestSet, RepositoryHandle, StackProfile
from .services import detect_services
from .stacks import CONTAINERFILE, RECOGNIZED_MANIFESTS, detect_stacks

UNKNOWN_REPOSITORY = RepositoryHandle(owner="unknown", name="repository")

_SETUP_BUCKETS: tuple[tuple[float, str], ...] = (
    (2, "1-2 minutes"),
    (5, "2-5 minutes"),
    (10, "5-10 minutes"),
)
_SETUP_OVERFLOW = "10+ minutes"

logger = get_logger("detection")


def estimate_setup_time(stack_count: int, service_count: int) -> str:
    """Bucket a rough setup duration from entry counts alone."""
    minutes = 1 + stack_count * 0.5 + service_count * 1
    for threshold, label in _SETUP_BUCKETS:
        if minutes < threshold:
            return label
    return _SETUP_OVERFLOW


def detect(
    listing: Optional[Sequence[FileEntry]],
    manifests: Optional[ManifestSet] = None,
    *,
    repository: RepositoryHandle = UNKNOWN_REPOSITORY,
    description: str = "",
) -> StackProfile:
    """Infer the stack profile for a file listing and its fetched manifests.

    Missing or malformed manifests never fail detection; they only reduce
    what the affected entries can report. A missing or malformed listing
    raises ``InvalidInput``.
    """
    files = _validate_listing(listing)
    recognized = _recognized_manifests(manifests)

    tech_stack = tuple(detect_stacks(files, recognized))
    services = tuple(detect_services(files))
    logger.debug(
        "Detected %d stack entries and %d services across %d files",
        len(tech_stack),
        len(services),
        len(files),
    )

    return StackProfile(
        repository=repository,
        description=description or "",
        files=files,
        tech_stack=tech_stack,
        services=services,
        ports=tuple(service.port for service in services),
        has_containerfile=any(entry.path == CONTAINERFILE for entry in files),
        has_tests=any("test" in entry.path for entry in files),
        estimated_setup_time=estimate_setup_time(len(tech_stack), len(services)),
    )


def _validate_listing(listing: Optional[Sequence[FileEntry]]) -> FileListing:
    if listing is None:
        raise InvalidInput("A file listing is required for detection")
    if isinstance(listing, (str, bytes)) or not isinstance(listing, Sequence):
        raise InvalidInput("File listing must be a sequence of FileEntry items")
    for entry in listing:
        if not isinstance(entry, FileEntry):
            raise InvalidInput(f"Unexpected listing item: {entry!r}")
    return tuple(listing)


def _recognized_manifests(manifests: Optional[ManifestSet]) -> Dict[str, str]:
    if not manifests:
        return {}
    return {
        name: content
        for name, content in manifests.items()
        if name in RECOGNIZED_MANIFESTS and isinstance(content, str)
    }


__all__ = ["UNKNOWN_REPOSITORY", "detect", "estimate_setup_time"]
