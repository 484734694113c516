"""Artifact synthesizer turning stack profiles into labspace files."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from ..logging import get_logger
from ..models import GeneratedArtifact, StackProfile
from .constants import ARTIFACT_PATHS, ARTIFACT_SLOTS, DEFAULT_APP_PORT, OUTPUT_PATHS
from .generators import GENERATORS, RenderContext, create_environment, resolve_app_port

logger = get_logger("synthesis")


def synthesize(
    profile: StackProfile,
    *,
    generated_at: datetime | None = None,
) -> List[GeneratedArtifact]:
    """Render the six labspace artifacts for ``profile`` in slot order.

    Pass ``generated_at`` to make the output byte-for-byte reproducible.
    """
    context = RenderContext(
        app_port=resolve_app_port(profile),
        generated_at=generated_at or datetime.now(timezone.utc),
        environment=create_environment(),
    )
    logger.debug(
        "Synthesizing %s with application port %d",
        profile.repository.full_name,
        context.app_port,
    )
    return [
        GeneratedArtifact(path=ARTIFACT_PATHS[slot], content=GENERATORS[slot](profile, context))
        for slot in ARTIFACT_SLOTS
    ]


__all__ = [
    "ARTIFACT_PATHS",
    "ARTIFACT_SLOTS",
    "DEFAULT_APP_PORT",
    "OUTPUT_PATHS",
    "resolve_app_port",
    "synthesize",
]
