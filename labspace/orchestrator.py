"""Pipeline orchestration for analyze/generate/bundle flows."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List

from .config import LabspaceConfig, load_config
from .detection import detect
from .errors import AnalysisError
from .logging import get_logger
from .models import GeneratedArtifact, StackProfile
from .packager import write_tree, write_zip
from .repo_fetcher import FetchError, GitHubFetcher, collect_manifests, parse_repository_reference
from .synthesis import synthesize

BUNDLE_PREFIX = "labspace-"
BUNDLE_SUFFIX = ".zip"
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass
class BundleOutcome:
    """Result of packaging a labspace."""

    path: Path
    files: List[str]


class Orchestrator:
    """Coordinates fetching, detection, synthesis and packaging."""

    def __init__(
        self,
        fetcher: GitHubFetcher | None = None,
        config: LabspaceConfig | None = None,
    ) -> None:
        self.config = config or load_config()
        self.fetcher = fetcher or GitHubFetcher.from_config(self.config.github)
        self.logger = get_logger("orchestrator")

    def analyze(self, reference: str) -> StackProfile:
        """Fetch a repository and infer its stack profile."""
        handle = parse_repository_reference(reference)
        self.logger.info("Starting analysis of %s", handle.full_name)
        try:
            description = self.fetcher.fetch_description(handle)
            listing = self.fetcher.fetch_listing(handle)
        except FetchError as exc:
            raise AnalysisError(f"Failed to analyze repository: {exc}") from exc
        self.logger.debug("Fetcher discovered %d files", len(listing))

        manifests = collect_manifests(self.fetcher, handle, listing)
        self.logger.debug("Fetched manifests: %s", ", ".join(sorted(manifests)) or "(none)")

        profile = detect(listing, manifests, repository=handle, description=description)
        self.logger.info(
            "Detected %s for %s",
            ", ".join(entry.name for entry in profile.tech_stack) or "no known stack",
            handle.full_name,
        )
        return profile

    def generate(
        self, profile: StackProfile, *, generated_at: datetime | None = None
    ) -> List[GeneratedArtifact]:
        return synthesize(profile, generated_at=generated_at)

    def build_bundle(
        self,
        profile: StackProfile,
        output_dir: Path | None = None,
        *,
        generated_at: datetime | None = None,
    ) -> BundleOutcome:
        """Generate artifacts for ``profile`` and package them as a zip file."""
        artifacts = self.generate(profile, generated_at=generated_at)
        directory = Path(output_dir) if output_dir is not None else self.config.service.download_dir
        safe_name = _UNSAFE_FILENAME.sub("-", profile.repository.name) or "repository"
        filename = f"{BUNDLE_PREFIX}{safe_name}-{int(time.time() * 1000)}{BUNDLE_SUFFIX}"
        bundle = write_zip(artifacts, directory / filename)
        self.logger.info("Labspace bundle written to %s", bundle)
        return BundleOutcome(path=bundle, files=[artifact.path for artifact in artifacts])

    def export(
        self,
        profile: StackProfile,
        target_dir: Path,
        *,
        generated_at: datetime | None = None,
    ) -> List[Path]:
        """Write the generated artifacts directly into ``target_dir``."""
        artifacts = self.generate(profile, generated_at=generated_at)
        written = write_tree(artifacts, Path(target_dir))
        self.logger.info("Wrote %d labspace files to %s", len(written), target_dir)
        return written


__all__ = ["BUNDLE_PREFIX", "BUNDLE_SUFFIX", "BundleOutcome", "Orchestrator"]
