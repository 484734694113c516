"""Serializes generated artifacts into a zip bundle or a directory tree."""

from __future__ import annotations

import stat
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Sequence

from .models import GeneratedArtifact

_EXECUTABLE_SUFFIXES = (".sh",)
COMPRESS_LEVEL = 9


def _member_name(artifact: GeneratedArtifact) -> str:
    member = PurePosixPath(artifact.path)
    if member.is_absolute() or ".." in member.parts:
        raise ValueError(f"Refusing to package path outside the bundle: {artifact.path}")
    return member.as_posix()


def write_zip(artifacts: Sequence[GeneratedArtifact], path: Path) -> Path:
    """Write ``artifacts`` into a deflate-compressed archive at ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for artifact in artifacts:
            name = _member_name(artifact)
            info = zipfile.ZipInfo(name)
            info.compress_type = zipfile.ZIP_DEFLATED
            mode = 0o755 if name.endswith(_EXECUTABLE_SUFFIXES) else 0o644
            info.external_attr = (stat.S_IFREG | mode) << 16
            archive.writestr(info, artifact.content.encode("utf-8"), compresslevel=COMPRESS_LEVEL)
    return path


def write_tree(artifacts: Sequence[GeneratedArtifact], root: Path) -> List[Path]:
    """Write ``artifacts`` below ``root`` and return the written paths."""
    root = Path(root)
    written: List[Path] = []
    for artifact in artifacts:
        target = root / _member_name(artifact)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(artifact.content, encoding="utf-8")
        if target.suffix in _EXECUTABLE_SUFFIXES:
            target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        written.append(target)
    return written


__all__ = ["write_tree", "write_zip"]
