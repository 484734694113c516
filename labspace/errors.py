"""Exception types raised across labspace."""

from __future__ import annotations


class InvalidInput(ValueError):
    """Raised for malformed repository references, listings or payloads."""


class AnalysisError(RuntimeError):
    """Raised when a repository cannot be retrieved for analysis."""


__all__ = ["AnalysisError", "InvalidInput"]
