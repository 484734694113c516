"""Labspace: development environments inferred from repository contents."""

from .detection import detect
from .errors import AnalysisError, InvalidInput
from .synthesis import synthesize

__all__ = ["AnalysisError", "InvalidInput", "detect", "synthesize"]

__version__ = "1.0.0"
