"""Detection engine turning file listings and manifests into stack profiles."""

from __future__ import annotations

from .engine import UNKNOWN_REPOSITORY, detect, estimate_setup_time
from .services import SERVICE_RULES, WEB_SERVICE_TYPE, detect_services
from .stacks import CONTAINERFILE, RECOGNIZED_MANIFESTS, STACK_RULES, detect_stacks

__all__ = [
    "CONTAINERFILE",
    "RECOGNIZED_MANIFESTS",
    "SERVICE_RULES",
    "STACK_RULES",
    "UNKNOWN_REPOSITORY",
    "WEB_SERVICE_TYPE",
    "detect",
    "detect_services",
    "detect_stacks",
    "estimate_setup_time",
]
