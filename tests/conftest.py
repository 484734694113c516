from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterator

import pytest

from labspace.logging import get_logger
from tests._fixtures.listing_builder import ListingBuilder


@pytest.fixture
def listing_builder() -> ListingBuilder:
    """Provide a fresh listing builder for each test."""
    return ListingBuilder()


@pytest.fixture
def generated_at() -> datetime:
    """Fixed timestamp so synthesized artifacts are reproducible."""
    return datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_labspace_logger() -> Iterator[None]:
    # CLI runs attach handlers bound to captured streams; drop them afterwards.
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
