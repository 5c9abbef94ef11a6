"""Shared pytest configuration and fixtures for the connected components test suite."""

import sys
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from connected_components.core import PubSub  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as exercising a full coordinator"
    )


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def pubsub() -> PubSub:
    return PubSub("test")


@pytest.fixture
def running():
    """Start a coordinator for the duration of an ``async with`` block.

    Example:
        async with running(coordinator) as task:
            coordinator.push_event("inc")
            await coordinator.wait_idle()

    The coordinator is stopped on exit; ``task`` exposes its outcome.
    """

    @asynccontextmanager
    async def _running(coordinator):
        task = coordinator.start()
        await coordinator.wait_idle()
        try:
            yield task
        finally:
            await coordinator.stop()

    return _running
