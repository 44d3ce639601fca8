"""Root test configuration."""

import logging

import pytest
import structlog

from deploywire.backends.memory import InMemoryBackend
from deploywire.config.settings import Settings
from deploywire.context import WiringContext
from deploywire.environment.store import EnvironmentStore


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def deployments_file(tmp_path):
    """Path of a deployments file that does not exist yet."""
    return tmp_path / "deployments.yaml"


@pytest.fixture
def store(deployments_file):
    """Store with the debug environment selected."""
    store = EnvironmentStore(deployments_file)
    store.select("debug")
    return store


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def settings(deployments_file):
    return Settings(environment="debug", deployments_file=str(deployments_file))


@pytest.fixture
def ctx(deployments_file, backend, settings):
    """Wiring context over the debug environment and an in-memory backend."""
    return WiringContext.open("debug", path=deployments_file, backend=backend, settings=settings)
