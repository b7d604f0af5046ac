"""Shared test fixtures for the Frontdesk test suite."""

from collections.abc import Callable, Generator, Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from uuid import UUID, uuid4

import pytest
import structlog

from frontdesk.cache import InMemoryCacheService
from frontdesk.memory.stores import InMemoryLearningStore
from frontdesk.tenants.models import TenantProfile, Trade
from frontdesk.tenants.stores import InMemoryTenantConfigStore


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            toml_file = test_config_dir / filename
            toml_file.write_text(content)

    return _create_toml_files


@pytest.fixture
def env_override(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[dict[str, str]], AbstractContextManager[None]]:
    """Set FRONTDESK_* variables for the duration of a with block.

    Usage:
        with env_override({"FRONTDESK_ENV": "test"}):
            settings = get_settings()
    """

    @contextmanager
    def _override(values: dict[str, str]) -> Iterator[None]:
        with monkeypatch.context() as patched:
            for key, value in values.items():
                patched.setenv(key, value)
            yield

    return _override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test.

    This ensures test isolation for configuration tests.
    """
    from frontdesk.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clear_log_context() -> Generator[None, None, None]:
    """Drop structlog context variables left behind by a test."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def profile(tenant_id: UUID) -> TenantProfile:
    """HVAC tenant profile with filler phrases disabled for stable text."""
    return TenantProfile(
        tenant_id=tenant_id,
        company_name="Acme Heating & Air",
        trade=Trade.HVAC,
        phone="555-0100",
        technician_name="Dana",
        filler_phrases=[],
    )


@pytest.fixture
def config_store() -> InMemoryTenantConfigStore:
    return InMemoryTenantConfigStore()


@pytest.fixture
def learning_store() -> InMemoryLearningStore:
    return InMemoryLearningStore()


@pytest.fixture
def cache() -> InMemoryCacheService:
    return InMemoryCacheService()
