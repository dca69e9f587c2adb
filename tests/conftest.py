"""pytest global fixtures: environment isolation."""

import pytest

_ENV_VARS = (
    "ITINERIZER_STORAGE",
    "RULES_DISABLED",
    "RULES_ENABLED",
    "RULES_ENABLE_WARNINGS",
    "RULES_ENABLE_INFO",
    "ADJACENCY_WINDOW_MINUTES",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Default settings with storage pointed at a per-test directory."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ITINERIZER_DATA_DIR", str(tmp_path / "itineraries"))

    from itinerizer.api.main import reset_services
    from itinerizer.infrastructure.logging import reset_logger

    reset_logger()
    reset_services()
    yield
    reset_services()
    reset_logger()
