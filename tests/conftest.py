import pytest

from tests.factories import FakeClock


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required env vars are set for all tests."""
    monkeypatch.setenv("GEOCODING_API_KEY", "test-geocoding-key")


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock for ledgers and sweeps."""
    return FakeClock()
