"""Shared test fixtures and helpers for Command Guard tests.

Provides a controllable clock, configuration factories, and managers
wired for mock-mode verification.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from command_guard.config import HighRiskConfig, MockConfig, TwoFactorConfig
from command_guard.two_factor.manager import TwoFactorAuthManager

MOCK_CODE = "123456"
MOCK_URL = "https://gateway.test/mock-2fa/{request_id}"
BASE_URL = "https://gateway.test"


class FakeClock:
    """Manually advanced wall clock (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_config(
    mock: bool = False,
    timeout_seconds: float = 300,
    **overrides: Any,
) -> TwoFactorConfig:
    """Create an enabled ``TwoFactorConfig`` with sensible defaults."""
    values: dict[str, Any] = {
        "enabled": True,
        "timeout_seconds": timeout_seconds,
        "auth_base_url": BASE_URL,
        "high_risk_commands": HighRiskConfig(enabled=True),
    }
    if mock:
        values["mock"] = MockConfig(enabled=True, auth_url=MOCK_URL, code=MOCK_CODE)
    values.update(overrides)
    return TwoFactorConfig(**values)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_config() -> Callable[..., TwoFactorConfig]:
    """Factory for ``TwoFactorConfig`` instances."""
    return build_config


@pytest.fixture()
def manager() -> TwoFactorAuthManager:
    """Manager with random codes and a five-minute timeout."""
    return TwoFactorAuthManager(build_config())


@pytest.fixture()
def mock_manager() -> TwoFactorAuthManager:
    """Manager in mock mode (fixed code ``123456``)."""
    return TwoFactorAuthManager(build_config(mock=True))


@pytest.fixture()
def clocked_manager(clock: FakeClock) -> TwoFactorAuthManager:
    """Manager whose deadlines follow the ``clock`` fixture."""
    return TwoFactorAuthManager(build_config(), clock=clock)
