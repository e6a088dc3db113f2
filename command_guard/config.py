"""Two-factor configuration schema and YAML loader.

Defines the frozen configuration dataclasses consumed by the risk
classifier and the verification manager, and a parser that builds
them from a mapping or a YAML file.  Keys are snake_case; the
camelCase spellings used by older configuration files are accepted
as aliases.

Example YAML::

    security:
      two_factor:
        enabled: true
        timeout_seconds: 300
        auth_base_url: https://gateway.example.com
        code_length: 6
        mock:
          enabled: false
        high_risk_commands:
          disabled_pattern_ids: [docker-cleanup]
          custom_patterns:
            - id: deploy-prod
              pattern: ^deploy\\s+prod
              description: Production deployment
              severity: high
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from command_guard.risk.patterns import HighRiskPattern, parse_custom_patterns

DEFAULT_TIMEOUT_SECONDS = 300
DEFAULT_CODE_LENGTH = 6
DEFAULT_MOCK_CODE = "123456"


@dataclass(frozen=True)
class MockConfig:
    """Test/development override for code generation and URLs.

    Attributes
    ----------
    enabled:
        Whether mock mode is active.
    auth_url:
        Challenge URL to hand out instead of the real one.  A
        ``{request_id}`` placeholder is substituted; otherwise the id
        is appended as a query parameter.
    code:
        Fixed verification code.  Blank means ``DEFAULT_MOCK_CODE``.
    """

    enabled: bool = False
    auth_url: str | None = None
    code: str | None = None


@dataclass(frozen=True)
class HighRiskConfig:
    """High-risk command detection settings.

    Attributes
    ----------
    enabled:
        Whether detection runs at all.
    disabled_pattern_ids:
        Ids of built-in patterns to skip.
    custom_patterns:
        Extra patterns evaluated after the built-in ones.
    """

    enabled: bool = True
    disabled_pattern_ids: tuple[str, ...] = ()
    custom_patterns: tuple[HighRiskPattern, ...] = ()


@dataclass(frozen=True)
class TwoFactorConfig:
    """Top-level two-factor verification settings.

    Attributes
    ----------
    enabled:
        Whether step-up verification is enforced.
    timeout_seconds:
        Lifetime of a verification request.
    auth_base_url:
        Base URL for real challenge links.
    code_length:
        Number of characters in generated codes.
    mock:
        Optional mock override block.
    high_risk_commands:
        Classifier settings.
    """

    enabled: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    auth_base_url: str | None = None
    code_length: int = DEFAULT_CODE_LENGTH
    mock: MockConfig | None = None
    high_risk_commands: HighRiskConfig = field(default_factory=HighRiskConfig)

    def __post_init__(self) -> None:
        if self.timeout_seconds < 0:
            raise ValueError(
                f"timeout_seconds must be >= 0, got {self.timeout_seconds}"
            )
        if self.code_length < 1:
            raise ValueError(f"code_length must be >= 1, got {self.code_length}")

    @property
    def mock_enabled(self) -> bool:
        return self.mock is not None and self.mock.enabled


def _get(data: Mapping[str, Any], key: str, alias: str | None = None, default: Any = None) -> Any:
    """Look up ``key``, falling back to its camelCase ``alias``."""
    if key in data:
        return data[key]
    if alias is not None and alias in data:
        return data[alias]
    return default


def _require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Invalid config: '{name}' must be a mapping")
    return value


def _parse_mock(data: Any) -> MockConfig | None:
    """Parse the mock block."""
    if not data:
        return None
    data = _require_mapping(data, "mock")
    auth_url = _get(data, "auth_url", "authUrl")
    code = data.get("code")
    return MockConfig(
        enabled=bool(data.get("enabled", False)),
        auth_url=str(auth_url) if auth_url is not None else None,
        code=str(code) if code is not None else None,
    )


def _parse_high_risk(data: Any, default_enabled: bool) -> HighRiskConfig:
    """Parse the high-risk detection block."""
    data = _require_mapping(data, "high_risk_commands")
    disabled = _get(data, "disabled_pattern_ids", "disabledPatternIds") or []
    if not isinstance(disabled, (list, tuple)):
        raise ValueError("Invalid config: 'disabled_pattern_ids' must be a list")

    custom = _get(data, "custom_patterns", "customPatterns") or []
    if not isinstance(custom, (list, tuple)):
        raise ValueError("Invalid config: 'custom_patterns' must be a list")

    return HighRiskConfig(
        enabled=bool(data.get("enabled", default_enabled)),
        disabled_pattern_ids=tuple(str(pid) for pid in disabled),
        custom_patterns=parse_custom_patterns(custom),
    )


def parse_two_factor_config(data: Mapping[str, Any] | None) -> TwoFactorConfig:
    """Build a ``TwoFactorConfig`` from a ``two_factor`` mapping.

    High-risk detection defaults to enabled exactly when two-factor
    verification is enabled.

    Raises
    ------
    ValueError
        If a block has the wrong shape or a value is out of range.
    """
    data = _require_mapping(data, "two_factor")
    enabled = bool(data.get("enabled", False))

    timeout = _get(data, "timeout_seconds", "timeoutSeconds", DEFAULT_TIMEOUT_SECONDS)
    code_length = _get(data, "code_length", "codeLength", DEFAULT_CODE_LENGTH)
    base_url = _get(data, "auth_base_url", "authBaseUrl")

    try:
        timeout = float(timeout)
        code_length = int(code_length)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid two_factor config: {exc}") from exc

    return TwoFactorConfig(
        enabled=enabled,
        timeout_seconds=timeout,
        auth_base_url=str(base_url) if base_url else None,
        code_length=code_length,
        mock=_parse_mock(data.get("mock")),
        high_risk_commands=_parse_high_risk(
            _get(data, "high_risk_commands", "highRiskCommands"), enabled
        ),
    )


def load_two_factor_config(path: str | Path) -> TwoFactorConfig:
    """Load two-factor settings from a YAML file.

    The file must contain a ``two_factor`` mapping, either at the top
    level or nested under ``security``.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML structure is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file: expected a mapping in {path}")

    section = data.get("security", data)
    if not isinstance(section, dict):
        raise ValueError(f"Invalid config file: 'security' must be a mapping in {path}")

    two_factor = _get(section, "two_factor", "twoFactor")
    if two_factor is None:
        raise ValueError(
            f"Invalid config file: expected a 'two_factor' key in {path}"
        )
    return parse_two_factor_config(two_factor)
