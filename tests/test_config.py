"""Tests for configuration parsing and YAML loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from command_guard.config import (
    DEFAULT_CODE_LENGTH,
    DEFAULT_TIMEOUT_SECONDS,
    HighRiskConfig,
    MockConfig,
    TwoFactorConfig,
    load_two_factor_config,
    parse_two_factor_config,
)
from command_guard.risk.patterns import Severity

SAMPLE_YAML = """\
security:
  two_factor:
    enabled: true
    timeout_seconds: 120
    auth_base_url: https://gateway.example.com/
    code_length: 8
    mock:
      enabled: true
      auth_url: http://localhost:3000/mock-2fa?session=abc
      code: " 654321 "
    high_risk_commands:
      disabled_pattern_ids:
        - sudo
        - docker-cleanup
      custom_patterns:
        - id: deploy-prod
          pattern: ^deploy\\s+prod
          description: Production deployment
          severity: critical
"""


class TestTwoFactorConfigDefaults:
    def test_default_values(self) -> None:
        config = TwoFactorConfig()
        assert config.enabled is False
        assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS == 300
        assert config.code_length == DEFAULT_CODE_LENGTH == 6
        assert config.auth_base_url is None
        assert config.mock is None
        assert config.mock_enabled is False
        assert config.high_risk_commands == HighRiskConfig()

    def test_frozen(self) -> None:
        config = TwoFactorConfig()
        with pytest.raises(AttributeError):
            config.enabled = True  # type: ignore[misc]

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ValueError, match="timeout_seconds"):
            TwoFactorConfig(timeout_seconds=-1)

    def test_zero_code_length_rejected(self) -> None:
        with pytest.raises(ValueError, match="code_length"):
            TwoFactorConfig(code_length=0)

    def test_mock_enabled_requires_enabled_flag(self) -> None:
        assert TwoFactorConfig(mock=MockConfig(enabled=False)).mock_enabled is False
        assert TwoFactorConfig(mock=MockConfig(enabled=True)).mock_enabled is True


class TestParseTwoFactorConfig:
    def test_empty_mapping_gives_defaults(self) -> None:
        config = parse_two_factor_config({})
        assert config.enabled is False
        assert config.timeout_seconds == 300
        assert config.code_length == 6

    def test_none_gives_defaults(self) -> None:
        assert parse_two_factor_config(None) == parse_two_factor_config({})

    def test_snake_case_keys(self) -> None:
        config = parse_two_factor_config(
            {
                "enabled": True,
                "timeout_seconds": 60,
                "auth_base_url": "https://gw.example.com",
                "code_length": 4,
            }
        )
        assert config.enabled is True
        assert config.timeout_seconds == 60.0
        assert config.auth_base_url == "https://gw.example.com"
        assert config.code_length == 4

    def test_camel_case_aliases(self) -> None:
        config = parse_two_factor_config(
            {
                "enabled": True,
                "timeoutSeconds": 45,
                "authBaseUrl": "https://gw.example.com",
                "codeLength": 5,
                "mock": {"enabled": True, "authUrl": "http://x/mock-2fa", "code": "999"},
                "highRiskCommands": {"disabledPatternIds": ["sudo"]},
            }
        )
        assert config.timeout_seconds == 45.0
        assert config.code_length == 5
        assert config.mock == MockConfig(enabled=True, auth_url="http://x/mock-2fa", code="999")
        assert config.high_risk_commands.disabled_pattern_ids == ("sudo",)

    def test_high_risk_follows_two_factor_enabled(self) -> None:
        assert parse_two_factor_config({"enabled": True}).high_risk_commands.enabled is True
        assert parse_two_factor_config({"enabled": False}).high_risk_commands.enabled is False

    def test_high_risk_explicit_enabled_wins(self) -> None:
        config = parse_two_factor_config(
            {"enabled": True, "high_risk_commands": {"enabled": False}}
        )
        assert config.high_risk_commands.enabled is False

    def test_custom_patterns_compiled(self) -> None:
        config = parse_two_factor_config(
            {
                "enabled": True,
                "high_risk_commands": {
                    "custom_patterns": [
                        {
                            "id": "custom1",
                            "pattern": "^launch-nukes$",
                            "description": "Launch",
                            "severity": "critical",
                        }
                    ]
                },
            }
        )
        (pattern,) = config.high_risk_commands.custom_patterns
        assert pattern.id == "custom1"
        assert pattern.severity is Severity.CRITICAL
        assert pattern.matches("LAUNCH-NUKES")

    def test_invalid_custom_regex(self) -> None:
        with pytest.raises(ValueError, match="Invalid pattern"):
            parse_two_factor_config(
                {"high_risk_commands": {"custom_patterns": [{"id": "bad", "pattern": "(unclosed"}]}}
            )

    def test_disabled_ids_must_be_list(self) -> None:
        with pytest.raises(ValueError, match="disabled_pattern_ids"):
            parse_two_factor_config({"high_risk_commands": {"disabled_pattern_ids": "sudo"}})

    def test_mock_must_be_mapping(self) -> None:
        with pytest.raises(ValueError, match="mock"):
            parse_two_factor_config({"mock": ["enabled"]})

    def test_non_numeric_timeout(self) -> None:
        with pytest.raises(ValueError):
            parse_two_factor_config({"timeout_seconds": "soon"})


class TestLoadTwoFactorConfig:
    def test_load_sample(self, tmp_path: Path) -> None:
        path = tmp_path / "security.yaml"
        path.write_text(SAMPLE_YAML)

        config = load_two_factor_config(path)

        assert config.enabled is True
        assert config.timeout_seconds == 120.0
        assert config.auth_base_url == "https://gateway.example.com/"
        assert config.code_length == 8
        assert config.mock is not None
        assert config.mock.code == " 654321 "
        assert config.high_risk_commands.enabled is True
        assert config.high_risk_commands.disabled_pattern_ids == ("sudo", "docker-cleanup")
        (custom,) = config.high_risk_commands.custom_patterns
        assert custom.id == "deploy-prod"
        assert custom.matches("deploy  prod --now")

    def test_top_level_two_factor_key(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("two_factor:\n  enabled: true\n  timeout_seconds: 10\n")
        config = load_two_factor_config(path)
        assert config.enabled is True
        assert config.timeout_seconds == 10.0

    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_two_factor_config("/nonexistent/security.yaml")

    def test_missing_two_factor_key(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("security:\n  other: 1\n")
        with pytest.raises(ValueError, match="two_factor"):
            load_two_factor_config(path)

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_two_factor_config(path)
