"""Tests for the request and result data models."""

from __future__ import annotations

import pytest

from command_guard.models.request import (
    RequestStatus,
    VerificationPayload,
    VerificationRequest,
)
from command_guard.models.verification import VerificationFailure, VerificationResult


def _request(**overrides) -> VerificationRequest:
    values = {
        "id": "req-1",
        "command": "  sudo ls  ",
        "verification_code": "ABC234",
        "created_at": 1000.0,
        "expires_at": 1300.5,
    }
    values.update(overrides)
    return VerificationRequest(**values)


class TestRequestStatus:
    def test_values(self) -> None:
        assert [s.value for s in RequestStatus] == ["pending", "verified", "expired", "cancelled"]

    def test_terminal(self) -> None:
        assert RequestStatus.PENDING.is_terminal is False
        assert RequestStatus.VERIFIED.is_terminal is True
        assert RequestStatus.EXPIRED.is_terminal is True
        assert RequestStatus.CANCELLED.is_terminal is True

    def test_string_comparison(self) -> None:
        assert RequestStatus.VERIFIED == "verified"


class TestVerificationRequest:
    def test_defaults(self) -> None:
        request = _request()
        assert request.status is RequestStatus.PENDING
        assert request.resolved_at is None
        assert request.session_key is None
        assert request.user_id is None

    def test_normalized_command(self) -> None:
        request = _request()
        assert request.normalized_command == "sudo ls"
        assert request.command == "  sudo ls  "

    def test_expires_at_ms(self) -> None:
        assert _request().expires_at_ms == 1_300_500

    def test_remaining_seconds(self) -> None:
        request = _request()
        assert request.remaining_seconds(1200.0) == pytest.approx(100.5)
        assert request.remaining_seconds(2000.0) == 0.0


class TestVerificationPayload:
    def test_minimal(self) -> None:
        payload = VerificationPayload(command="sudo ls")
        assert payload.agent_id is None
        assert payload.channel_id is None

    def test_frozen(self) -> None:
        payload = VerificationPayload(command="sudo ls")
        with pytest.raises(AttributeError):
            payload.command = "ls"  # type: ignore[misc]


class TestVerificationResult:
    def test_success(self) -> None:
        result = VerificationResult.success()
        assert result.verified is True
        assert result.failure is None
        assert result.error is None
        assert result.retryable is False

    @pytest.mark.parametrize(
        ("failure", "message", "retryable"),
        [
            (VerificationFailure.NOT_FOUND, "Request not found or expired", False),
            (VerificationFailure.EXPIRED, "Request expired", False),
            (VerificationFailure.INVALID_CODE, "Invalid verification code", True),
        ],
    )
    def test_failures(self, failure: VerificationFailure, message: str, retryable: bool) -> None:
        result = VerificationResult.failed(failure)
        assert result.verified is False
        assert result.error == message
        assert result.retryable is retryable
