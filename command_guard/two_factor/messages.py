"""Human-facing challenge prompt text."""

from __future__ import annotations

import math
import time

from command_guard.models.request import VerificationRequest

# Challenge URLs containing this marker are local test challenges.
MOCK_URL_MARKER = "mock-2fa"


def minutes_remaining(request: VerificationRequest, now: float | None = None) -> int:
    """Whole minutes until the deadline, rounded up."""
    now = time.time() if now is None else now
    return max(0, math.ceil((request.expires_at - now) / 60))


def format_challenge_message(
    request: VerificationRequest,
    challenge_url: str,
    now: float | None = None,
) -> str:
    """Render the prompt asking the user to complete verification.

    The expected code is only revealed when ``challenge_url`` points at
    a mock challenge.
    """
    mock_hint = ""
    if MOCK_URL_MARKER in challenge_url:
        mock_hint = f" (mock verification -- test code: {request.verification_code})"

    return "\n".join(
        [
            f"High-risk command detected: `{request.command}`",
            f"Complete verification here: {challenge_url}",
            f"Then enter the verification code here to continue.{mock_hint}",
            f"Expires in {minutes_remaining(request, now)} minute(s) "
            "(type cancel to abort).",
        ]
    )
