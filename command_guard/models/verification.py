"""VerificationResult dataclass -- output of TwoFactorAuthManager.submit_code()."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class VerificationFailure(str, Enum):
    """Why a code submission did not verify the request."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    INVALID_CODE = "invalid_code"


_FAILURE_MESSAGES = {
    VerificationFailure.NOT_FOUND: "Request not found or expired",
    VerificationFailure.EXPIRED: "Request expired",
    VerificationFailure.INVALID_CODE: "Invalid verification code",
}


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a single code submission.

    Only ``INVALID_CODE`` leaves the request pending; the caller may
    retry with another code before the deadline.
    """

    verified: bool
    failure: VerificationFailure | None = None

    @property
    def error(self) -> str | None:
        """Human-readable failure message, or ``None`` on success."""
        if self.failure is None:
            return None
        return _FAILURE_MESSAGES[self.failure]

    @property
    def retryable(self) -> bool:
        """Whether the same request can still be verified."""
        return self.failure is VerificationFailure.INVALID_CODE

    @classmethod
    def success(cls) -> VerificationResult:
        return cls(verified=True)

    @classmethod
    def failed(cls, failure: VerificationFailure) -> VerificationResult:
        return cls(verified=False, failure=failure)
