"""VerificationRequest dataclass -- output of TwoFactorAuthManager.create()."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RequestStatus(str, Enum):
    """Lifecycle state of a verification request.

    ``PENDING`` is the only non-terminal state.  A request moves to
    exactly one terminal state and never leaves it.
    """

    PENDING = "pending"
    VERIFIED = "verified"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


@dataclass(frozen=True)
class VerificationPayload:
    """Input to ``TwoFactorAuthManager.create()``.

    The correlation attributes are carried through for display and
    audit only; the manager never interprets them.
    """

    command: str
    session_key: str | None = None
    agent_id: str | None = None
    channel_id: str | None = None
    user_id: str | None = None


@dataclass
class VerificationRequest:
    """A single challenge/response cycle for one high-risk command.

    Mutable only through ``TwoFactorAuthManager``: ``status`` and
    ``resolved_at`` are written once, on the terminal transition.
    """

    id: str
    """Opaque unique identifier (UUID4 string)."""

    command: str
    """The original, untrimmed command text."""

    verification_code: str
    """Expected code, fixed at creation."""

    created_at: float
    """Creation time in epoch seconds."""

    expires_at: float
    """Deadline in epoch seconds."""

    status: RequestStatus = RequestStatus.PENDING

    session_key: str | None = None
    agent_id: str | None = None
    channel_id: str | None = None
    user_id: str | None = None

    resolved_at: float | None = None
    """Set only when the request reaches a terminal state."""

    @property
    def normalized_command(self) -> str:
        """Trimmed command used for matching and display."""
        return self.command.strip()

    @property
    def expires_at_ms(self) -> int:
        """Deadline in integer epoch milliseconds."""
        return int(self.expires_at * 1000)

    def remaining_seconds(self, now: float) -> float:
        """Seconds left before the deadline, clamped at zero."""
        return max(0.0, self.expires_at - now)
