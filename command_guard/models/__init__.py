"""Command Guard data models."""

from command_guard.models.detection import HighRiskDetection
from command_guard.models.request import (
    RequestStatus,
    VerificationPayload,
    VerificationRequest,
)
from command_guard.models.verification import VerificationFailure, VerificationResult

__all__ = [
    "HighRiskDetection",
    "RequestStatus",
    "VerificationFailure",
    "VerificationPayload",
    "VerificationRequest",
    "VerificationResult",
]
