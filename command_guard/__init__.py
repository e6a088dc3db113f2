"""Command Guard -- step-up verification for high-risk commands.

Public API re-exports for convenient access::

    from command_guard import CommandGuard, TwoFactorAuthManager, TwoFactorConfig
    from command_guard.risk import detect_high_risk_command
"""

from command_guard.config import (
    HighRiskConfig,
    MockConfig,
    TwoFactorConfig,
    load_two_factor_config,
    parse_two_factor_config,
)
from command_guard.errors import CommandGuardError, GuardUnavailableError, InvalidRequestError
from command_guard.guard import CommandGuard
from command_guard.models.detection import HighRiskDetection
from command_guard.models.request import RequestStatus, VerificationPayload, VerificationRequest
from command_guard.models.verification import VerificationFailure, VerificationResult
from command_guard.risk import HighRiskDetector, HighRiskPattern, Severity, detect_high_risk_command
from command_guard.two_factor import TwoFactorAuthManager, format_challenge_message

__version__ = "0.1.0"

__all__ = [
    # Orchestrator
    "CommandGuard",
    # Verification
    "TwoFactorAuthManager",
    "format_challenge_message",
    # Risk classification
    "HighRiskDetector",
    "HighRiskPattern",
    "Severity",
    "detect_high_risk_command",
    # Models
    "HighRiskDetection",
    "RequestStatus",
    "VerificationPayload",
    "VerificationRequest",
    "VerificationFailure",
    "VerificationResult",
    # Config
    "HighRiskConfig",
    "MockConfig",
    "TwoFactorConfig",
    "load_two_factor_config",
    "parse_two_factor_config",
    # Errors
    "CommandGuardError",
    "GuardUnavailableError",
    "InvalidRequestError",
]
