"""High-risk command classification.

Decides whether a command needs step-up verification by matching it
against the built-in pattern table plus any configured custom
patterns.  The first matching pattern wins.

Usage::

    from command_guard.risk import detect_high_risk_command

    detection = detect_high_risk_command("rm -rf /tmp", config.high_risk_commands)
    if detection.is_high_risk:
        print(detection.matched_pattern.id)
"""

from command_guard.risk.patterns import (
    DEFAULT_HIGH_RISK_PATTERNS,
    HighRiskPattern,
    Severity,
    parse_custom_patterns,
)
from command_guard.risk.detector import (
    HighRiskDetector,
    detect_high_risk_command,
    get_high_risk_patterns,
    is_high_risk_detection_enabled,
)

__all__ = [
    "DEFAULT_HIGH_RISK_PATTERNS",
    "HighRiskDetector",
    "HighRiskPattern",
    "Severity",
    "detect_high_risk_command",
    "get_high_risk_patterns",
    "is_high_risk_detection_enabled",
    "parse_custom_patterns",
]
