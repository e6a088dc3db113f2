"""High-risk command detection.

``detect_high_risk_command()`` is the pure classification function.
``HighRiskDetector`` holds the effective pattern list for one
configuration so repeated classification does not rebuild it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from command_guard.models.detection import HighRiskDetection
from command_guard.risk.patterns import DEFAULT_HIGH_RISK_PATTERNS, HighRiskPattern

if TYPE_CHECKING:
    from command_guard.config import HighRiskConfig

logger = logging.getLogger(__name__)


def is_high_risk_detection_enabled(config: HighRiskConfig | None = None) -> bool:
    """Return whether detection is switched on.  ``None`` means off."""
    return config is not None and config.enabled


def get_high_risk_patterns(config: HighRiskConfig | None = None) -> list[HighRiskPattern]:
    """Return the effective pattern list for ``config``.

    Defaults come first, minus any whose id is listed in
    ``disabled_pattern_ids``; custom patterns are appended in their
    configured order.  Custom patterns cannot be disabled by id.
    """
    disabled = set(config.disabled_pattern_ids) if config is not None else set()
    patterns = [p for p in DEFAULT_HIGH_RISK_PATTERNS if p.id not in disabled]
    if config is not None:
        patterns.extend(config.custom_patterns)
    return patterns


def match_first(command: str, patterns: list[HighRiskPattern]) -> HighRiskPattern | None:
    """Return the first pattern accepting ``command``, in list order."""
    for pattern in patterns:
        if pattern.matches(command):
            return pattern
    return None


def _classify(
    command: str, enabled: bool, patterns: list[HighRiskPattern]
) -> HighRiskDetection:
    normalized = command.strip()
    if not enabled:
        return HighRiskDetection(is_high_risk=False, command=normalized)

    matched = match_first(normalized, patterns)
    if matched is None:
        return HighRiskDetection(is_high_risk=False, command=normalized)
    return HighRiskDetection(is_high_risk=True, command=normalized, matched_pattern=matched)


def detect_high_risk_command(
    command: str, config: HighRiskConfig | None = None
) -> HighRiskDetection:
    """Classify ``command`` against the configured patterns.

    Parameters
    ----------
    command:
        Raw command text.  Leading and trailing whitespace is ignored.
    config:
        Detection settings.  ``None`` or ``enabled=False`` disables
        detection and every command is reported as not high-risk.

    Returns
    -------
    HighRiskDetection
        The verdict, carrying the first matching pattern.  An earlier,
        lower-severity pattern hides a later, more severe one.
    """
    enabled = is_high_risk_detection_enabled(config)
    patterns = get_high_risk_patterns(config) if enabled else []
    return _classify(command, enabled, patterns)


class HighRiskDetector:
    """Classifier bound to a single ``HighRiskConfig``.

    Usage::

        detector = HighRiskDetector(config.high_risk_commands)
        detection = detector.detect("sudo rm -rf /")
        if detection.is_high_risk:
            print(detection.matched_pattern.description)
    """

    def __init__(self, config: HighRiskConfig | None = None) -> None:
        self._enabled = is_high_risk_detection_enabled(config)
        self._patterns = get_high_risk_patterns(config)
        logger.info(
            "HighRiskDetector initialized (enabled=%s, patterns=%d)",
            self._enabled,
            len(self._patterns),
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def patterns(self) -> list[HighRiskPattern]:
        """Return a copy of the effective pattern list."""
        return list(self._patterns)

    def detect(self, command: str) -> HighRiskDetection:
        """Classify ``command``; same result as ``detect_high_risk_command``."""
        detection = _classify(command, self._enabled, self._patterns)
        if detection.matched_pattern is not None:
            logger.debug(
                "Command matched high-risk pattern '%s' (%s)",
                detection.matched_pattern.id,
                detection.matched_pattern.severity.value,
            )
        elif self._enabled:
            logger.debug("No high-risk pattern matched command")
        return detection
