"""HighRiskDetection dataclass -- output of detect_high_risk_command()."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from command_guard.risk.patterns import HighRiskPattern


@dataclass(frozen=True)
class HighRiskDetection:
    """Verdict of the risk classifier for a single command."""

    is_high_risk: bool
    """Whether the command requires step-up verification."""

    command: str
    """The trimmed command that was evaluated."""

    matched_pattern: HighRiskPattern | None = None
    """First pattern that matched, or ``None`` if nothing matched."""
