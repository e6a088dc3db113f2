"""High-risk command patterns and their parser.

Defines the ``HighRiskPattern`` data structure, the built-in default
pattern table, and the parser that turns configured custom pattern
entries (regex strings) into compiled patterns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping


class Severity(str, Enum):
    """How dangerous a matched command is considered."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class HighRiskPattern:
    """A single high-risk command pattern.

    Attributes
    ----------
    id:
        Pattern identifier.  Default ids can be disabled through
        configuration; custom ids cannot.
    pattern:
        Compiled regular expression.  Evaluated with ``search`` against
        the trimmed command.
    description:
        Human-readable description shown when the pattern matches.
    severity:
        One of ``critical``, ``high`` or ``medium``.  Informational only:
        the classifier is first-match-wins, not highest-severity-wins.
    """

    id: str
    pattern: re.Pattern[str]
    description: str
    severity: Severity

    def matches(self, command: str) -> bool:
        """Return ``True`` if this pattern accepts ``command``."""
        return self.pattern.search(command) is not None

    @classmethod
    def from_regex(
        cls,
        id: str,
        regex: str,
        description: str,
        severity: Severity | str,
    ) -> HighRiskPattern:
        """Build a pattern from a regex string, compiled case-insensitively.

        Raises
        ------
        ValueError
            If ``regex`` does not compile or ``severity`` is unknown.
        """
        try:
            compiled = re.compile(regex, re.IGNORECASE)
        except re.error as exc:
            raise ValueError(f"Invalid pattern for '{id}': {exc}") from exc
        return cls(
            id=id,
            pattern=compiled,
            description=description,
            severity=parse_severity(severity),
        )


def parse_severity(value: Severity | str) -> Severity:
    """Coerce a severity label, raising ``ValueError`` if unknown."""
    if isinstance(value, Severity):
        return value
    try:
        return Severity(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in Severity)
        raise ValueError(
            f"Unknown severity {value!r}; expected one of: {allowed}"
        ) from None


DEFAULT_HIGH_RISK_PATTERNS: tuple[HighRiskPattern, ...] = (
    HighRiskPattern.from_regex(
        "rm-recursive",
        r"^rm\s+(-[a-zA-Z]*r[a-zA-Z]*|-[a-zA-Z]*f[a-zA-Z]*|--recursive|--force)\s+",
        "Recursive or forced file deletion",
        Severity.CRITICAL,
    ),
    HighRiskPattern.from_regex(
        "sudo",
        r"^(sudo|doas)\s+",
        "Elevated privilege command",
        Severity.HIGH,
    ),
    HighRiskPattern.from_regex(
        "drop-database",
        r"\bdrop\s+(database|table|schema)\b",
        "Database object deletion",
        Severity.CRITICAL,
    ),
    HighRiskPattern.from_regex(
        "git-force-push",
        r"^git\s+push\s+(-[a-zA-Z]*f[a-zA-Z]*|--force)",
        "Git force push",
        Severity.HIGH,
    ),
    HighRiskPattern.from_regex(
        "kubectl-delete",
        r"^kubectl\s+delete\s+",
        "Kubernetes resource deletion",
        Severity.HIGH,
    ),
    HighRiskPattern.from_regex(
        "docker-cleanup",
        r"^docker\s+(rm|rmi|system\s+prune|container\s+prune|image\s+prune)",
        "Docker resource cleanup",
        Severity.MEDIUM,
    ),
    HighRiskPattern.from_regex(
        "chmod-dangerous",
        r"^chmod\s+(-[a-zA-Z]*R[a-zA-Z]*|--recursive)\s+[0-7]*[0-7][0-7][0-7]\s+/",
        "Recursive chmod on root paths",
        Severity.CRITICAL,
    ),
    HighRiskPattern.from_regex(
        "chown-dangerous",
        r"^chown\s+(-[a-zA-Z]*R[a-zA-Z]*|--recursive)\s+",
        "Recursive ownership change",
        Severity.HIGH,
    ),
    HighRiskPattern.from_regex(
        "format-disk",
        r"^(mkfs|fdisk|parted|dd\s+if=)",
        "Disk formatting or low-level operations",
        Severity.CRITICAL,
    ),
    HighRiskPattern.from_regex(
        "truncate-table",
        r"\btruncate\s+table\b",
        "Database table truncation",
        Severity.CRITICAL,
    ),
    HighRiskPattern.from_regex(
        "2fa-test",
        r"^2fa-test$",
        "Manual 2FA test command",
        Severity.MEDIUM,
    ),
)
"""Built-in patterns, evaluated in this order."""

DEFAULT_PATTERN_IDS: frozenset[str] = frozenset(p.id for p in DEFAULT_HIGH_RISK_PATTERNS)


def _parse_custom_pattern(index: int, data: Any) -> HighRiskPattern:
    """Parse one custom pattern entry from a config mapping."""
    if isinstance(data, HighRiskPattern):
        return data
    if not isinstance(data, Mapping):
        raise ValueError(f"Invalid custom pattern #{index}: expected a mapping")

    missing = [key for key in ("id", "pattern") if not data.get(key)]
    if missing:
        raise ValueError(
            f"Invalid custom pattern #{index}: missing {', '.join(missing)}"
        )

    pattern_id = str(data["id"])
    return HighRiskPattern.from_regex(
        pattern_id,
        str(data["pattern"]),
        str(data.get("description") or pattern_id),
        data.get("severity", Severity.HIGH),
    )


def parse_custom_patterns(entries: Iterable[Any] | None) -> tuple[HighRiskPattern, ...]:
    """Parse configured custom patterns, preserving their order.

    Each entry is either a ``HighRiskPattern`` or a mapping with
    ``id``, ``pattern`` (regex string), ``description`` and
    ``severity`` keys.

    Raises
    ------
    ValueError
        If an entry is malformed, its regex is invalid, or its
        severity is unknown.
    """
    if not entries:
        return ()
    return tuple(
        _parse_custom_pattern(index, entry) for index, entry in enumerate(entries)
    )
