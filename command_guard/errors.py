"""Command Guard error hierarchy.

Boundary failures inherit from ``CommandGuardError`` so callers can
catch a single base class while still handling the specific kinds
when needed.

Lifecycle operations on ``TwoFactorAuthManager`` never raise these --
they report outcomes as explicit result values.  The gateway layer
converts those results into the exceptions below.
"""

from __future__ import annotations


class CommandGuardError(Exception):
    """Base exception for all Command Guard errors."""


class GuardUnavailableError(CommandGuardError):
    """Raised when two-factor verification is not initialized."""


class InvalidRequestError(CommandGuardError):
    """Raised for malformed input, a wrong code, or an unknown request."""
