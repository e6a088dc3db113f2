"""Gateway handlers for the verify / status / cancel operations.

Translates loosely-typed request parameters into manager calls and
manager results into response dicts, raising ``GuardUnavailableError``
or ``InvalidRequestError`` for anything that fails.  Transport layers
(``integrations.server``, chat bots) call these handlers and map the
two exception kinds onto their own error responses.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from command_guard.errors import GuardUnavailableError, InvalidRequestError
from command_guard.models.verification import VerificationFailure
from command_guard.two_factor.manager import TwoFactorAuthManager

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Request not found or expired"
ALREADY_RESOLVED_MESSAGE = "Request not found or already resolved"


def _require_str(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    if not value or not isinstance(value, str):
        raise InvalidRequestError(f"{key} is required")
    return value


class TwoFactorGateway:
    """Boundary handlers around a ``TwoFactorAuthManager``.

    Parameters
    ----------
    manager:
        The manager to serve.  ``None`` means two-factor verification
        is not initialized in this process and every call fails with
        ``GuardUnavailableError``.
    """

    def __init__(self, manager: TwoFactorAuthManager | None) -> None:
        self._manager = manager

    def _require_manager(self) -> TwoFactorAuthManager:
        if self._manager is None:
            raise GuardUnavailableError("2FA not initialized")
        return self._manager

    def verify(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Submit a code.  Expects ``request_id`` and ``code``."""
        manager = self._require_manager()
        request_id = _require_str(params, "request_id")
        code = _require_str(params, "code")

        result = manager.submit_code(request_id, code)
        if not result.verified:
            if result.failure is VerificationFailure.INVALID_CODE:
                raise InvalidRequestError(result.error or "Verification failed")
            # Expired and unknown requests look the same from outside.
            raise InvalidRequestError(NOT_FOUND_MESSAGE)

        return {"verified": True, "request_id": request_id}

    def status(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Describe a pending request.  Expects ``request_id``."""
        manager = self._require_manager()
        request_id = _require_str(params, "request_id")

        request = manager.get_request(request_id)
        if request is None:
            raise InvalidRequestError(NOT_FOUND_MESSAGE)

        return {
            "request_id": request.id,
            "status": request.status.value,
            "command": request.command,
            "expires_at_ms": request.expires_at_ms,
        }

    def cancel(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Cancel a pending request.  Expects ``request_id``."""
        manager = self._require_manager()
        request_id = _require_str(params, "request_id")

        if not manager.cancel(request_id):
            raise InvalidRequestError(ALREADY_RESOLVED_MESSAGE)

        return {"cancelled": True, "request_id": request_id}
