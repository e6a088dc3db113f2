"""REST API server exposing the two-factor gateway as HTTP endpoints.

Provides ``create_app()`` which returns a FastAPI application with:

- ``POST /2fa/verify`` -- submit a verification code
- ``GET /2fa/status/{request_id}`` -- inspect a pending request
- ``POST /2fa/cancel`` -- cancel a pending request
- ``GET /health`` -- liveness check

``GuardUnavailableError`` maps to HTTP 503 and ``InvalidRequestError``
to HTTP 400.

Usage::

    from command_guard.integrations.server import create_app

    app = create_app(manager=guard.manager)

    # Run with:  uvicorn command_guard.integrations.server:app
"""

import logging
from typing import Any, Optional

from command_guard.config import TwoFactorConfig
from command_guard.errors import GuardUnavailableError, InvalidRequestError
from command_guard.integrations.gateway import TwoFactorGateway

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"

# Module-level app instance for ``uvicorn command_guard.integrations.server:app``
app: Any = None


def create_app(
    manager: Any = None,
    config: Optional[TwoFactorConfig] = None,
) -> Any:
    """Create a FastAPI application serving the two-factor gateway.

    Parameters
    ----------
    manager:
        The ``TwoFactorAuthManager`` shared with the command-execution
        path.  If ``None`` and ``config`` is given, a new manager is
        created from it.  If both are ``None`` every 2FA endpoint
        answers 503.
    config:
        Two-factor settings used only when ``manager`` is ``None``.

    Returns
    -------
    FastAPI
        A FastAPI application instance.
    """
    try:
        from fastapi import FastAPI, HTTPException
        from pydantic import BaseModel
    except ImportError:
        raise ImportError(
            "fastapi and pydantic are required for the REST API server. "
            "Install them with: pip install fastapi uvicorn pydantic"
        )

    if manager is None and config is not None:
        from command_guard.two_factor.manager import TwoFactorAuthManager
        manager = TwoFactorAuthManager(config)

    gateway = TwoFactorGateway(manager)

    # -- Request/Response models --

    class VerifyRequest(BaseModel):
        request_id: Optional[str] = None
        code: Optional[str] = None

    class CancelRequest(BaseModel):
        request_id: Optional[str] = None

    class VerifyResponse(BaseModel):
        verified: bool
        request_id: str

    class StatusResponse(BaseModel):
        request_id: str
        status: str
        command: str
        expires_at_ms: int

    class CancelResponse(BaseModel):
        cancelled: bool
        request_id: str

    class HealthResponse(BaseModel):
        status: str
        version: str
        two_factor: str

    def _call(handler: Any, params: dict[str, Any]) -> dict[str, Any]:
        try:
            return handler(params)
        except GuardUnavailableError as exc:
            raise HTTPException(status_code=503, detail=str(exc))
        except InvalidRequestError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    # -- FastAPI app --

    api = FastAPI(
        title="Command Guard API",
        description="Step-up verification for high-risk commands.",
        version=API_VERSION,
    )

    @api.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            version=API_VERSION,
            two_factor="ready" if manager is not None else "unavailable",
        )

    @api.post("/2fa/verify", response_model=VerifyResponse)
    async def verify(req: VerifyRequest) -> VerifyResponse:
        """Submit the code the user received."""
        result = _call(gateway.verify, {"request_id": req.request_id, "code": req.code})
        return VerifyResponse(**result)

    @api.get("/2fa/status/{request_id}", response_model=StatusResponse)
    async def status(request_id: str) -> StatusResponse:
        """Return the state of a pending request."""
        result = _call(gateway.status, {"request_id": request_id})
        return StatusResponse(**result)

    @api.post("/2fa/cancel", response_model=CancelResponse)
    async def cancel(req: CancelRequest) -> CancelResponse:
        """Cancel a pending request; the gated command is rejected."""
        result = _call(gateway.cancel, {"request_id": req.request_id})
        return CancelResponse(**result)

    # Store reference at module level for uvicorn
    global app
    app = api

    return api
