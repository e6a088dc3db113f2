"""Boundary integrations -- gateway handlers and REST API.

Exposes the verify / status / cancel operations to the outside::

    from command_guard.integrations.gateway import TwoFactorGateway
    from command_guard.integrations.server import create_app
"""

from command_guard.integrations.gateway import TwoFactorGateway
from command_guard.integrations.server import create_app

__all__ = [
    "TwoFactorGateway",
    "create_app",
]
