"""Step-up verification for high-risk commands.

Usage::

    from command_guard.two_factor import TwoFactorAuthManager

    manager = TwoFactorAuthManager(config)
    request = manager.create("sudo reboot")
    verified = await manager.wait_for_outcome(request)
"""

from command_guard.two_factor.codes import (
    CODE_ALPHABET,
    build_challenge_url,
    generate_verification_code,
)
from command_guard.two_factor.manager import TwoFactorAuthManager
from command_guard.two_factor.messages import format_challenge_message

__all__ = [
    "CODE_ALPHABET",
    "TwoFactorAuthManager",
    "build_challenge_url",
    "format_challenge_message",
    "generate_verification_code",
]
