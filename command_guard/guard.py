"""CommandGuard -- step-up verification gate for command execution.

Wires the risk classifier, the verification manager and a
caller-supplied notifier into a single ``authorize()`` call that a
command-execution path awaits before running a command.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from command_guard.config import TwoFactorConfig
from command_guard.models.detection import HighRiskDetection
from command_guard.models.request import VerificationPayload, VerificationRequest
from command_guard.risk.detector import HighRiskDetector
from command_guard.two_factor.manager import TwoFactorAuthManager
from command_guard.two_factor.messages import format_challenge_message

logger = logging.getLogger(__name__)

Notifier = Callable[[str, VerificationRequest], Awaitable[None]]
"""Delivers the rendered challenge message to the user."""


class CommandGuard:
    """Gate that holds high-risk commands until the user verifies them.

    Parameters
    ----------
    config:
        Two-factor settings, including the high-risk detection block.
    manager:
        Verification manager to use.  If ``None``, one is created from
        ``config``.  Pass the same instance to the gateway so codes
        submitted there resolve requests created here.
    notifier:
        Async callable receiving the challenge message and the request.
        If ``None``, the message is only logged.

    Usage::

        guard = CommandGuard(config, notifier=send_to_chat)
        if not await guard.authorize("kubectl delete ns prod", user_id="u1"):
            raise PermissionError("verification failed")
    """

    def __init__(
        self,
        config: TwoFactorConfig,
        manager: TwoFactorAuthManager | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._config = config
        self._manager = manager or TwoFactorAuthManager(config)
        self._notifier = notifier
        self._detector = HighRiskDetector(config.high_risk_commands)

        logger.info(
            "CommandGuard initialized (two_factor=%s, detection=%s, notifier=%s)",
            "enabled" if config.enabled else "disabled",
            "enabled" if self._detector.enabled else "disabled",
            "set" if notifier else "none",
        )

    @property
    def manager(self) -> TwoFactorAuthManager:
        return self._manager

    def classify(self, command: str) -> HighRiskDetection:
        """Classify ``command`` with the configured patterns."""
        return self._detector.detect(command)

    def requires_verification(self, command: str) -> bool:
        """Whether ``authorize()`` would challenge ``command``."""
        return self._config.enabled and self.classify(command).is_high_risk

    async def authorize(
        self,
        command: str,
        *,
        session_key: str | None = None,
        agent_id: str | None = None,
        channel_id: str | None = None,
        user_id: str | None = None,
    ) -> bool:
        """Decide whether ``command`` may run.

        Commands are allowed straight away when two-factor verification
        is disabled or the command is not high-risk.  Otherwise a
        verification request is created, the challenge is sent through
        the notifier, and the call suspends until the request is
        verified, cancelled or expires.

        Returns
        -------
        bool
            ``True`` if the command may run.  Anything short of an
            explicit verification returns ``False``.

        Raises
        ------
        ValueError
            If no challenge URL can be built from the configuration.
        Exception
            Whatever the notifier raises, including ``CancelledError``
            when the calling task is cancelled.  In all cases the request is
            cancelled before the exception propagates.
        """
        if not self._config.enabled:
            return True

        detection = self.classify(command)
        if not detection.is_high_risk:
            return True

        pattern = detection.matched_pattern
        logger.info(
            "High-risk command requires verification (pattern=%s, severity=%s)",
            pattern.id if pattern else None,
            pattern.severity.value if pattern else None,
        )

        request = self._manager.create(
            VerificationPayload(
                command=command,
                session_key=session_key,
                agent_id=agent_id,
                channel_id=channel_id,
                user_id=user_id,
            )
        )
        try:
            url = self._manager.get_challenge_url(request.id)
            message = format_challenge_message(request, url, now=self._manager.now())
            if self._notifier is not None:
                await self._notifier(message, request)
            else:
                logger.info("Challenge for request %s: %s", request.id, url)
        except asyncio.CancelledError:
            self._manager.cancel(request.id)
            logger.warning(
                "Authorization cancelled while issuing challenge for request %s; "
                "request cancelled",
                request.id,
            )
            raise
        except Exception:
            self._manager.cancel(request.id)
            logger.exception(
                "Failed to issue challenge for request %s; request cancelled",
                request.id,
            )
            raise

        verified = await self._manager.wait_for_outcome(request)
        logger.info(
            "Verification request %s resolved as %s",
            request.id,
            request.status.value,
        )
        return verified
