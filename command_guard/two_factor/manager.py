"""TwoFactorAuthManager -- verification request lifecycle.

Owns the table of live verification requests and arbitrates the race
between the three ways a request can end: a correct code, an explicit
cancel, or the deadline timer.  Whichever gets to the table first
removes the entry, disarms the timer and wakes the waiter; everyone
after it sees "not found".

The manager runs on asyncio.  ``submit_code()``, ``cancel()`` and the
read-only lookups may also be called from worker threads: the table is
guarded by a lock, and waiters are woken on their own loop with
``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from command_guard.config import TwoFactorConfig
from command_guard.models.request import (
    RequestStatus,
    VerificationPayload,
    VerificationRequest,
)
from command_guard.models.verification import VerificationFailure, VerificationResult
from command_guard.two_factor.codes import (
    build_challenge_url,
    codes_match,
    generate_verification_code,
)

logger = logging.getLogger(__name__)


@dataclass
class _PendingEntry:
    """Table record: the request plus its waiter and deadline timer.

    ``waiter``, ``timer`` and ``loop`` stay ``None`` until someone
    starts waiting on the request.
    """

    request: VerificationRequest
    loop: asyncio.AbstractEventLoop | None = None
    waiter: asyncio.Future[bool] | None = None
    timer: asyncio.TimerHandle | None = None


def _complete(waiter: asyncio.Future[bool], verified: bool) -> None:
    if not waiter.done():
        waiter.set_result(verified)


def _call_in_loop(loop: asyncio.AbstractEventLoop, callback: Callable[..., Any], *args: Any) -> None:
    """Run ``callback`` on ``loop``, directly if we are already on it."""
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None

    if running is loop:
        callback(*args)
        return
    try:
        loop.call_soon_threadsafe(callback, *args)
    except RuntimeError:
        # Loop already closed; its waiter is gone with it.
        logger.debug("Event loop closed before %s could run", callback)


class TwoFactorAuthManager:
    """Creates, tracks and resolves step-up verification requests.

    Parameters
    ----------
    config:
        Two-factor settings (timeout, code length, base URL, mock).
    clock:
        Wall-clock source in epoch seconds.  Deadlines are computed and
        checked against it; the deadline timer itself runs on the event
        loop's monotonic clock.

    Usage::

        manager = TwoFactorAuthManager(config)
        request = manager.create(VerificationPayload(command="sudo reboot"))
        url = manager.get_challenge_url(request.id)
        # ... deliver url to the user, who calls submit_code() or cancel()
        verified = await manager.wait_for_outcome(request)
    """

    def __init__(
        self,
        config: TwoFactorConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._clock = clock
        self._pending: dict[str, _PendingEntry] = {}
        self._lock = threading.Lock()

        logger.info(
            "TwoFactorAuthManager initialized (enabled=%s, timeout=%ss, mock=%s)",
            config.enabled,
            config.timeout_seconds,
            "enabled" if config.mock_enabled else "disabled",
        )

    @property
    def config(self) -> TwoFactorConfig:
        return self._config

    def is_enabled(self) -> bool:
        """Whether step-up verification is enforced."""
        return self._config.enabled

    def now(self) -> float:
        """Current time on the clock deadlines are measured against."""
        return self._clock()

    # -- Creation --

    def create(self, payload: VerificationPayload | str) -> VerificationRequest:
        """Allocate a new pending verification request.

        The request is registered immediately so it can be inspected and
        verified, but no deadline timer runs until
        ``wait_for_outcome()`` is called.

        Parameters
        ----------
        payload:
            The command and its correlation attributes.  A bare string
            is treated as the command.

        Returns
        -------
        VerificationRequest
            The new request, in ``pending`` state.
        """
        if isinstance(payload, str):
            payload = VerificationPayload(command=payload)

        now = self._clock()
        request = VerificationRequest(
            id=str(uuid.uuid4()),
            command=payload.command,
            verification_code=generate_verification_code(
                self._config.code_length, self._config.mock
            ),
            created_at=now,
            expires_at=now + self._config.timeout_seconds,
            session_key=payload.session_key,
            agent_id=payload.agent_id,
            channel_id=payload.channel_id,
            user_id=payload.user_id,
        )

        with self._lock:
            self._pending[request.id] = _PendingEntry(request=request)

        logger.debug(
            "Created verification request %s (expires in %ss)",
            request.id,
            self._config.timeout_seconds,
        )
        return request

    def get_challenge_url(self, request_id: str) -> str:
        """Return the challenge link for ``request_id``."""
        return build_challenge_url(
            request_id, self._config.auth_base_url, self._config.mock
        )

    # -- Waiting --

    async def wait_for_outcome(self, request: VerificationRequest) -> bool:
        """Suspend until ``request`` is verified, cancelled or expired.

        A request whose deadline has already passed is expired on the
        spot without scheduling a timer.  If the awaiting task itself is
        cancelled, the request is cancelled too and ``CancelledError``
        propagates.

        Returns
        -------
        bool
            ``True`` only if the request was verified.

        Raises
        ------
        RuntimeError
            If another task is already waiting on the same request.
        """
        if request.status.is_terminal:
            return request.status is RequestStatus.VERIFIED

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[bool] = loop.create_future()

        with self._lock:
            entry = self._pending.get(request.id)
            if entry is None:
                if request.status.is_terminal:
                    return request.status is RequestStatus.VERIFIED
                entry = _PendingEntry(request=request)
                self._pending[request.id] = entry
            if entry.waiter is not None:
                raise RuntimeError(
                    f"Verification request {request.id} is already being awaited"
                )

            remaining = request.expires_at - self._clock()
            already_expired = remaining <= 0
            if already_expired:
                self._resolve_locked(entry, RequestStatus.EXPIRED)
            else:
                entry.loop = loop
                entry.waiter = waiter
                entry.timer = loop.call_later(remaining, self._on_deadline, request.id)

        if already_expired:
            logger.warning(
                "Verification request %s was already past its deadline", request.id
            )
            return False

        logger.debug(
            "Waiting on verification request %s (%.1fs remaining)",
            request.id,
            remaining,
        )
        try:
            return await waiter
        except asyncio.CancelledError:
            if self.cancel(request.id):
                logger.warning(
                    "Wait on verification request %s was cancelled; request cancelled",
                    request.id,
                )
            raise

    def _on_deadline(self, request_id: str) -> None:
        """Deadline timer callback."""
        with self._lock:
            entry = self._pending.get(request_id)
            if entry is None:
                return
            # The handle has fired; there is nothing left to cancel.
            entry.timer = None
            self._resolve_locked(entry, RequestStatus.EXPIRED)

        self._log_overdue([request_id])

    # -- Resolution --

    def _resolve_locked(self, entry: _PendingEntry, status: RequestStatus) -> None:
        """Perform the terminal transition.  Caller must hold ``_lock``."""
        request = entry.request
        del self._pending[request.id]
        request.status = status
        request.resolved_at = self._clock()

        if entry.timer is not None and entry.loop is not None:
            _call_in_loop(entry.loop, entry.timer.cancel)
        if entry.waiter is not None and entry.loop is not None:
            _call_in_loop(
                entry.loop, _complete, entry.waiter, status is RequestStatus.VERIFIED
            )

    def submit_code(self, request_id: str, code: str) -> VerificationResult:
        """Check a user-submitted code against a pending request.

        A wrong code leaves the request pending; the caller may try
        again until the deadline.  A submission that finds the deadline
        already passed expires the request itself.

        Parameters
        ----------
        request_id:
            Id of the pending request.
        code:
            The code the user typed.  Compared trimmed and upper-cased.

        Returns
        -------
        VerificationResult
            ``verified=True`` on a match, otherwise the failure kind.
        """
        with self._lock:
            entry = self._pending.get(request_id)
            if entry is None:
                failure = VerificationFailure.NOT_FOUND
            elif self._clock() > entry.request.expires_at:
                self._resolve_locked(entry, RequestStatus.EXPIRED)
                failure = VerificationFailure.EXPIRED
            elif not codes_match(code, entry.request.verification_code):
                failure = VerificationFailure.INVALID_CODE
            else:
                self._resolve_locked(entry, RequestStatus.VERIFIED)
                failure = None

        if failure is None:
            logger.info("Verification request %s verified", request_id)
            return VerificationResult.success()

        if failure is VerificationFailure.EXPIRED:
            logger.warning(
                "Code submitted for verification request %s after its deadline",
                request_id,
            )
        else:
            logger.debug(
                "Code submission for verification request %s failed: %s",
                request_id,
                failure.value,
            )
        return VerificationResult.failed(failure)

    def cancel(self, request_id: str) -> bool:
        """Cancel a pending request.

        Returns
        -------
        bool
            ``True`` if the request was pending and is now cancelled,
            ``False`` if it was unknown, already resolved, or past its
            deadline (it is expired instead).
        """
        with self._lock:
            expired = self._expire_overdue_locked()
            entry = self._pending.get(request_id)
            if entry is not None:
                self._resolve_locked(entry, RequestStatus.CANCELLED)

        self._log_overdue(expired)
        if entry is None:
            return False
        logger.info("Verification request %s cancelled", request_id)
        return True

    # -- Inspection --

    def _expire_overdue_locked(self) -> list[str]:
        """Expire every entry past its deadline.  Caller must hold ``_lock``.

        Requests nobody is waiting on have no timer, so lookups settle
        them here instead.
        """
        now = self._clock()
        overdue = [e for e in self._pending.values() if now > e.request.expires_at]
        for entry in overdue:
            self._resolve_locked(entry, RequestStatus.EXPIRED)
        return [entry.request.id for entry in overdue]

    def _log_overdue(self, request_ids: list[str]) -> None:
        for request_id in request_ids:
            logger.warning("Verification request %s expired", request_id)

    def get_request(self, request_id: str) -> VerificationRequest | None:
        """Return a pending request, or ``None`` once it is resolved."""
        with self._lock:
            expired = self._expire_overdue_locked()
            entry = self._pending.get(request_id)

        self._log_overdue(expired)
        return entry.request if entry is not None else None

    def pending_count(self) -> int:
        """Number of requests still pending."""
        with self._lock:
            expired = self._expire_overdue_locked()
            count = len(self._pending)

        self._log_overdue(expired)
        return count
