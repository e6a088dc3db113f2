"""Verification code generation and challenge URL construction."""

from __future__ import annotations

import secrets
from urllib.parse import quote

from command_guard.config import DEFAULT_CODE_LENGTH, DEFAULT_MOCK_CODE, MockConfig

# No 0/O or 1/I.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

VERIFY_PATH = "/2fa/verify"
REQUEST_ID_PLACEHOLDER = "{request_id}"
# Spelling used by camelCase configuration files.
REQUEST_ID_PLACEHOLDER_CAMEL = "{requestId}"


def resolve_mock_code(mock: MockConfig | None) -> str | None:
    """Return the fixed code for an active mock block, else ``None``."""
    if mock is None or not mock.enabled:
        return None
    return (mock.code or "").strip() or DEFAULT_MOCK_CODE


def generate_verification_code(
    length: int = DEFAULT_CODE_LENGTH, mock: MockConfig | None = None
) -> str:
    """Generate a human-typeable verification code.

    Parameters
    ----------
    length:
        Number of characters to draw.
    mock:
        Optional mock block.  When enabled, its fixed code is returned
        instead of a random one.

    Returns
    -------
    str
        ``length`` characters drawn independently and uniformly from
        ``CODE_ALPHABET`` with ``secrets.choice``, or the mock code.

    Raises
    ------
    ValueError
        If ``length`` is less than 1.
    """
    mock_code = resolve_mock_code(mock)
    if mock_code is not None:
        return mock_code

    if length < 1:
        raise ValueError(f"Code length must be >= 1, got {length}")
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    """Canonical form used for comparison: trimmed and upper-cased."""
    return code.strip().upper()


def codes_match(submitted: str, expected: str) -> bool:
    """Compare two codes ignoring case and surrounding whitespace."""
    return secrets.compare_digest(
        normalize_code(submitted).encode("utf-8"),
        normalize_code(expected).encode("utf-8"),
    )


def _mock_url(mock_url: str, request_id: str) -> str:
    placeholders = (REQUEST_ID_PLACEHOLDER, REQUEST_ID_PLACEHOLDER_CAMEL)
    if any(p in mock_url for p in placeholders):
        for placeholder in placeholders:
            mock_url = mock_url.replace(placeholder, request_id)
        return mock_url
    joiner = "&" if "?" in mock_url else "?"
    return f"{mock_url}{joiner}request_id={quote(request_id, safe='')}"


def build_challenge_url(
    request_id: str,
    base_url: str | None,
    mock: MockConfig | None = None,
) -> str:
    """Build the link a human visits to complete the challenge.

    With an active mock block carrying a non-blank ``auth_url``, that
    URL is used exclusively.  Otherwise the fixed verification path and
    the request id are appended to ``base_url``.

    Raises
    ------
    ValueError
        If no mock URL applies and ``base_url`` is empty.
    """
    if mock is not None and mock.enabled:
        mock_url = (mock.auth_url or "").strip()
        if mock_url:
            return _mock_url(mock_url, request_id)

    if not base_url:
        raise ValueError("auth_base_url is required to build a challenge URL")
    return f"{base_url.rstrip('/')}{VERIFY_PATH}/{request_id}"
