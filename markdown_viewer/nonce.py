"""Per-render security tokens."""

from __future__ import annotations

import secrets

from .constants import NONCE_ALPHABET, NONCE_LENGTH


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    """Return a fresh alphanumeric token drawn from the system CSPRNG.

    Call once per render pass; a token must never be reused across passes.

    Examples:
        len(generate_nonce())  # 32
    """
    if length <= 0:
        raise ValueError("Nonce length must be a positive integer")
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(length))
