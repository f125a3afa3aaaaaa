"""Unguessable invite tokens for collaboration requests."""
from __future__ import annotations

import secrets
from typing import Callable

# Visually ambiguous symbols (0/O, 1/l/I, i, o) are left out.
TOKEN_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"
TOKEN_LENGTH = 12
MAX_ATTEMPTS = 8


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Return ``length`` symbols drawn uniformly from ``TOKEN_ALPHABET``."""

    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def new_invite_token(
    exists: Callable[[str], bool],
    *,
    length: int = TOKEN_LENGTH,
    attempts: int = MAX_ATTEMPTS,
) -> str:
    """Draw tokens until ``exists`` reports one as unused."""

    for _ in range(attempts):
        token = generate_token(length)
        if not exists(token):
            return token
    raise RuntimeError(f"Could not draw an unused invite token in {attempts} attempts")


__all__ = ["TOKEN_ALPHABET", "TOKEN_LENGTH", "generate_token", "new_invite_token"]
