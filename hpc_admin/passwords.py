"""Random password generation."""

from __future__ import annotations

import secrets

DEFAULT_LENGTH = 10

# Confusable characters (I, L, O, 0, 1, l, o) are left out.
ALPHABET = (
    "ABCDEFGHJKMNPQRSTUVWXYZ"
    "abcdefghijkmnpqrstuvwxyz"
    "23456789"
    ",@."
)


def rand_passwd(length: int = DEFAULT_LENGTH) -> str:
    """Return a random password of ``length`` characters.

    Anything other than a positive integer falls back to DEFAULT_LENGTH.
    """
    if not isinstance(length, int) or isinstance(length, bool) or length <= 0:
        length = DEFAULT_LENGTH
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
