"""
Random id generators: pure, side-effect-free functions.

Challenge ids double as proof tokens, so they come from the ``secrets``
module. Challenge content (captcha text, operands) is generated elsewhere
from its own PRNG instance.
"""

from __future__ import annotations

import secrets
import string

# Same alphabet as URL-safe base64, so ids survive query strings unescaped
ID_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_challenge_id(length: int = 12) -> str:
    """Generate a cryptographically secure URL-safe challenge id.

    Args:
        length: Number of characters (default 12, ~72 bits of entropy).

    Returns:
        Random string over ``A-Za-z0-9_-`` of the requested length.
    """
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))
