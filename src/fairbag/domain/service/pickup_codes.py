"""One-time confirmation codes for local pickup orders."""

from __future__ import annotations

import secrets

PICKUP_CODE_LENGTH = 6


def generate_pickup_code(length: int = PICKUP_CODE_LENGTH) -> str:
    """Random numeric code, zero-padded, e.g. ``"048213"``."""
    return "".join(str(secrets.randbelow(10)) for _ in range(length))
