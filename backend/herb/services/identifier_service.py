# Overview: Identifier generation for entities and portal slugs.

from __future__ import annotations

import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_id() -> str:
    """
    Entity id: id-<epoch_ms>-<6 base36 chars>.

    Collision-resistant, not collision-proof: two ids minted in the same
    millisecond differ only by the random suffix.
    """
    return f"id-{int(time.time() * 1000)}-{_random_base36(6)}"


def generate_portal_slug(length: int = 10) -> str:
    """Random, URL-safe slug for a customer portal's unique_url."""
    return _random_base36(length)
