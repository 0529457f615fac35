"""
Elliptic-curve Diffie-Hellman on the stealth curve.

    compute_shared_point(a, b·G) == compute_shared_point(b, a·G) == (a·b)·G

The shared *point* is returned as-is; turning it into key material is
the domain hash's job (see :pymod:`hash`).
"""

from __future__ import annotations

from .curve import Point, Scalar


def compute_shared_point(private_key: Scalar, other_public_key: Point) -> Point:
    """``other_public_key · private_key``."""
    return private_key * other_public_key
