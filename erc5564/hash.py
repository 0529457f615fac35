"""
Domain hash for stealth commitments.

Two stages, matching the RLN hashers:

    hash_to_field(x)  = Keccak-256(x)  read little-endian, mod r_BN254
    hash_to_scalar(x) = Poseidon([ hash_to_field(x) ])

The Keccak stage absorbs arbitrary bytes, so serialised curve points
never reach the Poseidon sponge directly; the sponge only ever sees
Keccak outputs reduced into the field.

The result is lifted into the scalar field of the requested backend.
Every supported group order exceeds the BN254 scalar modulus, so the
lift is injective.
"""

from __future__ import annotations

from typing import Optional

from Crypto.Hash import keccak

from .backends import CurveBackend
from .curve import Point, Scalar
from .errors import InvalidInputError
from .poseidon import FIELD_PRIME, poseidon_hash


def keccak256(data: bytes) -> bytes:
    """Original Keccak-256 (Ethereum flavour, not NIST SHA3-256)."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def _require_bytes(data) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise InvalidInputError(
        f"hash input must be bytes-like, got {type(data).__name__}"
    )


def hash_to_field(data: bytes) -> int:
    """Map arbitrary bytes into the BN254 scalar field."""
    digest = keccak256(_require_bytes(data))
    return int.from_bytes(digest, "little") % FIELD_PRIME


def hash_to_scalar(data: bytes, curve: Optional[CurveBackend] = None) -> Scalar:
    """Domain hash: bytes → scalar of *curve* (active backend by default)."""
    return Scalar(poseidon_hash([hash_to_field(data)]), curve)


def hash_commitment_leaf(commitment: Point) -> int:
    """
    Membership-tree leaf for a published commitment.

    ``Poseidon([x mod r, y mod r])`` over the affine coordinates.  The
    tree itself (indices, insertion, proofs) belongs to the caller.
    """
    if commitment.is_inf():
        raise InvalidInputError("the identity is not a valid commitment")
    x, y = commitment.affine()
    return poseidon_hash([x % FIELD_PRIME, y % FIELD_PRIME])
