"""
erc5564: non-interactive stealth commitments over pairing-friendly curves.

A sender derives a one-time public commitment that only the intended
receiver can recognise and spend from, without any handshake:

- **ECDH** between the sender's ephemeral key and the receiver's
  viewing key yields a shared point,
- a **domain hash** (Keccak-256 → Poseidon) turns it into a scalar *h*,
- the commitment is  *h·G + S*  (S = receiver's spending key), and
- the low 64 bits of *h* form a public **view tag** that lets scanners
  reject almost every foreign announcement after one multiplication.

Curves: BN254 (default) and BLS12-381 via py_ecc, secp256k1 via
coincurve.  Exactly one backend is active per process; see
:pymod:`erc5564.config`.

Quick start
-----------
::

    from erc5564 import random_keypair, generate_stealth_commitment, \\
        generate_stealth_private_key, derive_public_key

    spending_sk, spending_pk = random_keypair()
    viewing_sk, viewing_pk = random_keypair()
    ephemeral_sk, ephemeral_pk = random_keypair()

    commitment, view_tag = generate_stealth_commitment(
        viewing_pk, spending_pk, ephemeral_sk,
    )
    sk = generate_stealth_private_key(
        ephemeral_pk, viewing_sk, spending_sk, view_tag,
    )
    assert derive_public_key(sk) == commitment
"""

__version__ = "0.1.0"

# ── curve backends / configuration ──────────────────────────────────────
from .backends import (
    CurveBackend,
    Bn254Backend,
    Bls12381Backend,
    Secp256k1Backend,
    get_backend,
    available_backends,
)
from .config import CurveConfig, configure_curve, active_curve, reset_curve

# ── core types ──────────────────────────────────────────────────────────
from .curve import Scalar, Point

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    StealthError,
    EntropyUnavailableError,
    CurveConfigurationError,
    CurveMismatchError,
    InvalidInputError,
)

# ── hashing ─────────────────────────────────────────────────────────────
from .poseidon import poseidon_hash
from .hash import keccak256, hash_to_field, hash_to_scalar, hash_commitment_leaf

# ── keys / ECDH ─────────────────────────────────────────────────────────
from .keys import KeyPair, derive_public_key, generate_random_scalar, random_keypair
from .ecdh import compute_shared_point

# ── stealth commitments ─────────────────────────────────────────────────
from .stealth import (
    VIEW_TAG_BITS,
    StealthCommitment,
    Announcement,
    extract_view_tag,
    compute_view_tag,
    generate_stealth_commitment,
    generate_stealth_private_key,
    verify_stealth_private_key,
    check_announcement,
    scan_announcements,
)

# ── protocol ────────────────────────────────────────────────────────────
from .protocol import StealthScheme, StealthMetaAddress, StealthKeys

__all__ = [
    # version
    "__version__",
    # backends / config
    "CurveBackend", "Bn254Backend", "Bls12381Backend", "Secp256k1Backend",
    "get_backend", "available_backends",
    "CurveConfig", "configure_curve", "active_curve", "reset_curve",
    # core
    "Scalar", "Point",
    # errors
    "StealthError", "EntropyUnavailableError", "CurveConfigurationError",
    "CurveMismatchError", "InvalidInputError",
    # hashing
    "poseidon_hash", "keccak256", "hash_to_field", "hash_to_scalar",
    "hash_commitment_leaf",
    # keys / ecdh
    "KeyPair", "derive_public_key", "generate_random_scalar",
    "random_keypair", "compute_shared_point",
    # stealth
    "VIEW_TAG_BITS", "StealthCommitment", "Announcement",
    "extract_view_tag", "compute_view_tag",
    "generate_stealth_commitment", "generate_stealth_private_key",
    "verify_stealth_private_key", "check_announcement", "scan_announcements",
    # protocol
    "StealthScheme", "StealthMetaAddress", "StealthKeys",
]
