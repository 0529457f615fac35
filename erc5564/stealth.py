"""
Stealth commitments: sender-side generation, receiver-side recovery.

Sender, knowing the receiver's meta-address (spending pk *S*, viewing
pk *V*) and a fresh ephemeral keypair (e, E = e·G):

    Q   = e · V
    h   = H(Q)                      domain hash, see hash.py
    C   = h·G + S                   published commitment
    tag = low 64 bits of h          published view tag

Receiver, holding (s, v) with S = s·G and V = v·G, sees (E, C, tag):

    Q'  = v · E  ( = Q )
    h'  = H(Q')
    tag'== tag   ?  →  sk = s + h'  with  sk·G == C

The view tag is a filter, not a proof: a random announcement passes it
with probability 2⁻⁶⁴.  Anything that will *spend* must check
``sk·G == C`` — :func:`check_announcement` does.

Every function here is pure; scanning a list of announcements is
embarrassingly parallel, so :func:`check_announcement` is exposed for
callers that want to map it over their own executor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

from .backends import CurveBackend
from .config import active_curve
from .curve import Point, Scalar
from .ecdh import compute_shared_point
from .errors import InvalidInputError
from .hash import hash_commitment_leaf, hash_to_scalar
from .keys import derive_public_key

logger = logging.getLogger(__name__)

VIEW_TAG_BITS = 64
VIEW_TAG_BYTES = VIEW_TAG_BITS // 8


# ── view tags ───────────────────────────────────────────────────────────
def extract_view_tag(hashed_secret: Scalar) -> int:
    """Low 64 bits of the scalar's canonical little-endian encoding."""
    return int.from_bytes(hashed_secret.to_bytes()[:VIEW_TAG_BYTES], "little")


def _check_view_tag(tag: int) -> None:
    if not isinstance(tag, int) or isinstance(tag, bool):
        raise InvalidInputError(f"view tag must be int, got {type(tag).__name__}")
    if not 0 <= tag < 1 << VIEW_TAG_BITS:
        raise InvalidInputError(f"view tag must fit in {VIEW_TAG_BITS} bits")


def _hashed_shared_secret(private_key: Scalar, public_key: Point) -> Scalar:
    shared = compute_shared_point(private_key, public_key)
    return hash_to_scalar(shared.to_hash_input(), private_key.curve)


def compute_view_tag(ephemeral_public_key: Point, viewing_key: Scalar) -> int:
    """Receiver-side view tag for an announcement's ephemeral key."""
    return extract_view_tag(_hashed_shared_secret(viewing_key, ephemeral_public_key))


# ── commitment ──────────────────────────────────────────────────────────
@dataclass(frozen=True)
class StealthCommitment:
    """Published one-time key  C = H(e·V)·G + S  and its view tag."""

    point: Point
    view_tag: int

    def __post_init__(self) -> None:
        _check_view_tag(self.view_tag)

    def __iter__(self):
        yield self.point
        yield self.view_tag

    def leaf(self) -> int:
        """Membership-tree leaf value for this commitment."""
        return hash_commitment_leaf(self.point)

    def to_bytes(self) -> bytes:
        return self.point.to_bytes() + self.view_tag.to_bytes(VIEW_TAG_BYTES, "little")

    @classmethod
    def from_bytes(cls, data: bytes, curve: Optional[CurveBackend] = None) -> StealthCommitment:
        if len(data) < VIEW_TAG_BYTES:
            raise InvalidInputError("stealth commitment encoding too short")
        point = Point.from_bytes(data[:-VIEW_TAG_BYTES], curve)
        return cls(point, int.from_bytes(data[-VIEW_TAG_BYTES:], "little"))


def generate_stealth_commitment(
    viewing_public_key: Point,
    spending_public_key: Point,
    ephemeral_private_key: Scalar,
) -> StealthCommitment:
    """
    Sender side.  Unpacks as ``(commitment_point, view_tag)``.

    The ephemeral private key should be discarded afterwards; only
    ``ephemeral_private_key · G`` is published alongside the result.
    """
    q_hashed = _hashed_shared_secret(ephemeral_private_key, viewing_public_key)
    q_hashed_point = derive_public_key(q_hashed)
    view_tag = extract_view_tag(q_hashed)
    return StealthCommitment(q_hashed_point + spending_public_key, view_tag)


def generate_stealth_private_key(
    ephemeral_public_key: Point,
    viewing_key: Scalar,
    spending_key: Scalar,
    expected_view_tag: int,
) -> Optional[Scalar]:
    """
    Receiver side.  ``None`` when the view tag does not match.

    A match only means the tag agreed; confirm with
    :func:`verify_stealth_private_key` before trusting the key.
    """
    _check_view_tag(expected_view_tag)
    q_receiver_hashed = _hashed_shared_secret(viewing_key, ephemeral_public_key)
    if extract_view_tag(q_receiver_hashed) != expected_view_tag:
        return None
    return spending_key + q_receiver_hashed


def verify_stealth_private_key(
    stealth_private_key: Scalar,
    commitment: Union[StealthCommitment, Point],
) -> bool:
    """Full check  sk·G == C."""
    point = commitment.point if isinstance(commitment, StealthCommitment) else commitment
    return derive_public_key(stealth_private_key) == point


# ── announcements / scanning ────────────────────────────────────────────
@dataclass(frozen=True)
class Announcement:
    """What a sender publishes: ephemeral public key plus commitment."""

    ephemeral_public_key: Point
    commitment: StealthCommitment

    @property
    def view_tag(self) -> int:
        return self.commitment.view_tag

    def to_bytes(self) -> bytes:
        return self.ephemeral_public_key.to_bytes() + self.commitment.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes, curve: Optional[CurveBackend] = None) -> Announcement:
        curve = curve if curve is not None else active_curve()
        n = curve.point_bytes
        if len(data) != 2 * n + VIEW_TAG_BYTES:
            raise InvalidInputError(
                f"announcement needs {2 * n + VIEW_TAG_BYTES} bytes, got {len(data)}"
            )
        return cls(
            Point.from_bytes(data[:n], curve),
            StealthCommitment.from_bytes(data[n:], curve),
        )


def check_announcement(
    announcement: Announcement,
    viewing_key: Scalar,
    spending_key: Scalar,
) -> Optional[Scalar]:
    """
    Scan one announcement.  Returns the spendable key, or ``None``.

    View-tag false positives are caught by the full point comparison
    and reported as ``None``.
    """
    sk = generate_stealth_private_key(
        announcement.ephemeral_public_key,
        viewing_key,
        spending_key,
        announcement.view_tag,
    )
    if sk is None:
        return None
    if not verify_stealth_private_key(sk, announcement.commitment):
        logger.debug("view tag %016x matched but commitment differs", announcement.view_tag)
        return None
    return sk


def scan_announcements(
    announcements: Iterable[Announcement],
    viewing_key: Scalar,
    spending_key: Scalar,
) -> Iterator[Tuple[Announcement, Scalar]]:
    """Lazily yield ``(announcement, stealth_private_key)`` for every hit."""
    scanned = found = 0
    for ann in announcements:
        scanned += 1
        sk = check_announcement(ann, viewing_key, spending_key)
        if sk is not None:
            found += 1
            yield ann, sk
    logger.debug("scanned %d announcements, %d addressed to us", scanned, found)
