"""
High-level stealth payment flow bound to one curve backend.

``StealthScheme`` ties key generation, commitment generation and
scanning together so that application code never handles a raw backend.

Usage
-----
::

    from erc5564 import StealthScheme

    scheme = StealthScheme.for_curve("bn254")

    # Receiver, once
    bob = scheme.generate_keys()
    published = bob.meta_address.to_hex()

    # Sender, per payment
    meta = scheme.meta_address_from_hex(published)
    ann = scheme.announce(meta)

    # Receiver, while scanning
    for ann, sk in scheme.scan(announcements, bob):
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .backends import CurveBackend, get_backend
from .config import active_curve
from .curve import Point, Scalar
from .errors import CurveMismatchError, InvalidInputError
from .keys import KeyPair, random_keypair
from .stealth import (
    Announcement,
    check_announcement,
    generate_stealth_commitment,
    scan_announcements,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StealthMetaAddress:
    """Receiver's public pair  (S, V)  shared with senders."""

    spending_public_key: Point
    viewing_public_key: Point

    def __post_init__(self) -> None:
        if self.spending_public_key.is_inf() or self.viewing_public_key.is_inf():
            raise InvalidInputError("meta-address contains the identity")
        if self.spending_public_key.curve is not self.viewing_public_key.curve:
            raise CurveMismatchError("meta-address keys are on different curves")

    def to_bytes(self) -> bytes:
        return self.spending_public_key.to_bytes() + self.viewing_public_key.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes, curve: CurveBackend) -> StealthMetaAddress:
        n = curve.point_bytes
        if len(data) != 2 * n:
            raise InvalidInputError(
                f"meta-address needs {2 * n} bytes, got {len(data)}"
            )
        return cls(Point.from_bytes(data[:n], curve), Point.from_bytes(data[n:], curve))

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()


@dataclass(frozen=True)
class StealthKeys:
    """Receiver identity: long-lived spending and viewing keypairs."""

    spending: KeyPair
    viewing: KeyPair

    @property
    def meta_address(self) -> StealthMetaAddress:
        return StealthMetaAddress(self.spending.public_key, self.viewing.public_key)


class StealthScheme:
    """
    Stealth commitments over a single curve backend.

    All methods are pure apart from the randomness drawn for new keys,
    so one instance may be shared between threads.
    """

    def __init__(self, curve: CurveBackend) -> None:
        self._curve = curve

    # ── factories ──────────────────────────────────────────────────────

    @classmethod
    def for_curve(cls, name: str) -> StealthScheme:
        return cls(get_backend(name))

    @classmethod
    def active(cls) -> StealthScheme:
        """Scheme over the process-wide active backend."""
        return cls(active_curve())

    # ── keys ───────────────────────────────────────────────────────────

    def random_keypair(self) -> KeyPair:
        return random_keypair(self._curve)

    def generate_keys(self) -> StealthKeys:
        """Fresh spending and viewing keypairs for a new receiver."""
        return StealthKeys(spending=self.random_keypair(), viewing=self.random_keypair())

    def keys_from_private(self, spending_key: int, viewing_key: int) -> StealthKeys:
        """Rebuild a receiver identity from stored private scalars."""
        return StealthKeys(
            spending=KeyPair.from_private_key(spending_key, self._curve),
            viewing=KeyPair.from_private_key(viewing_key, self._curve),
        )

    # ── sending ────────────────────────────────────────────────────────

    def announce(
        self,
        meta_address: StealthMetaAddress,
        ephemeral: Optional[KeyPair] = None,
    ) -> Announcement:
        """
        Produce the announcement for one payment to *meta_address*.

        A fresh ephemeral keypair is drawn unless one is given; its
        private half does not outlive this call.
        """
        self._check_point(meta_address.spending_public_key)
        self._check_point(meta_address.viewing_public_key)
        if ephemeral is None:
            ephemeral = self.random_keypair()
        commitment = generate_stealth_commitment(
            meta_address.viewing_public_key,
            meta_address.spending_public_key,
            ephemeral.private_key,
        )
        return Announcement(ephemeral.public_key, commitment)

    # ── receiving ──────────────────────────────────────────────────────

    def recover(self, announcement: Announcement, keys: StealthKeys) -> Optional[Scalar]:
        """Spendable key for *announcement*, or ``None`` if it is not ours."""
        self._check_point(keys.viewing.public_key)
        self._check_point(announcement.ephemeral_public_key)
        return check_announcement(
            announcement, keys.viewing.private_key, keys.spending.private_key,
        )

    def scan(
        self,
        announcements: Iterable[Announcement],
        keys: StealthKeys,
    ) -> List[Tuple[Announcement, Scalar]]:
        """Every ``(announcement, stealth_private_key)`` addressed to *keys*."""
        self._check_point(keys.viewing.public_key)
        hits = list(scan_announcements(
            announcements, keys.viewing.private_key, keys.spending.private_key,
        ))
        logger.debug("%s scan found %d announcement(s)", self._curve.name, len(hits))
        return hits

    # ── decoding ───────────────────────────────────────────────────────

    def meta_address_from_bytes(self, data: bytes) -> StealthMetaAddress:
        return StealthMetaAddress.from_bytes(data, self._curve)

    def meta_address_from_hex(self, text: str) -> StealthMetaAddress:
        body = text[2:] if text.startswith(("0x", "0X")) else text
        try:
            data = bytes.fromhex(body)
        except ValueError as exc:
            raise InvalidInputError("meta-address is not valid hex") from exc
        return self.meta_address_from_bytes(data)

    def announcement_from_bytes(self, data: bytes) -> Announcement:
        return Announcement.from_bytes(data, self._curve)

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def curve(self) -> CurveBackend:
        return self._curve

    def _check_point(self, p: Point) -> None:
        if p.curve.name != self._curve.name:
            raise CurveMismatchError(
                f"{p.curve.name} point given to {self._curve.name} scheme"
            )

    def __repr__(self) -> str:
        return f"StealthScheme({self._curve.name})"
