"""
Key derivation: private scalar → public point, and fresh keypairs.

Identity keys (spending, viewing) are generated once and stored by the
caller; ephemeral keys are generated per payment and the private half
is thrown away once the commitment exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from .backends import CurveBackend
from .curve import Point, Scalar


def derive_public_key(private_key: Scalar) -> Point:
    """``pk = sk · G`` on the scalar's curve."""
    return Point.from_scalar(private_key)


def generate_random_scalar(curve: Optional[CurveBackend] = None) -> Scalar:
    """Uniform non-zero scalar from the OS CSPRNG."""
    return Scalar.random(curve)


@dataclass(frozen=True)
class KeyPair:
    """
    ``(private_key, public_key)`` with ``public_key == private_key · G``.

    Unpacks like a tuple::

        sk, pk = random_keypair()
    """

    private_key: Scalar
    public_key: Point

    def __post_init__(self) -> None:
        if derive_public_key(self.private_key) != self.public_key:
            raise ValueError("public key does not match private key")

    @classmethod
    def from_private_key(cls, private_key: Union[Scalar, int],
                         curve: Optional[CurveBackend] = None) -> KeyPair:
        if isinstance(private_key, int):
            private_key = Scalar(private_key, curve)
        if private_key.is_zero():
            raise ValueError("private key must be non-zero")
        return cls(private_key, derive_public_key(private_key))

    @property
    def curve(self) -> CurveBackend:
        return self.private_key.curve

    def __iter__(self) -> Iterator:
        yield self.private_key
        yield self.public_key

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key!r})"


def random_keypair(curve: Optional[CurveBackend] = None) -> KeyPair:
    """Fresh keypair; raises ``EntropyUnavailableError`` without an OS RNG."""
    return KeyPair.from_private_key(generate_random_scalar(curve))
