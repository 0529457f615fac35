"""
Curve backends: the group capability set every stealth operation uses.

A backend exposes a fixed generator, scalar multiplication, point
addition and negation, equality, affine coordinates and a canonical
compressed encoding.  Points handled by a backend are opaque *raw*
values; :pymod:`curve` wraps them in ``Point`` so that callers never see
them.

Three concrete backends are provided:

- ``bn254``      — alt_bn128 G1 via ``py_ecc.optimized_bn128``
- ``bls12_381``  — BLS12-381 G1 via ``py_ecc.optimized_bls12_381``
- ``secp256k1``  — via ``coincurve`` (libsecp256k1), for ERC-5564
  scheme 1 interoperability; not pairing-friendly

Install
-------
    pip install py_ecc>=6.0.0 coincurve>=18.0.0

Encodings
---------
Pairing curves use a compressed little-endian encoding: the affine *x*
in ``field_bytes`` little-endian bytes, with the two top bits of the
last byte used as flags (``0x80`` — *y* is the larger of ±y,
``0x40`` — point at infinity).  secp256k1 uses SEC 1 compressed points
(33 B, all-zero for the identity), as libsecp256k1 does.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from coincurve import PrivateKey as _SK, PublicKey as _PK
from py_ecc import optimized_bls12_381 as _bls12_381
from py_ecc import optimized_bn128 as _bn128

from .errors import CurveConfigurationError, InvalidInputError

_FLAG_Y_NEGATIVE = 0x80
_FLAG_INFINITY = 0x40
_FLAG_MASK = _FLAG_Y_NEGATIVE | _FLAG_INFINITY


class CurveBackend(ABC):
    """Capability set of a prime-order group used for stealth commitments."""

    name: str = ""
    order: int = 0
    field_modulus: int = 0
    point_bytes: int = 0

    # group ------------------------------------------------------------------
    @abstractmethod
    def generator(self) -> Any:
        """Fixed base point *G*."""

    @abstractmethod
    def identity(self) -> Any:
        ...

    @abstractmethod
    def is_identity(self, p: Any) -> bool:
        ...

    @abstractmethod
    def multiply(self, p: Any, k: int) -> Any:
        """``k · p`` with *k* already reduced modulo ``order``."""

    @abstractmethod
    def add(self, p: Any, q: Any) -> Any:
        ...

    @abstractmethod
    def neg(self, p: Any) -> Any:
        ...

    @abstractmethod
    def eq(self, p: Any, q: Any) -> bool:
        ...

    # coordinates / encoding -------------------------------------------------
    @abstractmethod
    def to_affine(self, p: Any) -> Tuple[int, int]:
        """Affine ``(x, y)`` of a non-identity point."""

    @abstractmethod
    def from_affine(self, x: int, y: int) -> Any:
        """Build a point from affine coordinates, rejecting off-curve input."""

    @abstractmethod
    def encode(self, p: Any) -> bytes:
        ...

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


# ── pairing-friendly curves via py_ecc ──────────────────────────────────
class _PyEccBackend(CurveBackend):
    """
    Short-Weierstrass G1 over a py_ecc ``optimized_*`` module.

    Raw points are py_ecc homogeneous projective triples ``(X, Y, Z)``.
    """

    field_bytes: int = 32
    cofactor_one: bool = True

    def __init__(self, curve_module: Any) -> None:
        self._c = curve_module
        self._fq = curve_module.FQ
        self._b = int(curve_module.b.n)
        self.order = curve_module.curve_order
        self.field_modulus = curve_module.field_modulus
        self.point_bytes = self.field_bytes

    def generator(self) -> Any:
        return self._c.G1

    def identity(self) -> Any:
        return self._c.Z1

    def is_identity(self, p: Any) -> bool:
        return self._c.is_inf(p)

    def multiply(self, p: Any, k: int) -> Any:
        return self._c.multiply(p, k)

    def add(self, p: Any, q: Any) -> Any:
        return self._c.add(p, q)

    def neg(self, p: Any) -> Any:
        return self._c.neg(p)

    def eq(self, p: Any, q: Any) -> bool:
        return self._c.eq(p, q)

    def to_affine(self, p: Any) -> Tuple[int, int]:
        x, y = self._c.normalize(p)
        return int(x.n), int(y.n)

    def from_affine(self, x: int, y: int) -> Any:
        if not (0 <= x < self.field_modulus and 0 <= y < self.field_modulus):
            raise InvalidInputError("coordinate outside the base field")
        pt = (self._fq(x), self._fq(y), self._fq.one())
        if not self._c.is_on_curve(pt, self._c.b):
            raise InvalidInputError(f"point is not on {self.name}")
        self._check_subgroup(pt)
        return pt

    def _check_subgroup(self, pt: Any) -> None:
        if self.cofactor_one:
            return
        if not self._c.is_inf(self._c.multiply(pt, self.order)):
            raise InvalidInputError(f"point is not in the {self.name} G1 subgroup")

    def encode(self, p: Any) -> bytes:
        if self.is_identity(p):
            out = bytearray(self.field_bytes)
            out[-1] = _FLAG_INFINITY
            return bytes(out)
        x, y = self.to_affine(p)
        out = bytearray(x.to_bytes(self.field_bytes, "little"))
        if y > self.field_modulus - y:
            out[-1] |= _FLAG_Y_NEGATIVE
        return bytes(out)

    def decode(self, data: bytes) -> Any:
        if len(data) != self.field_bytes:
            raise InvalidInputError(
                f"{self.name} point needs {self.field_bytes} bytes, got {len(data)}"
            )
        flags = data[-1] & _FLAG_MASK
        body = bytes(data[:-1]) + bytes([data[-1] & ~_FLAG_MASK & 0xFF])
        x = int.from_bytes(body, "little")

        if flags & _FLAG_INFINITY:
            if x != 0 or flags & _FLAG_Y_NEGATIVE:
                raise InvalidInputError("non-canonical encoding of infinity")
            return self.identity()
        if x >= self.field_modulus:
            raise InvalidInputError("x coordinate out of range")

        p = self.field_modulus
        y_sq = (pow(x, 3, p) + self._b) % p
        # p ≡ 3 (mod 4) for both supported curves
        y = pow(y_sq, (p + 1) // 4, p)
        if (y * y) % p != y_sq:
            raise InvalidInputError(f"x coordinate is not on {self.name}")
        if (y > p - y) != bool(flags & _FLAG_Y_NEGATIVE):
            y = p - y
        return self.from_affine(x, y)


class Bn254Backend(_PyEccBackend):
    """alt_bn128 / BN254 G1 (prime order, cofactor 1)."""

    name = "bn254"
    field_bytes = 32

    def __init__(self) -> None:
        super().__init__(_bn128)


class Bls12381Backend(_PyEccBackend):
    """BLS12-381 G1 (decoded points are subgroup-checked)."""

    name = "bls12_381"
    field_bytes = 48
    cofactor_one = False

    def __init__(self) -> None:
        super().__init__(_bls12_381)


# ── secp256k1 via libsecp256k1 ──────────────────────────────────────────
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_FIELD_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
_COMPRESSED_BYTES = 33


class Secp256k1Backend(CurveBackend):
    """
    secp256k1 through ``coincurve``.

    The identity is ``None`` rather than a ``coincurve.PublicKey``;
    libsecp256k1 cannot represent the point at infinity.
    """

    name = "secp256k1"
    order = SECP256K1_ORDER
    field_modulus = SECP256K1_FIELD_PRIME
    point_bytes = _COMPRESSED_BYTES

    def __init__(self) -> None:
        self._g = _SK(b"\x00" * 31 + b"\x01").public_key

    def generator(self) -> Optional[_PK]:
        return self._g

    def identity(self) -> Optional[_PK]:
        return None

    def is_identity(self, p: Optional[_PK]) -> bool:
        return p is None

    def multiply(self, p: Optional[_PK], k: int) -> Optional[_PK]:
        if p is None or k == 0:
            return None
        copy = _PK(p.format())
        return copy.multiply(k.to_bytes(32, "big"))

    def add(self, p: Optional[_PK], q: Optional[_PK]) -> Optional[_PK]:
        if p is None:
            return q
        if q is None:
            return p
        # P + (-P) = O
        if p.format() == self.neg(q).format():  # type: ignore[union-attr]
            return None
        return _PK.combine_keys([p, q])

    def neg(self, p: Optional[_PK]) -> Optional[_PK]:
        if p is None:
            return None
        raw = bytearray(p.format(compressed=True))
        raw[0] ^= 0x01            # 0x02 ↔ 0x03 flip parity
        return _PK(bytes(raw))

    def eq(self, p: Optional[_PK], q: Optional[_PK]) -> bool:
        if p is None or q is None:
            return p is None and q is None
        return p.format() == q.format()

    def to_affine(self, p: Optional[_PK]) -> Tuple[int, int]:
        if p is None:
            raise InvalidInputError("identity has no affine coordinates")
        return p.point()

    def from_affine(self, x: int, y: int) -> _PK:
        if not (0 <= x < self.field_modulus and 0 <= y < self.field_modulus):
            raise InvalidInputError("coordinate outside the base field")
        try:
            return _PK.from_point(x, y)
        except ValueError as exc:
            raise InvalidInputError("point is not on secp256k1") from exc

    def encode(self, p: Optional[_PK]) -> bytes:
        if p is None:
            return b"\x00" * _COMPRESSED_BYTES
        return p.format(compressed=True)

    def decode(self, data: bytes) -> Optional[_PK]:
        if len(data) != _COMPRESSED_BYTES:
            raise InvalidInputError(
                f"secp256k1 point needs {_COMPRESSED_BYTES} bytes, got {len(data)}"
            )
        if all(b == 0 for b in data):
            return None
        try:
            return _PK(bytes(data))
        except ValueError as exc:
            raise InvalidInputError("invalid SEC 1 point encoding") from exc


# ── registry ────────────────────────────────────────────────────────────
_BACKENDS: Dict[str, CurveBackend] = {
    b.name: b for b in (Bn254Backend(), Bls12381Backend(), Secp256k1Backend())
}
_ALIASES = {
    "bn128": "bn254",
    "alt_bn128": "bn254",
    "bls12-381": "bls12_381",
}


def get_backend(name: str) -> CurveBackend:
    """Look up a backend by name (case-insensitive, common aliases accepted)."""
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return _BACKENDS[key]
    except KeyError:
        raise CurveConfigurationError(
            f"unknown curve backend {name!r}; "
            f"choose one of {', '.join(available_backends())}"
        ) from None


def available_backends() -> List[str]:
    return sorted(_BACKENDS)
