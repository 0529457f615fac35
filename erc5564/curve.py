"""
Scalar-field and group elements bound to a curve backend.

``Scalar`` is an element of  Z_r  (r = the backend's group order) and
``Point`` a group element.  Every value remembers the backend it was
created on; mixing backends in one expression raises
``CurveMismatchError`` instead of silently producing garbage.

All group work is delegated to the backend (py_ecc for the pairing
curves, libsecp256k1 through coincurve for secp256k1); scalar arithmetic
is plain Python integers.

Constructors default to the *active* backend (see :pymod:`config`), so
there is intentionally no module-level generator constant: building one
at import time would pin the curve before the caller could choose it.

Canonical encodings
-------------------
- Scalar: 32 bytes, little-endian.
- Point: backend compressed encoding (see :pymod:`backends`).
- Point hash input: ASCII ``"(x, y)"`` with decimal affine coordinates,
  ``"infinity"`` for the identity.
"""

from __future__ import annotations

import secrets
from typing import Optional, Tuple

from .backends import CurveBackend
from .config import active_curve
from .errors import CurveMismatchError, EntropyUnavailableError, InvalidInputError

SCALAR_BYTES = 32


def _resolve(curve: Optional[CurveBackend]) -> CurveBackend:
    return curve if curve is not None else active_curve()


# ── Scalar  (Z_r arithmetic, pure Python) ───────────────────────────────
class Scalar:
    """Element of the scalar field of a curve backend."""

    __slots__ = ("_v", "_curve")

    def __init__(self, value: int, curve: Optional[CurveBackend] = None) -> None:
        self._curve = _resolve(curve)
        self._v = value % self._curve.order

    # constructors -----------------------------------------------------------
    @classmethod
    def zero(cls, curve: Optional[CurveBackend] = None) -> Scalar:
        return cls(0, curve)

    @classmethod
    def one(cls, curve: Optional[CurveBackend] = None) -> Scalar:
        return cls(1, curve)

    @classmethod
    def random(cls, curve: Optional[CurveBackend] = None) -> Scalar:
        """Uniform in [1, r-1] via rejection sampling from the OS CSPRNG."""
        curve = _resolve(curve)
        shift = 8 * SCALAR_BYTES - curve.order.bit_length()
        while True:
            try:
                raw = secrets.token_bytes(SCALAR_BYTES)
            except (OSError, NotImplementedError) as exc:
                raise EntropyUnavailableError("OS random source unavailable") from exc
            c = int.from_bytes(raw, "little") >> shift
            if 0 < c < curve.order:
                return cls(c, curve)

    @classmethod
    def from_bytes(cls, data: bytes, curve: Optional[CurveBackend] = None) -> Scalar:
        """Strict decoding: exactly 32 little-endian bytes, value < r."""
        curve = _resolve(curve)
        if len(data) != SCALAR_BYTES:
            raise InvalidInputError(f"need {SCALAR_BYTES} bytes, got {len(data)}")
        v = int.from_bytes(data, "little")
        if v >= curve.order:
            raise InvalidInputError("scalar out of range")
        return cls(v, curve)

    @classmethod
    def from_bytes_reduce(cls, data: bytes, curve: Optional[CurveBackend] = None) -> Scalar:
        """Hash-output safe: little-endian, any length, reduced modulo *r*."""
        return cls(int.from_bytes(data, "little"), curve)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return self._v.to_bytes(SCALAR_BYTES, "little")

    @property
    def value(self) -> int:
        return self._v

    @property
    def curve(self) -> CurveBackend:
        return self._curve

    def is_zero(self) -> bool:
        return self._v == 0

    def _check(self, o: Scalar) -> None:
        if o._curve.name != self._curve.name:
            raise CurveMismatchError(
                f"scalar on {self._curve.name} combined with scalar on {o._curve.name}"
            )

    # arithmetic -------------------------------------------------------------
    def __add__(self, o: Scalar) -> Scalar:
        if not isinstance(o, Scalar):
            return NotImplemented
        self._check(o)
        return Scalar(self._v + o._v, self._curve)

    def __sub__(self, o: Scalar) -> Scalar:
        if not isinstance(o, Scalar):
            return NotImplemented
        self._check(o)
        return Scalar(self._v - o._v, self._curve)

    def __mul__(self, o):
        if isinstance(o, Scalar):
            self._check(o)
            return Scalar(self._v * o._v, self._curve)
        if isinstance(o, Point):
            return o._smul(self)
        return NotImplemented

    def __neg__(self) -> Scalar:
        return Scalar(-self._v, self._curve)

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if isinstance(o, Scalar):
            return self._curve.name == o._curve.name and self._v == o._v
        if isinstance(o, int):
            return self._v == o % self._curve.order
        return False

    def __hash__(self) -> int:
        return hash((self._curve.name, self._v))

    def __bool__(self) -> bool:
        return self._v != 0

    def __repr__(self) -> str:
        # never print the full value: scalars are usually private keys
        h = hex(self._v)
        body = f"0x{h[2:10]}…" if len(h) > 14 else h
        return f"Scalar({body}, {self._curve.name})"


# ── Point  (group element, arithmetic in the backend) ───────────────────
class Point:
    """
    Group element of a curve backend.

    Equality is group equality, independent of the backend's internal
    (projective) representation.
    """

    __slots__ = ("_raw", "_curve")

    def __init__(self, raw, curve: CurveBackend) -> None:
        self._raw = raw
        self._curve = curve

    # constructors -----------------------------------------------------------
    @classmethod
    def generator(cls, curve: Optional[CurveBackend] = None) -> Point:
        """Standard base point *G*."""
        curve = _resolve(curve)
        return cls(curve.generator(), curve)

    @classmethod
    def identity(cls, curve: Optional[CurveBackend] = None) -> Point:
        """Point at infinity — additive identity."""
        curve = _resolve(curve)
        return cls(curve.identity(), curve)

    @classmethod
    def from_scalar(cls, s: Scalar) -> Point:
        """Compute *s · G* on the scalar's own curve."""
        return cls.generator(s.curve)._smul(s)

    @classmethod
    def from_affine(cls, x: int, y: int, curve: Optional[CurveBackend] = None) -> Point:
        curve = _resolve(curve)
        return cls(curve.from_affine(x, y), curve)

    @classmethod
    def from_bytes(cls, data: bytes, curve: Optional[CurveBackend] = None) -> Point:
        """Decode the backend's compressed encoding (validated)."""
        curve = _resolve(curve)
        return cls(curve.decode(bytes(data)), curve)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return self._curve.encode(self._raw)

    def to_hash_input(self) -> bytes:
        """Bytes fed to the domain hash when this point is a shared secret."""
        return str(self).encode("ascii")

    def affine(self) -> Tuple[int, int]:
        if self.is_inf():
            raise InvalidInputError("identity has no affine coordinates")
        return self._curve.to_affine(self._raw)

    @property
    def x(self) -> int:
        if self.is_inf():
            return 0
        return self.affine()[0]

    @property
    def y(self) -> int:
        if self.is_inf():
            return 0
        return self.affine()[1]

    @property
    def curve(self) -> CurveBackend:
        return self._curve

    def is_inf(self) -> bool:
        return self._curve.is_identity(self._raw)

    def _check(self, o: Point) -> None:
        if o._curve.name != self._curve.name:
            raise CurveMismatchError(
                f"point on {self._curve.name} combined with point on {o._curve.name}"
            )

    # group operations -------------------------------------------------------
    def _smul(self, s: Scalar) -> Point:
        """Scalar multiplication  s · self."""
        if s.curve.name != self._curve.name:
            raise CurveMismatchError(
                f"scalar on {s.curve.name} applied to point on {self._curve.name}"
            )
        if s.is_zero():
            return Point.identity(self._curve)
        return Point(self._curve.multiply(self._raw, s.value), self._curve)

    def __neg__(self) -> Point:
        return Point(self._curve.neg(self._raw), self._curve)

    def __add__(self, o: Point) -> Point:
        if not isinstance(o, Point):
            return NotImplemented
        self._check(o)
        return Point(self._curve.add(self._raw, o._raw), self._curve)

    def __sub__(self, o: Point) -> Point:
        return self + (-o)

    def __rmul__(self, s) -> Point:
        if isinstance(s, Scalar):
            return self._smul(s)
        if isinstance(s, int):
            return self._smul(Scalar(s, self._curve))
        return NotImplemented

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, Point):
            return False
        if o._curve.name != self._curve.name:
            return False
        return self._curve.eq(self._raw, o._raw)

    def __hash__(self) -> int:
        return hash((self._curve.name, self.to_bytes()))

    def __str__(self) -> str:
        if self.is_inf():
            return "infinity"
        x, y = self.affine()
        return f"({x}, {y})"

    def __repr__(self) -> str:
        if self.is_inf():
            return f"Point(∞, {self._curve.name})"
        return f"Point(0x{self.x:064x}"[:24] + f"…, {self._curve.name})"
