"""
Poseidon permutation over the BN254 scalar field (circomlib flavour).

Parameters follow the Poseidon reference generator
(``generate_parameters_grain.sage``): round constants and the Cauchy MDS
matrix are drawn from the Grain LFSR seeded with
(prime field, x^5 S-box, n = 254, t, R_F = 8, R_P).  With the partial
round counts below this reproduces circomlib's ``poseidon`` for every
width, e.g.

    poseidon_hash([1])    == 18586133768512220936620570745912940619677854269274689475585506675881198879027
    poseidon_hash([1, 2]) == 0x115cc0f5e7d690413df64c6b9662e9cf2a3617f2743245519e19607a4417189a

Hashing *k* inputs uses width ``t = k + 1`` with state ``[0, *inputs]``
and returns ``state[0]`` after the permutation.

References
----------
- Grassi, Khovratovich, Rechberger, Roy, Schofnegger (2021).
  "Poseidon: A New Hash Function for Zero-Knowledge Proof Systems."
  USENIX Security 2021.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence, Tuple

from .errors import InvalidInputError

# ── BN254 scalar field ──────────────────────────────────────────────────
FIELD_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617
FIELD_BITS = 254

FULL_ROUNDS = 8
# partial rounds indexed by t - 2 (circomlib)
PARTIAL_ROUNDS = (56, 57, 56, 60, 60, 63, 64, 63)
MAX_INPUTS = len(PARTIAL_ROUNDS)


# ── Grain LFSR ──────────────────────────────────────────────────────────
class _Grain:
    """80-bit self-shrinking Grain LFSR used to derive Poseidon parameters."""

    def __init__(self, t: int, full_rounds: int, partial_rounds: int) -> None:
        bits: List[int] = []
        for value, width in (
            (1, 2),                 # prime field
            (0, 4),                 # S-box x^alpha
            (FIELD_BITS, 12),
            (t, 12),
            (full_rounds, 10),
            (partial_rounds, 10),
        ):
            bits.extend(int(b) for b in format(value, f"0{width}b"))
        bits.extend([1] * 30)
        self._state = bits
        for _ in range(160):
            self._step()

    def _step(self) -> int:
        s = self._state
        bit = s[62] ^ s[51] ^ s[38] ^ s[23] ^ s[13] ^ s[0]
        s.pop(0)
        s.append(bit)
        return bit

    def _next_bit(self) -> int:
        # self-shrinking: emit the second bit of each pair whose first bit is 1
        while True:
            first = self._step()
            second = self._step()
            if first:
                return second

    def bits(self, n: int) -> int:
        """Next *n* output bits, most significant first."""
        v = 0
        for _ in range(n):
            v = (v << 1) | self._next_bit()
        return v

    def field_element(self) -> int:
        """Uniform field element by rejection."""
        while True:
            v = self.bits(FIELD_BITS)
            if v < FIELD_PRIME:
                return v


@lru_cache(maxsize=None)
def parameters(t: int) -> Tuple[Tuple[int, ...], Tuple[Tuple[int, ...], ...]]:
    """
    Round constants and MDS matrix for width *t*.

    Returns ``(constants, mds)`` where ``constants`` holds
    ``(R_F + R_P) * t`` elements (round-major) and ``mds[i][j]`` is the
    Cauchy entry ``1 / (x_i + y_j)``.
    """
    if not 2 <= t <= MAX_INPUTS + 1:
        raise InvalidInputError(f"unsupported Poseidon width {t}")
    partial = PARTIAL_ROUNDS[t - 2]
    grain = _Grain(t, FULL_ROUNDS, partial)

    constants = tuple(
        grain.field_element() for _ in range((FULL_ROUNDS + partial) * t)
    )

    while True:
        # MDS candidates are reduced, not rejected
        candidates = [grain.bits(FIELD_BITS) % FIELD_PRIME for _ in range(2 * t)]
        if len(set(candidates)) != len(candidates):
            continue
        xs, ys = candidates[:t], candidates[t:]
        if any((x + y) % FIELD_PRIME == 0 for x in xs for y in ys):
            continue
        break

    mds = tuple(
        tuple(pow(x + y, FIELD_PRIME - 2, FIELD_PRIME) for y in ys)
        for x in xs
    )
    return constants, mds


# ── permutation / hash ──────────────────────────────────────────────────
def permute(state: Sequence[int]) -> List[int]:
    """Apply the Poseidon permutation to a full state of width ``len(state)``."""
    t = len(state)
    constants, mds = parameters(t)
    partial = PARTIAL_ROUNDS[t - 2]
    half_full = FULL_ROUNDS // 2
    p = FIELD_PRIME

    s = [v % p for v in state]
    for r in range(FULL_ROUNDS + partial):
        s = [(v + constants[r * t + i]) % p for i, v in enumerate(s)]
        if r < half_full or r >= half_full + partial:
            s = [pow(v, 5, p) for v in s]
        else:
            s[0] = pow(s[0], 5, p)
        s = [sum(m * v for m, v in zip(row, s)) % p for row in mds]
    return s


def poseidon_hash(inputs: Sequence[int]) -> int:
    """
    Hash 1..8 field elements to one field element.

    Inputs must already be canonical field elements (``0 <= x < p``).
    """
    if not 1 <= len(inputs) <= MAX_INPUTS:
        raise InvalidInputError(
            f"Poseidon takes 1..{MAX_INPUTS} inputs, got {len(inputs)}"
        )
    for x in inputs:
        if not isinstance(x, int) or isinstance(x, bool):
            raise InvalidInputError(f"Poseidon input must be int, got {type(x).__name__}")
        if not 0 <= x < FIELD_PRIME:
            raise InvalidInputError("Poseidon input is not a canonical field element")
    return permute([0, *inputs])[0]
