"""
Tests for erc5564.backends and erc5564.curve — Scalar / Point over each backend.
"""

import unittest

import pytest
from py_ecc import optimized_bn128

from erc5564.backends import (
    Bls12381Backend,
    Bn254Backend,
    Secp256k1Backend,
    available_backends,
    get_backend,
)
from erc5564.curve import SCALAR_BYTES, Point, Scalar
from erc5564.errors import CurveConfigurationError, CurveMismatchError, InvalidInputError

BN254 = get_backend("bn254")
BLS = get_backend("bls12_381")
SECP = get_backend("secp256k1")
ALL = ["bn254", "bls12_381", "secp256k1"]

BN254_P = 21888242871839275222246405745257275088696311157297823662689037894645226208583
BN254_R = 21888242871839275222246405745257275088548364400416034343698204186575808495617


class TestRegistry(unittest.TestCase):

    def test_available(self):
        self.assertEqual(available_backends(), ["bls12_381", "bn254", "secp256k1"])

    def test_lookup_and_aliases(self):
        self.assertIsInstance(get_backend("bn254"), Bn254Backend)
        self.assertIs(get_backend("BN128"), get_backend("bn254"))
        self.assertIs(get_backend("alt_bn128"), get_backend("bn254"))
        self.assertIsInstance(get_backend("bls12-381"), Bls12381Backend)
        self.assertIsInstance(get_backend(" secp256k1 "), Secp256k1Backend)

    def test_unknown(self):
        with self.assertRaises(CurveConfigurationError):
            get_backend("ed25519")

    def test_orders(self):
        self.assertEqual(BN254.order, BN254_R)
        self.assertEqual(BN254.field_modulus, BN254_P)
        self.assertEqual(BLS.order, 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001)
        self.assertEqual(SECP.point_bytes, 33)
        self.assertEqual(BLS.point_bytes, 48)


class TestScalar(unittest.TestCase):

    def test_reduces_modulo_order(self):
        self.assertEqual(Scalar(BN254_R + 5, BN254).value, 5)
        self.assertEqual(Scalar(-1, BN254).value, BN254_R - 1)

    def test_little_endian_encoding(self):
        s = Scalar(0x0102, BN254)
        self.assertEqual(s.to_bytes(), b"\x02\x01" + b"\x00" * 30)
        self.assertEqual(len(s.to_bytes()), SCALAR_BYTES)

    def test_from_bytes(self):
        s = Scalar(123456789, BN254)
        self.assertEqual(Scalar.from_bytes(s.to_bytes(), BN254), s)

    def test_from_bytes_rejects_length(self):
        with self.assertRaises(InvalidInputError):
            Scalar.from_bytes(b"\x01" * 31, BN254)

    def test_from_bytes_rejects_out_of_range(self):
        with self.assertRaises(InvalidInputError):
            Scalar.from_bytes(BN254_R.to_bytes(32, "little"), BN254)

    def test_from_bytes_reduce(self):
        data = (BN254_R + 1).to_bytes(32, "little")
        self.assertEqual(Scalar.from_bytes_reduce(data, BN254).value, 1)

    def test_arithmetic(self):
        a, b = Scalar(7, BN254), Scalar(5, BN254)
        self.assertEqual((a + b).value, 12)
        self.assertEqual((a - b).value, 2)
        self.assertEqual((b - a).value, BN254_R - 2)
        self.assertEqual((a * b).value, 35)
        self.assertEqual((-a + a).value, 0)
        self.assertEqual(a, 7)

    def test_random_in_range(self):
        for name in ALL:
            curve = get_backend(name)
            for _ in range(20):
                s = Scalar.random(curve)
                self.assertTrue(0 < s.value < curve.order)

    def test_random_distinct(self):
        self.assertNotEqual(Scalar.random(BN254), Scalar.random(BN254))

    def test_mismatch(self):
        with self.assertRaises(CurveMismatchError):
            Scalar(1, BN254) + Scalar(1, SECP)
        self.assertNotEqual(Scalar(1, BN254), Scalar(1, SECP))

    def test_repr_hides_value(self):
        s = Scalar(2 ** 200 + 12345, BN254)
        self.assertNotIn(str(s.value), repr(s))
        self.assertIn("bn254", repr(s))


class TestPointBn254(unittest.TestCase):

    def test_generator_affine(self):
        self.assertEqual(Point.generator(BN254).affine(), (1, 2))

    def test_double_generator(self):
        two_g = Scalar(2, BN254) * Point.generator(BN254)
        self.assertEqual(two_g.affine(), (
            1368015179489954701390400359078579693043519447331113978918064868415326638035,
            9918110051302171585080402603319702774565515993150576347155970296011118125764,
        ))

    def test_matches_py_ecc(self):
        k = 0xDEADBEEF_CAFEBABE_0123456789
        ours = Scalar(k, BN254) * Point.generator(BN254)
        x, y = optimized_bn128.normalize(optimized_bn128.multiply(optimized_bn128.G1, k))
        self.assertEqual(ours.affine(), (x.n, y.n))

    def test_generator_encoding(self):
        g = Point.generator(BN254)
        self.assertEqual(g.to_bytes(), b"\x01" + b"\x00" * 31)

    def test_negated_generator_sets_flag(self):
        neg = -Point.generator(BN254)
        self.assertEqual(neg.affine(), (1, BN254_P - 2))
        self.assertEqual(neg.to_bytes(), b"\x01" + b"\x00" * 30 + b"\x80")
        self.assertEqual(Point.from_bytes(neg.to_bytes(), BN254), neg)

    def test_identity_encoding(self):
        inf = Point.identity(BN254)
        self.assertEqual(inf.to_bytes(), b"\x00" * 31 + b"\x40")
        self.assertTrue(Point.from_bytes(inf.to_bytes(), BN254).is_inf())

    def test_text_encoding(self):
        self.assertEqual(str(Point.generator(BN254)), "(1, 2)")
        self.assertEqual(Point.generator(BN254).to_hash_input(), b"(1, 2)")
        self.assertEqual(str(Point.identity(BN254)), "infinity")

    def test_decode_rejects_off_curve_x(self):
        # x = 0: 0^3 + 3 = 3 is not a square mod p
        with self.assertRaises(InvalidInputError):
            Point.from_bytes(b"\x00" * 32, BN254)

    def test_decode_rejects_bad_infinity(self):
        with self.assertRaises(InvalidInputError):
            Point.from_bytes(b"\x01" + b"\x00" * 30 + b"\x40", BN254)

    def test_decode_rejects_length(self):
        with self.assertRaises(InvalidInputError):
            Point.from_bytes(b"\x01" * 33, BN254)

    def test_from_affine_rejects_off_curve(self):
        with self.assertRaises(InvalidInputError):
            Point.from_affine(1, 3, BN254)


@pytest.mark.parametrize("name", ALL)
def test_group_laws(name):
    curve = get_backend(name)
    g = Point.generator(curve)
    a, b = Scalar(11, curve), Scalar(31, curve)
    assert a * g + b * g == (a + b) * g
    assert g - g == Point.identity(curve)
    assert g + Point.identity(curve) == g
    assert Scalar.zero(curve) * g == Point.identity(curve)
    assert Point.from_scalar(a) == a * g
    assert 3 * g == g + g + g


@pytest.mark.parametrize("name", ALL)
def test_encoding_roundtrip(name):
    curve = get_backend(name)
    p = Scalar.random(curve) * Point.generator(curve)
    data = p.to_bytes()
    assert len(data) == curve.point_bytes
    assert Point.from_bytes(data, curve) == p
    assert Point.from_affine(*p.affine(), curve=curve) == p
    assert Point.from_bytes((-p).to_bytes(), curve) == -p


@pytest.mark.parametrize("name", ALL)
def test_hash_is_representation_independent(name):
    curve = get_backend(name)
    g = Point.generator(curve)
    p = Scalar(6, curve) * g
    q = Scalar(2, curve) * g + Scalar(4, curve) * g
    assert p == q
    assert hash(p) == hash(q)
    assert str(p) == str(q)


class TestPointSecp256k1(unittest.TestCase):

    def test_generator_encoding(self):
        self.assertEqual(
            Point.generator(SECP).to_bytes().hex(),
            "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798",
        )

    def test_identity_encoding(self):
        self.assertEqual(Point.identity(SECP).to_bytes(), b"\x00" * 33)
        self.assertTrue(Point.from_bytes(b"\x00" * 33, SECP).is_inf())

    def test_decode_rejects_garbage(self):
        with self.assertRaises(InvalidInputError):
            Point.from_bytes(b"\x05" + b"\x11" * 32, SECP)

    def test_identity_has_no_affine(self):
        with self.assertRaises(InvalidInputError):
            Point.identity(SECP).affine()
        self.assertEqual(Point.identity(SECP).x, 0)


class TestPointBls12381(unittest.TestCase):

    def test_generator_roundtrip(self):
        g = Point.generator(BLS)
        self.assertEqual(g.affine()[0], 0x17F1D3A73197D7942695638C4FA9AC0FC3688C4F9774B905A14E3A3F171BAC586C55E83FF97A1AEFFB3AF00ADB22C6BB)
        self.assertEqual(Point.from_bytes(g.to_bytes(), BLS), g)
        self.assertEqual(g.to_bytes()[-1] & 0xC0, 0)


class TestMixedCurves(unittest.TestCase):

    def test_point_addition_mismatch(self):
        with self.assertRaises(CurveMismatchError):
            Point.generator(BN254) + Point.generator(SECP)

    def test_scalar_mult_mismatch(self):
        with self.assertRaises(CurveMismatchError):
            Scalar(2, SECP) * Point.generator(BN254)

    def test_points_on_different_curves_unequal(self):
        self.assertNotEqual(Point.generator(BN254), Point.generator(BLS))


if __name__ == "__main__":
    unittest.main()
