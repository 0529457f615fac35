"""
Shared pytest fixtures for the erc5564 test suite.
"""

import pytest

from erc5564.backends import get_backend
from erc5564.config import ENV_CURVE, reset_curve


@pytest.fixture(autouse=True)
def clean_curve_selection(monkeypatch):
    """Every test starts and ends with no active backend and no env override."""
    monkeypatch.delenv(ENV_CURVE, raising=False)
    reset_curve()
    yield
    reset_curve()


@pytest.fixture
def bn254():
    return get_backend("bn254")


@pytest.fixture
def bls12_381():
    return get_backend("bls12_381")


@pytest.fixture
def secp256k1():
    return get_backend("secp256k1")
