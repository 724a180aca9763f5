"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from app.main import app
from app.calculations.tvm import TVMRegisters, TVMVariable, solve


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def car_loan() -> TVMRegisters:
    """$10,000 over 60 months at 6%, fully amortizing, PMT solved (about -193.33)."""
    registers = TVMRegisters(n=60, iy=6, pv=10000, fv=0)
    return solve(registers).unwrap().registers


@pytest.fixture
def unsolved_car_loan() -> TVMRegisters:
    """Same loan with PMT left blank."""
    return TVMRegisters(n=60, iy=6, pv=10000, fv=0).with_value(TVMVariable.PMT, None)
