"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : Component tests (mocked dependencies)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


# =============================================================================
# Test Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: pure function tests")
    config.addinivalue_line("markers", "component: service tests with mocked dependencies")


@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Keep tests off real endpoints"""
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("PROPERTY_SERVICE_URL", "http://localhost:9999")
