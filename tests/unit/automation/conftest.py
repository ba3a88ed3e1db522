"""
Unit Test Fixtures for Automation Service

Uses AutomationTestDataFactory from the data contract.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.automation.data_contract import AutomationTestDataFactory


@pytest.fixture
def factory():
    """Test data factory"""
    return AutomationTestDataFactory()


@pytest.fixture
def templates(factory):
    """Template catalog with one single- and one multi-property template"""
    return factory.make_templates()
