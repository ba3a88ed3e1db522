"""
Component Test Fixtures for Automation Service

Provides the service wired to mocked collaborators.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.automation.data_contract import (
    AutomationTestDataFactory,
    ExecutionRecord,
    ExecutionStatus,
)
from microservices.automation_service.automation_service import AutomationService
from microservices.automation_service.protocols import PropertyDataError


# ====================
# Mock Collaborators
# ====================


class MockPropertySource:
    """Mock property data source for component testing"""

    def __init__(self, delay: float = 0.0):
        self.properties: Dict[str, Dict[str, Any]] = {}
        self.failing: set = set()
        self.broken: Dict[str, Exception] = {}
        self.calls: List[str] = []
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, payload: Dict[str, Any]) -> None:
        self.properties[payload["id"]] = payload

    async def get_property(self, property_id: str) -> Dict[str, Any]:
        self.calls.append(property_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if property_id in self.broken:
                raise self.broken[property_id]
            if property_id in self.failing or property_id not in self.properties:
                raise PropertyDataError(f"Property not found: {property_id}", property_id)
            return self.properties[property_id]
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        pass


class MockExecutionRepository:
    """Mock repository for component testing"""

    def __init__(self):
        self.executions: Dict[str, ExecutionRecord] = {}
        self.save_count = 0

    async def save_execution(self, record: ExecutionRecord) -> ExecutionRecord:
        self.save_count += 1
        self.executions[record.execution_id] = record
        return record

    async def get_execution(self, execution_id: str) -> Optional[ExecutionRecord]:
        return self.executions.get(execution_id)

    async def list_executions(
        self,
        workflow_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        status: Optional[List[ExecutionStatus]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ExecutionRecord]:
        records = [
            r for r in self.executions.values()
            if (workflow_id is None or r.workflow_id == workflow_id)
            and (contact_id is None or r.contact_id == contact_id)
            and (not status or r.status in status)
        ]
        return records[offset:offset + limit]


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    return AutomationTestDataFactory()


@pytest.fixture
def property_source():
    return MockPropertySource()


@pytest.fixture
def mock_repository():
    return MockExecutionRepository()


@pytest.fixture
def service(property_source, mock_repository):
    return AutomationService(
        property_source=property_source,
        execution_repository=mock_repository,
        max_fetch_concurrency=2,
    )


@pytest.fixture
def slow_property_source():
    """Property source that holds each request open briefly"""
    return MockPropertySource(delay=0.01)
