"""
Component Tests for AutomationServiceFactory and the in-memory repository
"""

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import AutomationConfig
from tests.contracts.automation.data_contract import ExecutionStatus
from microservices.automation_service.clients.property_client import PropertyDataClient
from microservices.automation_service.execution_repository import InMemoryExecutionRepository
from microservices.automation_service.factory import AutomationServiceFactory


class TestFactory:
    def test_properties_require_initialize(self):
        factory = AutomationServiceFactory(AutomationConfig())
        with pytest.raises(RuntimeError):
            factory.service

    @pytest.mark.asyncio
    async def test_initialize_wires_components(self):
        config = AutomationConfig(max_fetch_concurrency=3)
        factory = AutomationServiceFactory(config)

        await factory.initialize()
        try:
            assert isinstance(factory.repository, InMemoryExecutionRepository)
            assert isinstance(factory.property_client, PropertyDataClient)
            assert factory.service.max_fetch_concurrency == 3
            assert factory.service.image_base_url == config.services.image_base_url
        finally:
            await factory.close()

    def test_concurrency_clamped(self):
        assert AutomationConfig(max_fetch_concurrency=0).max_fetch_concurrency == 1

    @pytest.mark.asyncio
    async def test_close_releases_components(self):
        repository = InMemoryExecutionRepository()
        factory = AutomationServiceFactory(AutomationConfig(), execution_repository=repository)
        await factory.initialize()
        record = await factory.service.start_execution("wf_1", "ct_1")

        await factory.close()

        assert await repository.get_execution(record.execution_id) is None
        with pytest.raises(RuntimeError):
            factory.service
        with pytest.raises(RuntimeError):
            factory.property_client
        with pytest.raises(RuntimeError):
            factory.repository


class TestInMemoryRepository:
    @pytest.mark.asyncio
    async def test_round_trip_and_filters(self):
        repository = InMemoryExecutionRepository()
        factory = AutomationServiceFactory(AutomationConfig(), execution_repository=repository)
        await factory.initialize()
        service = factory.service

        first = await service.start_execution("wf_1", "ct_1")
        second = await service.start_execution("wf_1", "ct_2")
        await service.fail_execution(second.execution_id)

        assert (await repository.get_execution(first.execution_id)).status == ExecutionStatus.RUNNING
        failed = await repository.list_executions(status=[ExecutionStatus.FAILED])
        assert [r.contact_id for r in failed] == ["ct_2"]
        assert len(await repository.list_executions(workflow_id="wf_1", limit=1)) == 1

        await factory.close()
