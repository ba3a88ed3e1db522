"""
Automation Service Factory

Factory for creating automation service instances with proper dependency injection.
"""

import logging
from typing import Optional

from core.config import AutomationConfig, configure_logging, get_settings

from .automation_service import AutomationService
from .clients.property_client import PropertyDataClient
from .execution_repository import InMemoryExecutionRepository
from .protocols import ExecutionRepositoryProtocol

logger = logging.getLogger(__name__)


class AutomationServiceFactory:
    """Factory for creating automation service components"""

    def __init__(
        self,
        config: Optional[AutomationConfig] = None,
        execution_repository: Optional[ExecutionRepositoryProtocol] = None,
    ):
        self.config = config or get_settings()
        self._repository: Optional[ExecutionRepositoryProtocol] = execution_repository
        self._property_client: Optional[PropertyDataClient] = None
        self._service: Optional[AutomationService] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        configure_logging(self.config.logging)
        logger.info("Initializing Automation Service components...")

        if self._repository is None:
            self._repository = InMemoryExecutionRepository()
            logger.info("Using in-memory execution repository")

        self._property_client = PropertyDataClient(self.config.services)

        self._service = AutomationService(
            property_source=self._property_client,
            execution_repository=self._repository,
            max_fetch_concurrency=self.config.max_fetch_concurrency,
            image_base_url=self.config.services.image_base_url,
        )

        logger.info("Automation Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Automation Service components...")

        if self._property_client:
            await self._property_client.close()

        close_repository = getattr(self._repository, "close", None)
        if close_repository:
            await close_repository()

        self._service = None
        self._property_client = None
        self._repository = None

        logger.info("Automation Service components closed")

    @property
    def repository(self) -> ExecutionRepositoryProtocol:
        """Get execution repository"""
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def property_client(self) -> PropertyDataClient:
        """Get property data client"""
        if not self._property_client:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._property_client

    @property
    def service(self) -> AutomationService:
        """Get automation service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service


# Global factory instance
_factory: Optional[AutomationServiceFactory] = None


async def get_factory() -> AutomationServiceFactory:
    """Get or create factory instance"""
    global _factory
    if _factory is None:
        _factory = AutomationServiceFactory()
        await _factory.initialize()
    return _factory


async def close_factory() -> None:
    """Close factory instance"""
    global _factory
    if _factory:
        await _factory.close()
        _factory = None


__all__ = [
    "AutomationServiceFactory",
    "get_factory",
    "close_factory",
]
