"""
Automation Service Protocols

Defines interfaces for the external collaborators (property data source,
execution persistence) and the service exception hierarchy.
"""

from typing import Any, Dict, List, Optional, Protocol

from .models import ExecutionRecord, ExecutionStatus


# ====================
# Collaborator Protocols
# ====================


class PropertyDataSourceProtocol(Protocol):
    """Protocol for the property listing data source"""

    async def get_property(self, property_id: str) -> Dict[str, Any]:
        """Get the raw property document (image URLs, financing fields)"""
        ...

    async def close(self) -> None:
        """Release underlying connections"""
        ...


class ExecutionRepositoryProtocol(Protocol):
    """Protocol for execution record persistence"""

    async def save_execution(self, record: ExecutionRecord) -> ExecutionRecord:
        """Insert or replace an execution record"""
        ...

    async def get_execution(self, execution_id: str) -> Optional[ExecutionRecord]:
        """Get execution by ID"""
        ...

    async def list_executions(
        self,
        workflow_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        status: Optional[List[ExecutionStatus]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ExecutionRecord]:
        """List executions with filters"""
        ...


# ====================
# Custom Exceptions
# ====================


class AutomationServiceError(Exception):
    """Base exception for automation service errors"""
    pass


class AutomationValidationError(AutomationServiceError):
    """Raised when an automation definition fails validation"""

    def __init__(self, message: str, field: Optional[str] = None, issues: Optional[list] = None):
        super().__init__(message)
        self.field = field
        self.issues = issues or []


class InvalidExecutionStateError(AutomationServiceError):
    """Raised when an execution record cannot make the requested transition"""

    def __init__(self, message: str, current_status: Optional[ExecutionStatus] = None):
        super().__init__(message)
        self.current_status = current_status


class ExecutionNotFoundError(AutomationServiceError):
    """Raised when an execution record is not found"""
    pass


class ImageSelectionError(AutomationServiceError):
    """Raised when an image index is outside the property's image list"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PropertyDataError(AutomationServiceError):
    """Raised when property data cannot be fetched"""

    def __init__(self, message: str, property_id: Optional[str] = None):
        super().__init__(message)
        self.property_id = property_id


__all__ = [
    "PropertyDataSourceProtocol",
    "ExecutionRepositoryProtocol",
    "AutomationServiceError",
    "AutomationValidationError",
    "InvalidExecutionStateError",
    "ExecutionNotFoundError",
    "ImageSelectionError",
    "PropertyDataError",
]
