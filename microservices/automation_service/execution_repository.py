"""
In-memory execution repository

Process-local store satisfying ExecutionRepositoryProtocol. Used by the
service factory when no external persistence layer is wired in.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from .models import ExecutionRecord, ExecutionStatus

logger = logging.getLogger(__name__)


class InMemoryExecutionRepository:
    """Execution records keyed by execution_id"""

    def __init__(self):
        self._records: Dict[str, ExecutionRecord] = {}
        self._lock = asyncio.Lock()

    async def save_execution(self, record: ExecutionRecord) -> ExecutionRecord:
        if not record.execution_id:
            raise ValueError("execution_id is required to save an execution")
        async with self._lock:
            self._records[record.execution_id] = record
        logger.debug(f"Saved execution {record.execution_id} ({record.status.value})")
        return record

    async def get_execution(self, execution_id: str) -> Optional[ExecutionRecord]:
        return self._records.get(execution_id)

    async def list_executions(
        self,
        workflow_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        status: Optional[List[ExecutionStatus]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ExecutionRecord]:
        records = [
            r for r in self._records.values()
            if (workflow_id is None or r.workflow_id == workflow_id)
            and (contact_id is None or r.contact_id == contact_id)
            and (not status or r.status in status)
        ]
        records.sort(key=lambda r: r.started_at, reverse=True)
        return records[offset:offset + limit]

    async def close(self) -> None:
        self._records.clear()
