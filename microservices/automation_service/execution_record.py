"""
Execution Record State Machine

States:
- RUNNING -> COMPLETED (all nodes processed)
- RUNNING -> FAILED (interpreter gives up)
- RUNNING -> PAUSED (interpreter suspends)
- PAUSED -> RUNNING (resume)

COMPLETED and FAILED are terminal. Every mutation returns a new record with
status and completed_at updated together, so a record can never be running
with a completion timestamp.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from .models import ExecutionRecord, ExecutionStatus, NodeError
from .protocols import InvalidExecutionStateError


class ExecutionStateMachine:
    """Transition table for execution records"""

    VALID_TRANSITIONS: Dict[ExecutionStatus, Set[ExecutionStatus]] = {
        ExecutionStatus.RUNNING: {
            ExecutionStatus.COMPLETED,
            ExecutionStatus.FAILED,
            ExecutionStatus.PAUSED,
        },
        ExecutionStatus.PAUSED: {ExecutionStatus.RUNNING},
        # Terminal states
        ExecutionStatus.COMPLETED: set(),
        ExecutionStatus.FAILED: set(),
    }

    TERMINAL_STATUSES = frozenset({ExecutionStatus.COMPLETED, ExecutionStatus.FAILED})

    @classmethod
    def can_transition(cls, from_status: ExecutionStatus, to_status: ExecutionStatus) -> bool:
        return to_status in cls.VALID_TRANSITIONS.get(from_status, set())

    @classmethod
    def is_terminal(cls, status: ExecutionStatus) -> bool:
        return status in cls.TERMINAL_STATUSES

    @classmethod
    def is_active(cls, status: ExecutionStatus) -> bool:
        return status == ExecutionStatus.RUNNING

    @classmethod
    def accepts_node_updates(cls, status: ExecutionStatus) -> bool:
        return not cls.is_terminal(status)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def start_execution(
    workflow_id: str,
    contact_id: str,
    start_node_id: Optional[str] = None,
    execution_id: Optional[str] = None,
) -> ExecutionRecord:
    """Create a running record for one contact entering a workflow"""
    return ExecutionRecord(
        execution_id=execution_id or f"exe_{uuid.uuid4().hex[:16]}",
        workflow_id=workflow_id,
        contact_id=contact_id,
        status=ExecutionStatus.RUNNING,
        current_node_id=start_node_id,
        started_at=_now(),
    )


def transition_execution(
    record: ExecutionRecord,
    to_status: ExecutionStatus,
    at: Optional[datetime] = None,
) -> ExecutionRecord:
    """
    Move a record to a new status.

    Raises:
        InvalidExecutionStateError: transition not allowed from current status
    """
    to_status = ExecutionStatus(to_status)
    if not ExecutionStateMachine.can_transition(record.status, to_status):
        raise InvalidExecutionStateError(
            f"Cannot transition execution {record.execution_id} "
            f"from {record.status.value} to {to_status.value}",
            current_status=record.status,
        )

    completed_at = None
    if ExecutionStateMachine.is_terminal(to_status):
        completed_at = at or _now()

    return record.model_copy(update={"status": to_status, "completed_at": completed_at})


def pause_execution(record: ExecutionRecord) -> ExecutionRecord:
    return transition_execution(record, ExecutionStatus.PAUSED)


def resume_execution(record: ExecutionRecord) -> ExecutionRecord:
    return transition_execution(record, ExecutionStatus.RUNNING)


def complete_execution(record: ExecutionRecord, at: Optional[datetime] = None) -> ExecutionRecord:
    return transition_execution(record, ExecutionStatus.COMPLETED, at)


def fail_execution(record: ExecutionRecord, at: Optional[datetime] = None) -> ExecutionRecord:
    return transition_execution(record, ExecutionStatus.FAILED, at)


def _require_open(record: ExecutionRecord, action: str) -> None:
    if not ExecutionStateMachine.accepts_node_updates(record.status):
        raise InvalidExecutionStateError(
            f"Cannot {action} on {record.status.value} execution {record.execution_id}",
            current_status=record.status,
        )


def advance_to_node(record: ExecutionRecord, node_id: str) -> ExecutionRecord:
    _require_open(record, "advance")
    return record.model_copy(update={"current_node_id": node_id})


def record_node_result(record: ExecutionRecord, node_id: str, result: Any) -> ExecutionRecord:
    _require_open(record, "record node result")
    results = dict(record.results)
    results[node_id] = result
    return record.model_copy(update={"results": results})


def record_node_error(
    record: ExecutionRecord,
    node_id: str,
    message: str,
    at: Optional[datetime] = None,
) -> ExecutionRecord:
    """Append a node error; the status is left untouched"""
    _require_open(record, "record node error")
    error = NodeError(node_id=node_id, message=message, timestamp=at or _now())
    return record.model_copy(update={"errors": [*record.errors, error]})


__all__ = [
    "ExecutionStateMachine",
    "start_execution",
    "transition_execution",
    "pause_execution",
    "resume_execution",
    "complete_execution",
    "fail_execution",
    "advance_to_node",
    "record_node_result",
    "record_node_error",
]
