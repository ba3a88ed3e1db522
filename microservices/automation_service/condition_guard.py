"""
Condition Category Guard and Clause Evaluation

The guard rejects condition groups whose category the trigger already
guarantees. The evaluator applies clause operators to plain records; a field
missing from the record never matches.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .models import (
    AutomationCondition,
    AutomationTrigger,
    ConditionCategory,
    ConditionOperator,
    IssueSeverity,
    ValidationIssue,
)
from .trigger_policy import disabled_condition_categories

logger = logging.getLogger(__name__)


# ====================
# Guard
# ====================


def guard_conditions(
    trigger: AutomationTrigger,
    conditions: Sequence[AutomationCondition],
) -> List[ValidationIssue]:
    """Flag every condition group whose category the trigger disables"""
    disabled = disabled_condition_categories(trigger)
    issues = []
    for index, condition in enumerate(conditions):
        if condition.category in disabled:
            issues.append(
                ValidationIssue(
                    code="DISABLED_CONDITION_CATEGORY",
                    message=(
                        f"{condition.category.value} conditions are not available for "
                        f"{trigger.kind.value} triggers; the trigger already selects them."
                    ),
                    field=f"conditions[{index}].category",
                    severity=IssueSeverity.ERROR,
                )
            )
    return issues


def allowed_conditions(
    trigger: AutomationTrigger,
    conditions: Sequence[AutomationCondition],
) -> List[AutomationCondition]:
    """Conditions that survive the guard, in their original order"""
    disabled = disabled_condition_categories(trigger)
    return [c for c in conditions if c.category not in disabled]


def validate_condition_structure(conditions: Sequence[AutomationCondition]) -> List[ValidationIssue]:
    """Checks that the model layer cannot express, such as empty groups"""
    issues = []
    for index, condition in enumerate(conditions):
        if not condition.clauses:
            issues.append(
                ValidationIssue(
                    code="EMPTY_CONDITION",
                    message=f"{condition.category.value} condition has no filters defined.",
                    field=f"conditions[{index}].clauses",
                )
            )
    return issues


# ====================
# Clause evaluation
# ====================


def get_field_value(record: Mapping[str, Any], field: str) -> Any:
    """Get nested value using dot notation (e.g. 'owner.address.city')"""
    value: Any = record
    for key in field.split("."):
        if isinstance(value, Mapping) and key in value:
            value = value[key]
        else:
            return None
    return value


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", ""))
        except ValueError:
            return None
    return None


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _ordered_pair(left: Any, right: Any) -> Optional[Tuple[Any, Any]]:
    """Coerce two values to a comparable pair: numbers first, then dates"""
    left_num, right_num = _as_number(left), _as_number(right)
    if left_num is not None and right_num is not None:
        return left_num, right_num
    left_dt, right_dt = _as_datetime(left), _as_datetime(right)
    if left_dt is not None and right_dt is not None:
        # Mixed naive/aware datetimes are compared as naive wall-clock times
        if (left_dt.tzinfo is None) != (right_dt.tzinfo is None):
            left_dt = left_dt.replace(tzinfo=None)
            right_dt = right_dt.replace(tzinfo=None)
        return left_dt, right_dt
    return None


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, (list, tuple, set, frozenset)):
        return expected in actual
    # Scalars compare as case-insensitive text, so numbers match on their digits
    return str(expected).lower() in str(actual).lower()


def _compare(actual: Any, expected: Any, op: str) -> bool:
    pair = _ordered_pair(actual, expected)
    if pair is None:
        return False
    left, right = pair
    return left > right if op == ConditionOperator.GREATER_THAN else left < right


def _between(actual: Any, low: Any, high: Any) -> bool:
    lower = _ordered_pair(actual, low)
    upper = _ordered_pair(actual, high)
    if lower is None or upper is None:
        return False
    return lower[1] <= lower[0] and upper[0] <= upper[1]


def evaluate_clause(clause, record: Mapping[str, Any]) -> bool:
    """Evaluate a single clause against a record"""
    actual = get_field_value(record, clause.field)
    if actual is None:
        return False

    operator = clause.operator
    if operator == ConditionOperator.EQUALS:
        return actual == clause.value
    elif operator == ConditionOperator.NOT_EQUALS:
        return actual != clause.value
    elif operator == ConditionOperator.CONTAINS:
        return _contains(actual, clause.value)
    elif operator == ConditionOperator.NOT_CONTAINS:
        return not _contains(actual, clause.value)
    elif operator in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
        return _compare(actual, clause.value, operator)
    elif operator == ConditionOperator.BETWEEN:
        return _between(actual, clause.value, clause.second_value)
    elif operator == ConditionOperator.IN:
        return actual in clause.value
    elif operator == ConditionOperator.NOT_IN:
        return actual not in clause.value

    logger.debug(f"Unhandled operator {operator} on field {clause.field}")
    return False


def evaluate_condition(condition: AutomationCondition, record: Mapping[str, Any]) -> bool:
    """AND over the clauses when match_all, OR otherwise.

    An empty group matches everything.
    """
    if not condition.clauses:
        return True
    results = (evaluate_clause(clause, record) for clause in condition.clauses)
    return all(results) if condition.match_all else any(results)


def evaluate_conditions(
    conditions: Iterable[AutomationCondition],
    context: Mapping[str, Mapping[str, Any]],
) -> bool:
    """Every condition group must hold against the record for its category"""
    for condition in conditions:
        record = context.get(condition.category.value) or {}
        if not evaluate_condition(condition, record):
            return False
    return True


def filter_properties(
    properties: Iterable[Dict[str, Any]],
    conditions: Iterable[AutomationCondition],
) -> List[Dict[str, Any]]:
    """Properties matching every property_data condition group"""
    property_conditions = [
        c for c in conditions if c.category == ConditionCategory.PROPERTY_DATA
    ]
    return [
        prop for prop in properties
        if all(evaluate_condition(c, prop) for c in property_conditions)
    ]


__all__ = [
    "guard_conditions",
    "allowed_conditions",
    "validate_condition_structure",
    "get_field_value",
    "evaluate_clause",
    "evaluate_condition",
    "evaluate_conditions",
    "filter_properties",
]
