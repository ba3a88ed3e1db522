"""
Plan Extremum Selector

Picks one financing plan per property by a named strategy and decides
whether a financed campaign is ready to send.

All functions are pure: the same plans, strategy and overrides always give
the same selected plan object.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .models import (
    FinancingPlan,
    IssueSeverity,
    PlanSelection,
    PlanStrategy,
    ValidationIssue,
)

FINANCING_AVAILABLE = "Available"

# Property document keys per plan slot: (availability flag, field suffix)
PLAN_FIELD_KEYS = {
    1: ("financing", "One"),
    2: ("financingTwo", "Two"),
    3: ("financingThree", "Three"),
}

STRATEGY_LABELS: Dict[PlanStrategy, str] = {
    PlanStrategy.PLAN_1: "Plan 1",
    PlanStrategy.PLAN_2: "Plan 2 (with fallback)",
    PlanStrategy.PLAN_3: "Plan 3 (with validation)",
    PlanStrategy.MONTHLY_LOW: "Lowest Monthly Payment",
    PlanStrategy.MONTHLY_HIGH: "Highest Monthly Payment",
    PlanStrategy.DOWN_PAYMENT_LOW: "Lowest Down Payment",
    PlanStrategy.DOWN_PAYMENT_HIGH: "Highest Down Payment",
    PlanStrategy.INTEREST_LOW: "Lowest Interest Rate",
    PlanStrategy.INTEREST_HIGH: "Highest Interest Rate",
}

STRATEGY_DESCRIPTIONS: Dict[PlanStrategy, str] = {
    PlanStrategy.PLAN_1: "Use the first available payment plan",
    PlanStrategy.PLAN_2: "Prefer Plan 2, fallback to Plan 1 if unavailable",
    PlanStrategy.PLAN_3: "Prefer Plan 3, requires custom selection for properties without it",
    PlanStrategy.MONTHLY_LOW: "Select the plan with the lowest monthly payment",
    PlanStrategy.MONTHLY_HIGH: "Select the plan with the highest monthly payment",
    PlanStrategy.DOWN_PAYMENT_LOW: "Select the plan with the lowest down payment",
    PlanStrategy.DOWN_PAYMENT_HIGH: "Select the plan with the highest down payment",
    PlanStrategy.INTEREST_LOW: "Select the plan with the lowest interest rate",
    PlanStrategy.INTEREST_HIGH: "Select the plan with the highest interest rate",
}


def _lower(a: float, b: float) -> bool:
    return a < b


def _higher(a: float, b: float) -> bool:
    return a > b


# strategy -> (plan attribute, strict comparison)
EXTREMUM_STRATEGIES: Dict[PlanStrategy, tuple] = {
    PlanStrategy.MONTHLY_LOW: ("monthly_payment", _lower),
    PlanStrategy.MONTHLY_HIGH: ("monthly_payment", _higher),
    PlanStrategy.DOWN_PAYMENT_LOW: ("down_payment", _lower),
    PlanStrategy.DOWN_PAYMENT_HIGH: ("down_payment", _higher),
    PlanStrategy.INTEREST_LOW: ("interest_rate", _lower),
    PlanStrategy.INTEREST_HIGH: ("interest_rate", _higher),
}


# ====================
# Plan extraction
# ====================


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def plans_from_property_data(data: Optional[Mapping[str, Any]]) -> List[FinancingPlan]:
    """Build the available plans of a property document.

    Plan 3 additionally needs a monthly payment; its missing down payment and
    loan amount default to 0.
    """
    if not data:
        return []

    plans = []
    for number, (flag_key, suffix) in PLAN_FIELD_KEYS.items():
        if data.get(flag_key) != FINANCING_AVAILABLE:
            continue
        monthly = _number(data.get(f"monthlyPayment{suffix}"))
        down = _number(data.get(f"downPayment{suffix}"))
        loan = _number(data.get(f"loanAmount{suffix}"))
        if number == 3:
            if monthly is None:
                continue
            down = down or 0.0
            loan = loan or 0.0
        plans.append(
            FinancingPlan(
                plan_number=number,
                down_payment=down,
                loan_amount=loan,
                interest_rate=_number(data.get(f"interest{suffix}")),
                monthly_payment=monthly,
                is_available=True,
            )
        )
    return plans


def available_plans(plans: Sequence[FinancingPlan]) -> List[FinancingPlan]:
    return [p for p in plans if p.is_available]


# ====================
# Selection
# ====================


def _find(plans: Sequence[FinancingPlan], number: int) -> Optional[FinancingPlan]:
    for plan in plans:
        if plan.plan_number == number:
            return plan
    return None


def _extremum(
    plans: Sequence[FinancingPlan],
    attribute: str,
    better: Callable[[float, float], bool],
) -> FinancingPlan:
    """Fold keeping the first-seen plan on ties; plans lacking the field never win"""
    best = plans[0]
    for plan in plans[1:]:
        value = getattr(plan, attribute)
        if value is None:
            continue
        current = getattr(best, attribute)
        if current is None or better(value, current):
            best = plan
    return best


def _select_plan_1(plans: Sequence[FinancingPlan]) -> FinancingPlan:
    return _find(plans, 1) or plans[0]


def _coerce_strategy(strategy: Union[PlanStrategy, str, None]) -> Optional[PlanStrategy]:
    if isinstance(strategy, PlanStrategy) or strategy is None:
        return strategy
    try:
        return PlanStrategy(strategy)
    except ValueError:
        return None


def select_plan(
    plans: Sequence[FinancingPlan],
    strategy: Union[PlanStrategy, str, None],
    property_id: Optional[str] = None,
    custom_selections: Optional[Mapping[str, int]] = None,
) -> PlanSelection:
    """
    Select one plan for a property.

    Args:
        plans: Plans of the property in plan-number order
        strategy: Selection strategy; unknown values pick the first plan
        property_id: Key into custom_selections
        custom_selections: Manual plan-number overrides, read only for plan-3
            when the property has no plan #3 and more than one plan

    Returns:
        PlanSelection whose plan is None when no plan is available
    """
    candidates = available_plans(plans)
    if not candidates:
        return PlanSelection(property_id=property_id)

    resolved = _coerce_strategy(strategy)
    pending = False

    if resolved == PlanStrategy.PLAN_1:
        plan = _select_plan_1(candidates)
    elif resolved == PlanStrategy.PLAN_2:
        plan = _find(candidates, 2) or _select_plan_1(candidates)
    elif resolved == PlanStrategy.PLAN_3:
        plan = _find(candidates, 3)
        if plan is None and len(candidates) > 1:
            override = (custom_selections or {}).get(property_id) if property_id else None
            pending = override is None
            plan = _find(candidates, override if override is not None else 1) or candidates[0]
        elif plan is None:
            plan = candidates[0]
    elif resolved in EXTREMUM_STRATEGIES:
        attribute, better = EXTREMUM_STRATEGIES[resolved]
        plan = _extremum(candidates, attribute, better)
    else:
        plan = candidates[0]

    return PlanSelection(property_id=property_id, plan=plan, pending_manual_input=pending)


def needs_manual_selection(plans: Sequence[FinancingPlan], strategy: Union[PlanStrategy, str, None]) -> bool:
    """Whether plan-3 would consult a manual override for this plan set"""
    candidates = available_plans(plans)
    return (
        _coerce_strategy(strategy) == PlanStrategy.PLAN_3
        and _find(candidates, 3) is None
        and len(candidates) > 1
    )


def select_plans(
    plans_by_property: Mapping[str, Sequence[FinancingPlan]],
    strategy: Union[PlanStrategy, str, None],
    custom_selections: Optional[Mapping[str, int]] = None,
) -> Dict[str, PlanSelection]:
    """Select a plan for every property, keyed by property id"""
    return {
        property_id: select_plan(plans, strategy, property_id, custom_selections)
        for property_id, plans in plans_by_property.items()
    }


# ====================
# Readiness
# ====================


def _has_valid_plan(selection: Optional[PlanSelection]) -> bool:
    if selection is None or selection.plan is None:
        return False
    monthly = selection.plan.monthly_payment
    return monthly is not None and monthly > 0


def is_ready_to_send(
    financing_enabled: bool,
    selections: Mapping[str, Optional[PlanSelection]],
    financed_property_ids: Sequence[str],
) -> bool:
    """Financing disabled, no financed properties, or every financed property
    has a selected plan with a positive monthly payment"""
    if not financing_enabled or not financed_property_ids:
        return True
    return all(_has_valid_plan(selections.get(pid)) for pid in financed_property_ids)


def validate_payment_options(
    financing_enabled: bool,
    strategy: Union[PlanStrategy, str, None],
    selections: Mapping[str, Optional[PlanSelection]],
    financed_property_ids: Sequence[str],
) -> List[ValidationIssue]:
    """Readiness rule as field-scoped issues"""
    if not financing_enabled or not financed_property_ids:
        return []

    issues = []
    invalid = [pid for pid in financed_property_ids if not _has_valid_plan(selections.get(pid))]
    if invalid:
        issues.append(
            ValidationIssue(
                code="INVALID_PAYMENT_PLAN",
                message="Please ensure all properties with financing have valid payment plans selected.",
                field="paymentPlans",
            )
        )

    if _coerce_strategy(strategy) == PlanStrategy.PLAN_3:
        pending = [
            pid for pid in financed_property_ids
            if selections.get(pid) is not None and selections[pid].pending_manual_input
        ]
        if pending:
            issues.append(
                ValidationIssue(
                    code="PLAN_SELECTION_PENDING",
                    message=(
                        "Plan 3 strategy uses Plan 1 for properties without Plan 3 "
                        f"until a plan is chosen: {', '.join(pending)}."
                    ),
                    field="customPlanSelections",
                    severity=IssueSeverity.WARNING,
                )
            )
    return issues


def payment_options_summary(
    financing_enabled: bool,
    strategy: Union[PlanStrategy, str, None],
    selections: Mapping[str, Optional[PlanSelection]],
    financed_property_ids: Sequence[str],
    total_properties: int,
) -> Dict[str, Any]:
    if not financing_enabled:
        return {
            "financing_enabled": False,
            "properties_with_financing": 0,
            "total_properties": total_properties,
            "valid_selections": 0,
            "plan_strategy": None,
            "is_complete": True,
        }

    valid = sum(1 for pid in financed_property_ids if _has_valid_plan(selections.get(pid)))
    resolved = _coerce_strategy(strategy)
    return {
        "financing_enabled": True,
        "properties_with_financing": len(financed_property_ids),
        "total_properties": total_properties,
        "valid_selections": valid,
        "plan_strategy": resolved.value if resolved else None,
        "is_complete": valid == len(financed_property_ids),
    }


def format_plan_strategy(strategy: Union[PlanStrategy, str]) -> str:
    resolved = _coerce_strategy(strategy)
    if resolved is None:
        return str(strategy)
    return STRATEGY_LABELS[resolved]


def describe_plan_strategy(strategy: Union[PlanStrategy, str, None]) -> str:
    resolved = _coerce_strategy(strategy)
    if resolved is None:
        return "Select how payment plans should be chosen"
    return STRATEGY_DESCRIPTIONS[resolved]


__all__ = [
    "FINANCING_AVAILABLE",
    "plans_from_property_data",
    "available_plans",
    "select_plan",
    "select_plans",
    "needs_manual_selection",
    "is_ready_to_send",
    "validate_payment_options",
    "payment_options_summary",
    "format_plan_strategy",
    "describe_plan_strategy",
]
