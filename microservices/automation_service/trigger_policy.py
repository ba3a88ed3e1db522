"""
Trigger Policy Table

Per-trigger facts that gate campaign-type choice, property-selection source,
condition categories and the subject toggle. Every row is an immutable
TriggerPolicy; the table is built once at import and never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from .models import (
    AutomationCondition,
    AutomationTrigger,
    CampaignType,
    ConditionCategory,
    PropertySelectionSource,
    TriggerKind,
)


class SelectionRule(str, Enum):
    """How a trigger resolves its property-selection source"""
    TRIGGER = "trigger"
    CONDITION = "condition"
    CONDITION_ELSE_TRIGGER = "condition_else_trigger"
    CONDITION_ELSE_MANUAL = "condition_else_manual"


@dataclass(frozen=True)
class AllowedCampaignTypes:
    single: bool
    multi: bool

    def allows(self, campaign_type: CampaignType) -> bool:
        if campaign_type == CampaignType.SINGLE_PROPERTY:
            return self.single
        return self.multi


@dataclass(frozen=True)
class TriggerPolicy:
    allowed_campaign_types: AllowedCampaignTypes
    selection_rule: SelectionRule
    locked_campaign_type: Optional[CampaignType] = None
    disabled_condition_categories: FrozenSet[ConditionCategory] = frozenset()
    show_email_subject_toggle: bool = False
    locked_message: Optional[str] = None

    @property
    def is_campaign_type_locked(self) -> bool:
        return self.locked_campaign_type is not None


BOTH_TYPES = AllowedCampaignTypes(single=True, multi=True)
SINGLE_ONLY = AllowedCampaignTypes(single=True, multi=False)
MULTI_ONLY = AllowedCampaignTypes(single=False, multi=True)

PROPERTY_DATA_ONLY = frozenset({ConditionCategory.PROPERTY_DATA})

DEFAULT_POLICY = TriggerPolicy(
    allowed_campaign_types=BOTH_TYPES,
    selection_rule=SelectionRule.CONDITION_ELSE_MANUAL,
)

PROPERTY_UPLOADED_POLICY = TriggerPolicy(
    allowed_campaign_types=SINGLE_ONLY,
    selection_rule=SelectionRule.TRIGGER,
    locked_campaign_type=CampaignType.SINGLE_PROPERTY,
    disabled_condition_categories=PROPERTY_DATA_ONLY,
    show_email_subject_toggle=True,
    locked_message="Property upload trigger requires single property campaigns.",
)

PROPERTY_VIEWED_POLICY = TriggerPolicy(
    allowed_campaign_types=BOTH_TYPES,
    selection_rule=SelectionRule.TRIGGER,
    disabled_condition_categories=PROPERTY_DATA_ONLY,
)

PROPERTY_UPDATED_POLICY = TriggerPolicy(
    allowed_campaign_types=BOTH_TYPES,
    selection_rule=SelectionRule.TRIGGER,
    disabled_condition_categories=PROPERTY_DATA_ONLY,
    show_email_subject_toggle=True,
)

PROPERTY_DISCOUNT_POLICY = TriggerPolicy(
    allowed_campaign_types=SINGLE_ONLY,
    selection_rule=SelectionRule.TRIGGER,
    locked_campaign_type=CampaignType.SINGLE_PROPERTY,
    disabled_condition_categories=PROPERTY_DATA_ONLY,
    show_email_subject_toggle=True,
    locked_message="Property discount trigger requires single property campaigns.",
)

CLOSING_DATE_POLICY = TriggerPolicy(
    allowed_campaign_types=BOTH_TYPES,
    selection_rule=SelectionRule.CONDITION_ELSE_TRIGGER,
)

TIME_BASED_POLICY = TriggerPolicy(
    allowed_campaign_types=MULTI_ONLY,
    selection_rule=SelectionRule.CONDITION,
    locked_campaign_type=CampaignType.MULTI_PROPERTY,
    disabled_condition_categories=frozenset({ConditionCategory.CAMPAIGN_DATA}),
    locked_message="Time-based trigger requires multi-property campaigns.",
)

# property_updated with updateType=discount is resolved separately in
# resolve_trigger_policy; every other kind is a direct lookup.
POLICY_TABLE: Mapping[TriggerKind, TriggerPolicy] = MappingProxyType({
    TriggerKind.PROPERTY_UPLOADED: PROPERTY_UPLOADED_POLICY,
    TriggerKind.PROPERTY_VIEWED: PROPERTY_VIEWED_POLICY,
    TriggerKind.PROPERTY_UPDATED: PROPERTY_UPDATED_POLICY,
    TriggerKind.CLOSING_DATE: CLOSING_DATE_POLICY,
    TriggerKind.TIME_BASED: TIME_BASED_POLICY,
    TriggerKind.CAMPAIGN_STATUS_CHANGED: DEFAULT_POLICY,
    TriggerKind.EMAIL_TRACKING_STATUS: DEFAULT_POLICY,
    TriggerKind.UNSUBSCRIBE: DEFAULT_POLICY,
    TriggerKind.UNKNOWN: DEFAULT_POLICY,
})

DISCOUNT_UPDATE_TYPE = "discount"

SELECTION_MESSAGES: Dict[PropertySelectionSource, str] = {
    PropertySelectionSource.TRIGGER: "Properties will be selected from the trigger event.",
    PropertySelectionSource.CONDITION: "Properties will be filtered by the conditions you defined.",
    PropertySelectionSource.MANUAL: "You can manually select properties below.",
}


def resolve_trigger_policy(trigger: AutomationTrigger) -> TriggerPolicy:
    """Look up the policy row for a trigger; unknown kinds get the default row"""
    if (
        trigger.kind == TriggerKind.PROPERTY_UPDATED
        and trigger.update_type == DISCOUNT_UPDATE_TYPE
    ):
        return PROPERTY_DISCOUNT_POLICY
    return POLICY_TABLE.get(trigger.kind, DEFAULT_POLICY)


def has_property_condition(conditions: Iterable[AutomationCondition]) -> bool:
    return any(c.category == ConditionCategory.PROPERTY_DATA for c in conditions)


def allowed_campaign_types(trigger: AutomationTrigger) -> AllowedCampaignTypes:
    return resolve_trigger_policy(trigger).allowed_campaign_types


def property_selection_source(
    trigger: AutomationTrigger,
    conditions: Iterable[AutomationCondition] = (),
) -> PropertySelectionSource:
    """Where target properties come from for this trigger and condition list"""
    rule = resolve_trigger_policy(trigger).selection_rule
    if rule == SelectionRule.TRIGGER:
        return PropertySelectionSource.TRIGGER
    if rule == SelectionRule.CONDITION:
        return PropertySelectionSource.CONDITION
    if has_property_condition(conditions):
        return PropertySelectionSource.CONDITION
    if rule == SelectionRule.CONDITION_ELSE_TRIGGER:
        return PropertySelectionSource.TRIGGER
    return PropertySelectionSource.MANUAL


def property_selection_message(source: PropertySelectionSource) -> str:
    return SELECTION_MESSAGES[PropertySelectionSource(source)]


def is_campaign_type_locked(trigger: AutomationTrigger) -> bool:
    return resolve_trigger_policy(trigger).is_campaign_type_locked


def locked_campaign_type(trigger: AutomationTrigger) -> Optional[CampaignType]:
    return resolve_trigger_policy(trigger).locked_campaign_type


def locked_campaign_type_message(trigger: AutomationTrigger) -> Optional[str]:
    return resolve_trigger_policy(trigger).locked_message


def disabled_condition_categories(trigger: AutomationTrigger) -> FrozenSet[ConditionCategory]:
    return resolve_trigger_policy(trigger).disabled_condition_categories


def show_email_subject_toggle(trigger: AutomationTrigger) -> bool:
    """Whether the subject line may be taken verbatim from the source property"""
    return resolve_trigger_policy(trigger).show_email_subject_toggle


__all__ = [
    "SelectionRule",
    "AllowedCampaignTypes",
    "TriggerPolicy",
    "DEFAULT_POLICY",
    "POLICY_TABLE",
    "resolve_trigger_policy",
    "has_property_condition",
    "allowed_campaign_types",
    "property_selection_source",
    "property_selection_message",
    "is_campaign_type_locked",
    "locked_campaign_type",
    "locked_campaign_type_message",
    "disabled_condition_categories",
    "show_email_subject_toggle",
]
