"""
Action Config Validator

Checks a finished automation document against the trigger policy before it
is accepted. Every problem is returned as a field-scoped ValidationIssue so a
configuration surface can show it inline; nothing here raises.
"""

import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from .condition_guard import guard_conditions, validate_condition_structure
from .models import (
    MATCH_LISTS,
    SUBJECT_BYPASS,
    AutomationAction,
    AutomationCondition,
    AutomationDefinition,
    AutomationTrigger,
    CampaignType,
    ConditionCategory,
    EmailTemplate,
    IssueSeverity,
    PropertySelectionSource,
    ScheduleMode,
    TemplateType,
    TriggerKind,
    ValidationIssue,
    ValidationResult,
)
from .trigger_policy import (
    has_property_condition,
    property_selection_source,
    resolve_trigger_policy,
    show_email_subject_toggle,
)

logger = logging.getLogger(__name__)

TIME_SCHEDULES = frozenset({"daily", "weekly", "monthly", "specific_date"})

TEMPLATE_TYPE_BY_CAMPAIGN = {
    CampaignType.SINGLE_PROPERTY: TemplateType.SINGLE,
    CampaignType.MULTI_PROPERTY: TemplateType.MULTI,
}

TemplateCatalog = Union[Mapping[str, EmailTemplate], Iterable[EmailTemplate], None]


def _issue(code: str, message: str, field: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(code=code, message=message, field=field, severity=IssueSeverity.ERROR)


def _warning(code: str, message: str, field: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(code=code, message=message, field=field, severity=IssueSeverity.WARNING)


def _template_index(templates: TemplateCatalog) -> Optional[Mapping[str, EmailTemplate]]:
    if templates is None:
        return None
    if isinstance(templates, Mapping):
        return templates
    return {t.id: t for t in templates}


# ====================
# Trigger
# ====================


def validate_trigger_config(trigger: AutomationTrigger) -> List[ValidationIssue]:
    """Kind-specific trigger config requirements"""
    config = trigger.config
    issues = []

    if trigger.kind == TriggerKind.TIME_BASED:
        schedule = config.get("schedule")
        if schedule not in TIME_SCHEDULES:
            issues.append(_issue(
                "INVALID_TIME_TRIGGER",
                "Time-based trigger requires a schedule configuration.",
                "trigger.config.schedule",
            ))
        elif schedule == "specific_date" and not config.get("specificDate"):
            issues.append(_issue(
                "MISSING_SPECIFIC_DATE",
                "Specific date is required for this schedule type.",
                "trigger.config.specificDate",
            ))

    elif trigger.kind == TriggerKind.PROPERTY_VIEWED:
        if config.get("requireLoggedIn") is not True:
            issues.append(_issue(
                "INVALID_PROPERTY_VIEW_TRACKING",
                "Property viewed trigger requires logged-in users for accurate tracking.",
                "trigger.config.requireLoggedIn",
            ))

    elif trigger.kind == TriggerKind.EMAIL_TRACKING_STATUS:
        if not config.get("event"):
            issues.append(_issue(
                "MISSING_TRACKING_EVENT",
                "Email tracking trigger requires an event type.",
                "trigger.config.event",
            ))

    return issues


# ====================
# Action
# ====================


def validate_action(
    trigger: AutomationTrigger,
    conditions: Sequence[AutomationCondition],
    action: AutomationAction,
    templates: TemplateCatalog = None,
) -> List[ValidationIssue]:
    """
    Validate the send_campaign config against the trigger policy.

    Args:
        trigger: Automation trigger
        conditions: Condition groups as authored
        action: Action to check
        templates: Optional template catalog (id -> template, or a list);
            when omitted, template existence and type are not checked

    Returns:
        Error issues, empty when the action is complete
    """
    policy = resolve_trigger_policy(trigger)
    config = action.config
    issues = []

    # Campaign type lock
    if policy.locked_campaign_type is not None and config.campaign_type != policy.locked_campaign_type:
        issues.append(_issue(
            "LOCKED_CAMPAIGN_TYPE",
            policy.locked_message
            or f"This trigger requires {policy.locked_campaign_type.value} campaigns.",
            "action.config.campaignType",
        ))
    elif not policy.allowed_campaign_types.allows(config.campaign_type):
        issues.append(_issue(
            "CAMPAIGN_TYPE_NOT_ALLOWED",
            f"{config.campaign_type.value} campaigns are not available for this trigger.",
            "action.config.campaignType",
        ))

    # Property selection source
    expected_source = property_selection_source(trigger, conditions)
    selection = config.property_selection
    if selection.source != expected_source:
        issues.append(_issue(
            "CONFLICTING_PROPERTY_SELECTION",
            f'Property selection must be "{expected_source.value}" for this trigger and conditions.',
            "action.config.propertySelection.source",
        ))
    if selection.source == PropertySelectionSource.MANUAL and not selection.property_ids:
        issues.append(_issue(
            "MISSING_MANUAL_PROPERTIES",
            "Manual property selection requires at least one property ID.",
            "action.config.propertySelection.propertyIds",
        ))

    if not config.name.strip():
        issues.append(_issue(
            "MISSING_CAMPAIGN_NAME", "Campaign name is required.", "action.config.name",
        ))

    if show_email_subject_toggle(trigger):
        if config.subject != SUBJECT_BYPASS and not config.subject.strip():
            issues.append(_issue(
                "MISSING_CAMPAIGN_SUBJECT",
                "Campaign subject is required or must be set to bypass.",
                "action.config.subject",
            ))
    elif not config.subject.strip() or config.subject == SUBJECT_BYPASS:
        issues.append(_issue(
            "MISSING_CAMPAIGN_SUBJECT", "Campaign subject is required.", "action.config.subject",
        ))

    if not config.email_list:
        issues.append(_issue(
            "MISSING_EMAIL_LIST", "Email list is required.", "action.config.emailList",
        ))
    elif config.email_list.startswith("Match-") and config.email_list not in MATCH_LISTS:
        issues.append(_issue(
            "INVALID_MATCH_LIST",
            "Invalid match list type. Must be Match-Title or Match-Area.",
            "action.config.emailList",
        ))

    issues.extend(_validate_template(config.campaign_type, config.email_template, templates))

    if config.schedule == ScheduleMode.SCHEDULED and config.scheduled_date is None:
        issues.append(_issue(
            "MISSING_SCHEDULED_DATE",
            "Scheduled campaigns require a date.",
            "action.config.scheduledDate",
        ))
    if config.schedule == ScheduleMode.TIME_DELAY and config.delay is None:
        issues.append(_issue(
            "MISSING_DELAY_CONFIG",
            "Time delay scheduling requires delay configuration.",
            "action.config.delay",
        ))

    if config.financing_enabled and config.plan_strategy is None:
        issues.append(_issue(
            "MISSING_PLAN_STRATEGY",
            "Select a payment plan strategy when financing is enabled.",
            "action.config.planStrategy",
        ))

    if (
        trigger.kind == TriggerKind.TIME_BASED
        and config.campaign_type == CampaignType.MULTI_PROPERTY
        and not has_property_condition(conditions)
    ):
        issues.append(_issue(
            "MISSING_PROPERTY_FILTER",
            "Multi-property campaigns with time triggers require property conditions to select properties.",
            "conditions",
        ))

    return issues


def _validate_template(
    campaign_type: CampaignType,
    template_id: str,
    templates: TemplateCatalog,
) -> List[ValidationIssue]:
    if not template_id:
        return [_issue(
            "MISSING_EMAIL_TEMPLATE", "Email template is required.", "action.config.emailTemplate",
        )]

    catalog = _template_index(templates)
    if catalog is None:
        return []

    template = catalog.get(template_id)
    if template is None:
        return [_issue(
            "UNKNOWN_EMAIL_TEMPLATE",
            f"Email template {template_id} does not exist.",
            "action.config.emailTemplate",
        )]

    expected = TEMPLATE_TYPE_BY_CAMPAIGN[campaign_type]
    if template.template_type != expected:
        return [_issue(
            "TEMPLATE_TYPE_MISMATCH",
            f"{campaign_type.value} campaigns require a {expected.value}-property template.",
            "action.config.emailTemplate",
        )]
    return []


# ====================
# Best practices
# ====================


def best_practice_warnings(
    trigger: AutomationTrigger,
    conditions: Sequence[AutomationCondition],
) -> List[ValidationIssue]:
    warnings = []
    if not conditions:
        warnings.append(_warning(
            "NO_CONDITIONS",
            "Consider adding conditions to filter recipients or properties.",
        ))
    if trigger.kind == TriggerKind.TIME_BASED and not any(
        c.category == ConditionCategory.BUYER_DATA for c in conditions
    ):
        warnings.append(_warning(
            "NO_RECIPIENT_FILTER",
            "Time-based automations should filter recipients to avoid sending to all contacts.",
            "conditions",
        ))
    return warnings


# ====================
# Whole document
# ====================


def validate_automation(
    definition: AutomationDefinition,
    templates: TemplateCatalog = None,
) -> ValidationResult:
    """Trigger config, category guard, condition structure and action checks"""
    issues: List[ValidationIssue] = []

    if not definition.name.strip():
        issues.append(_issue("MISSING_NAME", "Automation name is required", "name"))

    issues.extend(validate_trigger_config(definition.trigger))
    issues.extend(guard_conditions(definition.trigger, definition.conditions))
    issues.extend(validate_condition_structure(definition.conditions))
    issues.extend(validate_action(
        definition.trigger, definition.conditions, definition.action, templates,
    ))
    issues.extend(best_practice_warnings(definition.trigger, definition.conditions))

    result = ValidationResult.from_issues(issues)
    if not result.is_valid:
        logger.debug(
            f"Automation {definition.automation_id or definition.name!r} failed validation: "
            f"{[e.code for e in result.errors]}"
        )
    return result


__all__ = [
    "validate_trigger_config",
    "validate_action",
    "best_practice_warnings",
    "validate_automation",
]
