"""
Automation Service Data Models

Canonical data structures for trigger/condition/action automation documents,
financing plans, creative image slots and execution records.

Attributes are snake_case; every model also accepts and emits the camelCase
keys used by stored automation documents (``matchAll``, ``propertyIds``,
``planNumber``...).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================

class TriggerKind(str, Enum):
    """Event class that starts an automation"""
    PROPERTY_UPLOADED = "property_uploaded"
    PROPERTY_VIEWED = "property_viewed"
    PROPERTY_UPDATED = "property_updated"
    CLOSING_DATE = "closing_date"
    TIME_BASED = "time_based"
    CAMPAIGN_STATUS_CHANGED = "campaign_status_changed"
    EMAIL_TRACKING_STATUS = "email_tracking_status"
    UNSUBSCRIBE = "unsubscribe"
    UNKNOWN = "unknown"


class ConditionCategory(str, Enum):
    """Condition group category"""
    PROPERTY_DATA = "property_data"
    CAMPAIGN_DATA = "campaign_data"
    EMAIL_TRACKING = "email_tracking"
    EMAIL_TEMPLATE = "email_template"
    BUYER_DATA = "buyer_data"


class ConditionOperator(str, Enum):
    """Clause comparison operators"""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"
    IN = "in"
    NOT_IN = "not_in"


class CampaignType(str, Enum):
    """Campaign shape produced by the send_campaign action"""
    SINGLE_PROPERTY = "single_property"
    MULTI_PROPERTY = "multi_property"


class PropertySelectionSource(str, Enum):
    """Where target properties come from"""
    TRIGGER = "trigger"
    CONDITION = "condition"
    MANUAL = "manual"


class TemplateType(str, Enum):
    """Email template audience"""
    SINGLE = "single"
    MULTI = "multi"


class ScheduleMode(str, Enum):
    """When the campaign is sent once the automation fires"""
    IMMEDIATE = "immediate"
    SCHEDULED = "scheduled"
    TIME_DELAY = "time_delay"


class DelayUnit(str, Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


class PlanStrategy(str, Enum):
    """Financing plan selection strategy"""
    PLAN_1 = "plan-1"
    PLAN_2 = "plan-2"
    PLAN_3 = "plan-3"
    MONTHLY_LOW = "monthly-low"
    MONTHLY_HIGH = "monthly-high"
    DOWN_PAYMENT_LOW = "down-payment-low"
    DOWN_PAYMENT_HIGH = "down-payment-high"
    INTEREST_LOW = "interest-low"
    INTEREST_HIGH = "interest-high"


class ExecutionStatus(str, Enum):
    """Execution record status"""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PAUSED = "paused"


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


# Clause field vocabulary per condition category
CATEGORY_FIELDS: Dict[ConditionCategory, frozenset] = {
    ConditionCategory.PROPERTY_DATA: frozenset({
        "area", "status", "featured", "landtype", "zoning", "mobilehomefriendly",
        "city", "county", "state", "zip", "water", "sewer", "electric",
        "roadCondition", "floodplain", "ltag", "rtag", "landid", "financing",
        "financingTwo", "financingThree", "hoapoa", "hascma", "sqft", "acre",
        "askingprice", "minprice", "disprice", "purchasePrice", "financedPrice",
        "longitude", "latitude", "createdAt", "updatedAt",
    }),
    ConditionCategory.CAMPAIGN_DATA: frozenset({
        "status", "sent", "delivered", "opened", "clicked", "bounced",
        "complained", "totalRecipients", "totalClicks", "open", "bounces",
        "successfulDeliveries", "clicks", "didNotOpen", "mobileOpen", "failed",
        "hardBounces", "softBounces", "sentAt", "createdAt", "updatedAt",
    }),
    ConditionCategory.EMAIL_TRACKING: frozenset({
        "status", "sentAt", "clickedAt", "deliveredAt", "rejectedAt", "bouncedAt",
    }),
    ConditionCategory.EMAIL_TEMPLATE: frozenset({"category", "componentName"}),
    ConditionCategory.BUYER_DATA: frozenset({"source", "emailstatus", "preferredAreas"}),
}

MATCH_LISTS = frozenset({"Match-Title", "Match-Area"})
SUBJECT_BYPASS = "bypass"


# =============================================================================
# BASE MODEL
# =============================================================================

class BaseContract(BaseModel):
    """Base model for all contracts"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# =============================================================================
# TRIGGER
# =============================================================================

class AutomationTrigger(BaseContract):
    """Trigger with its kind-specific config record.

    Unrecognised kinds are kept as ``TriggerKind.UNKNOWN`` so that they resolve
    to the permissive default policy instead of failing to parse.
    """
    kind: TriggerKind = Field(validation_alias=AliasChoices("kind", "type"))
    config: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("kind", mode="before")
    @classmethod
    def coerce_unknown_kind(cls, v):
        if isinstance(v, TriggerKind):
            return v
        try:
            return TriggerKind(v)
        except ValueError:
            return TriggerKind.UNKNOWN

    @property
    def update_type(self) -> Optional[str]:
        return self.config.get("updateType")


# =============================================================================
# CONDITIONS
# =============================================================================

class _ClauseBase(BaseContract):
    field: str = Field(..., min_length=1, description="Record field, dotted paths allowed")


class ComparisonClause(_ClauseBase):
    """Single-value comparison clause"""
    operator: Literal[
        "equals", "not_equals", "contains", "not_contains", "greater_than", "less_than",
    ]
    value: Any

    @field_validator("value")
    @classmethod
    def value_required(cls, v):
        if v is None:
            raise ValueError("Clause value is required")
        return v


class BetweenClause(_ClauseBase):
    """Inclusive range clause"""
    operator: Literal["between"]
    value: Any
    second_value: Any

    @model_validator(mode="after")
    def bounds_required(self):
        if self.value is None or self.second_value is None:
            raise ValueError("Between clause requires value and secondValue")
        return self


class MembershipClause(_ClauseBase):
    """Set membership clause"""
    operator: Literal["in", "not_in"]
    value: List[Any]


ConditionClause = Annotated[
    Union[ComparisonClause, BetweenClause, MembershipClause],
    Field(discriminator="operator"),
]


class AutomationCondition(BaseContract):
    """Condition group; clauses are ANDed when match_all, ORed otherwise"""
    category: ConditionCategory
    match_all: bool = True
    clauses: List[ConditionClause] = Field(
        default_factory=list,
        validation_alias=AliasChoices("clauses", "conditions"),
    )

    @model_validator(mode="after")
    def validate_clause_fields(self):
        allowed = CATEGORY_FIELDS[self.category]
        for clause in self.clauses:
            root = clause.field.split(".")[0]
            if root not in allowed:
                raise ValueError(
                    f"Field '{clause.field}' is not valid for {self.category.value} conditions"
                )
        return self


# =============================================================================
# ACTION
# =============================================================================

class PropertySelection(BaseContract):
    source: PropertySelectionSource
    property_ids: List[str] = Field(default_factory=list)


class ScheduleDelay(BaseContract):
    amount: int = Field(..., gt=0)
    unit: DelayUnit


class ImageSelection(BaseContract):
    """Image chosen for one template slot"""
    image_index: int = Field(..., ge=0)
    order: int = 0
    name: Optional[str] = None


class SendCampaignConfig(BaseContract):
    """Configuration of the send_campaign action"""
    campaign_type: CampaignType
    property_selection: PropertySelection

    # List id, or one of the Match-* pseudo lists
    email_list: str = ""
    email_template: str = ""
    selected_agent: Optional[str] = None

    schedule: ScheduleMode = ScheduleMode.IMMEDIATE
    scheduled_date: Optional[datetime] = None
    delay: Optional[ScheduleDelay] = None

    name: str = ""
    # "bypass" reuses the source property's own subject line
    subject: str = ""
    description: Optional[str] = None

    financing_enabled: bool = False
    plan_strategy: Optional[PlanStrategy] = None
    # property id -> plan number, read only for plan-3
    custom_plan_selections: Dict[str, int] = Field(default_factory=dict)
    # slot id -> selection
    image_selections: Dict[str, ImageSelection] = Field(default_factory=dict)


class AutomationAction(BaseContract):
    kind: Literal["send_campaign"] = Field(
        default="send_campaign",
        validation_alias=AliasChoices("kind", "type"),
    )
    config: SendCampaignConfig


class AutomationDefinition(BaseContract):
    """Automation document: one trigger, optional conditions, one action"""
    automation_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("automationId", "automation_id", "_id", "id"))
    name: str = ""
    description: str = ""
    is_active: bool = False
    trigger: AutomationTrigger
    conditions: List[AutomationCondition] = Field(default_factory=list)
    action: AutomationAction


# =============================================================================
# TEMPLATES, PLANS, SLOTS
# =============================================================================

class ImageSlot(BaseContract):
    """Template position reserved for one property image"""
    id: str
    name: str = "Property Image"
    order: int = 0
    default_image_index: int = Field(default=0, ge=0)


class EmailTemplate(BaseContract):
    id: str
    name: str = ""
    template_type: TemplateType = Field(
        default=TemplateType.SINGLE,
        validation_alias=AliasChoices("templateType", "template_type", "type"),
    )
    image_slots: List[ImageSlot] = Field(default_factory=list)


class FinancingPlan(BaseContract):
    """One predefined financing offer attached to a property"""
    plan_number: int = Field(..., ge=1, le=3)
    down_payment: Optional[float] = None
    loan_amount: Optional[float] = None
    interest_rate: Optional[float] = None
    monthly_payment: Optional[float] = None
    is_available: bool = True


class PlanSelection(BaseContract):
    """Outcome of the plan selector for one property"""
    property_id: Optional[str] = None
    plan: Optional[FinancingPlan] = None
    # plan-3 without a native plan #3 and no manual override yet
    pending_manual_input: bool = False

    @property
    def is_financing_eligible(self) -> bool:
        return self.plan is not None


class SlotAssignment(BaseContract):
    """Renderable slots for one property and the seeded selections"""
    renderable_slots: List[ImageSlot] = Field(default_factory=list)
    selections: Dict[str, ImageSelection] = Field(default_factory=dict)
    missing_slot_count: int = 0


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationIssue(BaseContract):
    """Field-scoped validation message"""
    code: str
    message: str
    field: Optional[str] = None
    severity: IssueSeverity = IssueSeverity.ERROR


class ValidationResult(BaseContract):
    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: List[ValidationIssue]) -> "ValidationResult":
        errors = [i for i in issues if i.severity == IssueSeverity.ERROR]
        warnings = [i for i in issues if i.severity == IssueSeverity.WARNING]
        return cls(is_valid=not errors, errors=errors, warnings=warnings)


# =============================================================================
# EXECUTION
# =============================================================================

class NodeError(BaseContract):
    node_id: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExecutionRecord(BaseContract):
    """State of one automation run for one contact.

    ``completed_at`` is set exactly when the status is terminal.
    """
    execution_id: Optional[str] = None
    workflow_id: str
    contact_id: str
    status: ExecutionStatus = ExecutionStatus.RUNNING
    current_node_id: Optional[str] = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    results: Dict[str, Any] = Field(default_factory=dict)
    errors: List[NodeError] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_completion_timestamp(self):
        terminal = self.status in (ExecutionStatus.COMPLETED, ExecutionStatus.FAILED)
        if terminal and self.completed_at is None:
            raise ValueError(f"{self.status.value} executions require completed_at")
        if not terminal and self.completed_at is not None:
            raise ValueError(f"{self.status.value} executions cannot have completed_at")
        return self


# =============================================================================
# RESOLUTION OUTPUT
# =============================================================================

class ResolvedProperty(BaseContract):
    """Materialized per-property campaign payload"""
    property_id: str
    image_urls: List[str] = Field(default_factory=list)
    plan: Optional[FinancingPlan] = None
    pending_manual_input: bool = False
    financing_eligible: bool = False
    image_selections: Dict[str, ImageSelection] = Field(default_factory=dict)
    missing_slot_count: int = 0
    data_available: bool = True


class ResolvedCampaign(BaseContract):
    campaign_type: CampaignType
    financing_enabled: bool = False
    plan_strategy: Optional[PlanStrategy] = None
    properties: List[ResolvedProperty] = Field(default_factory=list)
    ready_to_send: bool = False
    issues: List[ValidationIssue] = Field(default_factory=list)


__all__ = [
    # Enums
    "TriggerKind",
    "ConditionCategory",
    "ConditionOperator",
    "CampaignType",
    "PropertySelectionSource",
    "TemplateType",
    "ScheduleMode",
    "DelayUnit",
    "PlanStrategy",
    "ExecutionStatus",
    "IssueSeverity",
    # Constants
    "CATEGORY_FIELDS",
    "MATCH_LISTS",
    "SUBJECT_BYPASS",
    # Automation document
    "BaseContract",
    "AutomationTrigger",
    "ComparisonClause",
    "BetweenClause",
    "MembershipClause",
    "ConditionClause",
    "AutomationCondition",
    "PropertySelection",
    "ScheduleDelay",
    "ImageSelection",
    "SendCampaignConfig",
    "AutomationAction",
    "AutomationDefinition",
    # Templates, plans, slots
    "ImageSlot",
    "EmailTemplate",
    "FinancingPlan",
    "PlanSelection",
    "SlotAssignment",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Execution
    "NodeError",
    "ExecutionRecord",
    # Resolution
    "ResolvedProperty",
    "ResolvedCampaign",
]
