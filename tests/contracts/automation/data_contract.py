"""
Automation Service Data Contract

Re-exports the service models and provides AutomationTestDataFactory for
building automation documents, property payloads, plans, slots and
execution records in tests.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from microservices.automation_service.models import (
    AutomationAction,
    AutomationCondition,
    AutomationDefinition,
    AutomationTrigger,
    CampaignType,
    ConditionCategory,
    ConditionOperator,
    EmailTemplate,
    ExecutionRecord,
    ExecutionStatus,
    FinancingPlan,
    ImageSelection,
    ImageSlot,
    PlanStrategy,
    PropertySelectionSource,
    ScheduleMode,
    SendCampaignConfig,
    TemplateType,
    TriggerKind,
)


class AutomationTestDataFactory:
    """Factory for generating test data for automation service tests

    Usage:
        factory = AutomationTestDataFactory()
        definition = factory.make_definition(trigger_kind=TriggerKind.TIME_BASED)
        plans = factory.make_plans([(1, 500.0), (2, 400.0)])
    """

    @staticmethod
    def make_id(prefix: str = "aut") -> str:
        """Generate a unique ID with prefix"""
        return f"{prefix}_{uuid4().hex[:16]}"

    @staticmethod
    def make_property_id() -> str:
        return f"prop_{uuid4().hex[:12]}"

    @staticmethod
    def make_trigger(kind: Any = TriggerKind.PROPERTY_UPLOADED, **config) -> AutomationTrigger:
        return AutomationTrigger.model_validate({"kind": kind, "config": config})

    @staticmethod
    def make_clause(
        field: str = "city",
        operator: str = "equals",
        value: Any = "Austin",
        second_value: Any = None,
    ) -> Dict[str, Any]:
        clause = {"field": field, "operator": operator, "value": value}
        if second_value is not None:
            clause["secondValue"] = second_value
        return clause

    @classmethod
    def make_condition(
        cls,
        category: ConditionCategory = ConditionCategory.PROPERTY_DATA,
        clauses: Optional[List[Dict[str, Any]]] = None,
        match_all: bool = True,
    ) -> AutomationCondition:
        if clauses is None:
            clauses = [cls.make_clause()]
        return AutomationCondition.model_validate({
            "category": category,
            "matchAll": match_all,
            "conditions": clauses,
        })

    @classmethod
    def make_buyer_condition(cls) -> AutomationCondition:
        return cls.make_condition(
            ConditionCategory.BUYER_DATA,
            [cls.make_clause("source", "equals", "website")],
        )

    @classmethod
    def make_action(
        cls,
        campaign_type: CampaignType = CampaignType.SINGLE_PROPERTY,
        source: PropertySelectionSource = PropertySelectionSource.TRIGGER,
        property_ids: Optional[List[str]] = None,
        **overrides,
    ) -> AutomationAction:
        config: Dict[str, Any] = {
            "campaignType": campaign_type,
            "propertySelection": {"source": source, "propertyIds": property_ids or []},
            "emailList": "list_buyers",
            "emailTemplate": "tpl_single",
            "schedule": ScheduleMode.IMMEDIATE,
            "name": "New listing alert",
            "subject": "A new property just arrived",
        }
        config.update(overrides)
        return AutomationAction(config=SendCampaignConfig.model_validate(config))

    @classmethod
    def make_definition(
        cls,
        trigger_kind: Any = TriggerKind.PROPERTY_UPLOADED,
        trigger_config: Optional[Dict[str, Any]] = None,
        conditions: Optional[List[AutomationCondition]] = None,
        action: Optional[AutomationAction] = None,
        name: str = "Listing automation",
    ) -> AutomationDefinition:
        if conditions is None:
            conditions = [cls.make_buyer_condition()]
        return AutomationDefinition(
            automation_id=cls.make_id(),
            name=name,
            trigger=cls.make_trigger(trigger_kind, **(trigger_config or {})),
            conditions=conditions,
            action=action or cls.make_action(),
        )

    @classmethod
    def make_time_based_definition(cls, **action_overrides) -> AutomationDefinition:
        """Valid weekly multi-property automation filtered by city"""
        action_overrides.setdefault("emailTemplate", "tpl_multi")
        return cls.make_definition(
            trigger_kind=TriggerKind.TIME_BASED,
            trigger_config={"schedule": "weekly"},
            conditions=[cls.make_condition(), cls.make_buyer_condition()],
            action=cls.make_action(
                CampaignType.MULTI_PROPERTY,
                PropertySelectionSource.CONDITION,
                **action_overrides,
            ),
        )

    @staticmethod
    def make_plan(
        plan_number: int,
        monthly_payment: Optional[float] = 500.0,
        down_payment: Optional[float] = 5000.0,
        interest_rate: Optional[float] = 9.9,
        loan_amount: Optional[float] = 45000.0,
        is_available: bool = True,
    ) -> FinancingPlan:
        return FinancingPlan(
            plan_number=plan_number,
            monthly_payment=monthly_payment,
            down_payment=down_payment,
            interest_rate=interest_rate,
            loan_amount=loan_amount,
            is_available=is_available,
        )

    @classmethod
    def make_plans(cls, numbers: List[int]) -> List[FinancingPlan]:
        return [cls.make_plan(n) for n in numbers]

    @staticmethod
    def make_property_payload(
        property_id: str = "prop_1",
        plans: int = 2,
        images: int = 3,
        plan_three_monthly: Optional[float] = 350.0,
    ) -> Dict[str, Any]:
        """Property document as served by the property service"""
        payload: Dict[str, Any] = {
            "id": property_id,
            "imageUrls": [f"https://cdn.example.com/{property_id}/{i}.jpg" for i in range(images)],
            "financing": "Not-Available",
            "financingTwo": "Not-Available",
            "financingThree": "Not-Available",
        }
        if plans >= 1:
            payload.update({
                "financing": "Available",
                "downPaymentOne": 5000,
                "loanAmountOne": 45000,
                "interestOne": 9.9,
                "monthlyPaymentOne": 512.5,
            })
        if plans >= 2:
            payload.update({
                "financingTwo": "Available",
                "downPaymentTwo": 2500,
                "loanAmountTwo": 47500,
                "interestTwo": 11.9,
                "monthlyPaymentTwo": 601.0,
            })
        if plans >= 3:
            payload.update({
                "financingThree": "Available",
                "interestThree": 12.9,
                "monthlyPaymentThree": plan_three_monthly,
            })
        return payload

    @staticmethod
    def make_slots(default_indices: List[int]) -> List[ImageSlot]:
        return [
            ImageSlot(id=f"slot_{i}", name=f"Image {i + 1}", order=i, default_image_index=idx)
            for i, idx in enumerate(default_indices)
        ]

    @staticmethod
    def make_images(count: int) -> List[str]:
        return [f"https://cdn.example.com/img_{i}.jpg" for i in range(count)]

    @classmethod
    def make_template(
        cls,
        template_id: str = "tpl_single",
        template_type: TemplateType = TemplateType.SINGLE,
        slot_defaults: Optional[List[int]] = None,
    ) -> EmailTemplate:
        return EmailTemplate(
            id=template_id,
            name=template_id,
            template_type=template_type,
            image_slots=cls.make_slots(slot_defaults if slot_defaults is not None else [0, 1]),
        )

    @classmethod
    def make_templates(cls) -> Dict[str, EmailTemplate]:
        return {
            "tpl_single": cls.make_template("tpl_single", TemplateType.SINGLE),
            "tpl_multi": cls.make_template("tpl_multi", TemplateType.MULTI),
        }

    @staticmethod
    def make_image_selection(image_index: int, order: int = 0) -> ImageSelection:
        return ImageSelection(image_index=image_index, order=order)

    @classmethod
    def make_execution(
        cls,
        status: ExecutionStatus = ExecutionStatus.RUNNING,
        **overrides,
    ) -> ExecutionRecord:
        terminal = status in (ExecutionStatus.COMPLETED, ExecutionStatus.FAILED)
        data = {
            "execution_id": cls.make_id("exe"),
            "workflow_id": cls.make_id("wf"),
            "contact_id": cls.make_id("ct"),
            "status": status,
            "started_at": datetime.now(timezone.utc),
            "completed_at": datetime.now(timezone.utc) if terminal else None,
        }
        data.update(overrides)
        return ExecutionRecord(**data)


__all__ = [
    "AutomationTestDataFactory",
    "AutomationAction",
    "AutomationCondition",
    "AutomationDefinition",
    "AutomationTrigger",
    "CampaignType",
    "ConditionCategory",
    "ConditionOperator",
    "EmailTemplate",
    "ExecutionRecord",
    "ExecutionStatus",
    "FinancingPlan",
    "ImageSelection",
    "ImageSlot",
    "PlanStrategy",
    "PropertySelectionSource",
    "ScheduleMode",
    "SendCampaignConfig",
    "TemplateType",
    "TriggerKind",
]
