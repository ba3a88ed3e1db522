"""
Automation Service Business Logic

Validates automation documents, resolves a send_campaign action into a
per-property campaign payload (plan selection, image slots, readiness) and
persists execution records on behalf of the workflow interpreter.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .action_validator import TemplateCatalog, validate_automation
from .execution_record import (
    advance_to_node,
    complete_execution,
    fail_execution,
    pause_execution,
    record_node_error,
    record_node_result,
    resume_execution,
    start_execution,
)
from .models import (
    AutomationDefinition,
    EmailTemplate,
    ExecutionRecord,
    ExecutionStatus,
    ImageSelection,
    IssueSeverity,
    PlanSelection,
    ResolvedCampaign,
    ResolvedProperty,
    ValidationIssue,
    ValidationResult,
)
from .plan_selector import (
    is_ready_to_send,
    plans_from_property_data,
    select_plan,
    validate_payment_options,
)
from .protocols import (
    AutomationValidationError,
    ExecutionNotFoundError,
    ExecutionRepositoryProtocol,
    PropertyDataError,
    PropertyDataSourceProtocol,
)
from .slot_assigner import assign_slots, parse_image_urls, selection_in_range

logger = logging.getLogger(__name__)


class AutomationService:
    """Automation service business logic layer"""

    DEFAULT_MAX_FETCH_CONCURRENCY = 5
    IMAGE_FIELD = "imageUrls"

    def __init__(
        self,
        property_source: Optional[PropertyDataSourceProtocol] = None,
        execution_repository: Optional[ExecutionRepositoryProtocol] = None,
        max_fetch_concurrency: int = DEFAULT_MAX_FETCH_CONCURRENCY,
        image_base_url: Optional[str] = None,
    ):
        self.property_source = property_source
        self.execution_repository = execution_repository
        self.max_fetch_concurrency = max(1, max_fetch_concurrency)
        self.image_base_url = image_base_url

    # ====================
    # Validation
    # ====================

    def validate_automation(
        self,
        definition: AutomationDefinition,
        templates: TemplateCatalog = None,
    ) -> ValidationResult:
        return validate_automation(definition, templates)

    def require_valid(
        self,
        definition: AutomationDefinition,
        templates: TemplateCatalog = None,
    ) -> ValidationResult:
        """
        Validate and raise on the first error.

        Raises:
            AutomationValidationError: carrying every error issue
        """
        result = validate_automation(definition, templates)
        if not result.is_valid:
            first = result.errors[0]
            raise AutomationValidationError(first.message, field=first.field, issues=result.errors)
        return result

    # ====================
    # Property data
    # ====================

    async def fetch_property_data(
        self,
        property_ids: Sequence[str],
    ) -> Dict[str, Optional[Dict[str, Any]]]:
        """
        Fetch property documents concurrently.

        At most max_fetch_concurrency requests are in flight. A property whose
        fetch fails maps to None; the batch itself never fails.
        """
        if self.property_source is None:
            raise RuntimeError("No property data source configured")

        semaphore = asyncio.Semaphore(self.max_fetch_concurrency)
        unique_ids = list(dict.fromkeys(property_ids))

        async def fetch(property_id: str) -> Optional[Dict[str, Any]]:
            async with semaphore:
                try:
                    return await self.property_source.get_property(property_id)
                except PropertyDataError as e:
                    logger.warning(f"Property data unavailable for {property_id}: {e}")
                    return None
                except Exception as e:
                    logger.error(f"Error fetching property {property_id}: {e}")
                    return None

        results = await asyncio.gather(*(fetch(pid) for pid in unique_ids))
        fetched = dict(zip(unique_ids, results))
        failed = sum(1 for v in results if v is None)
        logger.info(f"Fetched {len(unique_ids) - failed}/{len(unique_ids)} properties")
        return fetched

    # ====================
    # Campaign resolution
    # ====================

    async def resolve_campaign(
        self,
        definition: AutomationDefinition,
        property_ids: Sequence[str],
        template: Optional[EmailTemplate] = None,
    ) -> ResolvedCampaign:
        """
        Materialize the send_campaign payload for the target properties.

        Args:
            definition: Automation whose action is resolved
            property_ids: Target properties, as chosen by the selection source
            template: Template providing the image slots

        Returns:
            ResolvedCampaign with per-property plan, images and readiness

        Raises:
            AutomationValidationError: if the definition does not validate
        """
        self.require_valid(definition)
        config = definition.action.config
        documents = await self.fetch_property_data(property_ids)
        slots = list(template.image_slots) if template else []

        issues: List[ValidationIssue] = []
        properties: List[ResolvedProperty] = []
        selections: Dict[str, PlanSelection] = {}

        for property_id, data in documents.items():
            images = parse_image_urls((data or {}).get(self.IMAGE_FIELD), self.image_base_url)
            plans = plans_from_property_data(data)

            selection = None
            if config.financing_enabled:
                selection = select_plan(
                    plans, config.plan_strategy, property_id, config.custom_plan_selections,
                )
                selections[property_id] = selection

            current = self._usable_image_selections(
                property_id, config.image_selections, images, issues,
            )
            assignment = assign_slots(slots, images, current)
            if assignment.missing_slot_count:
                issues.append(ValidationIssue(
                    code="MISSING_PROPERTY_IMAGES",
                    message=(
                        f"Property {property_id} has {len(images)} image(s) for "
                        f"{len(slots)} slot(s); {assignment.missing_slot_count} slot(s) will be hidden."
                    ),
                    field=f"properties.{property_id}.images",
                    severity=IssueSeverity.WARNING,
                ))
            if data is None:
                issues.append(ValidationIssue(
                    code="PROPERTY_DATA_UNAVAILABLE",
                    message=f"Property {property_id} could not be loaded; it has no financing data.",
                    field=f"properties.{property_id}",
                    severity=IssueSeverity.WARNING,
                ))

            properties.append(ResolvedProperty(
                property_id=property_id,
                image_urls=images,
                plan=selection.plan if selection else None,
                pending_manual_input=selection.pending_manual_input if selection else False,
                financing_eligible=bool(selection and selection.plan is not None),
                image_selections=assignment.selections,
                missing_slot_count=assignment.missing_slot_count,
                data_available=data is not None,
            ))

        financed_ids = [p.property_id for p in properties if p.financing_eligible]
        issues.extend(validate_payment_options(
            config.financing_enabled, config.plan_strategy, selections, financed_ids,
        ))
        ready = is_ready_to_send(config.financing_enabled, selections, financed_ids)

        logger.info(
            f"Resolved {config.campaign_type.value} campaign for "
            f"{len(properties)} properties (ready={ready})"
        )
        return ResolvedCampaign(
            campaign_type=config.campaign_type,
            financing_enabled=config.financing_enabled,
            plan_strategy=config.plan_strategy,
            properties=properties,
            ready_to_send=ready,
            issues=issues,
        )

    @staticmethod
    def _usable_image_selections(
        property_id: str,
        requested: Dict[str, ImageSelection],
        images: List[str],
        issues: List[ValidationIssue],
    ) -> Dict[str, ImageSelection]:
        usable = {}
        for slot_id, selection in requested.items():
            if selection_in_range(selection, images):
                usable[slot_id] = selection
                continue
            issues.append(ValidationIssue(
                code="IMAGE_SELECTION_OUT_OF_RANGE",
                message=(
                    f"Image {selection.image_index} is not available for property "
                    f"{property_id}; the slot default is used instead."
                ),
                field=f"imageSelections.{slot_id}.imageIndex",
                severity=IssueSeverity.WARNING,
            ))
        return usable

    # ====================
    # Execution records
    # ====================

    def _require_repository(self) -> ExecutionRepositoryProtocol:
        if self.execution_repository is None:
            raise RuntimeError("No execution repository configured")
        return self.execution_repository

    async def get_execution(self, execution_id: str) -> ExecutionRecord:
        record = await self._require_repository().get_execution(execution_id)
        if record is None:
            raise ExecutionNotFoundError(f"Execution not found: {execution_id}")
        return record

    async def list_executions(
        self,
        workflow_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        status: Optional[Iterable[ExecutionStatus]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ExecutionRecord]:
        return await self._require_repository().list_executions(
            workflow_id=workflow_id,
            contact_id=contact_id,
            status=list(status) if status else None,
            limit=limit,
            offset=offset,
        )

    async def start_execution(
        self,
        workflow_id: str,
        contact_id: str,
        start_node_id: Optional[str] = None,
    ) -> ExecutionRecord:
        record = start_execution(workflow_id, contact_id, start_node_id)
        saved = await self._require_repository().save_execution(record)
        logger.info(f"Execution {saved.execution_id} started for contact {contact_id}")
        return saved

    async def _mutate(self, execution_id: str, mutate) -> ExecutionRecord:
        record = await self.get_execution(execution_id)
        updated = mutate(record)
        return await self._require_repository().save_execution(updated)

    async def advance_execution(self, execution_id: str, node_id: str) -> ExecutionRecord:
        return await self._mutate(execution_id, lambda r: advance_to_node(r, node_id))

    async def record_node_result(self, execution_id: str, node_id: str, result: Any) -> ExecutionRecord:
        return await self._mutate(execution_id, lambda r: record_node_result(r, node_id, result))

    async def record_node_error(self, execution_id: str, node_id: str, message: str) -> ExecutionRecord:
        updated = await self._mutate(execution_id, lambda r: record_node_error(r, node_id, message))
        logger.warning(f"Execution {execution_id} node {node_id} failed: {message}")
        return updated

    async def pause_execution(self, execution_id: str) -> ExecutionRecord:
        return await self._mutate(execution_id, pause_execution)

    async def resume_execution(self, execution_id: str) -> ExecutionRecord:
        return await self._mutate(execution_id, resume_execution)

    async def complete_execution(self, execution_id: str, at: Optional[datetime] = None) -> ExecutionRecord:
        updated = await self._mutate(execution_id, lambda r: complete_execution(r, at))
        logger.info(f"Execution {execution_id} completed")
        return updated

    async def fail_execution(self, execution_id: str, at: Optional[datetime] = None) -> ExecutionRecord:
        updated = await self._mutate(execution_id, lambda r: fail_execution(r, at))
        logger.info(f"Execution {execution_id} failed with {len(updated.errors)} node error(s)")
        return updated
