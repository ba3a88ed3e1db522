"""
Creative Slot Assigner

Maps a template's image slots onto a property's ordered image list.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import ImageSelection, ImageSlot, SlotAssignment
from .protocols import ImageSelectionError

logger = logging.getLogger(__name__)

PROPERTY_IMAGE_COMPONENT = "property-image"


def parse_image_urls(raw: Any, base_url: Optional[str] = None) -> List[str]:
    """
    Normalize a property's image list.

    Accepts a list or a JSON-encoded list; anything else yields []. Relative
    paths are joined onto base_url when one is given.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.debug("Image list is not valid JSON, ignoring")
            return []

    if not isinstance(raw, list):
        return []

    urls = []
    for item in raw:
        if not isinstance(item, str) or not item:
            continue
        if base_url and not item.startswith(("http://", "https://")):
            item = f"{base_url.rstrip('/')}/{item.lstrip('/')}"
        urls.append(item)
    return urls


def image_slots_from_components(components: Iterable[Mapping[str, Any]]) -> List[ImageSlot]:
    """Image slots declared by template components, in component order"""
    slots = []
    for index, component in enumerate(components or []):
        if component.get("type") != PROPERTY_IMAGE_COMPONENT:
            continue
        props = component.get("props") or {}
        default_index = props.get("imageIndex")
        if not isinstance(default_index, int) or isinstance(default_index, bool) or default_index < 0:
            default_index = 0
        order = component.get("order")
        slots.append(
            ImageSlot(
                id=str(component.get("id") or f"image-slot-{index}"),
                name=component.get("name") or "Property Image",
                order=order if isinstance(order, int) else index,
                default_image_index=default_index,
            )
        )
    # sorted() is stable, so equal orders keep declaration order
    return sorted(slots, key=lambda slot: slot.order)


def assign_slots(
    slots: List[ImageSlot],
    images: List[str],
    current_selections: Optional[Mapping[str, ImageSelection]] = None,
) -> SlotAssignment:
    """
    Seed default selections for the renderable slots.

    Slots beyond min(len(slots), len(images)) are dropped and counted in
    missing_slot_count. Existing selections for renderable slots are kept as
    they are; selections for dropped slots are not carried over.
    """
    current = dict(current_selections or {})
    renderable_count = min(len(slots), len(images))
    renderable = list(slots[:renderable_count])

    selections: Dict[str, ImageSelection] = {}
    for slot in renderable:
        if slot.id in current:
            selections[slot.id] = current[slot.id]
            continue
        index = slot.default_image_index
        if index >= len(images):
            index = 0
        selections[slot.id] = ImageSelection(
            image_index=index,
            order=slot.order,
            name=slot.name,
        )

    missing = len(slots) - renderable_count
    if missing:
        logger.debug(f"{missing} image slot(s) have no image available")

    return SlotAssignment(
        renderable_slots=renderable,
        selections=selections,
        missing_slot_count=missing,
    )


def select_slot_image(
    assignment: SlotAssignment,
    slot_id: str,
    image_index: int,
    images: List[str],
) -> SlotAssignment:
    """
    Record a user's image choice for a slot.

    Raises:
        ImageSelectionError: slot not renderable or index outside the image list
    """
    slot = next((s for s in assignment.renderable_slots if s.id == slot_id), None)
    if slot is None:
        raise ImageSelectionError(
            f"Image slot {slot_id} is not renderable for this property",
            field=f"imageSelections.{slot_id}",
        )
    if not 0 <= image_index < len(images):
        raise ImageSelectionError(
            f"Image index {image_index} out of range (0-{len(images) - 1})",
            field=f"imageSelections.{slot_id}.imageIndex",
        )

    selections = dict(assignment.selections)
    selections[slot_id] = ImageSelection(image_index=image_index, order=slot.order, name=slot.name)
    return assignment.model_copy(update={"selections": selections})


def selection_in_range(selection: ImageSelection, images: List[str]) -> bool:
    return 0 <= selection.image_index < len(images)


__all__ = [
    "PROPERTY_IMAGE_COMPONENT",
    "parse_image_urls",
    "image_slots_from_components",
    "assign_slots",
    "select_slot_image",
    "selection_in_range",
]
