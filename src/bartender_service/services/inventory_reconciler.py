"""Apply inventory deductions embedded in a chat reply.

The model is instructed to append ``[INVENTORY_UPDATE]`` followed by a JSON
object like ``{"updates": [{"name": "Whiskey", "subtract": 60}]}`` once the
user confirms they made a drink. This module finds that directive, removes it
from the text shown to the user and applies the deductions. A malformed
directive is logged and ignored so the chat reply is always delivered.
"""

import json
import logging
from dataclasses import dataclass

from pydantic import BaseModel, Field, ValidationError

from bartender_service.models.inventory_models import InventoryItem, format_amount, parse_amount
from bartender_service.observability.metrics import record_reconciliation
from bartender_service.services.menu_rules import names_match

logger = logging.getLogger(__name__)

UPDATE_MARKER = "[INVENTORY_UPDATE]"
MAX_DIRECTIVE_DEPTH = 8


class InventoryUpdate(BaseModel):
    """One deduction named by the model."""

    name: str
    subtract: float = 0


class InventoryUpdateDirective(BaseModel):
    """The JSON object following the marker."""

    updates: list[InventoryUpdate] = Field(default_factory=list)


@dataclass
class ReconciliationResult:
    """Outcome of reconciling one reply.

    Attributes:
        response_text: Reply with the directive removed (unchanged when none applied)
        inventory: Inventory after deductions, same order and length as the input
        changed: Whether any item's remaining amount was modified
    """

    response_text: str
    inventory: list[InventoryItem]
    changed: bool = False


def find_json_object(text: str, start: int, max_depth: int = MAX_DIRECTIVE_DEPTH) -> tuple[int, int] | None:
    """Locate the balanced JSON object beginning at the first ``{`` at or after ``start``.

    Braces inside JSON strings are ignored. Only whitespace may precede the
    opening brace.

    Returns:
        (begin, end) slice bounds of the object, or None if there is no
        balanced object or it nests deeper than ``max_depth``
    """
    begin = start
    while begin < len(text) and text[begin].isspace():
        begin += 1
    if begin >= len(text) or text[begin] != "{":
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(begin, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
            if depth > max_depth:
                return None
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return begin, index + 1
            if depth < 0:
                return None

    return None


def apply_updates(
    inventory: list[InventoryItem], updates: list[InventoryUpdate]
) -> tuple[list[InventoryItem], bool]:
    """Deduct amounts from matching items.

    Each item takes the first update whose name matches it (see
    ``names_match``). Amounts never drop below zero.

    Returns:
        (new inventory, whether any item changed)
    """
    result: list[InventoryItem] = []
    changed = False
    for item in inventory:
        update = next((u for u in updates if names_match(item.name, u.name)), None)
        if update is None or update.subtract <= 0:
            result.append(item)
            continue

        before = parse_amount(item.amount_remaining)
        after = max(0.0, before - update.subtract)
        new_amount = format_amount(after)
        if new_amount != item.amount_remaining:
            changed = True
        result.append(item.model_copy(update={"amount_remaining": new_amount}))
        logger.info(f"Deducted {update.subtract} from '{item.name}': {before} -> {new_amount}")

    return result, changed


class InventoryReconciler:
    """Parses update directives out of model replies and applies them."""

    def __init__(self, marker: str = UPDATE_MARKER, max_depth: int = MAX_DIRECTIVE_DEPTH) -> None:
        self.marker = marker
        self.max_depth = max_depth

    def reconcile(self, response_text: str, inventory: list[InventoryItem]) -> ReconciliationResult:
        """Strip and apply the update directive in ``response_text``, if any.

        Args:
            response_text: Raw reply from the model
            inventory: Current inventory

        Returns:
            ReconciliationResult; without a valid directive the text and
            inventory are returned unchanged
        """
        marker_index = response_text.find(self.marker)
        if marker_index == -1:
            return ReconciliationResult(response_text=response_text, inventory=list(inventory))

        bounds = find_json_object(response_text, marker_index + len(self.marker), self.max_depth)
        if bounds is None:
            logger.error("Inventory update marker found without a balanced JSON object")
            record_reconciliation("malformed")
            return ReconciliationResult(response_text=response_text, inventory=list(inventory))

        begin, end = bounds
        try:
            directive = InventoryUpdateDirective.model_validate(json.loads(response_text[begin:end]))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Error parsing inventory update: {e}")
            record_reconciliation("malformed")
            return ReconciliationResult(response_text=response_text, inventory=list(inventory))

        visible_text = (response_text[:marker_index] + response_text[end:]).strip()
        updated, changed = apply_updates(inventory, directive.updates)
        record_reconciliation("applied" if changed else "no_match")

        return ReconciliationResult(response_text=visible_text, inventory=updated, changed=changed)
