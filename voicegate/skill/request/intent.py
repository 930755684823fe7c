"""Intent name and slot extraction.

Slot definitions arrive either as a list of ``{"name": ..., "value": ...}``
objects or as an object keyed by slot name whose members have the same
shape (the platform's wire form). Both are handled identically.
"""

from typing import Any, Dict, Iterable, Tuple

from ..exceptions import ValidationError
from ..sanitizer import Sanitizer

KEY_INTENT_NAME = "name"
KEY_INTENT_SLOTS = "slots"
KEY_SLOT_NAME = "name"
KEY_SLOT_VALUE = "value"


def extract_intent(intent: Any, sanitizer: Sanitizer) -> Tuple[str, Dict[str, str]]:
    """Extract the intent name and sanitized slot values.

    Args:
        intent: The decoded ``request.intent`` object (None if absent).
        sanitizer: Sanitizer applied to the intent name, slot names and values.

    Returns:
        Tuple of (intent_name, slots).

    Raises:
        ValidationError: MISSING_INTENT_NAME if the name is absent or blank,
            MISSING_SLOTS if the slots collection is absent.
    """
    if not isinstance(intent, dict):
        raise ValidationError.missing_intent_name()

    name = intent.get(KEY_INTENT_NAME)
    if name is None:
        raise ValidationError.missing_intent_name()
    if not isinstance(name, str):
        raise ValidationError.type_mismatch("request.intent.name", "a string", name)

    intent_name = sanitizer.sanitize(name)
    if not intent_name.strip():
        raise ValidationError.missing_intent_name()

    return intent_name, extract_slots(intent.get(KEY_INTENT_SLOTS), sanitizer)


def extract_slots(slots: Any, sanitizer: Sanitizer) -> Dict[str, str]:
    """Build the slot name → value mapping.

    Definitions without a value are omitted. Duplicate names are not
    detected: the last definition wins.

    Raises:
        ValidationError: MISSING_SLOTS if ``slots`` is None.
    """
    if slots is None:
        raise ValidationError.missing_slots()

    result: Dict[str, str] = {}
    for definition in _definitions(slots):
        if not isinstance(definition, dict):
            raise ValidationError.type_mismatch("request.intent.slots[]", "an object", definition)
        attach_slot(result, definition, sanitizer)
    return result


def attach_slot(slots: Dict[str, str], definition: dict, sanitizer: Sanitizer) -> None:
    """Add one slot definition to ``slots`` if it carries a value."""
    value = definition.get(KEY_SLOT_VALUE)
    if value is None:
        return

    name = definition.get(KEY_SLOT_NAME)
    if name is None:
        raise ValidationError.missing_field("request.intent.slots[].name")
    if not isinstance(name, str):
        raise ValidationError.type_mismatch("request.intent.slots[].name", "a string", name)

    slot_name = sanitizer.sanitize(name)
    slots[slot_name] = sanitizer.sanitize(_as_text(value))


def _definitions(slots: Any) -> Iterable[Any]:
    if isinstance(slots, dict):
        return slots.values()
    if isinstance(slots, list):
        return slots
    raise ValidationError.type_mismatch("request.intent.slots", "an array or object", slots)


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValidationError.type_mismatch("request.intent.slots[].value", "a string", value)
