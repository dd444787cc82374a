"""Merge policy for the documents attached to an event.

An event holds at most one document per slot. Incoming documents replace the
document in their slot and leave every other slot untouched. Replacing a
document in a protected slot (the clinical result) needs explicit overwrite
confirmation; without it the whole merge is refused so a result is never
clobbered silently.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from health_api.constants import DEFAULT_FILE_SLOTS, PROTECTED_FILE_SLOTS
from health_api.exceptions import ValidationError
from health_api.models.base_model import FileAttachment

RESULT_OVERWRITE_PROMPT = "A result document already exists for this event. Overwrite?"


class FileSlotConflict(BaseModel):
    """Merge refused because a protected slot is occupied and overwrite was not confirmed."""

    slot: str
    message: str = RESULT_OVERWRITE_PROMPT


class ReconcileOutcome(BaseModel):
    """Result of a merge: either the merged list or the conflict that stopped it."""

    files: list[FileAttachment] = Field(default_factory=list)
    conflict: FileSlotConflict | None = None

    @property
    def has_conflict(self) -> bool:
        return self.conflict is not None


def parse_attachments(
    entries: Iterable[Mapping[str, Any] | FileAttachment] | None,
    allowed_slots: Sequence[str] = DEFAULT_FILE_SLOTS,
) -> list[FileAttachment]:
    """Validate raw attachment entries.

    Args:
        entries: Raw dictionaries (camelCase or snake_case keys) or attachments
        allowed_slots: Slot names an event may hold

    Returns:
        Attachments in input order

    Raises:
        ValidationError: If an entry lacks slot/name/url or names an unknown slot
    """
    attachments: list[FileAttachment] = []
    errors: dict[str, str] = {}

    for index, entry in enumerate(entries or []):
        try:
            attachment = entry if isinstance(entry, FileAttachment) else FileAttachment.model_validate(entry)
        except PydanticValidationError as e:
            missing = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
            errors[f"files[{index}]"] = f"Attachment {index} is missing or has invalid fields: {', '.join(missing)}."
            continue
        if attachment.slot not in allowed_slots:
            errors[f"files[{index}]"] = f"Unknown document slot '{attachment.slot}'."
            continue
        attachments.append(attachment)

    if errors:
        raise ValidationError.from_errors(errors)
    return attachments


def latest_per_slot(attachments: Iterable[FileAttachment]) -> dict[str, FileAttachment]:
    """Keep one attachment per slot; later entries win, first-seen slot order is kept."""
    by_slot: dict[str, FileAttachment] = {}
    for attachment in attachments:
        by_slot[attachment.slot] = attachment
    return by_slot


def reconcile_files(
    current: Iterable[Mapping[str, Any] | FileAttachment],
    incoming: Iterable[Mapping[str, Any] | FileAttachment],
    overwrite: bool = False,
    allowed_slots: Sequence[str] = DEFAULT_FILE_SLOTS,
    protected_slots: Sequence[str] = PROTECTED_FILE_SLOTS,
) -> ReconcileOutcome:
    """Merge incoming attachments into an event's current attachment list.

    Args:
        current: Attachments the event holds now
        incoming: New or replacement attachments
        overwrite: Caller confirmed replacing documents in protected slots
        allowed_slots: Slot names an event may hold
        protected_slots: Slots that need overwrite confirmation when occupied

    Returns:
        ReconcileOutcome with the merged list, or with a conflict and the
        current list untouched

    Raises:
        ValidationError: If an incoming entry is malformed
    """
    existing = [FileAttachment.model_validate(entry) for entry in current]
    replacements = latest_per_slot(parse_attachments(incoming, allowed_slots))

    if not overwrite:
        occupied = {attachment.slot for attachment in existing}
        for slot in protected_slots:
            if slot in occupied and slot in replacements:
                return ReconcileOutcome(files=existing, conflict=FileSlotConflict(slot=slot))

    merged = [attachment for attachment in existing if attachment.slot not in replacements]
    merged.extend(replacements.values())
    return ReconcileOutcome(files=merged)
