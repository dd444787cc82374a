"""Scheduling rules for health events.

Pure date/time validation, double-booking detection and the document slot
merge policy used by the event lifecycle service.
"""

from .file_slots import FileSlotConflict, ReconcileOutcome, parse_attachments, reconcile_files
from .overlap import ensure_no_overlap, find_overlapping_events, times_overlap
from .time_validator import TimeValidationResult, normalize_event_date, validate_event_datetime

__all__ = [
    # Time validation
    "TimeValidationResult",
    "validate_event_datetime",
    "normalize_event_date",
    # Overlap detection
    "times_overlap",
    "find_overlapping_events",
    "ensure_no_overlap",
    # File slots
    "FileSlotConflict",
    "ReconcileOutcome",
    "parse_attachments",
    "reconcile_files",
]
