"""Tests for the document slot merge policy."""

import pytest

from health_api.exceptions import ValidationError
from health_api.scheduling.file_slots import (
    RESULT_OVERWRITE_PROMPT,
    latest_per_slot,
    parse_attachments,
    reconcile_files,
)

REQUEST = {"slot": "request", "name": "pedido.pdf", "url": "/uploads/e1/request-pedido.pdf"}
INVOICE = {"slot": "invoice", "name": "nota.pdf", "url": "/uploads/e1/invoice-nota.pdf"}
RESULT = {"slot": "result", "name": "laudo.pdf", "url": "/uploads/e1/result-laudo.pdf", "uploadDate": "2025-03-10"}
NEW_RESULT = {"slot": "result", "name": "laudo-v2.pdf", "url": "/uploads/e1/result-laudo-v2.pdf"}


def _slots(files):
    return [(attachment.slot, attachment.name) for attachment in files]


class TestParseAttachments:
    def test_accepts_camel_and_snake_case(self):
        attachments = parse_attachments([RESULT, {"slot": "invoice", "name": "n.pdf", "url": "/u", "upload_date": "2025-01-01"}])
        assert attachments[0].upload_date == "2025-03-10"
        assert attachments[1].upload_date == "2025-01-01"

    def test_missing_fields_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_attachments([REQUEST, {"slot": "result", "name": "laudo.pdf"}])
        assert list(exc_info.value.errors) == ["files[1]"]
        assert "url" in exc_info.value.errors["files[1]"]

    def test_unknown_slot_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_attachments([{"slot": "xray", "name": "a.png", "url": "/u/a.png"}])
        assert exc_info.value.errors == {"files[0]": "Unknown document slot 'xray'."}

    def test_none_is_empty(self):
        assert parse_attachments(None) == []


def test_latest_per_slot_last_entry_wins():
    by_slot = latest_per_slot(parse_attachments([RESULT, INVOICE, NEW_RESULT]))
    assert list(by_slot) == ["result", "invoice"]
    assert by_slot["result"].name == "laudo-v2.pdf"


class TestReconcileFiles:
    def test_untouched_slots_keep_position(self):
        outcome = reconcile_files([REQUEST, INVOICE], [{"slot": "request", "name": "pedido2.pdf", "url": "/u/p2"}])
        assert outcome.conflict is None
        assert _slots(outcome.files) == [("invoice", "nota.pdf"), ("request", "pedido2.pdf")]

    def test_idempotent_for_non_result_slots(self):
        first = reconcile_files([REQUEST], [INVOICE])
        second = reconcile_files(first.files, [INVOICE])
        assert _slots(second.files) == _slots(first.files)

    def test_result_added_to_empty_slot_without_confirmation(self):
        outcome = reconcile_files([REQUEST], [RESULT])
        assert not outcome.has_conflict
        assert _slots(outcome.files) == [("request", "pedido.pdf"), ("result", "laudo.pdf")]

    def test_occupied_result_without_overwrite_is_a_conflict(self):
        outcome = reconcile_files([REQUEST, RESULT], [NEW_RESULT, INVOICE])
        assert outcome.has_conflict
        assert outcome.conflict.slot == "result"
        assert outcome.conflict.message == RESULT_OVERWRITE_PROMPT
        assert _slots(outcome.files) == [("request", "pedido.pdf"), ("result", "laudo.pdf")]

    def test_occupied_result_with_overwrite_replaces_only_result(self):
        outcome = reconcile_files([REQUEST, RESULT, INVOICE], [NEW_RESULT], overwrite=True)
        assert outcome.conflict is None
        assert _slots(outcome.files) == [("request", "pedido.pdf"), ("invoice", "nota.pdf"), ("result", "laudo-v2.pdf")]

    def test_malformed_incoming_rejected_before_merge(self):
        with pytest.raises(ValidationError):
            reconcile_files([REQUEST], [{"slot": "invoice"}])

    def test_custom_protected_slots(self):
        outcome = reconcile_files([INVOICE], [INVOICE], protected_slots=("invoice",))
        assert outcome.conflict.slot == "invoice"
