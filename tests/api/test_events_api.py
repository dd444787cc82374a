"""Tests for the events REST API."""

import pytest


@pytest.fixture
def created(client, user, event_input) -> dict:
    response = client.post(
        f"/api/events?userId={user.id}",
        json=event_input(
            files=[
                {"slot": "request", "name": "pedido.pdf", "url": "/uploads/x/request-pedido.pdf"},
                {"slot": "result", "name": "laudo.pdf", "url": "/uploads/x/result-laudo.pdf"},
            ]
        ),
    )
    assert response.status_code == 201, response.text
    return response.json()


def _update_body(event: dict, **overrides) -> dict:
    body = {key: event[key] for key in ("id", "title", "date", "type", "startTime", "endTime", "professionalId", "files")}
    body.update(overrides)
    return body


class TestCreate:
    def test_returns_camel_case_event(self, created, user):
        assert created["userId"] == str(user.id)
        assert created["startTime"] == "09:00"
        assert [entry["slot"] for entry in created["files"]] == ["request", "result"]

    def test_missing_fields_is_400_with_field_map(self, client, user):
        response = client.post(f"/api/events?userId={user.id}", json={"title": "Consulta"})
        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"date", "type", "start_time", "end_time", "professional_id"}

    def test_invalid_date_is_400(self, client, user, event_input):
        response = client.post(f"/api/events?userId={user.id}", json=event_input(date="2025-02-30"))
        assert response.status_code == 400
        assert response.json()["errors"] == {"date": "Invalid date."}

    def test_consultation_then_overlapping_return_is_409(self, client, user, event_input, created):
        response = client.post(
            f"/api/events?userId={user.id}",
            json=event_input(title="Retorno", startTime="09:15", endTime="09:45"),
        )
        assert response.status_code == 409
        assert "already" in response.json()["error"].lower()
        assert len(client.get(f"/api/events?userId={user.id}").json()) == 1

    def test_unknown_notification_is_404_and_nothing_saved(self, client, user, event_input, unknown_id):
        response = client.post(f"/api/events?userId={user.id}", json=event_input(notificationId=unknown_id))
        assert response.status_code == 404
        assert client.get(f"/api/events?userId={user.id}").json() == []


def test_list_is_not_cached(client, user, created):
    response = client.get(f"/api/events?userId={user.id}")
    assert response.status_code == 200
    assert "no-store" in response.headers["cache-control"]
    assert [event["id"] for event in response.json()] == [created["id"]]


def test_get_unknown_event_is_404(client, unknown_id):
    response = client.get(f"/api/events/{unknown_id}")
    assert response.status_code == 404
    assert "error" in response.json()


class TestUpdate:
    def test_plain_update(self, client, created):
        response = client.put("/api/events", json=_update_body(created, title="Retorno"))
        assert response.status_code == 200
        assert response.json()["title"] == "Retorno"

    def test_result_conflict_requires_confirmation(self, client, created, make_notification):
        notification = make_notification(
            {
                "kind": "lab_report",
                "doctorName": "Dra. Helena Costa",
                "examDate": "2025-03-10",
                "report": {"fileName": "laudo-v2.pdf", "fileContent": "JVBERi0xLjQ="},
            }
        )
        body = _update_body(
            created,
            notificationId=str(notification.id),
            files=[{"slot": "result", "name": "laudo-v2.pdf", "url": "/uploads/x/result-laudo-v2.pdf"}],
        )

        refused = client.put("/api/events", json=body)
        assert refused.status_code == 409
        assert "warning" in refused.json()
        unchanged = client.get(f"/api/events/{created['id']}").json()
        assert [entry["name"] for entry in unchanged["files"]] == ["pedido.pdf", "laudo.pdf"]

        confirmed = client.put("/api/events", json=body, headers={"X-Overwrite-Result": "true"})
        assert confirmed.status_code == 200
        assert [entry["name"] for entry in confirmed.json()["files"]] == ["pedido.pdf", "laudo-v2.pdf"]

    def test_unknown_professional_is_404(self, client, created, unknown_id):
        response = client.put("/api/events", json=_update_body(created, professionalId=unknown_id))
        assert response.status_code == 404
        assert client.get(f"/api/events/{created['id']}").json()["professionalId"] == created["professionalId"]

    @pytest.mark.parametrize("header", ["1", "yes", "TRUEISH"])
    def test_only_literal_true_confirms(self, client, created, make_notification, header):
        notification = make_notification(
            {
                "kind": "lab_report",
                "doctorName": "Dra. Helena Costa",
                "examDate": "2025-03-10",
                "report": {"fileName": "x.pdf", "fileContent": "JVBERi0xLjQ="},
            }
        )
        body = _update_body(
            created,
            notificationId=str(notification.id),
            files=[{"slot": "result", "name": "x.pdf", "url": "/uploads/x/result-x.pdf"}],
        )
        assert client.put("/api/events", json=body, headers={"X-Overwrite-Result": header}).status_code == 409


class TestDelete:
    def test_delete_with_missing_files_succeeds(self, client, created):
        response = client.request("DELETE", "/api/events", json={"id": created["id"], "deleteFiles": True})
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get(f"/api/events/{created['id']}").status_code == 404

    def test_delete_without_id_is_400(self, client):
        response = client.request("DELETE", "/api/events", json={})
        assert response.status_code == 400

    def test_delete_unknown_is_404(self, client, unknown_id):
        response = client.request("DELETE", "/api/events", json={"id": unknown_id})
        assert response.status_code == 404


class TestFileEndpoints:
    def test_upload_file_stores_without_attaching(self, client, storage, created):
        response = client.post(
            "/api/upload-file",
            data={"slot": "invoice", "eventId": created["id"]},
            files={"file": ("nota.pdf", b"nota", "application/pdf")},
        )
        assert response.status_code == 201
        attachment = response.json()
        assert attachment["url"] == f"/uploads/{created['id']}/invoice-nota.pdf"
        assert storage.exists(attachment["url"])
        event = client.get(f"/api/events/{created['id']}").json()
        assert "invoice" not in [entry["slot"] for entry in event["files"]]

    def test_upload_file_unknown_slot(self, client, created):
        response = client.post(
            "/api/upload-file",
            data={"slot": "xray", "eventId": created["id"]},
            files={"file": ("a.png", b"png", "image/png")},
        )
        assert response.status_code == 400

    def test_upload_file_unknown_event(self, client, unknown_id):
        response = client.post(
            "/api/upload-file",
            data={"slot": "invoice", "eventId": unknown_id},
            files={"file": ("nota.pdf", b"nota", "application/pdf")},
        )
        assert response.status_code == 404

    def test_attach_file_to_slot(self, client, storage, created):
        response = client.post(
            f"/api/events/{created['id']}/files",
            data={"slot": "prescription"},
            files={"file": ("receita.pdf", b"rx", "application/pdf")},
        )
        assert response.status_code == 201
        slots = {entry["slot"]: entry for entry in response.json()["files"]}
        assert storage.exists(slots["prescription"]["url"])

    def test_attach_to_filled_result_is_409(self, client, created):
        response = client.post(
            f"/api/events/{created['id']}/files",
            data={"slot": "result"},
            files={"file": ("novo.pdf", b"novo", "application/pdf")},
        )
        assert response.status_code == 409
        assert "warning" in response.json()

    def test_reupload_replaces_stored_document(self, client, storage, created):
        url = f"/api/events/{created['id']}/files"
        first = client.post(url, data={"slot": "invoice"}, files={"file": ("a.pdf", b"a", "application/pdf")})
        second = client.post(url, data={"slot": "invoice"}, files={"file": ("b.pdf", b"b", "application/pdf")})
        assert second.status_code == 201

        old = next(entry for entry in first.json()["files"] if entry["slot"] == "invoice")
        new = next(entry for entry in second.json()["files"] if entry["slot"] == "invoice")
        assert new["name"] == "b.pdf"
        assert not storage.exists(old["url"])
        assert storage.exists(new["url"])

    def test_remove_file_slot(self, client, created):
        response = client.delete(f"/api/events/{created['id']}/files/request?deleteFile=false")
        assert response.status_code == 200
        assert [entry["slot"] for entry in response.json()["files"]] == ["result"]
