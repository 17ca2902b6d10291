import io
import os

import pytest

from app.errors import PermissionDenied, ValidationError
from app.helpers.chat import list_messages, post_message
from app.helpers.spectate import request_spectate, respond_to_request


def test_participants_post_and_poll_with_cursor(debate):
    first = post_message(debate.aff_viewer, debate.pairing, "Ready when you are")
    second = post_message(debate.neg_viewer, debate.pairing, "Give us five minutes")

    assert [m.id for m in list_messages(debate.aff_viewer, debate.pairing)] == [first.id, second.id]
    assert [m.id for m in list_messages(debate.aff_viewer, debate.pairing, after_id=first.id)] == [second.id]

    row = second.to_dict(debate.aff_viewer.account_id)
    assert row["is_own_message"] is False


def test_empty_and_outsider_messages_rejected(debate):
    with pytest.raises(ValidationError):
        post_message(debate.aff_viewer, debate.pairing, "   ")
    with pytest.raises(PermissionDenied):
        post_message(debate.outsider_viewer, debate.pairing, "hello")


def test_approved_spectator_reads_but_cannot_post(debate):
    post_message(debate.aff_viewer, debate.pairing, "Round starts at 6")

    with pytest.raises(PermissionDenied):
        list_messages(debate.outsider_viewer, debate.pairing)

    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, True)
    respond_to_request(debate.neg_viewer, req.id, True)

    assert len(list_messages(debate.outsider_viewer, debate.pairing)) == 1
    with pytest.raises(PermissionDenied):
        post_message(debate.outsider_viewer, debate.pairing, "Good luck!")


def test_non_admin_system_messages_become_text(debate):
    msg = post_message(debate.aff_viewer, debate.pairing, "hi", message_type="system")
    assert msg.message_type == "text"


# --- HTTP ---

def test_messages_route_advertises_poll_interval(client, login, debate):
    login(debate.aff.account)

    resp = client.post(f"/api/pairings/{debate.pairing.id}/messages", json={"message": "Hello"})
    assert resp.status_code == 201
    msg_id = resp.get_json()["message"]["id"]

    resp = client.get(f"/api/pairings/{debate.pairing.id}/messages")
    body = resp.get_json()
    assert body["poll_interval_seconds"] == 10
    assert body["last_id"] == msg_id
    assert body["can_post"] is True

    resp = client.get(f"/api/pairings/{debate.pairing.id}/messages?after={msg_id}")
    assert resp.get_json()["messages"] == []


def test_evidence_upload_download_delete(app, client, login, debate):
    login(debate.aff.account)

    resp = client.post(
        f"/api/pairings/{debate.pairing.id}/evidence",
        data={"file": (io.BytesIO(b"card text"), "aff case.txt"), "description": "1AC"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    evidence = resp.get_json()["evidence"]
    assert evidence["file_name"] == "aff_case.txt"
    assert evidence["file_size"] == len(b"card text")

    resp = client.get(evidence["file_url"])
    assert resp.status_code == 200
    assert resp.data == b"card text"
    resp.close()

    login(debate.outsider)
    assert client.get(evidence["file_url"]).status_code == 403

    login(debate.neg.account)
    assert client.delete(f"/api/evidence/{evidence['id']}").status_code == 403

    login(debate.aff.account)
    assert client.delete(f"/api/evidence/{evidence['id']}").status_code == 200
    assert os.listdir(os.path.join(app.config["UPLOAD_FOLDER"], str(debate.pairing.id))) == []


def test_evidence_rejects_unknown_extension(client, login, debate):
    login(debate.aff.account)
    resp = client.post(
        f"/api/pairings/{debate.pairing.id}/evidence",
        data={"file": (io.BytesIO(b"MZ"), "tool.exe")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
