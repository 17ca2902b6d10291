import itertools

import pytest

from app.errors import ConflictError, NotAuthenticated, PermissionDenied
from app.helpers.pairings import can_view_pairing, edit_pairing, swap_sides
from app.helpers.session import ANONYMOUS, Viewer
from app.helpers.spectate import (
    my_requests, pending_approvals, request_spectate, respond_to_request,
)
from app.models import SpectateRequest
from app.models.spectate_request import derive_status


ANSWERS = (None, True, False)


@pytest.mark.parametrize("aff, neg", list(itertools.product(ANSWERS, ANSWERS)))
def test_derived_status_follows_both_answers(aff, neg):
    status = derive_status(aff, neg)

    if status == "approved":
        assert aff is True and neg is True
    if status == "rejected":
        assert aff is False or neg is False
    if aff is False or neg is False:
        assert status == "rejected"
    elif aff is True and neg is True:
        assert status == "approved"
    else:
        assert status == "pending"


def test_both_sides_approve(debate):
    req, created = request_spectate(debate.outsider_viewer, debate.pairing.id, "Scouting for next round")
    assert created
    assert req.aff_team_approval is None and req.neg_team_approval is None
    assert req.status == "pending"

    respond_to_request(debate.aff_viewer, req.id, True)
    assert req.status == "pending"

    respond_to_request(debate.neg_viewer, req.id, True)
    assert req.status == "approved"


def test_negative_rejection_wins_regardless_of_affirmative(debate):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, True)
    respond_to_request(debate.neg_viewer, req.id, False)
    assert req.status == "rejected"

    req2, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.neg_viewer, req2.id, False)
    assert req2.status == "rejected"
    assert req2.aff_team_approval is None


def test_each_side_only_writes_its_own_answer(debate):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)

    respond_to_request(debate.aff_viewer, req.id, True)
    assert req.aff_team_approval is True
    assert req.neg_team_approval is None

    # restating while pending is allowed and still only touches the caller's field
    respond_to_request(debate.aff_viewer, req.id, True)
    assert req.neg_team_approval is None

    respond_to_request(debate.neg_viewer, req.id, True)
    assert req.aff_team_approval is True
    assert req.neg_team_approval is True


def test_non_participant_cannot_answer(debate, make):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    stranger = make.account()

    with pytest.raises(PermissionDenied):
        respond_to_request(Viewer(account_id=stranger.id), req.id, True)
    with pytest.raises(PermissionDenied):
        respond_to_request(debate.outsider_viewer, req.id, True)

    assert req.aff_team_approval is None and req.neg_team_approval is None


def test_answering_a_decided_request_is_a_conflict(debate):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, False)

    with pytest.raises(ConflictError):
        respond_to_request(debate.neg_viewer, req.id, True)
    assert req.status == "rejected"


def test_participants_cannot_request_to_spectate(debate):
    with pytest.raises(PermissionDenied):
        request_spectate(debate.aff_viewer, debate.pairing.id)


def test_anonymous_cannot_request(debate):
    with pytest.raises(NotAuthenticated):
        request_spectate(ANONYMOUS, debate.pairing.id)


def test_unreleased_pairing_cannot_be_requested(debate, make):
    hidden = make.pairing(debate.round, debate.aff, debate.neg, released=False)
    with pytest.raises(PermissionDenied):
        request_spectate(debate.outsider_viewer, hidden.id)


def test_duplicate_request_returns_the_open_one(debate):
    first, created = request_spectate(debate.outsider_viewer, debate.pairing.id)
    again, created_again = request_spectate(debate.outsider_viewer, debate.pairing.id)

    assert created and not created_again
    assert again.id == first.id
    assert SpectateRequest.query.filter_by(pairing_id=debate.pairing.id).count() == 1


def test_rerequest_allowed_after_rejection(debate):
    first, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, first.id, False)

    second, created = request_spectate(debate.outsider_viewer, debate.pairing.id)
    assert created
    assert second.id != first.id
    assert second.status == "pending"


def test_status_is_queryable(debate):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, True)
    respond_to_request(debate.neg_viewer, req.id, True)

    approved = SpectateRequest.query.filter(SpectateRequest.status == "approved").all()
    pending = SpectateRequest.query.filter(SpectateRequest.status == "pending").all()
    assert [r.id for r in approved] == [req.id]
    assert pending == []


def test_pending_approvals_hide_answered_requests(debate):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)

    assert [r.id for r in pending_approvals(debate.aff_viewer)] == [req.id]
    respond_to_request(debate.aff_viewer, req.id, True)

    assert pending_approvals(debate.aff_viewer) == []
    assert [r.id for r in pending_approvals(debate.neg_viewer)] == [req.id]
    assert [r.id for r in my_requests(debate.outsider_viewer)] == [req.id]


def test_approval_grants_view_access(debate):
    assert not can_view_pairing(debate.outsider_viewer, debate.pairing)

    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, True)
    assert not can_view_pairing(debate.outsider_viewer, debate.pairing)

    respond_to_request(debate.neg_viewer, req.id, True)
    assert can_view_pairing(debate.outsider_viewer, debate.pairing)


def test_answers_follow_teams_when_sides_swap(debate, admin):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, True)

    swap_sides(admin, debate.pairing)
    assert req.aff_team_approval is None
    assert req.neg_team_approval is True

    # the original negative team now sits on the affirmative side
    respond_to_request(debate.neg_viewer, req.id, True)
    assert req.aff_team_approval is True
    assert req.status == "approved"


def test_replaced_team_must_answer_again(debate, make, admin):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, True)
    respond_to_request(debate.neg_viewer, req.id, True)
    assert req.status == "approved"

    newcomer = make.registration(debate.tournament)
    edit_pairing(admin, debate.pairing, {"neg_registration_id": newcomer.id})

    assert req.aff_team_approval is True
    assert req.neg_team_approval is None
    assert req.status == "pending"
    assert not can_view_pairing(debate.outsider_viewer, debate.pairing)


def test_team_moved_to_other_side_keeps_its_answer(debate, make, admin):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, False)

    newcomer = make.registration(debate.tournament)
    edit_pairing(admin, debate.pairing, {
        "aff_registration_id": newcomer.id, "neg_registration_id": debate.aff.id,
    })
    assert req.aff_team_approval is None
    assert req.neg_team_approval is False


def test_editing_teams_into_reversed_sides_acts_like_a_swap(debate, admin):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    respond_to_request(debate.aff_viewer, req.id, False)

    edit_pairing(admin, debate.pairing, {
        "aff_registration_id": debate.neg.id, "neg_registration_id": debate.aff.id,
    })
    assert req.aff_team_approval is None
    assert req.neg_team_approval is False


def test_locked_sides_refuse_reversal_through_edit(debate, admin):
    edit_pairing(admin, debate.pairing, {"side_locked": True})
    with pytest.raises(ConflictError):
        edit_pairing(admin, debate.pairing, {
            "aff_registration_id": debate.neg.id, "neg_registration_id": debate.aff.id,
        })
    assert debate.pairing.aff_registration_id == debate.aff.id


# --- HTTP ---

def test_spectate_routes(client, login, debate):
    login(debate.outsider)
    resp = client.post(f"/api/pairings/{debate.pairing.id}/spectate", json={"reason": "Learning"})
    assert resp.status_code == 201
    request_id = resp.get_json()["request"]["id"]

    resp = client.post(f"/api/pairings/{debate.pairing.id}/spectate", json={})
    assert resp.status_code == 200
    assert resp.get_json()["created"] is False

    resp = client.get("/api/my/spectate-requests")
    body = resp.get_json()
    assert body["poll_interval_seconds"] == 15
    assert body["requests"][0]["status"] == "pending"

    resp = client.post(f"/api/spectate/{request_id}/respond", json={"approved": True})
    assert resp.status_code == 403
    assert resp.get_json() == {"ok": False, "error": "Only the teams in this pairing can answer spectate requests."}


def test_respond_route_requires_boolean(client, login, debate):
    req, _ = request_spectate(debate.outsider_viewer, debate.pairing.id)
    login(debate.aff.account)

    resp = client.post(f"/api/spectate/{req.id}/respond", json={"approved": "yes"})
    assert resp.status_code == 400

    resp = client.post(f"/api/spectate/{req.id}/respond", json={"approved": False})
    assert resp.status_code == 200
    assert resp.get_json()["request"]["status"] == "rejected"
