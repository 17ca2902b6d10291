import pytest

from app.errors import (
    InvalidTransitionError, JudgeAlreadyAssignedError, JudgeConflictError, NoJudgeProfileError,
    PermissionDenied,
)
from app.extensions import db
from app.helpers.judging import (
    add_conflict, assign_judge, my_judgings, pairings_needing_judges,
    provision_judge_account, unassign_judge, volunteer_to_judge,
)
from app.helpers.pairings import change_status
from app.helpers.session import Viewer
from app.models import CompetitorNotification, PairingJudgeAssignment


def _judge_viewer(make):
    account = make.account(first_name="Jules")
    judge = make.judge(account)
    return judge, Viewer(account_id=account.id)


def test_volunteer_without_conflict_succeeds(debate, make):
    judge, viewer = _judge_viewer(make)

    assignment = volunteer_to_judge(viewer, debate.pairing)

    assert assignment.role == "chair"
    assert assignment.status == "volunteered"
    assert debate.pairing.judge_id == judge.id
    assert debate.pairing.status == "assigned"

    notes = CompetitorNotification.query.filter_by(pairing_id=debate.pairing.id).all()
    assert sorted(n.registration_id for n in notes) == sorted([debate.aff.id, debate.neg.id])
    assert {n.type for n in notes} == {"judge_volunteer"}


@pytest.mark.parametrize("side", ["aff", "neg"])
def test_volunteer_with_conflict_is_refused(debate, make, side):
    judge, viewer = _judge_viewer(make)
    make.conflict(judge, debate.aff if side == "aff" else debate.neg)

    with pytest.raises(JudgeConflictError) as err:
        volunteer_to_judge(viewer, debate.pairing)

    assert err.value.message == "You have a conflict with one of the teams in this pairing"
    assert debate.pairing.judge_id is None
    assert PairingJudgeAssignment.query.count() == 0


def test_conflict_in_another_tournament_does_not_block(debate, make):
    judge, viewer = _judge_viewer(make)
    other = make.tournament()
    make.conflict(judge, make.registration(other, debate.aff.account))

    volunteer_to_judge(viewer, debate.pairing)
    assert debate.pairing.judge_id == judge.id


def test_volunteer_needs_a_judge_profile(debate):
    with pytest.raises(NoJudgeProfileError) as err:
        volunteer_to_judge(debate.outsider_viewer, debate.pairing)
    assert err.value.message == "You must have a judge profile to volunteer"


def test_volunteer_refused_when_pairing_has_a_judge(debate, make):
    _, first = _judge_viewer(make)
    _, second = _judge_viewer(make)

    volunteer_to_judge(first, debate.pairing)
    with pytest.raises(JudgeAlreadyAssignedError):
        volunteer_to_judge(second, debate.pairing)


def test_admin_assignment_checks_conflicts_too(debate, make, admin):
    judge, _ = _judge_viewer(make)
    make.conflict(judge, debate.neg)

    with pytest.raises(JudgeConflictError):
        assign_judge(admin, debate.pairing, judge.id)


def test_admin_assign_and_unassign(debate, make, admin):
    judge, viewer = _judge_viewer(make)

    assign_judge(admin, debate.pairing, judge.id)
    assert debate.pairing.status == "assigned"
    assert [a.pairing_id for a in my_judgings(viewer)] == [debate.pairing.id]

    removed = unassign_judge(admin, debate.pairing, judge.id)
    assert removed == 1
    assert debate.pairing.judge_id is None
    assert debate.pairing.status == "needs_judge"
    assert my_judgings(viewer) == []


def test_volunteer_refused_before_release(debate, make):
    judge, viewer = _judge_viewer(make)
    debate.pairing.released = False
    db.session.commit()

    with pytest.raises(PermissionDenied):
        volunteer_to_judge(viewer, debate.pairing)
    assert debate.pairing.judge_id is None
    assert PairingJudgeAssignment.query.filter_by(pairing_id=debate.pairing.id).count() == 0


def test_chair_stays_once_round_starts(debate, make, admin):
    judge, viewer = _judge_viewer(make)
    assign_judge(admin, debate.pairing, judge.id)
    change_status(viewer, debate.pairing, "in_progress")

    with pytest.raises(InvalidTransitionError):
        unassign_judge(admin, debate.pairing, judge.id)
    assert debate.pairing.judge_id == judge.id
    assert debate.pairing.status == "in_progress"


def test_only_admins_assign(debate, make):
    judge, viewer = _judge_viewer(make)
    with pytest.raises(PermissionDenied):
        assign_judge(viewer, debate.pairing, judge.id)


def test_needing_judges_lists_open_released_pairings(debate, make):
    hidden = make.pairing(debate.round, debate.aff, debate.neg, released=False)
    _, viewer = _judge_viewer(make)

    assert [p.id for p in pairings_needing_judges(debate.tournament.id)] == [debate.pairing.id]
    volunteer_to_judge(viewer, debate.pairing)
    assert pairings_needing_judges(debate.tournament.id) == []
    assert hidden.judge_id is None


def test_add_conflict_is_idempotent(debate, make, admin):
    judge, _ = _judge_viewer(make)
    first = add_conflict(admin, debate.tournament.id, judge.id, debate.aff.id, "school")
    again = add_conflict(admin, debate.tournament.id, judge.id, debate.aff.id, "school")
    assert first.id == again.id


def test_provision_judge_account(admin):
    judge = provision_judge_account(admin, {"email": "New.Judge@Example.org", "name": "New Judge"})
    assert judge.email == "new.judge@example.org"
    assert judge.account_id is not None


# --- HTTP ---

def test_volunteer_route_reports_conflict(client, login, debate, make):
    judge, _ = _judge_viewer(make)
    make.conflict(judge, debate.aff)
    login(judge.account)

    resp = client.post(f"/api/pairings/{debate.pairing.id}/volunteer")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "You have a conflict with one of the teams in this pairing"


def test_volunteer_route_without_profile(client, login, debate):
    login(debate.outsider)
    resp = client.post(f"/api/pairings/{debate.pairing.id}/volunteer")
    assert resp.status_code == 403
