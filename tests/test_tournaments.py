import pytest

from app.errors import ConflictError, NotFound, PermissionDenied, ValidationError
from app.helpers.tournaments import (
    create_round, create_tournament, get_tournament_or_404, my_registrations,
    register_for_tournament, withdraw_registration,
)
from app.helpers.session import Viewer


def test_create_tournament(admin):
    t = create_tournament(admin, {"name": "Spring Open", "start_date": "2025-04-01", "end_date": "2025-04-02"})
    assert t.slug == "spring-open"
    assert t.format == "LD"
    assert get_tournament_or_404("spring-open").id == t.id
    assert get_tournament_or_404(str(t.id)).id == t.id

    again = create_tournament(admin, {"name": "Spring Open"})
    assert again.slug != t.slug

    with pytest.raises(NotFound):
        get_tournament_or_404("winter-classic")


@pytest.mark.parametrize("data", [
    {"name": ""},
    {"name": "Backwards", "start_date": "2025-04-02", "end_date": "2025-04-01"},
    {"name": "Bad date", "start_date": "soon"},
    {"name": "Bad size", "max_participants": "lots"},
])
def test_create_tournament_validation(admin, data):
    with pytest.raises(ValidationError):
        create_tournament(admin, data)


def test_only_admins_create(debate):
    with pytest.raises(PermissionDenied):
        create_tournament(debate.aff_viewer, {"name": "Mine"})


def test_rounds_number_themselves(make, admin):
    t = make.tournament()
    assert create_round(admin, t, {}).round_number == 1
    assert create_round(admin, t, {"name": "Octos"}).round_number == 2
    with pytest.raises(ConflictError):
        create_round(admin, t, {"round_number": 1})


def test_register_and_withdraw(make):
    t = make.tournament(max_participants=1)
    acct = make.account(first_name="Rae", last_name="Kim")
    viewer = Viewer(account_id=acct.id)

    reg = register_for_tournament(viewer, acct, t, {"partner_name": "Jo Park"})
    assert reg.team_name == "Rae Kim / Jo Park"
    assert reg.participant_email == acct.email

    with pytest.raises(ConflictError):
        register_for_tournament(viewer, acct, t, {})

    other = make.account()
    with pytest.raises(ConflictError) as err:
        register_for_tournament(Viewer(account_id=other.id), other, t, {})
    assert err.value.message == "This tournament is full."

    with pytest.raises(NotFound):
        withdraw_registration(Viewer(account_id=other.id), reg)

    withdraw_registration(viewer, reg)
    assert reg.is_active is False
    assert [r.id for r in my_registrations(viewer)] == [reg.id]

    # the freed seat can be taken again
    register_for_tournament(Viewer(account_id=other.id), other, t, {})


def test_closed_registration(make):
    t = make.tournament(registration_open=False)
    acct = make.account()
    with pytest.raises(ConflictError):
        register_for_tournament(Viewer(account_id=acct.id), acct, t, {})


# --- HTTP ---

def test_tournament_routes(client, login, make):
    login(admin=True)
    resp = client.post("/api/tournaments", json={"name": "City Championship", "format": "PF"})
    assert resp.status_code == 201
    t_id = resp.get_json()["tournament"]["id"]

    resp = client.post(f"/api/tournaments/{t_id}/rounds", json={})
    assert resp.status_code == 201

    acct = make.account()
    login(acct)
    resp = client.post(f"/api/tournaments/{t_id}/register", json={"school_organization": "Central High"})
    assert resp.status_code == 201

    detail = client.get("/api/tournaments/city-championship").get_json()["tournament"]
    assert detail["registered_count"] == 1
    assert [r["round_number"] for r in detail["rounds"]] == [1]

    rows = client.get(f"/api/tournaments/{t_id}/registrations").get_json()["registrations"]
    assert set(rows[0]) == {"id", "team_name", "school_organization"}

    assert client.post(f"/api/tournaments/{t_id}/register", json={}).status_code == 409
