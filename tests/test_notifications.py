from app.extensions import db
from app.helpers.notifications import list_notifications, mark_read, notify_pairing_sides, unread_count


def _notify(debate, title="Room changed"):
    rows = notify_pairing_sides(debate.pairing, "pairing_updated", title, "Now in Hall B")
    db.session.commit()
    return rows


def test_each_side_sees_only_its_own(debate):
    aff_row, neg_row = _notify(debate)

    assert [n.id for n in list_notifications(debate.aff_viewer)] == [aff_row.id]
    assert [n.id for n in list_notifications(debate.neg_viewer)] == [neg_row.id]
    assert list_notifications(debate.outsider_viewer) == []


def test_mark_read(debate):
    first, _ = _notify(debate, "First")
    _notify(debate, "Second")
    assert unread_count(debate.aff_viewer) == 2

    assert mark_read(debate.aff_viewer, first.id) == 1
    assert unread_count(debate.aff_viewer) == 1
    assert [n.title for n in list_notifications(debate.aff_viewer, unread_only=True)] == ["Second"]

    assert mark_read(debate.aff_viewer) == 1
    assert unread_count(debate.aff_viewer) == 0
    assert unread_count(debate.neg_viewer) == 2


def test_cannot_mark_someone_elses(debate):
    _, neg_row = _notify(debate)
    assert mark_read(debate.aff_viewer, neg_row.id) == 0
    assert neg_row.is_read is False


def test_notifications_route(client, login, debate):
    assert client.get("/api/notifications").status_code == 401

    _notify(debate)
    login(debate.aff.account)
    body = client.get("/api/notifications?unread=1").get_json()
    assert body["unread_count"] == 1
    assert body["poll_interval_seconds"] == 15

    client.post("/api/notifications/read")
    assert client.get("/api/notifications").get_json()["unread_count"] == 0
