import pytest

from app.helpers.session import Viewer
from app.helpers.sponsors import invite_sponsor
from app.helpers.tournaments import register_for_tournament


@pytest.fixture
def outbox(monkeypatch):
    sent = []

    def capture(to, subject, body_html, tag="EMAIL"):
        sent.append({"to": to, "subject": subject, "body": body_html, "tag": tag})
        return True

    monkeypatch.setattr("app.helpers.email.send_email", capture)
    return sent


def test_registration_email_escapes_names(make, outbox):
    t = make.tournament(name="Spring <Open>")
    acct = make.account()

    register_for_tournament(Viewer(account_id=acct.id), acct, t, {"participant_name": "<b>Rae</b>"})

    body = outbox[0]["body"]
    assert "&lt;b&gt;Rae&lt;/b&gt;" in body
    assert "<b>Rae" not in body
    assert "Spring &lt;Open&gt;" in body


def test_sponsor_invitation_escapes_message(admin, outbox):
    invite_sponsor(admin, {
        "email": "partners@example.org",
        "organization_name": "Tom & Jerry's",
        "personal_message": "<script>alert(1)</script>",
    })

    body = outbox[0]["body"]
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "Tom &amp; Jerry&#39;s" in body
