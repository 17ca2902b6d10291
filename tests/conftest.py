import pytest

from app import create_app
from app.config import Config
from app.extensions import db
from app.helpers.session import Viewer
from app.models import (
    Account, JudgeProfile, JudgeTeamConflict, Pairing, Registration, Round, Tournament,
)


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret"
    ADMIN_PASSWORD = "test-admin-password"
    ADMIN_EMAILS = "director@example.org"
    RESEND_API_KEY = None
    SITE_URL = "http://localhost"
    LOG_LEVEL = "WARNING"


class Factory:
    """Small builders for the records most tests need."""

    def __init__(self):
        self._n = 0

    def _next(self) -> int:
        self._n += 1
        return self._n

    def account(self, email=None, first_name="Test", last_name=None, role="user"):
        n = self._next()
        acct = Account(
            email=email or f"user{n}@example.org",
            first_name=first_name,
            last_name=last_name or f"User{n}",
            role=role,
        )
        db.session.add(acct)
        db.session.commit()
        return acct

    def tournament(self, name=None, **kwargs):
        n = self._next()
        t = Tournament(name=name or f"Tournament {n}", slug=f"tournament-{n}", **kwargs)
        db.session.add(t)
        db.session.commit()
        return t

    def round(self, tournament, round_number=1):
        rnd = Round(tournament_id=tournament.id, round_number=round_number, name=f"Round {round_number}")
        db.session.add(rnd)
        db.session.commit()
        return rnd

    def registration(self, tournament, account=None, name=None):
        account = account or self.account()
        reg = Registration(
            tournament_id=tournament.id,
            account_id=account.id,
            participant_name=name or account.display_name,
            participant_email=account.email,
        )
        db.session.add(reg)
        db.session.commit()
        return reg

    def pairing(self, rnd, aff, neg, released=True, **kwargs):
        p = Pairing(
            tournament_id=rnd.tournament_id,
            round_id=rnd.id,
            aff_registration_id=aff.id,
            neg_registration_id=neg.id,
            released=released,
            **kwargs,
        )
        db.session.add(p)
        db.session.commit()
        return p

    def judge(self, account=None, name="Judge Judy"):
        account = account or self.account()
        judge = JudgeProfile(account_id=account.id, name=name, email=account.email)
        db.session.add(judge)
        db.session.commit()
        return judge

    def conflict(self, judge, registration):
        c = JudgeTeamConflict(
            judge_profile_id=judge.id,
            tournament_id=registration.tournament_id,
            registration_id=registration.id,
        )
        db.session.add(c)
        db.session.commit()
        return c


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make(app):
    return Factory()


@pytest.fixture
def admin(app):
    return Viewer(account_id=None, is_admin=True)


@pytest.fixture
def debate(make):
    """
    A released round-one pairing with its two team owners plus one outsider
    account, which is what most workflow tests start from.
    """
    t = make.tournament()
    rnd = make.round(t)
    aff_owner = make.account(first_name="Ava")
    neg_owner = make.account(first_name="Noah")
    aff = make.registration(t, aff_owner)
    neg = make.registration(t, neg_owner)
    pairing = make.pairing(rnd, aff, neg)

    class Debate:
        pass

    d = Debate()
    d.tournament, d.round, d.pairing = t, rnd, pairing
    d.aff, d.neg = aff, neg
    d.aff_viewer = Viewer(account_id=aff_owner.id)
    d.neg_viewer = Viewer(account_id=neg_owner.id)
    d.outsider = make.account(first_name="Olive")
    d.outsider_viewer = Viewer(account_id=d.outsider.id)
    return d


@pytest.fixture
def login(client):
    """Put an account (and optionally the admin flag) into the client session."""
    def _login(account=None, admin=False):
        with client.session_transaction() as sess:
            if account is not None:
                sess["account_id"] = account.id
            sess["admin_ok"] = admin
    return _login
