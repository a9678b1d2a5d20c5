from __future__ import annotations

import pytest

from ddm import create_app
from ddm.extensions import db
from ddm.habbo import HabboProfile
from ddm.models import Member


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{(tmp_path / 'test.db').as_posix()}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "LOGIN_DISABLED": True,
            "MAIL_SERVER": "",
            "MAIL_DEFAULT_SENDER": "",
        }
    )
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_member(app):
    def _make(nick: str, **fields) -> Member:
        password = fields.pop("password", None)
        fields.setdefault("rank_id", 1)
        fields.setdefault("active", True)
        member = Member(nick=nick, **fields)
        if password:
            member.set_password(password)
        db.session.add(member)
        db.session.commit()
        return member

    return _make


@pytest.fixture()
def commander(make_member):
    return make_member("Comandante", email="cmd@ddm.com.br", rank_id=12, tag="CMD", has_system_access=True)


class FakeProfileClient:
    def __init__(self, motto: str = "", error: Exception | None = None) -> None:
        self.motto = motto
        self.error = error
        self.calls: list[str] = []

    def fetch_profile(self, name: str) -> HabboProfile:
        self.calls.append(name)
        if self.error:
            raise self.error
        return HabboProfile(unique_id=f"hhbr-{name}", name=name, motto=self.motto)


@pytest.fixture()
def fake_profile(monkeypatch):
    fake = FakeProfileClient()
    monkeypatch.setattr("ddm.onboarding.profile_client", lambda: fake)
    return fake
