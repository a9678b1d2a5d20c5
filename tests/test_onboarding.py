import re

import pytest

from ddm.errors import (
    AlreadyHasAccess,
    AlreadyRegistered,
    ChallengeMismatch,
    EmailInUse,
    MemberInactive,
    MemberNotFound,
    MemberNotPreSeeded,
    ProfileUnavailable,
)
from ddm.models import Member
from ddm.onboarding import complete_registration, confirm_challenge, generate_code, issue_challenge


CODE_RE = re.compile(r"^DDM\d{4}-\d{4}BR$")


def test_generated_codes_follow_template():
    codes = {generate_code() for _ in range(200)}
    assert all(CODE_RE.match(code) for code in codes)
    assert all(len(code) == 14 for code in codes)
    assert len(codes) > 1


def test_issue_challenge_requires_pre_seeded_member(app):
    with pytest.raises(MemberNotPreSeeded):
        issue_challenge("Estranho")


def test_issue_challenge_rejects_registered_member(make_member):
    make_member("Registrado", email="reg@ddm.com.br", has_system_access=True)
    with pytest.raises(AlreadyRegistered):
        issue_challenge("Registrado")


def test_issue_challenge_persists_nothing(make_member):
    make_member("Novo")
    before = Member.query.filter_by(nick="Novo").one().to_dict()
    first = issue_challenge("Novo")
    second = issue_challenge("Novo")
    assert CODE_RE.match(first) and CODE_RE.match(second)
    assert Member.query.filter_by(nick="Novo").one().to_dict() == before


def test_confirm_compares_against_current_motto(make_member, fake_profile):
    make_member("Novo")
    older = issue_challenge("Novo")
    issue_challenge("Novo")

    # The motto still holds the first code: it is accepted even though a newer one was issued.
    fake_profile.motto = older
    profile = confirm_challenge("Novo", f"  {older} ")
    assert profile.motto == older
    assert fake_profile.calls == ["Novo"]

    fake_profile.motto = "DDM0000-0000BR"
    with pytest.raises(ChallengeMismatch):
        confirm_challenge("Novo", older)


def test_confirm_surfaces_profile_failures(fake_profile):
    fake_profile.error = ProfileUnavailable("HTTP 503")
    with pytest.raises(ProfileUnavailable):
        confirm_challenge("Novo", "DDM1234-5678BR")


def test_complete_registration_grants_access(make_member):
    make_member("Novo")
    member = complete_registration("Novo", "Novo@DDM.com.br", "segredo123")
    assert member.email == "novo@ddm.com.br"
    assert member.has_system_access is True
    assert member.check_password("segredo123")


def test_complete_registration_preconditions(make_member):
    make_member("Inativo", active=False)
    make_member("Antigo", email="antigo@ddm.com.br", has_system_access=True)
    make_member("Novo")

    with pytest.raises(MemberNotFound):
        complete_registration("Fantasma", "f@ddm.com.br", "segredo123")
    with pytest.raises(MemberInactive):
        complete_registration("Inativo", "i@ddm.com.br", "segredo123")
    with pytest.raises(AlreadyHasAccess):
        complete_registration("Antigo", "a@ddm.com.br", "segredo123")
    with pytest.raises(EmailInUse):
        complete_registration("Novo", "antigo@ddm.com.br", "segredo123")
    assert Member.query.filter_by(nick="Novo").one().has_system_access is False


def test_register_flow_over_http(client, make_member, fake_profile):
    make_member("Novo")

    resp = client.post("/auth/register/check-nick", json={"nick": "Novo"})
    assert resp.status_code == 200
    code = resp.get_json()["code"]
    assert CODE_RE.match(code)

    fake_profile.motto = "outra coisa"
    resp = client.post("/auth/register/confirm", json={"nick": "Novo", "code": code})
    assert resp.status_code == 400

    fake_profile.motto = code
    resp = client.post("/auth/register/confirm", json={"nick": "Novo", "code": code})
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True

    resp = client.post("/auth/register", json={"nick": "Novo", "email": "novo@ddm.com.br", "password": "segredo123"})
    assert resp.status_code == 200

    resp = client.post("/auth/register/check-nick", json={"nick": "Novo"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "already_registered"

    resp = client.post("/auth/register", json={"nick": "Novo", "email": "novo2@ddm.com.br", "password": "segredo123"})
    assert resp.status_code == 409


def test_register_http_status_codes(client, make_member, fake_profile):
    make_member("Inativo", active=False)

    resp = client.post("/auth/register/check-nick", json={"nick": "Ninguem"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Militar não cadastrado, procure um superior."

    resp = client.post("/auth/register", json={"nick": "Inativo", "email": "i@ddm.com.br", "password": "segredo123"})
    assert resp.status_code == 403

    resp = client.post("/auth/register", json={"nick": "Ninguem", "email": "n@ddm.com.br", "password": "segredo123"})
    assert resp.status_code == 404

    resp = client.post("/auth/register", json={"nick": "Inativo", "email": "i@ddm.com.br", "password": "123"})
    assert resp.status_code == 400

    fake_profile.error = ProfileUnavailable("Usuário não encontrado no Habbo")
    resp = client.post("/auth/register/confirm", json={"nick": "Inativo", "code": "DDM1234-5678BR"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Usuário não encontrado no Habbo"
