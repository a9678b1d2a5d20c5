from __future__ import annotations

import secrets

from flask import current_app
from sqlalchemy.exc import IntegrityError

from .errors import (
    AlreadyHasAccess,
    AlreadyRegistered,
    ChallengeMismatch,
    EmailInUse,
    MemberInactive,
    MemberNotFound,
    MemberNotPreSeeded,
    ValidationFailed,
)
from .extensions import db
from .habbo import HabboClient, HabboProfile, profile_client
from .identity import create_credentials
from .members import find_by_nick
from .models import Member


CODE_PREFIX = "DDM"
CODE_SUFFIX = "BR"


def generate_code() -> str:
    """DDM + 4 digits + "-" + 4 digits + BR, e.g. ``DDM0421-9930BR``."""
    first = secrets.randbelow(10000)
    second = secrets.randbelow(10000)
    return f"{CODE_PREFIX}{first:04d}-{second:04d}{CODE_SUFFIX}"


def issue_challenge(nick: str) -> str:
    """Return a one-time code the applicant must put in their Habbo motto.

    Nothing is stored: the applicant sends the code back on confirmation and it
    is checked against the live profile.
    """
    member = find_by_nick(nick)
    if not member:
        raise MemberNotPreSeeded()
    if member.has_system_access:
        raise AlreadyRegistered()
    return generate_code()


def confirm_challenge(nick: str, code: str, *, client: HabboClient | None = None) -> HabboProfile:
    nick = (nick or "").strip()
    code = (code or "").strip()
    if not nick:
        raise ValidationFailed("Nick é obrigatório")
    if not code:
        raise ValidationFailed("Código é obrigatório")

    client = client or profile_client()
    profile = client.fetch_profile(nick)
    if profile.motto != code:
        raise ChallengeMismatch()
    return profile


def complete_registration(nick: str, email: str, password: str) -> Member:
    member = find_by_nick(nick)
    if not member:
        raise MemberNotFound("Militar não encontrado no sistema")
    if not member.active:
        raise MemberInactive()
    if member.has_system_access:
        raise AlreadyHasAccess()

    create_credentials(member, email, password)
    member.has_system_access = True
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise EmailInUse()

    current_app.logger.info("Member %s registered with system access", member.nick)
    return member
