from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from . import ranks
from .errors import ValidationFailed
from .extensions import db
from .models import Member


def normalize_email(email: str | None) -> str | None:
    email = (email or "").strip().lower()
    return email or None


def find_by_nick(nick: str | None, *, active_only: bool = False) -> Member | None:
    nick = (nick or "").strip()
    if not nick:
        return None
    query = Member.query.filter_by(nick=nick)
    if active_only:
        query = query.filter_by(active=True)
    return query.first()


def find_by_email(email: str | None) -> Member | None:
    email = normalize_email(email)
    if not email:
        return None
    return Member.query.filter_by(email=email).first()


def ensure_member(nick: str, **defaults) -> tuple[Member, bool]:
    """Return the member called ``nick``, creating it from ``defaults`` if missing.

    The second item tells whether a row was created. A concurrent insert of the
    same nick loses on the unique constraint and gets the existing row back.
    """
    nick = (nick or "").strip()
    if not nick:
        raise ValidationFailed("Nick é obrigatório")

    existing = find_by_nick(nick)
    if existing:
        return existing, False

    rank_id = defaults.pop("rank_id", ranks.MIN_RANK_ID)
    if not ranks.is_valid(rank_id):
        raise ValidationFailed("Patente inválida")

    member = Member(
        nick=nick,
        rank_id=rank_id,
        email=normalize_email(defaults.pop("email", None)),
        active=defaults.pop("active", True),
        has_system_access=defaults.pop("has_system_access", False),
        has_contract=defaults.pop("has_contract", False),
        promoter_tag=defaults.pop("promoter_tag", None),
    )
    if defaults:
        raise TypeError(f"Unknown member fields: {', '.join(sorted(defaults))}")

    db.session.add(member)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = find_by_nick(nick)
        if existing is None:
            raise
        return existing, False

    current_app.logger.info("Member created nick=%s rank=%s", member.nick, member.rank_id)
    return member, True
