from __future__ import annotations

import hashlib

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .extensions import db
from .models import Member


RESET_PURPOSE = "reset_password"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=f"token:{RESET_PURPOSE}")


def _password_fingerprint(member: Member) -> str:
    # Changes with every password update, so a used link stops working.
    return hashlib.sha256((member.password_hash or "").encode("utf-8")).hexdigest()[:16]


def generate_reset_token(member: Member) -> str:
    return _serializer().dumps({"member_id": member.id, "pw": _password_fingerprint(member)})


def verify_reset_token(token: str, max_age_seconds: int) -> Member | None:
    try:
        data = _serializer().loads(token, max_age=max_age_seconds)
    except (SignatureExpired, BadSignature):
        return None

    if not isinstance(data, dict) or not isinstance(data.get("member_id"), int):
        return None

    member = db.session.get(Member, data["member_id"])
    if member is None or data.get("pw") != _password_fingerprint(member):
        return None
    return member
