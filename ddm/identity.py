from __future__ import annotations

from .errors import EmailInUse, ValidationFailed
from .members import find_by_email, normalize_email
from .models import Member


MIN_PASSWORD_LENGTH = 6


def create_credentials(member: Member, email: str, password: str) -> None:
    """Attach login credentials to ``member``; the caller commits."""
    email = normalize_email(email)
    if not email:
        raise ValidationFailed("Email é obrigatório")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationFailed("A senha deve ter pelo menos 6 caracteres")

    owner = find_by_email(email)
    if owner is not None and owner.id != member.id:
        raise EmailInUse()

    member.email = email
    member.set_password(password)
