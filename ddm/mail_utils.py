from __future__ import annotations

from flask import current_app
from flask_mail import Message

from .extensions import mail
from .models import Member


def mail_is_configured() -> bool:
    config = current_app.config
    return bool(config.get("MAIL_SERVER")) and bool(config.get("MAIL_DEFAULT_SENDER"))


def send_email(to: str, subject: str, text: str, html: str | None = None) -> bool:
    """Send through Flask-Mail; without a mail server the message is only logged."""
    if not mail_is_configured():
        current_app.logger.warning("Email not configured. Would send to=%s subject=%s\n%s", to, subject, text)
        return False

    sender = current_app.config["MAIL_DEFAULT_SENDER"]
    mail.send(Message(subject=subject, sender=sender, recipients=[to], body=text, html=html))
    current_app.logger.info("Email sent to=%s subject=%s", to, subject)
    return True


def send_password_reset(member: Member, link: str) -> bool:
    minutes = max(1, int(current_app.config["PASSWORD_RESET_MAX_AGE"]) // 60)
    intro = f"Olá, {member.nick}. Redefina sua senha usando este link (válido por {minutes} minutos):"
    return send_email(
        to=member.email,
        subject="[DDM] Recuperação de senha",
        text=f"{intro}\n\n{link}\n\nSe você não pediu a troca, ignore este email.\n",
        html=(
            f"<p>{intro}</p><p><a href=\"{link}\">{link}</a></p>"
            "<p>Se você não pediu a troca, ignore este email.</p>"
        ),
    )
