from __future__ import annotations

from flask import Blueprint, current_app, jsonify, url_for
from flask_login import current_user, login_required, login_user, logout_user

from ..errors import DomainError, MemberNotFound, ProfileUnavailable
from ..extensions import db
from ..forms import validated
from ..mail_utils import send_password_reset
from ..members import find_by_email, find_by_nick
from ..onboarding import complete_registration, confirm_challenge, issue_challenge
from ..tokens import generate_reset_token, verify_reset_token
from .forms import ConfirmCodeForm, ForgotPasswordForm, LoginForm, NickForm, RegisterForm, ResetPasswordForm

bp = Blueprint("auth", __name__, url_prefix="/auth")


@bp.post("/register/check-nick")
def check_nick():
    form = validated(NickForm())
    code = issue_challenge(form.nick.data)
    return jsonify({"code": code})


@bp.post("/register/confirm")
def confirm_code():
    form = validated(ConfirmCodeForm())
    try:
        profile = confirm_challenge(form.nick.data, form.code.data)
    except ProfileUnavailable as e:
        raise DomainError(e.message, status_code=400)
    return jsonify({"success": True, "profile": {"name": profile.name, "motto": profile.motto}})


@bp.post("/register")
def register():
    form = validated(RegisterForm())
    complete_registration(form.nick.data, form.email.data, form.password.data)
    return jsonify({"success": True, "message": "Conta criada com sucesso! Acesso ao sistema liberado."})


@bp.post("/login")
def login():
    form = validated(LoginForm())
    member = find_by_nick(form.username.data)
    if not member or not member.email:
        raise MemberNotFound("Conta não encontrada ou nickname inválido")

    if not member.has_system_access or not member.check_password(form.password.data):
        raise DomainError("Credenciais inválidas", status_code=401)

    if not login_user(member):
        raise DomainError("Militar inativo. Entre em contato com um superior.", status_code=401)
    return jsonify({"member": member.to_dict()})


@bp.post("/logout")
def logout():
    logout_user()
    return jsonify({"success": True})


@bp.get("/session")
@login_required
def session():
    return jsonify({"success": True, "member": current_user.to_dict()})


@bp.post("/password/forgot")
def forgot_password():
    form = validated(ForgotPasswordForm())
    member = find_by_email(form.email.data)

    # Same answer whether or not the email exists.
    if member and member.has_system_access:
        token = generate_reset_token(member)
        link = url_for("auth.reset_password", token=token, _external=True)
        send_password_reset(member, link)

    return jsonify({"message": "Se o email estiver cadastrado, você receberá um link de recuperação."})


@bp.post("/password/reset/<token>")
def reset_password(token: str):
    member = verify_reset_token(token, max_age_seconds=current_app.config["PASSWORD_RESET_MAX_AGE"])
    if not member:
        raise DomainError("Link de redefinição inválido ou expirado.", status_code=400)

    form = validated(ResetPasswordForm())
    member.set_password(form.password.data)
    db.session.commit()
    current_app.logger.info("Password reset for %s", member.nick)
    return jsonify({"success": True, "message": "Senha atualizada. Faça login novamente."})
