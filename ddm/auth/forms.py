from __future__ import annotations

from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email, InputRequired, Length

from ..forms import JsonForm
from ..identity import MIN_PASSWORD_LENGTH


class NickForm(JsonForm):
    invalid_message = "Nickname é obrigatório"

    nick = StringField("Nick", validators=[DataRequired(), Length(max=32)], name="nick")


class ConfirmCodeForm(JsonForm):
    invalid_message = "Nick e código são obrigatórios"

    nick = StringField("Nick", validators=[DataRequired(), Length(max=32)], name="nick")
    code = StringField("Código", validators=[DataRequired(), Length(max=32)], name="code")


class RegisterForm(JsonForm):
    nick = StringField(
        "Nick",
        validators=[DataRequired(message="Email, senha e nick são obrigatórios"), Length(max=32)],
        name="nick",
    )
    email = StringField(
        "Email",
        validators=[DataRequired(message="Email, senha e nick são obrigatórios"), Email(message="Email inválido"), Length(max=255)],
        name="email",
    )
    password = PasswordField(
        "Senha",
        validators=[
            InputRequired(message="Email, senha e nick são obrigatórios"),
            Length(min=MIN_PASSWORD_LENGTH, max=128, message="A senha deve ter pelo menos 6 caracteres"),
        ],
        name="password",
    )


class LoginForm(JsonForm):
    invalid_message = "username e password são obrigatórios"

    username = StringField("Nick", validators=[DataRequired(), Length(max=32)], name="username")
    password = PasswordField("Senha", validators=[InputRequired(), Length(max=128)], name="password")


class ForgotPasswordForm(JsonForm):
    invalid_message = "Email inválido"

    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)], name="email")


class ResetPasswordForm(JsonForm):
    invalid_message = "A senha deve ter pelo menos 6 caracteres"

    password = PasswordField("Nova senha", validators=[InputRequired(), Length(min=MIN_PASSWORD_LENGTH, max=128)], name="password")
