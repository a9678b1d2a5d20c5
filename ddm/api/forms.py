from __future__ import annotations

from wtforms import DateField, IntegerField, StringField, TimeField
from wtforms.validators import AnyOf, DataRequired, InputRequired, Length, NumberRange, Optional

from ..forms import JsonForm


DATE_FORMATS = ["%Y-%m-%d", "%d/%m/%Y"]
TIME_FORMATS = ["%H:%M", "%H:%M:%S"]


class RankChangeForm(JsonForm):
    invalid_message = "Campos obrigatórios: afetado, motivo e email"

    affected_nick = StringField("Militar", validators=[DataRequired(), Length(max=32)], name="affectedNick")
    reason = StringField("Motivo", validators=[DataRequired()], name="reason")
    email = StringField("Email", validators=[DataRequired(), Length(max=255)], name="email")
    permission = StringField("Permissão", validators=[Optional(), Length(max=255)], name="permission")


class ResolveRequestForm(JsonForm):
    invalid_message = "Decisão deve ser approve ou reject"

    decision = StringField("Decisão", validators=[DataRequired(), AnyOf(["approve", "reject"])], name="decision")


class SaleForm(JsonForm):
    invalid_message = "Dados obrigatórios faltando para venda"

    buyer_nick = StringField("Comprador", validators=[DataRequired(), Length(max=32)], name="buyerNick")
    purchased_rank_id = IntegerField(
        "Patente",
        validators=[DataRequired(), NumberRange(min=1)],
        name="purchasedRankId",
    )
    seller_email = StringField("Email do vendedor", validators=[DataRequired(), Length(max=255)], name="sellerEmail")
    seller_tag = StringField("TAG do vendedor", validators=[DataRequired(), Length(max=16)], name="sellerTag")


class _CourseFields(JsonForm):
    invalid_message = "Todos os campos são obrigatórios"

    student_nick = StringField("Aluno", validators=[DataRequired(), Length(max=32)], name="studentNick")
    date = DateField("Data", validators=[DataRequired()], format=DATE_FORMATS, name="date")
    time = TimeField("Hora", validators=[DataRequired()], format=TIME_FORMATS, name="time")
    instructor_email = StringField("Instrutor", validators=[DataRequired(), Length(max=255)], name="instructorEmail")


class CompanyCourseForm(_CourseFields):
    course_id = IntegerField("Curso", validators=[DataRequired()], name="courseId")
    company_id = IntegerField("Companhia", validators=[DataRequired()], name="companyId")


class LegacyCourseForm(_CourseFields):
    course_sigla = StringField("Curso", validators=[DataRequired(), Length(max=10)], name="courseSigla")


class TagForm(JsonForm):
    invalid_message = "A TAG deve conter exatamente 3 letras."

    tag = StringField("TAG", validators=[InputRequired(), Length(min=3, max=3)], name="tag")


class CompanyMemberForm(JsonForm):
    invalid_message = "Nick é obrigatório"

    nick = StringField("Militar", validators=[DataRequired(), Length(max=32)], name="nick")
