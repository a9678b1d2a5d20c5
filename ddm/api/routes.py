from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from ..errors import ValidationFailed
from ..forms import validated
from ..history import build_profile, company_membership
from ..workflows.courses import (
    CompanyCourseRequest,
    LegacyCourseRequest,
    apply_course,
    enlist_in_company,
    list_company_courses,
)
from ..workflows.promotion import promote, punish, resolve_request
from ..workflows.sale import sell
from ..workflows.tags import request_tag
from .forms import (
    CompanyCourseForm,
    CompanyMemberForm,
    LegacyCourseForm,
    RankChangeForm,
    ResolveRequestForm,
    SaleForm,
    TagForm,
)

bp = Blueprint("api", __name__, url_prefix="/api")


@bp.post("/promotion")
@login_required
def promotion():
    form = validated(RankChangeForm())
    result = promote(form.email.data, form.affected_nick.data, form.reason.data, form.permission.data)
    return jsonify(
        {
            "success": True,
            "message": "Promoção registrada com sucesso",
            "data": result.to_dict(),
        }
    )


@bp.post("/punishment")
@login_required
def punishment():
    form = validated(RankChangeForm())
    result = punish(form.email.data, form.affected_nick.data, form.reason.data, form.permission.data)
    return jsonify(
        {
            "success": True,
            "message": "Punição registrada com sucesso",
            "data": result.to_dict(),
        }
    )


@bp.post("/requests/<int:request_id>/resolve")
@login_required
def resolve(request_id: int):
    form = validated(ResolveRequestForm())
    row = resolve_request(request_id, approve=form.decision.data == "approve")
    return jsonify({"success": True, "status": row.status})


@bp.post("/sell")
@login_required
def sale():
    form = validated(SaleForm())
    result = sell(
        form.seller_email.data,
        form.seller_tag.data,
        form.buyer_nick.data,
        form.purchased_rank_id.data,
    )
    return jsonify({"success": True, "message": result.message, "data": result.to_dict()})


@bp.get("/courses")
def courses():
    company_param = request.args.get("company")
    if not company_param:
        raise ValidationFailed("Parâmetro company é obrigatório")
    company, rows = list_company_courses(company_param)
    return jsonify({"company": company.to_dict(), "courses": [row.to_dict() for row in rows]})


@bp.post("/courses/company")
@login_required
def company_course():
    form = validated(CompanyCourseForm())
    result = apply_course(
        CompanyCourseRequest(
            course_id=form.course_id.data,
            company_id=form.company_id.data,
            student_nick=form.student_nick.data,
            date_applied=form.date.data,
            time_applied=form.time.data,
            instructor_email=form.instructor_email.data,
        )
    )
    return jsonify({"success": True, "message": "Curso aplicado com sucesso", "data": result.to_dict()})


@bp.post("/courses/legacy")
@login_required
def legacy_course():
    form = validated(LegacyCourseForm())
    result = apply_course(
        LegacyCourseRequest(
            course_sigla=form.course_sigla.data,
            student_nick=form.student_nick.data,
            date_applied=form.date.data,
            time_applied=form.time.data,
            instructor_email=form.instructor_email.data,
        )
    )
    return jsonify({"success": True, "message": "Curso aplicado com sucesso", "data": result.to_dict()})


@bp.post("/companies/<company>/members")
@login_required
def company_members(company: str):
    form = validated(CompanyMemberForm())
    row, created = enlist_in_company(company, form.nick.data)
    return jsonify(
        {
            "success": True,
            "created": created,
            "data": {"memberId": row.member_id, "companyId": row.company_id, "sigla": row.company.sigla},
        }
    )


@bp.post("/tags")
@login_required
def tags():
    form = validated(TagForm())
    row = request_tag(current_user, form.tag.data)
    return jsonify({"success": True, "tag": row.requested_tag, "status": row.status})


@bp.get("/profiles")
def profiles():
    viewer = current_user if current_user.is_authenticated else None
    data = build_profile(
        nick=request.args.get("nick"),
        email=request.args.get("email"),
        viewer=viewer,
    )
    return jsonify({"success": True, "data": data})


@bp.get("/profiles/companies")
def profile_companies():
    company_id = request.args.get("companyId", type=int)
    return jsonify(company_membership(request.args.get("email"), company_id))
