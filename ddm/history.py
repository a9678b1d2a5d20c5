from __future__ import annotations

from datetime import datetime

from . import ranks
from .errors import MemberNotFound, ValidationFailed
from .members import find_by_email, find_by_nick
from .models import (
    KIND_PROMOTION,
    KIND_PUNISHMENT,
    CompanyMembership,
    CourseCompletion,
    Member,
    RankChangeRequest,
    TagRequest,
)


def mission_text(member: Member) -> str:
    """Motto members are expected to wear: ``[DDM] <rank> [<tag>]``."""
    return f"[DDM] {ranks.name_of(member.rank_id)} [{member.promoter_tag or member.tag or 'DDM'}]"


def _applier(member: Member | None) -> dict:
    if member is None:
        return {"applier": "Desconhecido", "applierRank": "", "applierTag": ""}
    return {
        "applier": member.nick,
        "applierRank": ranks.name_of(member.rank_id),
        "applierTag": member.tag or "",
    }


def _course_items(member: Member) -> list[dict]:
    items = []
    rows = CourseCompletion.query.filter_by(student_id=member.id).all()
    for row in rows:
        when = datetime.combine(row.date_applied, row.time_applied)
        items.append(
            {
                "id": row.id,
                "type": "course",
                "title": row.course.name if row.course else f"Curso {row.course_id}",
                "courseSigla": row.course.sigla if row.course else "N/A",
                "date": when,
                "icon": "📚",
                **_applier(row.instructor),
            }
        )
    return items


def _rank_change_title(row: RankChangeRequest) -> str:
    new_name = ranks.name_of(row.new_rank_id)
    if row.kind == KIND_PROMOTION:
        return f"Promoção para {new_name}"
    if row.kind == KIND_PUNISHMENT:
        return f"Rebaixamento para {new_name}"
    return f"Compra de patente: {new_name}"


def _rank_change_items(member: Member) -> list[dict]:
    items = []
    rows = RankChangeRequest.query.filter_by(affected_id=member.id).all()
    for row in rows:
        items.append(
            {
                "id": row.id,
                "type": row.kind,
                "title": _rank_change_title(row),
                "date": row.created_at,
                "status": row.status,
                "icon": "⚠️" if row.kind == KIND_PUNISHMENT else "⭐",
                "reason": row.reason,
                "previousRank": ranks.name_of(row.previous_rank_id),
                "newRank": ranks.name_of(row.new_rank_id),
                **_applier(row.promoter),
            }
        )
    return items


def _tag_items(member: Member) -> list[dict]:
    return [
        {
            "id": row.id,
            "type": "tag",
            "title": f"Criação de TAG: [{row.requested_tag}]",
            "date": row.created_at,
            "status": row.status,
            "icon": "🏷️",
            "applier": "Sistema",
            "applierRank": "",
            "applierTag": "",
        }
        for row in TagRequest.query.filter_by(owner_id=member.id).all()
    ]


def build_history(member: Member) -> list[dict]:
    """Courses, rank changes and tag requests, newest first."""
    items = _course_items(member) + _rank_change_items(member) + _tag_items(member)
    items.sort(key=lambda item: item["date"], reverse=True)
    for item in items:
        item["date"] = item["date"].isoformat()
    return items


def member_companies(member: Member) -> list[dict]:
    rows = CompanyMembership.query.filter_by(member_id=member.id).order_by(CompanyMembership.id.asc()).all()
    return [
        {"id": row.id, "companyId": row.company_id, "name": row.company.name, "sigla": row.company.sigla}
        for row in rows
    ]


def build_profile(*, nick: str | None = None, email: str | None = None, viewer: Member | None = None) -> dict:
    if not (nick or "").strip() and not (email or "").strip():
        raise ValidationFailed("Nick ou email é obrigatório")

    member = find_by_email(email) if (email or "").strip() else find_by_nick(nick)
    if not member:
        raise MemberNotFound()

    own_profile = viewer is not None and viewer.id == member.id
    data = {
        "member": {**member.to_dict(include_email=own_profile), "mission": mission_text(member)},
        "history": build_history(member),
    }
    if own_profile:
        data["companies"] = member_companies(member)
    return data


def company_membership(email: str | None, company_id: int | None = None) -> dict:
    """Companies of the member with ``email``, or whether they belong to ``company_id``."""
    if not (email or "").strip():
        raise ValidationFailed("Email é obrigatório para verificar companhia")

    member = find_by_email(email)
    if not member:
        raise MemberNotFound()

    if company_id is not None:
        row = CompanyMembership.query.filter_by(member_id=member.id, company_id=company_id).first()
        return {"isMember": row is not None}
    return {"companies": member_companies(member)}
