from __future__ import annotations

from datetime import datetime

from flask import jsonify
from flask_login import UserMixin
from sqlalchemy import text
from werkzeug.security import check_password_hash, generate_password_hash

from .extensions import db, login_manager


STATUS_AWAITING = "awaiting"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

KIND_PROMOTION = "promotion"
KIND_PUNISHMENT = "punishment"
KIND_SALE = "sale"


class Rank(db.Model):
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(60), unique=True, nullable=False)


class Member(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    nick = db.Column(db.String(32), unique=True, nullable=False, index=True)
    # NULL instead of "" so the unique constraint only covers real addresses.
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    rank_id = db.Column(db.Integer, db.ForeignKey("rank.id"), nullable=False, default=1)
    active = db.Column(db.Boolean, nullable=False, default=True)
    has_system_access = db.Column(db.Boolean, nullable=False, default=False)
    has_contract = db.Column(db.Boolean, nullable=False, default=False)
    tag = db.Column(db.String(3), nullable=True)
    promoter_tag = db.Column(db.String(16), nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    rank = db.relationship("Rank")

    @property
    def is_active(self) -> bool:
        return bool(self.active)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self, *, include_email: bool = True) -> dict:
        data = {
            "id": self.id,
            "nick": self.nick,
            "rankId": self.rank_id,
            "rankName": self.rank.name if self.rank else None,
            "active": bool(self.active),
            "hasSystemAccess": bool(self.has_system_access),
            "hasContract": bool(self.has_contract),
            "tag": self.tag,
            "promoterTag": self.promoter_tag,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if include_email:
            data["email"] = self.email
        return data


@login_manager.user_loader
def load_member(member_id: str):
    return db.session.get(Member, int(member_id))


@login_manager.unauthorized_handler
def _unauthorized():
    return jsonify({"error": "Sessão inválida."}), 401


class RankChangeRequest(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    promoter_id = db.Column(db.Integer, db.ForeignKey("member.id"), nullable=False, index=True)
    affected_id = db.Column(db.Integer, db.ForeignKey("member.id"), nullable=False, index=True)
    previous_rank_id = db.Column(db.Integer, db.ForeignKey("rank.id"), nullable=False)
    new_rank_id = db.Column(db.Integer, db.ForeignKey("rank.id"), nullable=False)

    kind = db.Column(db.String(20), nullable=False)  # promotion/punishment/sale
    reason = db.Column(db.Text, nullable=False)
    permission = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_AWAITING)  # awaiting/approved/rejected
    promoter_tag = db.Column(db.String(16), nullable=True)
    resolved_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    promoter = db.relationship("Member", foreign_keys=[promoter_id])
    affected = db.relationship("Member", foreign_keys=[affected_id])

    __table_args__ = (
        db.Index(
            "uq_rank_request_awaiting_member",
            "affected_id",
            unique=True,
            sqlite_where=text("status = 'awaiting'"),
            postgresql_where=text("status = 'awaiting'"),
        ),
    )


class Company(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    sigla = db.Column(db.String(10), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)

    def to_dict(self) -> dict:
        return {"id": self.id, "sigla": self.sigla, "name": self.name}


class Course(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("company.id"), nullable=False, index=True)
    sigla = db.Column(db.String(10), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    mandatory = db.Column(db.Boolean, nullable=False, default=False)
    rank_id = db.Column(db.Integer, db.ForeignKey("rank.id"), nullable=True)

    company = db.relationship("Company")

    __table_args__ = (db.UniqueConstraint("company_id", "sigla", name="uq_course_company_sigla"),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sigla": self.sigla,
            "name": self.name,
            "mandatory": bool(self.mandatory),
            "rankId": self.rank_id,
        }


class CompanyMembership(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("member.id"), nullable=False, index=True)
    company_id = db.Column(db.Integer, db.ForeignKey("company.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    member = db.relationship("Member")
    company = db.relationship("Company")

    __table_args__ = (db.UniqueConstraint("member_id", "company_id", name="uq_company_membership"),)


class CourseCompletion(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("course.id"), nullable=False, index=True)
    instructor_id = db.Column(db.Integer, db.ForeignKey("member.id"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("member.id"), nullable=False, index=True)
    date_applied = db.Column(db.Date, nullable=False)
    time_applied = db.Column(db.Time, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    course = db.relationship("Course")
    instructor = db.relationship("Member", foreign_keys=[instructor_id])
    student = db.relationship("Member", foreign_keys=[student_id])

    __table_args__ = (db.UniqueConstraint("course_id", "student_id", name="uq_course_completion_student"),)


class TagRequest(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("member.id"), nullable=False, index=True)
    requested_tag = db.Column(db.String(3), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_AWAITING)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    owner = db.relationship("Member")

    __table_args__ = (
        db.Index(
            "uq_tag_request_open_owner",
            "owner_id",
            unique=True,
            sqlite_where=text("status IN ('awaiting', 'approved')"),
            postgresql_where=text("status IN ('awaiting', 'approved')"),
        ),
    )
