from __future__ import annotations

import os

from . import ranks
from .extensions import db
from .models import Company, CompanyMembership, Course, Member, Rank


DEFAULT_COMPANIES = {
    "EFB": "Escola de Formação Básica",
}

# (company sigla, course sigla, name, mandatory)
DEFAULT_COURSES = (
    ("EFB", "CFI", "Curso de Formação Inicial", True),
    ("EFB", "CFS", "Curso de Formação de Sargentos", False),
    ("EFB", "CFC", "Curso de Formação de Cabos", False),
)


def ensure_seed_data() -> None:
    _ensure_ranks()
    _ensure_default_courses()
    _ensure_admin_member()


def _ensure_ranks() -> None:
    existing = {row.id: row for row in Rank.query.all()}
    for rank in ranks.RANKS:
        row = existing.get(rank.id)
        if row is None:
            db.session.add(Rank(id=rank.id, name=rank.name))
        elif row.name != rank.name:
            row.name = rank.name
    db.session.commit()


def _ensure_default_courses() -> None:
    companies = {}
    for sigla, name in DEFAULT_COMPANIES.items():
        company = Company.query.filter_by(sigla=sigla).first()
        if not company:
            company = Company(sigla=sigla, name=name)
            db.session.add(company)
            db.session.flush()
        companies[sigla] = company

    for company_sigla, sigla, name, mandatory in DEFAULT_COURSES:
        company = companies[company_sigla]
        if not Course.query.filter_by(company_id=company.id, sigla=sigla).first():
            db.session.add(Course(company_id=company.id, sigla=sigla, name=name, mandatory=mandatory))

    db.session.commit()


def _ensure_admin_member() -> None:
    nick = os.getenv("ADMIN_NICK", "").strip()
    email = os.getenv("ADMIN_EMAIL", "").strip().lower()
    password = os.getenv("ADMIN_PASSWORD", "")
    if not (nick and email and password):
        return

    if Member.query.filter_by(nick=nick).first():
        return

    admin = Member(
        nick=nick,
        email=email,
        rank_id=ranks.MAX_RANK_ID,
        active=True,
        has_system_access=True,
        has_contract=True,
    )
    admin.set_password(password)
    db.session.add(admin)
    db.session.flush()

    # The admin instructs the school courses.
    for sigla in DEFAULT_COMPANIES:
        company = Company.query.filter_by(sigla=sigla).one()
        db.session.add(CompanyMembership(member_id=admin.id, company_id=company.id))
    db.session.commit()
