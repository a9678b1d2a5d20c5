from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import (
    AlreadyCompleted,
    CompanyNotFound,
    CourseNotFound,
    InstructorNotFound,
    MemberNotFound,
    StudentNotFound,
)
from ..extensions import db
from ..guards import insert_guarded
from ..members import ensure_member, find_by_email, find_by_nick
from ..models import Company, CompanyMembership, Course, CourseCompletion


# Applying one of these to an unknown nick enlists that nick as a new member.
FOUNDATIONAL_COURSES = frozenset({"CFI", "CFS"})

# Company owning the courses addressed by bare sigla.
LEGACY_COMPANY_SIGLA = "EFB"


@dataclass(frozen=True)
class CompanyCourseRequest:
    course_id: int
    company_id: int
    student_nick: str
    date_applied: date
    time_applied: time
    instructor_email: str

    def resolve_course(self) -> Course | None:
        return Course.query.filter_by(id=self.course_id, company_id=self.company_id).first()


@dataclass(frozen=True)
class LegacyCourseRequest:
    course_sigla: str
    student_nick: str
    date_applied: date
    time_applied: time
    instructor_email: str

    def resolve_course(self) -> Course | None:
        return (
            Course.query.join(Company)
            .filter(
                Company.sigla == LEGACY_COMPANY_SIGLA,
                Course.sigla == self.course_sigla.strip().upper(),
            )
            .first()
        )


CourseRequest = CompanyCourseRequest | LegacyCourseRequest


@dataclass(frozen=True)
class CourseResult:
    completion_id: int
    course_id: int
    course_sigla: str
    student_id: int
    student_nick: str
    created_member: bool

    def to_dict(self) -> dict:
        return {
            "completionId": self.completion_id,
            "courseId": self.course_id,
            "courseSigla": self.course_sigla,
            "studentId": self.student_id,
            "studentNick": self.student_nick,
            "createdMember": self.created_member,
        }


def apply_course(request: CourseRequest) -> CourseResult:
    instructor = find_by_email(request.instructor_email)
    if not instructor:
        raise InstructorNotFound()

    course = request.resolve_course()
    if not course:
        raise CourseNotFound()

    created = False
    if course.sigla in FOUNDATIONAL_COURSES:
        _, created = ensure_member(
            request.student_nick,
            active=True,
            has_system_access=False,
            promoter_tag=instructor.tag,
        )

    student = find_by_nick(request.student_nick)
    if not student:
        raise StudentNotFound()

    if CourseCompletion.query.filter_by(course_id=course.id, student_id=student.id).first():
        raise AlreadyCompleted()

    row = CourseCompletion(
        course_id=course.id,
        instructor_id=instructor.id,
        student_id=student.id,
        date_applied=request.date_applied,
        time_applied=request.time_applied,
    )
    insert_guarded(row, AlreadyCompleted)

    current_app.logger.info(
        "Course %s applied to %s by %s (new member: %s)",
        course.sigla,
        student.nick,
        instructor.nick,
        created,
    )
    return CourseResult(
        completion_id=row.id,
        course_id=course.id,
        course_sigla=course.sigla,
        student_id=student.id,
        student_nick=student.nick,
        created_member=created,
    )


def find_company(identifier: str | int | None) -> Company | None:
    """Look a company up by numeric id or by sigla."""
    value = str(identifier if identifier is not None else "").strip()
    if not value:
        return None
    if value.isdigit():
        return db.session.get(Company, int(value))
    return Company.query.filter_by(sigla=value.upper()).first()


def list_company_courses(identifier: str | int | None) -> tuple[Company, list[Course]]:
    company = find_company(identifier)
    if not company:
        raise CompanyNotFound()
    courses = Course.query.filter_by(company_id=company.id).order_by(Course.id.asc()).all()
    return company, courses


def enlist_in_company(identifier: str | int | None, nick: str) -> tuple[CompanyMembership, bool]:
    """Add the member called ``nick`` to a company; enlisting twice is a no-op."""
    company = find_company(identifier)
    if not company:
        raise CompanyNotFound()
    member = find_by_nick(nick)
    if not member:
        raise MemberNotFound()

    existing = CompanyMembership.query.filter_by(member_id=member.id, company_id=company.id).first()
    if existing:
        return existing, False

    row = CompanyMembership(member_id=member.id, company_id=company.id)
    db.session.add(row)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return CompanyMembership.query.filter_by(member_id=member.id, company_id=company.id).one(), False

    current_app.logger.info("Member %s enlisted in company %s", member.nick, company.sigla)
    return row, True
