from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from .errors import DomainError, PendingRequestExists
from .extensions import db
from .models import STATUS_APPROVED, STATUS_AWAITING, RankChangeRequest, TagRequest


def has_awaiting_request(member_id: int, kind: str | None = None) -> bool:
    query = RankChangeRequest.query.filter_by(affected_id=member_id, status=STATUS_AWAITING)
    if kind is not None:
        query = query.filter_by(kind=kind)
    return db.session.query(query.exists()).scalar()


def has_open_tag_request(owner_id: int) -> bool:
    query = TagRequest.query.filter(
        TagRequest.owner_id == owner_id,
        TagRequest.status.in_((STATUS_AWAITING, STATUS_APPROVED)),
    )
    return db.session.query(query.exists()).scalar()


def insert_guarded(row, error: type[DomainError] = PendingRequestExists):
    """Insert ``row`` relying on its unique index; a violation becomes ``error``.

    The read-side checks above only produce a friendly message early. The index
    is what keeps two simultaneous requests from both being stored.
    """
    db.session.add(row)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise error()
    return row
