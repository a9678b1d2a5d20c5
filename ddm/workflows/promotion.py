from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from .. import ranks
from ..errors import (
    AffectedNotFoundOrInactive,
    AlreadyAtMaxRank,
    AlreadyAtMinRank,
    PendingRequestExists,
    PromoterNotFound,
    RequestAlreadyResolved,
    RequestNotFound,
    StaleRankChange,
)
from ..extensions import db
from ..guards import has_awaiting_request, insert_guarded
from ..members import find_by_email, find_by_nick
from ..models import (
    KIND_PROMOTION,
    KIND_PUNISHMENT,
    STATUS_APPROVED,
    STATUS_AWAITING,
    STATUS_REJECTED,
    RankChangeRequest,
)


@dataclass(frozen=True)
class RankChangeResult:
    request_id: int
    affected_nick: str
    affected_id: int
    previous_rank_name: str
    new_rank_name: str
    kind: str
    status: str

    def to_dict(self) -> dict:
        return {
            "requestId": self.request_id,
            "affectedNick": self.affected_nick,
            "affectedId": self.affected_id,
            "previousRankName": self.previous_rank_name,
            "newRankName": self.new_rank_name,
            "kind": self.kind,
            "status": self.status,
        }


def promote(promoter_email: str, affected_nick: str, reason: str, permission: str | None = None) -> RankChangeResult:
    return _request_rank_change(
        KIND_PROMOTION,
        promoter_email,
        affected_nick,
        reason,
        permission,
    )


def punish(promoter_email: str, affected_nick: str, reason: str, permission: str | None = None) -> RankChangeResult:
    return _request_rank_change(
        KIND_PUNISHMENT,
        promoter_email,
        affected_nick,
        reason,
        permission,
    )


def _request_rank_change(
    kind: str,
    promoter_email: str,
    affected_nick: str,
    reason: str,
    permission: str | None,
) -> RankChangeResult:
    promoter = find_by_email(promoter_email)
    if not promoter:
        raise PromoterNotFound()

    affected = find_by_nick(affected_nick, active_only=True)
    if not affected:
        raise AffectedNotFoundOrInactive()

    if kind == KIND_PROMOTION:
        target = ranks.rank_after(affected.rank_id)
        if target is None:
            raise AlreadyAtMaxRank()
    else:
        target = ranks.rank_before(affected.rank_id)
        if target is None:
            raise AlreadyAtMinRank()

    # Any awaiting request blocks a new one, whatever its kind.
    if has_awaiting_request(affected.id):
        raise PendingRequestExists()

    row = RankChangeRequest(
        promoter_id=promoter.id,
        affected_id=affected.id,
        previous_rank_id=affected.rank_id,
        new_rank_id=target.id,
        kind=kind,
        reason=reason.strip(),
        permission=(permission or "").strip() or None,
        status=STATUS_AWAITING,
        promoter_tag=promoter.tag,
    )
    insert_guarded(row)

    current_app.logger.info(
        "Rank change requested kind=%s affected=%s %s -> %s by=%s",
        kind,
        affected.nick,
        affected.rank_id,
        target.id,
        promoter.nick,
    )
    return RankChangeResult(
        request_id=row.id,
        affected_nick=affected.nick,
        affected_id=affected.id,
        previous_rank_name=ranks.name_of(affected.rank_id),
        new_rank_name=target.name,
        kind=kind,
        status=STATUS_AWAITING,
    )


def resolve_request(request_id: int, *, approve: bool) -> RankChangeRequest:
    """Approve or reject an awaiting promotion/punishment.

    Approval is the only place a promotion or punishment touches the member's
    rank, and only while the member still holds the rank the request started
    from. A sale in between makes the request stale; it can still be rejected.
    """
    row = db.session.get(RankChangeRequest, request_id)
    if not row:
        raise RequestNotFound()
    if row.status != STATUS_AWAITING:
        raise RequestAlreadyResolved()
    if approve and row.affected.rank_id != row.previous_rank_id:
        raise StaleRankChange()

    row.status = STATUS_APPROVED if approve else STATUS_REJECTED
    row.resolved_at = datetime.utcnow()
    if approve:
        row.affected.rank_id = row.new_rank_id
    db.session.commit()

    current_app.logger.info("Rank change request %s %s", row.id, row.status)
    return row
