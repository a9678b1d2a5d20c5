from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from .. import ranks
from ..errors import SellerNotFound, ValidationFailed
from ..extensions import db
from ..members import ensure_member, find_by_email
from ..models import KIND_SALE, STATUS_APPROVED, RankChangeRequest


@dataclass(frozen=True)
class SaleResult:
    buyer_nick: str
    buyer_id: int
    previous_rank: int
    new_rank: int
    seller_nick: str
    created_new_member: bool

    @property
    def message(self) -> str:
        rank_name = ranks.name_of(self.new_rank)
        if self.created_new_member:
            return f"Novo militar {self.buyer_nick} cadastrado com patente {rank_name}"
        return f"Militar {self.buyer_nick} promovido para {rank_name}"

    def to_dict(self) -> dict:
        return {
            "buyerNick": self.buyer_nick,
            "buyerId": self.buyer_id,
            "previousRank": self.previous_rank,
            "newRank": self.new_rank,
            "seller": self.seller_nick,
            "createdNewMember": self.created_new_member,
        }


def sell(seller_email: str, seller_tag: str, buyer_nick: str, purchased_rank_id: int) -> SaleResult:
    """Grant ``purchased_rank_id`` to ``buyer_nick`` directly.

    Sales skip the pending-request guard and the hierarchy checks: any rank can
    be set, including a lower one. The member write and the history row are
    committed separately.
    """
    seller = find_by_email(seller_email)
    if not seller:
        raise SellerNotFound()

    if not ranks.is_valid(purchased_rank_id):
        raise ValidationFailed("Patente inválida")

    seller_tag = seller_tag.strip()
    buyer, created = ensure_member(
        buyer_nick,
        rank_id=purchased_rank_id,
        has_contract=True,
        active=True,
        has_system_access=False,
        promoter_tag=seller_tag,
    )

    if created:
        previous_rank = ranks.MIN_RANK_ID
    else:
        previous_rank = buyer.rank_id
        buyer.rank_id = purchased_rank_id
        buyer.active = True
        buyer.has_contract = True
        buyer.promoter_tag = seller_tag
        db.session.commit()

    db.session.add(
        RankChangeRequest(
            promoter_id=seller.id,
            affected_id=buyer.id,
            previous_rank_id=previous_rank,
            new_rank_id=purchased_rank_id,
            kind=KIND_SALE,
            reason=f"Venda de cargo realizada por {seller.nick}",
            status=STATUS_APPROVED,
            promoter_tag=seller_tag,
        )
    )
    db.session.commit()

    current_app.logger.info(
        "Sale recorded buyer=%s %s -> %s seller=%s new_member=%s",
        buyer.nick,
        previous_rank,
        purchased_rank_id,
        seller.nick,
        created,
    )
    return SaleResult(
        buyer_nick=buyer.nick,
        buyer_id=buyer.id,
        previous_rank=previous_rank,
        new_rank=purchased_rank_id,
        seller_nick=seller.nick,
        created_new_member=created,
    )
