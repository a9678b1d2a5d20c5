import pytest

from ddm.errors import SellerNotFound, StaleRankChange, ValidationFailed
from ddm.extensions import db
from ddm.models import Member, RankChangeRequest
from ddm.workflows.promotion import promote, resolve_request
from ddm.workflows.sale import sell


def test_sale_to_new_nick_creates_exactly_one_member(commander):
    result = sell("cmd@ddm.com.br", "CMD", "Comprador", 6)

    assert result.created_new_member is True
    assert result.previous_rank == 1
    assert result.new_rank == 6

    buyers = Member.query.filter_by(nick="Comprador").all()
    assert len(buyers) == 1
    buyer = buyers[0]
    assert buyer.rank_id == 6
    assert buyer.has_contract is True
    assert buyer.active is True
    assert buyer.has_system_access is False
    assert buyer.promoter_tag == "CMD"
    assert buyer.email is None


def test_sale_to_existing_nick_updates_in_place(commander, make_member):
    make_member("Cliente", rank_id=3, active=False)

    result = sell("cmd@ddm.com.br", "VND", "Cliente", 8)

    assert result.created_new_member is False
    assert result.previous_rank == 3
    assert Member.query.filter_by(nick="Cliente").count() == 1
    buyer = Member.query.filter_by(nick="Cliente").one()
    assert buyer.rank_id == 8
    assert buyer.active is True
    assert buyer.has_contract is True
    assert buyer.promoter_tag == "VND"


def test_sale_is_logged_as_approved_history(commander):
    sell("cmd@ddm.com.br", "CMD", "Comprador", 4)
    row = RankChangeRequest.query.one()
    assert row.kind == "sale"
    assert row.status == "approved"
    assert row.previous_rank_id == 1
    assert row.new_rank_id == 4
    assert row.reason == "Venda de cargo realizada por Comandante"


def test_sale_can_downgrade_and_ignores_pending_requests(commander, make_member):
    make_member("Veterano", rank_id=9)
    promote("cmd@ddm.com.br", "Veterano", "Mérito")

    result = sell("cmd@ddm.com.br", "CMD", "Veterano", 2)

    assert result.previous_rank == 9
    assert Member.query.filter_by(nick="Veterano").one().rank_id == 2


def test_promotion_filed_before_a_sale_cannot_be_approved(commander, make_member):
    make_member("Veterano", rank_id=9)
    pending = promote("cmd@ddm.com.br", "Veterano", "Mérito")
    sell("cmd@ddm.com.br", "CMD", "Veterano", 2)

    with pytest.raises(StaleRankChange):
        resolve_request(pending.request_id, approve=True)
    db.session.rollback()

    veterano = Member.query.filter_by(nick="Veterano").one()
    assert veterano.rank_id == 2

    row = resolve_request(pending.request_id, approve=False)
    assert row.status == "rejected"
    assert Member.query.filter_by(nick="Veterano").one().rank_id == 2


def test_repeated_sale_to_same_new_nick_never_duplicates(commander):
    first = sell("cmd@ddm.com.br", "CMD", "Novato", 2)
    second = sell("cmd@ddm.com.br", "CMD", "Novato", 3)
    assert first.created_new_member is True
    assert second.created_new_member is False
    assert second.previous_rank == 2
    assert Member.query.filter_by(nick="Novato").count() == 1


def test_sale_with_unknown_seller_or_rank(commander):
    with pytest.raises(SellerNotFound):
        sell("ninguem@ddm.com.br", "CMD", "Comprador", 2)
    with pytest.raises(ValidationFailed):
        sell("cmd@ddm.com.br", "CMD", "Comprador", 42)
    assert Member.query.filter_by(nick="Comprador").first() is None


def test_sell_route(client, commander):
    resp = client.post(
        "/api/sell",
        json={"buyerNick": "Comprador", "purchasedRankId": 5, "sellerEmail": "cmd@ddm.com.br", "sellerTag": "CMD"},
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data == {
        "buyerNick": "Comprador",
        "buyerId": data["buyerId"],
        "previousRank": 1,
        "newRank": 5,
        "seller": "Comandante",
        "createdNewMember": True,
    }
    assert "Aspirante a oficial" in resp.get_json()["message"]


def test_sell_route_errors(client, commander):
    resp = client.post("/api/sell", json={"buyerNick": "Comprador", "sellerEmail": "cmd@ddm.com.br"})
    assert resp.status_code == 400

    resp = client.post(
        "/api/sell",
        json={"buyerNick": "Comprador", "purchasedRankId": 5, "sellerEmail": "x@ddm.com.br", "sellerTag": "CMD"},
    )
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Vendedor não encontrado"
    db.session.rollback()
    assert Member.query.filter_by(nick="Comprador").first() is None


def test_sell_route_accepts_numeric_rank_but_not_booleans(client, commander):
    payload = {"buyerNick": "Comprador", "purchasedRankId": True, "sellerEmail": "cmd@ddm.com.br", "sellerTag": "CMD"}
    resp = client.post("/api/sell", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Dados obrigatórios faltando para venda"

    payload["purchasedRankId"] = "4"
    resp = client.post("/api/sell", json=payload)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["newRank"] == 4
