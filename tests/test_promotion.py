import pytest

from ddm import ranks
from ddm.errors import (
    AffectedNotFoundOrInactive,
    AlreadyAtMaxRank,
    AlreadyAtMinRank,
    PendingRequestExists,
    PromoterNotFound,
    RequestAlreadyResolved,
)
from ddm.extensions import db
from ddm.guards import has_awaiting_request, insert_guarded
from ddm.models import RankChangeRequest
from ddm.workflows.promotion import promote, punish, resolve_request


def test_promote_alice_then_pending_request_blocks_second(commander, make_member):
    alice = make_member("Alice")

    result = promote("cmd@ddm.com.br", "Alice", "Bom desempenho")

    assert result.previous_rank_name == "Soldado"
    assert result.new_rank_name == "Cabo"
    assert result.status == "awaiting"
    assert has_awaiting_request(alice.id, "promotion")

    with pytest.raises(PendingRequestExists):
        promote("cmd@ddm.com.br", "Alice", "De novo")

    assert RankChangeRequest.query.filter_by(affected_id=alice.id).count() == 1


def test_promote_does_not_touch_member_rank(commander, make_member):
    alice = make_member("Alice", rank_id=3)
    promote("cmd@ddm.com.br", "Alice", "Mérito")
    db.session.refresh(alice)
    assert alice.rank_id == 3


def test_promote_records_promoter_tag_and_permission(commander, make_member):
    make_member("Alice")
    promote("cmd@ddm.com.br", "Alice", "Mérito", "Autorizado pelo CMD")
    row = RankChangeRequest.query.one()
    assert row.promoter_tag == "CMD"
    assert row.permission == "Autorizado pelo CMD"
    assert row.previous_rank_id == 1
    assert row.new_rank_id == 2


@pytest.mark.parametrize("rank_id", range(1, ranks.MAX_RANK_ID))
def test_promote_yields_next_rank_for_every_rank_below_max(commander, make_member, rank_id):
    make_member("Alvo", rank_id=rank_id)
    result = promote("cmd@ddm.com.br", "Alvo", "Mérito")
    assert result.new_rank_name == ranks.name_of(rank_id + 1)


def test_promote_at_max_rank_fails(commander, make_member):
    make_member("Chefe", rank_id=ranks.MAX_RANK_ID)
    with pytest.raises(AlreadyAtMaxRank):
        promote("cmd@ddm.com.br", "Chefe", "Mérito")
    assert RankChangeRequest.query.count() == 0


def test_promote_unknown_promoter(make_member):
    make_member("Alice")
    with pytest.raises(PromoterNotFound):
        promote("ninguem@ddm.com.br", "Alice", "Mérito")


def test_promote_inactive_or_missing_affected(commander, make_member):
    make_member("Inativo", active=False)
    with pytest.raises(AffectedNotFoundOrInactive):
        promote("cmd@ddm.com.br", "Inativo", "Mérito")
    with pytest.raises(AffectedNotFoundOrInactive):
        promote("cmd@ddm.com.br", "Fantasma", "Mérito")


def test_punish_moves_down_and_stops_at_soldado(commander, make_member):
    make_member("Cabo Bruno", rank_id=2)
    make_member("Recruta")

    result = punish("cmd@ddm.com.br", "Cabo Bruno", "Indisciplina")
    assert result.kind == "punishment"
    assert result.new_rank_name == "Soldado"

    with pytest.raises(AlreadyAtMinRank):
        punish("cmd@ddm.com.br", "Recruta", "Indisciplina")


def test_pending_punishment_blocks_promotion(commander, make_member):
    make_member("Bruno", rank_id=4)
    punish("cmd@ddm.com.br", "Bruno", "Indisciplina")
    with pytest.raises(PendingRequestExists):
        promote("cmd@ddm.com.br", "Bruno", "Mérito")


def test_unique_index_rejects_second_awaiting_row(commander, make_member):
    alice = make_member("Alice")
    promote("cmd@ddm.com.br", "Alice", "Mérito")

    # Simulates a request that passed the read-side check concurrently.
    duplicate = RankChangeRequest(
        promoter_id=commander.id,
        affected_id=alice.id,
        previous_rank_id=1,
        new_rank_id=2,
        kind="promotion",
        reason="Corrida",
        status="awaiting",
    )
    with pytest.raises(PendingRequestExists):
        insert_guarded(duplicate)
    assert RankChangeRequest.query.filter_by(affected_id=alice.id, status="awaiting").count() == 1


def test_resolve_request_applies_rank_and_frees_the_slot(commander, make_member):
    alice = make_member("Alice")
    result = promote("cmd@ddm.com.br", "Alice", "Mérito")

    row = resolve_request(result.request_id, approve=True)
    assert row.status == "approved"
    db.session.refresh(alice)
    assert alice.rank_id == 2

    with pytest.raises(RequestAlreadyResolved):
        resolve_request(result.request_id, approve=False)

    again = promote("cmd@ddm.com.br", "Alice", "Mérito")
    assert again.new_rank_name == "Sargento"


def test_rejected_request_keeps_rank(commander, make_member):
    alice = make_member("Alice")
    result = promote("cmd@ddm.com.br", "Alice", "Mérito")
    resolve_request(result.request_id, approve=False)
    db.session.refresh(alice)
    assert alice.rank_id == 1
    assert not has_awaiting_request(alice.id)


def test_promotion_route(client, commander, make_member):
    make_member("Alice")
    resp = client.post(
        "/api/promotion",
        json={"affectedNick": "Alice", "reason": "Mérito", "email": "cmd@ddm.com.br"},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["affectedNick"] == "Alice"
    assert body["data"]["previousRankName"] == "Soldado"
    assert body["data"]["newRankName"] == "Cabo"

    resp = client.post(
        "/api/promotion",
        json={"affectedNick": "Alice", "reason": "Mérito", "email": "cmd@ddm.com.br"},
    )
    assert resp.status_code == 400
    assert "aguardando" in resp.get_json()["error"]


def test_promotion_route_validation_and_not_found(client, commander):
    resp = client.post("/api/promotion", json={"affectedNick": "Alice", "reason": "  ", "email": "cmd@ddm.com.br"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Campos obrigatórios: afetado, motivo e email"

    resp = client.post(
        "/api/promotion",
        json={"affectedNick": "Alice", "reason": "Mérito", "email": "outro@ddm.com.br"},
    )
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Promotor não encontrado"


def test_resolve_route(client, commander, make_member):
    make_member("Alice")
    result = promote("cmd@ddm.com.br", "Alice", "Mérito")

    resp = client.post(f"/api/requests/{result.request_id}/resolve", json={"decision": "approve"})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "approved"

    resp = client.post("/api/requests/9999/resolve", json={"decision": "approve"})
    assert resp.status_code == 404


def test_promotion_route_rejects_non_string_values(client, commander, make_member):
    make_member("Alice")
    resp = client.post(
        "/api/promotion",
        json={"affectedNick": 123, "reason": "Mérito", "email": "cmd@ddm.com.br"},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Campos obrigatórios: afetado, motivo e email"
    assert RankChangeRequest.query.count() == 0

    resp = client.post(
        "/api/promotion",
        json={"affectedNick": "Alice", "reason": ["Mérito"], "email": "cmd@ddm.com.br"},
    )
    assert resp.status_code == 400


def test_resolve_route_refuses_stale_approval(client, commander, make_member):
    make_member("Veterano", rank_id=9)
    result = promote("cmd@ddm.com.br", "Veterano", "Mérito")
    client.post(
        "/api/sell",
        json={"buyerNick": "Veterano", "purchasedRankId": 2, "sellerEmail": "cmd@ddm.com.br", "sellerTag": "CMD"},
    )

    resp = client.post(f"/api/requests/{result.request_id}/resolve", json={"decision": "approve"})
    assert resp.status_code == 409
    db.session.rollback()
    assert db.session.get(RankChangeRequest, result.request_id).status == "awaiting"
