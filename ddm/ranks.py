from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RankInfo:
    id: int
    name: str


# Ordered by id; the last entry is the ceiling for promotions.
RANKS: tuple[RankInfo, ...] = (
    RankInfo(1, "Soldado"),
    RankInfo(2, "Cabo"),
    RankInfo(3, "Sargento"),
    RankInfo(4, "Subtenente"),
    RankInfo(5, "Aspirante a oficial"),
    RankInfo(6, "Tenente"),
    RankInfo(7, "Capitao"),
    RankInfo(8, "Major"),
    RankInfo(9, "Coronel"),
    RankInfo(10, "General"),
    RankInfo(11, "Marechal"),
    RankInfo(12, "Comandante"),
    RankInfo(13, "Comandante-geral"),
)

UNKNOWN_RANK_NAME = "Patente desconhecida"

_BY_ID = {rank.id: rank for rank in RANKS}

MIN_RANK_ID = RANKS[0].id
MAX_RANK_ID = RANKS[-1].id


def get_rank(rank_id: int | None) -> RankInfo | None:
    if rank_id is None:
        return None
    return _BY_ID.get(rank_id)


def is_valid(rank_id: int | None) -> bool:
    return get_rank(rank_id) is not None


def rank_after(rank_id: int) -> RankInfo | None:
    return get_rank(rank_id + 1)


def rank_before(rank_id: int) -> RankInfo | None:
    return get_rank(rank_id - 1)


def name_of(rank_id: int | None) -> str:
    """Rank name for display; unknown ids come from stale rows and must not fail."""
    rank = get_rank(rank_id)
    return rank.name if rank else UNKNOWN_RANK_NAME


def id_by_name(name: str) -> int | None:
    wanted = (name or "").strip().lower()
    for rank in RANKS:
        if rank.name.lower() == wanted:
            return rank.id
    return None
