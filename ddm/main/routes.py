from __future__ import annotations

from flask import Blueprint, jsonify

from ..ranks import RANKS

bp = Blueprint("main", __name__)


@bp.get("/healthz")
def healthz():
    return jsonify(ok=True)


@bp.get("/ranks")
def rank_table():
    return jsonify(ranks=[{"id": rank.id, "name": rank.name} for rank in RANKS])
