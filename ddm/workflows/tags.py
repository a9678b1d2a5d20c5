from __future__ import annotations

from flask import current_app

from ..errors import DuplicateTagRequest, ValidationFailed
from ..guards import has_open_tag_request, insert_guarded
from ..models import STATUS_AWAITING, Member, TagRequest


def normalize_tag(tag: str | None) -> str:
    tag = (tag or "").strip()
    if len(tag) != 3 or not tag.isalpha():
        raise ValidationFailed("A TAG deve conter exatamente 3 letras.")
    return tag.upper()


def request_tag(member: Member, tag: str | None) -> TagRequest:
    requested = normalize_tag(tag)

    if has_open_tag_request(member.id):
        raise DuplicateTagRequest()

    row = TagRequest(owner_id=member.id, requested_tag=requested, status=STATUS_AWAITING)
    insert_guarded(row, DuplicateTagRequest)

    current_app.logger.info("Tag [%s] requested by %s", requested, member.nick)
    return row
