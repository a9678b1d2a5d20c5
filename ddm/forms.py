from __future__ import annotations

from flask import request
from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField

from .errors import ValidationFailed


class JsonForm(FlaskForm):
    """Form fed from the JSON request body (Flask-WTF reads ``request.get_json()``).

    Values of the wrong JSON type are rejected before the fields process them.
    """

    invalid_message: str | None = None

    class Meta:
        csrf = False

    def __init__(self, *args, **kwargs):
        self._check_json_types(request.get_json(silent=True))
        super().__init__(*args, **kwargs)

    def _check_json_types(self, payload) -> None:
        if not isinstance(payload, dict):
            return
        for attr, unbound in self._unbound_fields:
            key = unbound.name or attr
            if key not in payload:
                continue
            if not _accepts(unbound.field_class, payload[key]):
                raise ValidationFailed(self.invalid_message)


def _accepts(field_class, value) -> bool:
    if isinstance(value, str):
        return True
    if value is None:
        # A null string is treated as missing; other fields cannot parse it.
        return issubclass(field_class, StringField)
    if isinstance(value, bool):
        return False
    if issubclass(field_class, IntegerField):
        return isinstance(value, int)
    return False


def validated(form: JsonForm) -> JsonForm:
    if form.validate_on_submit():
        return form
    errors = [msg for messages in form.errors.values() for msg in messages]
    raise ValidationFailed(form.invalid_message or (errors[0] if errors else None))
