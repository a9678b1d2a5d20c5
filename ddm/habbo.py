from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from urllib.parse import quote

import requests
from flask import current_app

from .errors import ProfileUnavailable


HABBO_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]{3,15}$")

DEFAULT_ENDPOINTS = (
    "https://www.habbo.com.br/api/public/users?name={name}",
    "https://api.allorigins.win/get?url={proxied}",
    "https://www.habbo.com/api/public/users?name={name}",
)

REQUEST_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "Mozilla/5.0 (compatible; HabboProfileFetcher/1.0)",
}


def is_valid_habbo_name(name: str | None) -> bool:
    return bool(HABBO_NAME_RE.match((name or "").strip()))


@dataclass(frozen=True)
class HabboProfile:
    unique_id: str
    name: str
    motto: str = ""
    figure_string: str = ""
    online: bool = False
    member_since: str = ""
    profile_visible: bool = False
    selected_badges: list = field(default_factory=list)

    @classmethod
    def from_payload(cls, data) -> "HabboProfile":
        if not isinstance(data, dict):
            raise ValueError("Dados inválidos recebidos da API")
        if not data.get("uniqueId") or not data.get("name"):
            raise ValueError("Resposta da API não contém dados válidos do perfil")
        badges = data.get("selectedBadges")
        return cls(
            unique_id=str(data["uniqueId"]),
            name=str(data["name"]),
            motto=data.get("motto") or "",
            figure_string=data.get("figureString") or "",
            online=bool(data.get("online")),
            member_since=data.get("memberSince") or "",
            profile_visible=bool(data.get("profileVisible")),
            selected_badges=badges if isinstance(badges, list) else [],
        )


class HabboClient:
    """Public Habbo profile lookup.

    Each endpoint template is tried in order until one returns a usable
    profile. ``{name}`` is the quoted user name; ``{proxied}`` is the first
    direct endpoint, fully quoted, for proxies that wrap the answer in a
    ``contents`` string.
    """

    def __init__(
        self,
        *,
        endpoints: tuple[str, ...] | list[str] = DEFAULT_ENDPOINTS,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoints = tuple(endpoints)
        self.timeout = timeout
        self.session = session or requests.Session()

    def _urls(self, name: str) -> list[str]:
        quoted = quote(name, safe="")
        direct = [e for e in self.endpoints if "{proxied}" not in e]
        proxied = quote(direct[0].format(name=quoted), safe="") if direct else ""
        return [e.format(name=quoted, proxied=proxied) for e in self.endpoints]

    def fetch_profile(self, name: str) -> HabboProfile:
        name = (name or "").strip()
        if not name:
            raise ProfileUnavailable("Nome é obrigatório e deve ser uma string válida")

        last_error = "Falha ao buscar perfil"
        for attempt, url in enumerate(self._urls(name), start=1):
            try:
                return self._fetch_once(url, name)
            except (requests.RequestException, ValueError) as e:
                last_error = str(e)
                current_app.logger.warning("Habbo lookup attempt %s failed for %r: %s", attempt, name, e)

        raise ProfileUnavailable(last_error)

    def _fetch_once(self, url: str, name: str) -> HabboProfile:
        resp = self.session.get(url, headers=REQUEST_HEADERS, timeout=self.timeout)
        if resp.status_code == 404:
            raise ValueError(f'Usuário "{name}" não encontrado no Habbo')
        resp.raise_for_status()

        data = resp.json()
        if isinstance(data, dict) and isinstance(data.get("contents"), str):
            data = json.loads(data["contents"])
        return HabboProfile.from_payload(data)


def profile_client() -> HabboClient:
    return HabboClient(
        endpoints=current_app.config["HABBO_ENDPOINTS"],
        timeout=current_app.config["HABBO_TIMEOUT"],
    )
