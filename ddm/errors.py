from __future__ import annotations

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db


class DomainError(Exception):
    """A workflow precondition failed; carries the message shown to the caller."""

    status_code = 400
    message = "Erro ao processar a solicitação"

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationFailed(DomainError):
    status_code = 400
    message = "Dados obrigatórios faltando"


class NotFound(DomainError):
    status_code = 404
    message = "Registro não encontrado"


class Conflict(DomainError):
    status_code = 400


class Forbidden(DomainError):
    status_code = 403


class UpstreamError(DomainError):
    status_code = 502
    message = "Serviço externo indisponível"


# Not found

class PromoterNotFound(NotFound):
    message = "Promotor não encontrado"


class AffectedNotFoundOrInactive(NotFound):
    message = "Militar não encontrado ou inativo."


class SellerNotFound(NotFound):
    message = "Vendedor não encontrado"


class InstructorNotFound(NotFound):
    message = "Instrutor não encontrado"


class CourseNotFound(NotFound):
    message = "Curso não encontrado para esta companhia"


class CompanyNotFound(NotFound):
    message = "Companhia não encontrada"


class StudentNotFound(NotFound):
    message = "Militar não foi encontrado. Verifique o nome do militar."


class MemberNotFound(NotFound):
    message = "Militar não encontrado"


class RequestNotFound(NotFound):
    message = "Solicitação não encontrada"


class MemberNotPreSeeded(DomainError):
    # Kept as a 500: clients already treat it as a failed lookup.
    status_code = 500
    message = "Militar não cadastrado, procure um superior."


# Conflicts

class AlreadyAtMaxRank(Conflict):
    message = "O militar já está na patente máxima e não pode ser promovido"


class AlreadyAtMinRank(Conflict):
    message = "O militar já está na patente mínima e não pode ser rebaixado"


class PendingRequestExists(Conflict):
    message = "Este militar já possui uma promoção aguardando aprovação"


class RequestAlreadyResolved(Conflict):
    status_code = 409
    message = "Esta solicitação já foi resolvida"


class StaleRankChange(Conflict):
    status_code = 409
    message = "A patente do militar mudou desde a solicitação. Rejeite e solicite novamente."


class AlreadyCompleted(Conflict):
    message = "O aluno já possui este curso aplicado"


class AlreadyRegistered(Conflict):
    message = "already_registered"


class AlreadyHasAccess(Conflict):
    status_code = 409
    message = "Militar já possui acesso ao sistema."


class EmailInUse(Conflict):
    status_code = 409
    message = "Este email já está em uso."


class DuplicateTagRequest(Conflict):
    message = "Você já possui uma TAG aguardando aprovação ou já aprovada."


class ChallengeMismatch(Conflict):
    message = "O código não confere com a sua missão. Atualize e tente novamente."


# Other

class MemberInactive(Forbidden):
    message = "Militar inativo. Entre em contato com um superior."


class ProfileUnavailable(UpstreamError):
    message = "Não foi possível carregar o perfil Habbo"


def register_error_handlers(app) -> None:
    """Render every failure as ``{"error": ...}`` JSON."""

    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def _unexpected_error(e: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", e)
        return jsonify({"error": "Erro interno do servidor"}), 500
