import logging
from typing import Optional

from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError, RestrictedError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class UserFacingAPIException(APIException):
    """
    Exception controllable et propre pour retourner un message a l'utilisateur.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Une erreur est survenue."
    default_code = "error"


class ConflictError(UserFacingAPIException):
    """Violation d'unicité (clé, code, nom déjà pris)."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class Unauthorized(UserFacingAPIException):
    """401 métier (identifiants ou refresh token refusés)."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized."
    default_code = "unauthorized"


def _envelope(code: str, detail, status_code: int) -> dict:
    return {"error": {"code": code, "detail": detail, "status": status_code}}


def _error_code(exc) -> str:
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    return getattr(exc, "default_code", "error")


def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    Enveloppe les erreurs DRF dans un format stable:
        {"error": {"code": ..., "detail": ..., "status": ...}}
    Les erreurs d'intégrité de l'ORM deviennent des 409.
    """
    response = exception_handler(exc, context)

    if response is not None:
        detail = response.data
        # {"detail": "..."} -> "..." ; les erreurs de validation restent un dict par champ
        if isinstance(detail, dict) and set(detail) == {"detail"}:
            detail = detail["detail"]
        response.data = _envelope(_error_code(exc), detail, response.status_code)
        return response

    # Valeur refusée par un champ de l'ORM (ex: UUID mal formé dans un filtre)
    if isinstance(exc, DjangoValidationError):
        return Response(
            _envelope("invalid", exc.messages, 400),
            status=status.HTTP_400_BAD_REQUEST,
        )

    # Ligne référencée ailleurs (on_delete=PROTECT / RESTRICT)
    if isinstance(exc, (ProtectedError, RestrictedError)):
        return Response(
            _envelope("protected", "Cannot perform operation due to related data constraints", 409),
            status=status.HTTP_409_CONFLICT,
        )

    # Contrainte unique / FK levée par la base
    if isinstance(exc, IntegrityError):
        logger.warning(f"IntegrityError: {exc}")
        set_rollback()
        return Response(
            _envelope("conflict", "Resource conflicts with existing data", 409),
            status=status.HTTP_409_CONFLICT,
        )

    # Erreur non geree -> 500
    view = context.get("view")
    logger.error(f"Erreur inattendue dans {type(view).__name__ if view else '?'}", exc_info=exc)
    return Response(
        _envelope("server_error", "Erreur interne", 500),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
