"""
Domain error taxonomy shared by every app.

Services raise these; DRF renders them through `api_exception_handler` as
`{"error": <message>, "kind": <kind>}` with the HTTP status of the class.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "domain_error"

    @property
    def kind(self):
        return self.default_code


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."
    default_code = "forbidden"


class InvalidTransition(DomainError):
    default_detail = "Invalid status transition."
    default_code = "invalid_transition"


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource was modified concurrently."
    default_code = "conflict"


class InvalidAmount(DomainError):
    default_detail = "Amount must be greater than zero."
    default_code = "invalid_amount"


class InsufficientBalance(DomainError):
    default_detail = "Insufficient balance."
    default_code = "insufficient_balance"


class ValidationFailed(DomainError):
    default_detail = "Invalid input."
    default_code = "validation_failed"


class UpstreamFailure(DomainError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment provider request failed."
    default_code = "upstream_failure"


def _first_message(detail):
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    if isinstance(detail, dict) and detail:
        key, value = next(iter(detail.items()))
        message = _first_message(value)
        return message if key == "non_field_errors" else f"{key}: {message}"
    return str(detail)


def api_exception_handler(exc, context):
    """
    Render every API error as {"error": ..., "kind": ...}.

    Framework validation errors keep their field breakdown under "details".
    Anything DRF does not know about is logged and reported as a 500.
    """
    if isinstance(exc, DomainError):
        return Response(
            {"error": str(exc.detail), "kind": exc.kind}, status=exc.status_code
        )

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'API'}: {exc}",
            exc_info=exc,
        )
        return Response(
            {"error": "Internal server error.", "kind": "internal_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "error": _first_message(exc.detail),
            "kind": ValidationFailed.default_code,
            "details": exc.detail,
        }
        return response

    if isinstance(exc, Http404):
        kind = NotFound.default_code
    elif isinstance(exc, PermissionDenied):
        kind = Forbidden.default_code
    else:
        kind = exc.get_codes() if isinstance(exc, exceptions.APIException) else "error"
        if not isinstance(kind, str):
            kind = "error"
    detail = getattr(exc, "detail", None)
    response.data = {"error": str(detail) if detail is not None else str(exc), "kind": kind}
    return response
