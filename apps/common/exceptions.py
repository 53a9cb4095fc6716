"""
Service-layer error taxonomy and the single place that turns it into HTTP.

Services raise a ``ServiceError`` subclass; views never format errors themselves.
``service_exception_handler`` is wired in as DRF's ``EXCEPTION_HANDLER``.
"""

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    kind = "internal_error"
    code = "INTERNAL_SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = None

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInput(ServiceError):
    kind = "validation"
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST


class ResourceNotFound(ServiceError):
    kind = "not_found"
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id=None):
        message = f"{resource} with ID {resource_id} not found" if resource_id else f"{resource} not found"
        super().__init__(message, {"resource": resource, "id": str(resource_id) if resource_id else None})


class Forbidden(ServiceError):
    kind = "forbidden"
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidState(ServiceError):
    kind = "invalid_state"
    code = "INVALID_STATE"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, current_state=None, expected_state=None):
        super().__init__(message, {"current_state": current_state, "expected_state": expected_state})


class OnboardingRequired(InvalidState):
    code = "NEEDS_ONBOARDING"

    def __init__(self, restaurant_id):
        super().__init__(
            "Restaurant has not completed payment onboarding",
            current_state="no_connected_account",
            expected_state="connected_account",
        )
        self.details["restaurant_id"] = str(restaurant_id)


class DatabaseFailure(ServiceError):
    kind = "database_error"
    code = "DATABASE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Database operation failed"


class PaymentGatewayError(ServiceError):
    kind = "payment_gateway_error"
    code = "PAYMENT_GATEWAY_ERROR"
    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Payment gateway error"


class GatewayResourceMissing(PaymentGatewayError):
    """The processor does not know the referenced object (customer, account, session)."""


def error_body(message: str, code: str, path: str, details: dict | None = None) -> dict:
    error = {
        "message": message,
        "code": code,
        "timestamp": timezone.now().isoformat(),
        "path": path,
    }
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def service_exception_handler(exc, context):
    if not isinstance(exc, ServiceError):
        return exception_handler(exc, context)

    request = context.get("request")
    path = request.path if request is not None else ""

    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {path}: {exc.message}", exc_info=exc)
    else:
        logger.info(f"{exc.kind} on {path}: {exc.message}")

    # Internal and vendor error details never reach the client.
    if exc.public_message:
        body = error_body(exc.public_message, exc.code, path)
    else:
        body = error_body(exc.message, exc.code, path, exc.details)
    return Response(body, status=exc.status_code)
