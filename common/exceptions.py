import logging

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidOperation(ServiceError, ValueError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class InsufficientFunds(InvalidOperation):
    default_message = "Insufficient wallet balance"


class AuthenticationFailed(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed."


class PermissionDenied(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists."


def api_exception_handler(exc, context):
    """
    Render service errors as ``{"error": "<message>"}``.

    DRF's own exceptions (validation, authentication, throttling) keep the
    default rendering.
    """
    if isinstance(exc, ServiceError):
        view = context.get("view")
        logger.info(
            "Service error in %s: status=%d error=%s",
            view.__class__.__name__ if view else "unknown",
            exc.status_code,
            exc.message,
        )
        return Response({"error": exc.message}, status=exc.status_code)

    if isinstance(exc, ObjectDoesNotExist):
        return Response({"error": str(exc) or "Not found."}, status=status.HTTP_404_NOT_FOUND)

    from rest_framework.views import exception_handler

    return exception_handler(exc, context)
