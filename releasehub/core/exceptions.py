"""
Error taxonomy for the API.

Request-level errors are DRF ``APIException`` subclasses so views can raise
them and let the exception handler shape the response. ``IntegrationFailure``
is raised by storage, email and webhook clients; the release workflow catches
it per step and it never reaches a client.
"""
import logging

from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('releasehub.core')


class InsufficientInventory(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Insufficient inventory'
    default_code = 'insufficient_inventory'


class ConflictError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request conflicts with the current state of the resource'
    default_code = 'conflict'


class IntegrationFailure(Exception):
    """A third-party call (storage, email, webhook) failed"""

    def __init__(self, service, message):
        self.service = service
        self.message = message
        super().__init__(f'{service}: {message}')


def api_exception_handler(exc, context):
    """
    Render errors as ``{"error": "..."}``.

    Field validation errors keep DRF's ``{field: [messages]}`` shape. Anything
    DRF does not recognise becomes a generic 500; the detail only goes to the log.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {str(exc)}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, Http404):
        response.data = {'error': 'Not found'}
    elif isinstance(exc, exceptions.ValidationError) and isinstance(exc.detail, (dict, list)):
        if isinstance(exc.detail, list) and len(exc.detail) == 1:
            response.data = {'error': str(exc.detail[0])}
    elif isinstance(exc, exceptions.APIException):
        response.data = {'error': str(exc.detail)}
    return response
