"""
Error taxonomy for account provisioning and the unified API error format.

The service layer raises these directly; they are DRF ``APIException``
subclasses, so DRF renders them with the right status and
:func:`api_exception_handler` normalizes the body to
``{"ok": false, "error": {"code", "message"}}``.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ValidationError(exceptions.ValidationError):
    """Malformed or missing input; ``detail`` maps field names to messages."""
    default_code = 'invalid'


class NotFoundError(exceptions.NotFound):
    default_detail = 'account not found'
    default_code = 'not_found'


class ConflictError(exceptions.APIException):
    """Uniqueness violation (license number, national id or email)."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'conflict'
    default_code = 'conflict'


class InvalidStateError(exceptions.APIException):
    """Transition not permitted from the account's current state."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'transition not permitted from the current state'
    default_code = 'invalid_state'


def _error_code(exc) -> str:
    if isinstance(exc, exceptions.ValidationError):
        return 'invalid'
    if isinstance(exc, exceptions.APIException):
        return exc.default_code
    return 'api_error'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'), exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': _error_code(exc), 'message': detail}}, status=resp.status_code)
