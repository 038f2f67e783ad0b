import logging

from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

log = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        log.error("unhandled error while handling %s", getattr(context.get('request'), 'path', '?'), exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    # keep Retry-After from throttled responses
    headers = {k: v for k, v in resp.headers.items() if k == 'Retry-After'}
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}},
                    status=resp.status_code, headers=headers or None)
