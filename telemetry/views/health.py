from django.db import DatabaseError, connections
from django.http import JsonResponse

from ..runtime import get_runtime


def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        db_ok = bool(row and row[0] == 1)
    except DatabaseError as e:
        return JsonResponse({'ok': False, 'db': False, 'error': str(e)}, status=500)
    log_ok = get_runtime().sink.writable()
    ok = db_ok and log_ok
    return JsonResponse({'ok': ok, 'db': db_ok, 'metricsLog': log_ok}, status=200 if ok else 500)
