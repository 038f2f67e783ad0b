from .runtime import HTTP_REQUESTS, get_runtime

# Label for requests no URL pattern matched; keeps 404 scans to one series.
UNMATCHED_ROUTE = '<unmatched>'


class RequestMetricsMiddleware:
    """Count every finished request in ``http_requests_total{method,route,status}``."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        match = getattr(request, 'resolver_match', None)
        route = match.route if match is not None and match.route else UNMATCHED_ROUTE
        get_runtime().registry.increment(HTTP_REQUESTS, {
            'method': request.method,
            'route': route,
            'status': str(response.status_code),
        })
        return response
