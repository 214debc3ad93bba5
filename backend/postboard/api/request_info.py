"""Request helpers shared by middleware and error handlers."""

from starlette.requests import Request

UNKNOWN_CLIENT = "unknown"


def client_address(request: Request) -> str:
    """Peer address of the caller; the rate limit key and a log field."""
    if request.client is None or not request.client.host:
        return UNKNOWN_CLIENT
    return request.client.host


def request_log_context(request: Request) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "client": client_address(request),
    }
