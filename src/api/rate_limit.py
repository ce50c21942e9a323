"""Shared rate limiter.

Every endpoint gets the global default of 60/minute per client IP.
Endpoints that call the LLM tighten this with a decorator:

    from src.api.rate_limit import limiter

    @router.post("/{workflow_id}/execute")
    @limiter.limit("10/minute")
    async def execute_workflow(request: Request, workflow_id: str):
        ...

slowapi needs the ``request`` parameter on decorated handlers.
"""

from slowapi import Limiter
from starlette.requests import Request

DEFAULT_LIMIT = "60/minute"
LLM_LIMIT = "10/minute"

# Applied by the body-size middleware in src.api.main
MAX_REQUEST_BODY_BYTES = 1_048_576  # 1 MB


def _get_real_client_ip(request: Request) -> str:
    """Client IP, taking the leftmost X-Forwarded-For entry behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(
    key_func=_get_real_client_ip,
    default_limits=[DEFAULT_LIMIT],
)
