from __future__ import annotations

from fastapi import Request

from .errors import ErrorKind, ServiceError


# PUBLIC_INTERFACE
def get_caller_id(request: Request) -> str:
    """
    FastAPI dependency returning the authenticated caller's user id.

    Authentication happens upstream (gateway / session layer); by the time a request
    reaches this service the caller id arrives in the header named by
    settings.user_id_header. A missing or blank header is answered with 401.

    Usage:
        @router.get("/{task_id}")
        def get_task(task_id: str, caller_id: str = Depends(get_caller_id)): ...
    """
    header = request.app.state.settings.user_id_header
    caller_id = (request.headers.get(header) or "").strip()
    if not caller_id:
        raise ServiceError(ErrorKind.UNAUTHENTICATED, "Not authenticated", 401)
    return caller_id
