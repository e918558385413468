"""Audit logging around API handlers.

``audit_request`` wraps one handler call: it resolves who is calling, works out
which resource kind and action the request touches, and records an entry before
and after the handler runs. It never changes what the handler returns or
raises. ``AuditMiddleware`` installs it for every request of the app.
"""

from types import MappingProxyType
from typing import Awaitable, Callable, Mapping, Sequence

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.security import resolve_user_id
from app.services.log_service import LogAction, LogLevel, LogResource, LogStore

Handler = Callable[[Request], Awaitable[Response]]

METHOD_ACTIONS: Mapping[str, LogAction] = MappingProxyType({
    "GET": LogAction.READ,
    "POST": LogAction.CREATE,
    "PUT": LogAction.UPDATE,
    "PATCH": LogAction.UPDATE,
    "DELETE": LogAction.DELETE,
})

# second path segment -> resource kind (/api/<segment>/...)
PATH_RESOURCES: Mapping[str, LogResource] = MappingProxyType({
    "users": LogResource.USER,
    "buildings": LogResource.BUILDING,
    "floors": LogResource.FLOOR,
    "rooms": LogResource.ROOM,
    "storage": LogResource.STORAGE,
})

# explicit kinds for routes the path table does not cover
RESOURCE_OVERRIDES: Sequence[tuple[str, LogResource]] = (
    ("/api/logs", LogResource.USER),
    ("/api/schedules", LogResource.SCHEDULE),
    ("/api/tickets", LogResource.TICKET),
    ("/api/attendance", LogResource.ATTENDANCE),
    ("/api/deployments", LogResource.STORAGE),
    ("/api/assets", LogResource.ROOM),
    ("/api/import-csv", LogResource.STORAGE),
    ("/api/download-csv", LogResource.STORAGE),
)


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def resource_from_path(path: str) -> LogResource | None:
    segments = _segments(path)
    if len(segments) < 2:
        return None
    return PATH_RESOURCES.get(segments[1].lower())


def action_for_method(method: str) -> LogAction:
    return METHOD_ACTIONS.get(method.upper(), LogAction.READ)


def resource_id_from_path(path: str) -> str:
    return "/".join(_segments(path)[2:]) or "all"


def identify_caller(request: Request) -> str:
    return resolve_user_id(request.headers.get("authorization")) or "anonymous"


def _record(log_store: LogStore, level: LogLevel, message: str, **kw) -> None:
    # a broken sink must not change the handler's outcome
    try:
        log_store.log(level, message, **kw)
    except Exception as e:
        logger.error(f"Audit log write failed: {e}")


async def audit_request(
    request: Request,
    handler: Handler,
    *,
    log_store: LogStore,
    resource: LogResource | None = None,
    identify: Callable[[Request], str] = identify_caller,
) -> Response:
    method = request.method
    path = request.url.path

    try:
        user_id = identify(request) or "anonymous"
    except Exception as e:
        logger.warning(f"Auth error in audit middleware: {e}")
        user_id = "anonymous"

    kind = resource or resource_from_path(path)
    if kind is None:
        return await handler(request)

    action = action_for_method(method)
    resource_id = resource_id_from_path(path)
    entry = {"user": user_id, "action": action, "resource": kind}

    _record(
        log_store, LogLevel.INFO, f"{method} {path}",
        details={
            "resourceId": resource_id,
            "userAgent": request.headers.get("user-agent"),
            "referer": request.headers.get("referer"),
        },
        **entry,
    )

    try:
        response = await handler(request)
    except Exception as e:
        _record(
            log_store, LogLevel.ERROR, f"Exception: {method} {path}",
            details={"resourceId": resource_id, "error": str(e)},
            **entry,
        )
        raise

    status = response.status_code
    if 200 <= status < 300:
        _record(log_store, LogLevel.INFO, f"Success: {method} {path} ({status})",
                details={"resourceId": resource_id, "status": status}, **entry)
    else:
        _record(log_store, LogLevel.ERROR, f"Error: {method} {path} ({status})",
                details={"resourceId": resource_id, "status": status}, **entry)
    return response


class AuditMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, overrides: Sequence[tuple[str, LogResource]] = RESOURCE_OVERRIDES):
        super().__init__(app)
        self.overrides = tuple(overrides)

    def resource_for(self, path: str) -> LogResource | None:
        for prefix, kind in self.overrides:
            if path == prefix or path.startswith(prefix + "/"):
                return kind
        return None

    async def dispatch(self, request: Request, call_next) -> Response:
        return await audit_request(
            request,
            call_next,
            log_store=request.app.state.log_store,
            resource=self.resource_for(request.url.path),
        )
