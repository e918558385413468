"""Audit wrapper tests."""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.api.middleware import (
    AuditMiddleware,
    action_for_method,
    audit_request,
    resource_from_path,
    resource_id_from_path,
)
from app.services.log_service import LogAction, LogResource, LogStore
from conftest import auth_headers


def make_request(method: str = "GET", path: str = "/api/users/42", headers: dict | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "scheme": "http",
        "server": ("testserver", 80),
        "query_string": b"",
        "headers": raw,
    })


def run(coro):
    return asyncio.run(coro)


class TestPathInference:
    @pytest.mark.parametrize("path,expected", [
        ("/api/users", LogResource.USER),
        ("/api/buildings/abc", LogResource.BUILDING),
        ("/api/floors", LogResource.FLOOR),
        ("/api/rooms/1/schedules", LogResource.ROOM),
        ("/api/storage", LogResource.STORAGE),
        ("/api/Users", LogResource.USER),
    ])
    def test_known_segments(self, path, expected) -> None:
        assert resource_from_path(path) is expected

    @pytest.mark.parametrize("path", ["/api/widgets", "/api", "/", "/health"])
    def test_unknown_segments(self, path) -> None:
        assert resource_from_path(path) is None

    @pytest.mark.parametrize("method,action", [
        ("GET", LogAction.READ),
        ("POST", LogAction.CREATE),
        ("PUT", LogAction.UPDATE),
        ("PATCH", LogAction.UPDATE),
        ("DELETE", LogAction.DELETE),
        ("OPTIONS", LogAction.READ),
    ])
    def test_actions(self, method, action) -> None:
        assert action_for_method(method) is action

    def test_resource_id(self) -> None:
        assert resource_id_from_path("/api/users") == "all"
        assert resource_id_from_path("/api/users/42") == "42"
        assert resource_id_from_path("/api/rooms/7/deployments") == "7/deployments"


class TestAuditRequest:
    def test_success_writes_two_info_entries(self) -> None:
        store = LogStore()

        async def handler(request):
            return JSONResponse({"ok": True}, status_code=200)

        request = make_request("GET", "/api/users/42", {"User-Agent": "pytest", "Referer": "http://x"})
        response = run(audit_request(request, handler, log_store=store, identify=lambda r: "user_1"))

        assert response.status_code == 200
        post, pre = store.query(limit=10).logs
        assert pre.message == "GET /api/users/42"
        assert pre.level.value == "info"
        assert pre.details == {"resourceId": "42", "userAgent": "pytest", "referer": "http://x"}
        assert post.message == "Success: GET /api/users/42 (200)"
        assert post.details == {"resourceId": "42", "status": 200}
        assert {e.user for e in (pre, post)} == {"user_1"}
        assert {e.action for e in (pre, post)} == {LogAction.READ}
        assert {e.resource for e in (pre, post)} == {LogResource.USER}

    def test_non_2xx_logged_as_error(self) -> None:
        store = LogStore()

        async def handler(request):
            return JSONResponse({"error": "nope"}, status_code=404)

        response = run(audit_request(make_request("DELETE", "/api/users/9"), handler, log_store=store,
                                     identify=lambda r: "u"))
        assert response.status_code == 404
        post = store.query(limit=10).logs[0]
        assert post.level.value == "error"
        assert post.message == "Error: DELETE /api/users/9 (404)"
        assert post.action is LogAction.DELETE

    def test_exception_logged_once_and_reraised(self) -> None:
        store = LogStore()
        boom = RuntimeError("kaput")

        async def handler(request):
            raise boom

        with pytest.raises(RuntimeError) as excinfo:
            run(audit_request(make_request("POST", "/api/storage"), handler, log_store=store,
                              identify=lambda r: "u"))
        assert excinfo.value is boom
        errors = store.query(level="error").logs
        assert len(errors) == 1
        assert errors[0].message == "Exception: POST /api/storage"
        assert errors[0].details["error"] == "kaput"

    def test_identity_failure_degrades_to_anonymous(self) -> None:
        store = LogStore()

        def broken(request):
            raise ValueError("idp down")

        async def handler(request):
            return JSONResponse({})

        run(audit_request(make_request(), handler, log_store=store, identify=broken))
        assert {e.user for e in store.query(limit=10).logs} == {"anonymous"}

    def test_unmapped_path_is_not_logged(self) -> None:
        store = LogStore()
        calls = []

        async def handler(request):
            calls.append(request)
            return JSONResponse({})

        run(audit_request(make_request("GET", "/api/widgets"), handler, log_store=store))
        assert len(calls) == 1
        assert len(store) == 0

    def test_explicit_resource_wins(self) -> None:
        store = LogStore()

        async def handler(request):
            return JSONResponse({})

        run(audit_request(make_request("GET", "/api/logs"), handler, log_store=store,
                          resource=LogResource.USER, identify=lambda r: "u"))
        assert len(store) == 2

    def test_broken_sink_does_not_change_outcome(self) -> None:
        class BrokenStore(LogStore):
            def log(self, *a, **kw):
                raise OSError("disk full")

        async def handler(request):
            return JSONResponse({"ok": True}, status_code=201)

        response = run(audit_request(make_request("POST", "/api/rooms"), handler, log_store=BrokenStore(),
                                     identify=lambda r: "u"))
        assert response.status_code == 201


class TestAuditMiddleware:
    def _app(self, store: LogStore) -> FastAPI:
        app = FastAPI()
        app.state.log_store = store
        app.add_middleware(AuditMiddleware)

        @app.get("/api/tickets/{ticket_id}")
        def read_ticket(ticket_id: str):
            return {"id": ticket_id}

        @app.get("/api/buildings/explode")
        def explode():
            raise RuntimeError("handler blew up")

        @app.get("/health")
        def health():
            return {"status": "ok"}

        return app

    def test_override_prefix_and_bearer_identity(self) -> None:
        store = LogStore()
        client = TestClient(self._app(store))
        r = client.get("/api/tickets/t1", headers=auth_headers("idp_123"))
        assert r.status_code == 200
        entries = store.query(limit=10).logs
        assert len(entries) == 2
        assert all(e.resource is LogResource.TICKET and e.user == "idp_123" for e in entries)

    def test_bad_token_is_anonymous(self) -> None:
        store = LogStore()
        client = TestClient(self._app(store))
        client.get("/api/tickets/t1", headers={"Authorization": "Bearer not-a-jwt"})
        assert {e.user for e in store.query(limit=10).logs} == {"anonymous"}

    def test_unmapped_route_untouched(self) -> None:
        store = LogStore()
        client = TestClient(self._app(store))
        assert client.get("/health").json() == {"status": "ok"}
        assert len(store) == 0

    def test_exception_propagates(self) -> None:
        store = LogStore()
        client = TestClient(self._app(store))
        with pytest.raises(RuntimeError, match="handler blew up"):
            client.get("/api/buildings/explode")
        errors = store.query(level="error").logs
        assert [e.message for e in errors] == ["Exception: GET /api/buildings/explode"]
