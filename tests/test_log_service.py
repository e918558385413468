"""In-process log store tests."""

import math

import pytest

from app.services.log_service import LogAction, LogEntry, LogLevel, LogResource, LogStore


def fill(store: LogStore, n: int, level: str = "info", **kw) -> None:
    for i in range(n):
        store.log(level, f"entry {i}", **kw)


class TestAppend:
    def test_newest_first(self) -> None:
        store = LogStore()
        store.info("first")
        store.info("second")
        page = store.query()
        assert [e.message for e in page.logs] == ["second", "first"]

    def test_capacity_drops_oldest(self) -> None:
        store = LogStore(max_entries=3)
        fill(store, 5)
        assert len(store) == 3
        assert [e.message for e in store.query(limit=10).logs] == ["entry 4", "entry 3", "entry 2"]

    def test_below_threshold_not_stored(self) -> None:
        store = LogStore(level="warn")
        assert store.info("quiet") is None
        assert store.debug("quieter") is None
        assert store.error("loud") is not None
        assert len(store) == 1

    def test_defaults(self) -> None:
        entry = LogStore().info("hello")
        assert entry.user == "system"
        assert entry.action is LogAction.READ
        assert entry.resource is LogResource.USER
        assert entry.id and entry.timestamp

    def test_entries_are_immutable(self) -> None:
        entry = LogStore().info("hello")
        with pytest.raises(Exception):
            entry.message = "changed"  # type: ignore[misc]

    def test_log_action_defaults_to_anonymous(self) -> None:
        entry = LogStore().log_action(user=None, action=LogAction.CREATE, resource=LogResource.ROOM, message="m")
        assert entry.user == "anonymous"
        assert entry.to_dict()["action"] == "create"

    def test_invalid_level_rejected(self) -> None:
        with pytest.raises(ValueError):
            LogStore().log("fatal", "nope")


class TestQuery:
    def test_level_filter_is_exact(self) -> None:
        store = LogStore(level="debug")
        store.debug("d")
        store.info("i")
        store.warn("w")
        store.error("e")
        assert [e.message for e in store.query(level="warn").logs] == ["w"]

    def test_action_resource_user_filters(self) -> None:
        store = LogStore()
        store.info("a", user="u1", action="create", resource="room")
        store.info("b", user="u2", action="create", resource="room")
        store.info("c", user="u1", action="delete", resource="room")
        store.info("d", user="u1", action="create", resource="floor")
        page = store.query(user="u1", action="create", resource="room")
        assert [e.message for e in page.logs] == ["a"]

    def test_search_matches_message_details_and_user(self) -> None:
        store = LogStore()
        store.info("Deploy Monitor", user="x")
        store.info("other", details={"note": "MONITOR arm"}, user="y")
        store.info("nothing", user="monitor-bot")
        store.info("unrelated", user="z")
        page = store.query(search="monitor")
        assert page.total == 3

    def test_pagination(self) -> None:
        store = LogStore()
        fill(store, 12, level="error")
        page = store.query(level="error", page=2, limit=5)
        assert len(page.logs) == 5
        assert page.total == 12
        assert page.total_pages == math.ceil(12 / 5)
        assert [e.message for e in page.logs] == [f"entry {i}" for i in range(6, 1, -1)]

    def test_page_past_end_is_empty(self) -> None:
        store = LogStore()
        fill(store, 3)
        page = store.query(page=5, limit=10)
        assert page.logs == []
        assert page.total == 3

    def test_sort_ascending_by_message(self) -> None:
        store = LogStore()
        for m in ("b", "c", "a"):
            store.info(m)
        page = store.query(sort_by="message", sort_order="asc")
        assert [e.message for e in page.logs] == ["a", "b", "c"]

    def test_unknown_sort_field_keeps_order(self) -> None:
        store = LogStore()
        for m in ("b", "c", "a"):
            store.info(m)
        page = store.query(sort_by="color")
        assert [e.message for e in page.logs] == ["a", "c", "b"]

    def test_clear(self) -> None:
        store = LogStore()
        fill(store, 2)
        store.clear()
        assert store.query().total == 0


def test_to_dict_is_json_ready() -> None:
    entry = LogEntry(
        id="1", timestamp="t", level=LogLevel.WARN, user="u",
        action=LogAction.UPDATE, resource=LogResource.TICKET, message="m",
    )
    assert entry.to_dict() == {
        "id": "1", "timestamp": "t", "level": "warn", "user": "u",
        "action": "update", "resource": "ticket", "message": "m", "details": None,
    }
