"""In-process audit log store.

One ``LogStore`` is built by the app factory and shared through ``app.state``;
handlers and the audit middleware receive it by injection. Entries are
immutable, kept newest first and capped at ``max_entries``.
"""

from __future__ import annotations

import json
import math
import threading
import uuid
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from loguru import logger

from app.core.logging import LOGURU_LEVELS


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class LogAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class LogResource(str, Enum):
    USER = "user"
    BUILDING = "building"
    FLOOR = "floor"
    ROOM = "room"
    STORAGE = "storage"
    SCHEDULE = "schedule"
    TICKET = "ticket"
    ATTENDANCE = "attendance"


_SEVERITY = {LogLevel.DEBUG: 0, LogLevel.INFO: 1, LogLevel.WARN: 2, LogLevel.ERROR: 3}

SORTABLE_FIELDS = ("timestamp", "level", "user", "action", "resource", "message", "id")


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: str
    level: LogLevel
    user: str
    action: LogAction
    resource: LogResource
    message: str
    details: dict[str, Any] | None = field(default=None)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["level"] = self.level.value
        d["action"] = self.action.value
        d["resource"] = self.resource.value
        return d


@dataclass
class LogPage:
    logs: list[LogEntry]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class LogStore:
    def __init__(self, max_entries: int = 1000, level: LogLevel | str = LogLevel.INFO):
        self.level = LogLevel(level)
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def enabled_for(self, level: LogLevel) -> bool:
        return _SEVERITY[level] >= _SEVERITY[self.level]

    def log(
        self,
        level: LogLevel | str,
        message: str,
        *,
        user: str | None = None,
        action: LogAction | str = LogAction.READ,
        resource: LogResource | str = LogResource.USER,
        details: dict[str, Any] | None = None,
    ) -> LogEntry | None:
        """Append an entry unless it is below the store's level. Returns the stored entry."""
        level = LogLevel(level)
        if not self.enabled_for(level):
            return None
        entry = LogEntry(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            user=user or "system",
            action=LogAction(action),
            resource=LogResource(resource),
            message=message,
            details=dict(details) if details is not None else None,
        )
        with self._lock:
            self._entries.appendleft(entry)
        logger.log(
            LOGURU_LEVELS[level.value],
            f"{message} {json.dumps({'user': entry.user, 'action': entry.action.value, 'resource': entry.resource.value, 'details': details}, default=str)}",
        )
        return entry

    def debug(self, message: str, **kw) -> LogEntry | None:
        return self.log(LogLevel.DEBUG, message, **kw)

    def info(self, message: str, **kw) -> LogEntry | None:
        return self.log(LogLevel.INFO, message, **kw)

    def warn(self, message: str, **kw) -> LogEntry | None:
        return self.log(LogLevel.WARN, message, **kw)

    def error(self, message: str, **kw) -> LogEntry | None:
        return self.log(LogLevel.ERROR, message, **kw)

    def log_action(
        self,
        *,
        user: str | None,
        action: LogAction,
        resource: LogResource,
        message: str,
        details: dict[str, Any] | None = None,
        level: LogLevel = LogLevel.INFO,
    ) -> LogEntry | None:
        return self.log(level, message, user=user or "anonymous", action=action, resource=resource, details=details)

    def query(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        level: str | None = None,
        action: str | None = None,
        resource: str | None = None,
        user: str | None = None,
        search: str | None = None,
        sort_by: str = "timestamp",
        sort_order: str = "desc",
    ) -> LogPage:
        with self._lock:
            entries = list(self._entries)

        def keep(e: LogEntry) -> bool:
            if level and e.level.value != level:
                return False
            if action and e.action.value != action:
                return False
            if resource and e.resource.value != resource:
                return False
            if user and e.user != user:
                return False
            if search:
                needle = search.lower()
                details = json.dumps(e.details, default=str).lower() if e.details else ""
                return needle in e.message.lower() or needle in details or needle in e.user.lower()
            return True

        filtered = [e for e in entries if keep(e)]

        # Unknown sort keys leave the newest-first order alone
        if sort_by in SORTABLE_FIELDS:
            filtered.sort(key=lambda e: _sort_value(getattr(e, sort_by)), reverse=(sort_order != "asc"))

        page = max(page, 1)
        limit = max(limit, 1)
        start = (page - 1) * limit
        return LogPage(logs=filtered[start:start + limit], total=len(filtered), page=page, limit=limit)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def _sort_value(v) -> str:
    return v.value if isinstance(v, Enum) else str(v)
