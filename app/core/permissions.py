"""
Role-based access control for LabTrack.

Roles form a closed set (admin, manager, member, guest). Every role owns a fixed
set of capabilities and a permission check is plain set membership against
that table, so checks are pure and stateless.

Legacy role names still found in user rows and identity-provider metadata are
folded onto the four roles by ``Role.parse``:

- ``technician`` and ``moderator`` -> manager
- ``user`` -> member

Anything that does not parse is denied everything.
"""

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union


class Capability(str, Enum):
    """Named permissions, ``<resource>:<action>``."""
    # Users
    USER_READ = "user:read"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"

    # Logs
    LOGS_READ = "logs:read"

    # Ticketing
    TICKET_READ = "ticket:read"
    TICKET_CREATE = "ticket:create"
    TICKET_UPDATE = "ticket:update"
    TICKET_DELETE = "ticket:delete"
    TICKET_ASSIGN = "ticket:assign"
    TICKET_RESOLVE = "ticket:resolve"

    # Kanban
    KANBAN_READ = "kanban:read"
    KANBAN_CREATE = "kanban:create"
    KANBAN_UPDATE = "kanban:update"
    KANBAN_DELETE = "kanban:delete"

    # Scheduling
    SCHEDULE_READ = "schedule:read"
    SCHEDULE_CREATE = "schedule:create"
    SCHEDULE_UPDATE = "schedule:update"
    SCHEDULE_DELETE = "schedule:delete"

    # Reports
    REPORT_READ = "report:read"
    REPORT_CREATE = "report:create"
    REPORT_EXPORT = "report:export"

    # Storage
    STORAGE_READ = "storage:read"
    STORAGE_CREATE = "storage:create"
    STORAGE_UPDATE = "storage:update"
    STORAGE_DELETE = "storage:delete"

    # Buildings / floors / rooms
    BUILDING_READ = "building:read"
    BUILDING_CREATE = "building:create"
    BUILDING_UPDATE = "building:update"
    BUILDING_DELETE = "building:delete"
    FLOOR_READ = "floor:read"
    FLOOR_CREATE = "floor:create"
    FLOOR_UPDATE = "floor:update"
    FLOOR_DELETE = "floor:delete"
    ROOM_READ = "room:read"
    ROOM_CREATE = "room:create"
    ROOM_UPDATE = "room:update"
    ROOM_DELETE = "room:delete"

    # Assets
    ASSET_READ = "asset:read"
    ASSET_CREATE = "asset:create"
    ASSET_UPDATE = "asset:update"
    ASSET_DELETE = "asset:delete"
    ASSET_DEPLOY = "asset:deploy"

    @classmethod
    def parse(cls, value: Union[str, "Capability", None]) -> Optional["Capability"]:
        if isinstance(value, Capability):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"     # technician / moderator
    MEMBER = "member"       # professor / regular user
    GUEST = "guest"

    @classmethod
    def parse(cls, value: Union[str, "Role", None]) -> Optional["Role"]:
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        return _ROLE_ALIASES.get(value.strip().lower())


_ROLE_ALIASES = {
    "admin": Role.ADMIN,
    "manager": Role.MANAGER,
    "technician": Role.MANAGER,
    "moderator": Role.MANAGER,
    "member": Role.MEMBER,
    "user": Role.MEMBER,
    "guest": Role.GUEST,
}

C = Capability

CREATE_CAPABILITIES = frozenset({
    C.USER_CREATE, C.TICKET_CREATE, C.KANBAN_CREATE, C.SCHEDULE_CREATE, C.REPORT_CREATE,
    C.STORAGE_CREATE, C.BUILDING_CREATE, C.FLOOR_CREATE, C.ROOM_CREATE, C.ASSET_CREATE,
})

EDIT_CAPABILITIES = frozenset({
    C.USER_UPDATE, C.TICKET_UPDATE, C.KANBAN_UPDATE, C.SCHEDULE_UPDATE, C.STORAGE_UPDATE,
    C.BUILDING_UPDATE, C.FLOOR_UPDATE, C.ROOM_UPDATE, C.ASSET_UPDATE,
})

DELETE_CAPABILITIES = frozenset({
    C.USER_DELETE, C.TICKET_DELETE, C.KANBAN_DELETE, C.SCHEDULE_DELETE, C.STORAGE_DELETE,
    C.BUILDING_DELETE, C.FLOOR_DELETE, C.ROOM_DELETE, C.ASSET_DELETE,
})

# Map each role to its capabilities. Read-only after import.
ROLE_CAPABILITIES: Mapping[Role, frozenset] = MappingProxyType({
    Role.ADMIN: frozenset(Capability),
    # Everything except deletes
    Role.MANAGER: frozenset(Capability) - DELETE_CAPABILITIES,
    Role.MEMBER: frozenset({
        C.TICKET_READ, C.TICKET_CREATE,
        C.KANBAN_READ,
        C.SCHEDULE_READ,
        C.BUILDING_READ,
        C.FLOOR_READ,
        C.ROOM_READ,
        C.ASSET_READ, C.ASSET_DEPLOY,
    }),
    Role.GUEST: frozenset(),
})

del C


def permissions_for_role(role) -> frozenset:
    """Default capability set of a role; empty for unknown roles."""
    parsed = Role.parse(role)
    if parsed is None:
        return frozenset()
    return ROLE_CAPABILITIES[parsed]


def effective_permissions(role, extra: Iterable = ()) -> frozenset:
    """Role capabilities plus explicitly granted ones. Unknown codes in ``extra`` are dropped.

    Extra grants never lift an unknown role out of deny-all.
    """
    if Role.parse(role) is None:
        return frozenset()
    granted = {c for c in (Capability.parse(e) for e in extra) if c is not None}
    return permissions_for_role(role) | granted


def has_permission(role, capability, extra: Iterable = ()) -> bool:
    cap = Capability.parse(capability)
    if cap is None:
        return False
    return cap in effective_permissions(role, extra)


def has_any_permission(role, capabilities: Iterable, extra: Iterable = ()) -> bool:
    extra = tuple(extra)
    return any(has_permission(role, c, extra) for c in capabilities)


def has_all_permissions(role, capabilities: Iterable, extra: Iterable = ()) -> bool:
    if Role.parse(role) is None:
        return False
    extra = tuple(extra)
    return all(has_permission(role, c, extra) for c in capabilities)


def is_admin(role) -> bool:
    return Role.parse(role) is Role.ADMIN


def is_technician(role) -> bool:
    return Role.parse(role) is Role.MANAGER


def is_member(role) -> bool:
    return Role.parse(role) is Role.MEMBER


def can_manage(role) -> bool:
    return Role.parse(role) in (Role.ADMIN, Role.MANAGER)


def can_create(role, extra: Iterable = ()) -> bool:
    return can_manage(role) or has_any_permission(role, CREATE_CAPABILITIES, extra)


def can_edit(role, extra: Iterable = ()) -> bool:
    return can_manage(role) or has_any_permission(role, EDIT_CAPABILITIES, extra)


def can_delete(role, extra: Iterable = ()) -> bool:
    return is_admin(role) or has_any_permission(role, DELETE_CAPABILITIES, extra)


# Names used by the dashboard for button visibility
can_show_create_button = can_create
can_show_edit_button = can_edit
can_show_delete_button = can_delete


PERMISSION_DISPLAY_NAMES = {
    Capability.USER_READ: "View Users",
    Capability.USER_CREATE: "Create Users",
    Capability.USER_UPDATE: "Edit Users",
    Capability.USER_DELETE: "Delete Users",
    Capability.LOGS_READ: "View Logs",
    Capability.TICKET_READ: "View Tickets",
    Capability.TICKET_CREATE: "Create Tickets",
    Capability.TICKET_UPDATE: "Edit Tickets",
    Capability.TICKET_DELETE: "Delete Tickets",
    Capability.TICKET_ASSIGN: "Assign Tickets",
    Capability.TICKET_RESOLVE: "Resolve Tickets",
    Capability.KANBAN_READ: "View Kanban Boards",
    Capability.KANBAN_CREATE: "Create Kanban Items",
    Capability.KANBAN_UPDATE: "Edit Kanban Items",
    Capability.KANBAN_DELETE: "Delete Kanban Items",
    Capability.SCHEDULE_READ: "View Schedules",
    Capability.SCHEDULE_CREATE: "Create Schedules",
    Capability.SCHEDULE_UPDATE: "Edit Schedules",
    Capability.SCHEDULE_DELETE: "Delete Schedules",
    Capability.REPORT_READ: "View Reports",
    Capability.REPORT_CREATE: "Create Reports",
    Capability.REPORT_EXPORT: "Export Reports",
    Capability.STORAGE_READ: "View Storage Items",
    Capability.STORAGE_CREATE: "Create Storage Items",
    Capability.STORAGE_UPDATE: "Edit Storage Items",
    Capability.STORAGE_DELETE: "Delete Storage Items",
    Capability.BUILDING_READ: "View Buildings",
    Capability.BUILDING_CREATE: "Create Buildings",
    Capability.BUILDING_UPDATE: "Edit Buildings",
    Capability.BUILDING_DELETE: "Delete Buildings",
    Capability.FLOOR_READ: "View Floors",
    Capability.FLOOR_CREATE: "Create Floors",
    Capability.FLOOR_UPDATE: "Edit Floors",
    Capability.FLOOR_DELETE: "Delete Floors",
    Capability.ROOM_READ: "View Rooms",
    Capability.ROOM_CREATE: "Create Rooms",
    Capability.ROOM_UPDATE: "Edit Rooms",
    Capability.ROOM_DELETE: "Delete Rooms",
    Capability.ASSET_READ: "View Assets",
    Capability.ASSET_CREATE: "Create Assets",
    Capability.ASSET_UPDATE: "Edit Assets",
    Capability.ASSET_DELETE: "Delete Assets",
    Capability.ASSET_DEPLOY: "Deploy Assets",
}
