"""Closed vocabularies used by the access policy: roles, resources, actions, scopes."""

from __future__ import annotations

from enum import Enum


class _ClosedEnum(str, Enum):
    @classmethod
    def parse(cls, value: object):
        """
        Return the member for ``value`` or None.

        Accepts members, their string values, and anything else (None, ints,
        unhashable objects). Never raises.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Role(_ClosedEnum):
    OWNER = "Owner"
    ADMIN = "Admin"
    EMPLOYEE = "Employee"


class Resource(_ClosedEnum):
    EMPLOYEES = "employees"
    DEPARTMENTS = "departments"
    SUB_DEPARTMENTS = "sub_departments"
    RESOURCES = "resources"
    TASKS = "tasks"
    ANNOUNCEMENTS = "announcements"
    PERFORMANCE_METRICS = "performance_metrics"
    AUDIT_LOGS = "audit_logs"
    SALARIES = "salaries"
    COMPANY_SETTINGS = "company_settings"


class Action(_ClosedEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


class Scope(_ClosedEnum):
    """Breadth of records a role may see when listing or reading."""

    GLOBAL = "global"
    DEPARTMENT = "department"
    SELF_AND_DEPARTMENT = "self-and-department"
    NONE = "none"


# `manage` on a resource is the same grant as all four of these.
CRUD_ACTIONS: frozenset[Action] = frozenset({Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE})
