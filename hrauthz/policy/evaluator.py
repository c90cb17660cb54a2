"""
Access policy evaluator.

Key ideas:
- The policy (role -> resource -> actions, role -> scope) is built once and is
  read-only afterwards. There is no mutation API.
- `manage` is normalized at build time, so checks are plain set membership.
- Every query is total: unknown or malformed role/resource/action values are
  answered with "deny" / `Scope.NONE`, never with an exception.

This module is pure Python and has no FastAPI or database dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from .types import CRUD_ACTIONS, Action, Resource, Role, Scope

logger = logging.getLogger(__name__)


PolicyTable = Mapping[Role, Mapping[Resource, frozenset[Action]]]
ScopeTable = Mapping[Role, Scope]


class PolicyConfigError(ValueError):
    """Raised when a policy definition is invalid. Only ever raised while building."""


# ---- Construction --------------------------------------------------------------------


def _normalize_actions(actions: Iterable[Action]) -> frozenset[Action]:
    result = set(actions)
    if Action.MANAGE in result:
        result.update(CRUD_ACTIONS)
    elif CRUD_ACTIONS <= result:
        result.add(Action.MANAGE)
    return frozenset(result)


def _require(parser, raw: object, what: str, where: str):
    member = parser(raw)
    if member is None:
        raise PolicyConfigError(f"{where}: unknown {what} {raw!r}")
    return member


def build_policy(
    permissions: Mapping[object, Mapping[object, Iterable[object]]],
    scopes: Mapping[object, object],
) -> AccessPolicy:
    """
    Validate a raw definition and freeze it into an AccessPolicy.

    Keys and values may be enum members or their string values. Raises
    PolicyConfigError for unknown names or for a role that has permissions
    but no scope.
    """

    table: dict[Role, Mapping[Resource, frozenset[Action]]] = {}
    for raw_role, resources in permissions.items():
        role = _require(Role.parse, raw_role, "role", "permissions")
        entry: dict[Resource, frozenset[Action]] = {}
        for raw_resource, raw_actions in resources.items():
            resource = _require(Resource.parse, raw_resource, "resource", f"permissions.{role.value}")
            if isinstance(raw_actions, str):
                raise PolicyConfigError(f"permissions.{role.value}.{resource.value} must be a list of actions")
            actions = [
                _require(Action.parse, a, "action", f"permissions.{role.value}.{resource.value}")
                for a in raw_actions
            ]
            entry[resource] = _normalize_actions(actions)
        table[role] = MappingProxyType(entry)

    scope_table: dict[Role, Scope] = {}
    for raw_role, raw_scope in scopes.items():
        role = _require(Role.parse, raw_role, "role", "scopes")
        scope_table[role] = _require(Scope.parse, raw_scope, "scope", f"scopes.{role.value}")

    missing = sorted(r.value for r in table if r not in scope_table)
    if missing:
        raise PolicyConfigError(f"roles without a scope: {missing}")

    return AccessPolicy(permissions=MappingProxyType(table), scopes=MappingProxyType(scope_table))


# ---- Evaluator -----------------------------------------------------------------------


@dataclass(frozen=True)
class AccessPolicy:
    """
    Immutable policy plus the decision API.

    Usage:
        policy = build_policy({"Admin": {"tasks": ["read"]}}, {"Admin": "department"})
        policy.has_permission("Admin", "tasks", "read")   # True
        policy.get_scope("Admin")                          # Scope.DEPARTMENT
    """

    permissions: PolicyTable
    scopes: ScopeTable

    @property
    def roles(self) -> frozenset[Role]:
        return frozenset(self.permissions) | frozenset(self.scopes)

    def allowed_actions(self, role: object, resource: object) -> frozenset[Action]:
        """Actions granted to (role, resource); empty for anything unknown."""
        role_ = Role.parse(role)
        if role_ is None:
            return frozenset()
        resource_ = Resource.parse(resource)
        if resource_ is None:
            return frozenset()
        entry = self.permissions.get(role_)
        if entry is None:
            return frozenset()
        return entry.get(resource_, frozenset())

    def has_permission(self, role: object, resource: object, action: object) -> bool:
        action_ = Action.parse(action)
        if action_ is None:
            logger.debug("policy: unknown action=%r", action)
            return False

        allowed = action_ in self.allowed_actions(role, resource)
        if not allowed:
            logger.debug("policy: denied role=%r resource=%r action=%s", role, resource, action_.value)
        return allowed

    def get_scope(self, role: object) -> Scope:
        role_ = Role.parse(role)
        if role_ is None:
            return Scope.NONE
        return self.scopes.get(role_, Scope.NONE)

    def permission_map(self, role: object) -> dict[str, list[str]]:
        """JSON-friendly {resource: [actions]} for a role, in enum order."""
        role_ = Role.parse(role)
        entry = self.permissions.get(role_, {}) if role_ is not None else {}
        return {
            resource.value: [a.value for a in Action if a in entry[resource]]
            for resource in Resource
            if resource in entry
        }


# ---- Process-wide default ------------------------------------------------------------


_CRUD = ("create", "read", "update", "delete")

DEFAULT_DEFINITION: Mapping[str, Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        "Owner": {
            "employees": _CRUD,
            "departments": _CRUD,
            "sub_departments": _CRUD,
            "resources": _CRUD,
            "tasks": _CRUD,
            "announcements": _CRUD,
            "performance_metrics": _CRUD,
            "audit_logs": ("read",),
            "salaries": ("read", "update"),
            "company_settings": ("manage",),
        },
        "Admin": {
            "employees": ("read", "update"),
            "departments": ("read", "update"),
            "sub_departments": _CRUD,
            "resources": ("create", "read", "update"),
            "tasks": _CRUD,
            "announcements": _CRUD,
            "performance_metrics": ("create", "read", "update"),
        },
        "Employee": {
            "employees": ("read",),
            "tasks": ("read", "update"),
            "departments": ("read",),
            "resources": ("read",),
            "announcements": ("read",),
            "performance_metrics": ("read",),
        },
    }
)

DEFAULT_SCOPES: Mapping[str, str] = MappingProxyType(
    {
        "Owner": "global",
        "Admin": "department",
        "Employee": "self-and-department",
    }
)

DEFAULT_POLICY: AccessPolicy = build_policy(DEFAULT_DEFINITION, DEFAULT_SCOPES)


def has_permission(role: object, resource: object, action: object) -> bool:
    """Decide (role, resource, action) against the built-in policy. Never raises."""
    return DEFAULT_POLICY.has_permission(role, resource, action)


def get_scope(role: object) -> Scope:
    """Visibility scope for a role under the built-in policy; unknown -> Scope.NONE."""
    return DEFAULT_POLICY.get_scope(role)
