"""
Standalone role/resource/action policy evaluator with visibility scopes.

This package has no dependency on other hrauthz packages (db, security, etc.).
Use has_permission() before a write and get_scope() + apply_scope() before
returning a result set.
"""

from .evaluator import (
    DEFAULT_POLICY,
    AccessPolicy,
    PolicyConfigError,
    build_policy,
    get_scope,
    has_permission,
)
from .scoping import Caller, apply_scope, in_scope
from .types import Action, Resource, Role, Scope

__all__ = [
    "DEFAULT_POLICY",
    "AccessPolicy",
    "Action",
    "Caller",
    "PolicyConfigError",
    "Resource",
    "Role",
    "Scope",
    "apply_scope",
    "build_policy",
    "get_scope",
    "has_permission",
    "in_scope",
]
