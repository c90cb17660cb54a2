from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from hrauthz.db.session import bind_authz, get_db
from hrauthz.models.hr import Employee
from hrauthz.policy import AccessPolicy
from hrauthz.security.auth import extract_user_id, load_employee
from hrauthz.security.config import SecurityConfig
from hrauthz.security.context import AuthzContext

logger = logging.getLogger(__name__)


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_access_policy(request: Request) -> AccessPolicy:
    policy = getattr(request.app.state, "access_policy", None)
    if policy is None:
        raise RuntimeError("Access policy not loaded. Did app startup run?")
    return policy


def get_current_user(request: Request) -> Employee:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def get_authz(request: Request) -> AuthzContext:
    authz = getattr(request.state, "authz", None)
    if authz is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return authz


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    policy: AccessPolicy = Depends(get_access_policy),
    db: Session = Depends(get_db),
) -> None:
    """
    Global security dependency (configuration-driven, decorators optional).

    Runs after routing so endpoint decorator metadata is visible. FastAPI
    caches `get_db` per request, so the session opened here is the one the
    endpoint receives; binding the AuthzContext to it scopes the endpoint's
    queries.
    """

    path = request.url.path
    method = request.method.upper()

    rule = config.match(path, method)

    endpoint = request.scope.get("endpoint")
    decorator_permission = getattr(endpoint, "__security_permission__", None) if endpoint else None
    decorator_scoped = getattr(endpoint, "__security_scoped__", None) if endpoint else None

    resource, action = decorator_permission or (rule.resource, rule.action)
    scoped = rule.scoped if decorator_scoped is None else bool(decorator_scoped)

    auth_required = rule.auth_required or resource is not None
    if not auth_required:
        return

    user_id = extract_user_id(request, config)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user id")

    user = load_employee(db, user_id)
    request.state.user = user

    if resource is not None and not policy.has_permission(user.role, resource, action):
        logger.info(
            "Permission denied user_id=%s role=%s resource=%s action=%s path=%s",
            user.id,
            user.role,
            resource,
            action,
            path,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role {user.role!r} may not {action} {resource}",
        )

    authz = AuthzContext(
        user_id=user.id,
        department_id=user.department_id,
        role=user.role,
        scope=policy.get_scope(user.role),
        scoped=scoped,
    )
    request.state.authz = authz
    bind_authz(db, authz)
