"""
Dashboard page guard.

Runs before routing for every path under the protected prefix:
- Sends a role to its landing page when it opens the dashboard root
  (e.g. Employees go straight to their own tasks).
- Optionally requires the `auth` cookie and redirects to the login page,
  carrying the original path as a callback parameter.

Role decisions for API calls happen in `enforce_security`; this guard only
decides where a browser should be sent.
"""

from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import urlencode

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from hrauthz.policy import Role
from hrauthz.security.auth import parse_user_cookie
from hrauthz.security.config import GuardConfig

logger = logging.getLogger(__name__)


def _is_protected(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def guard_redirect(request: Request, guard: GuardConfig) -> str | None:
    """Return the URL to redirect to, or None to let the request through."""

    path = request.url.path
    if not _is_protected(path, guard.protected_prefix):
        return None

    if guard.require_auth_cookie and guard.auth_cookie not in request.cookies:
        logger.info("Dashboard request without auth cookie path=%s", path)
        return f"{guard.login_path}?{urlencode({guard.callback_param: path})}"

    user = parse_user_cookie(request.cookies.get(guard.user_cookie))
    role = Role.parse(user.get("role")) if user else None
    if role is None:
        return None

    landing = guard.role_landing.get(role.value)
    if landing and path.rstrip("/") == guard.protected_prefix.rstrip("/"):
        return landing
    return None


class DashboardGuardMiddleware(BaseHTTPMiddleware):
    """
    Applies `guard_redirect` using the GuardConfig loaded at startup.

    Requests pass through untouched until the security config is on app.state.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        config = getattr(request.app.state, "security_config", None)
        if config is not None:
            target = guard_redirect(request, config.guard)
            if target is not None:
                return RedirectResponse(target, status_code=307)
        return await call_next(request)
