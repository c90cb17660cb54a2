from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import unquote

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from hrauthz.models.hr import Employee
from hrauthz.security.config import SecurityConfig

logger = logging.getLogger(__name__)


def extract_user_id(request: Request, config: SecurityConfig) -> int | None:
    """
    Demo auth: extract bearer token and treat it as an employee id.

    - Input: `Authorization: Bearer <token>`
    - Demo behavior: `<token>` must be an integer employee id
    - Token issuance and verification live outside this service.
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing Authorization header (auth required) path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Expected '{bearer_prefix} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Missing token after '{bearer_prefix}'.",
        )

    try:
        return int(token)
    except ValueError as exc:
        logger.warning("Bearer token not an int (demo expects employee id) path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid bearer token for demo (expected integer employee id).",
        ) from exc


def load_employee(db: Session, employee_id: int) -> Employee:
    employee = db.execute(
        select(Employee).where(Employee.id == employee_id).options(selectinload(Employee.department))
    ).scalar_one_or_none()

    if employee is None or not employee.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")

    return employee


def parse_user_cookie(raw: str | None) -> dict[str, Any] | None:
    """
    Decode the `user` cookie set by the login page (URL-encoded JSON).

    Returns None when the cookie is absent or unreadable; the guard then
    treats the visitor as having no role.
    """

    if not raw:
        return None
    try:
        data = json.loads(unquote(raw))
    except ValueError:
        logger.error("Error parsing user cookie")
        return None
    if not isinstance(data, dict):
        logger.error("Error parsing user cookie: expected an object")
        return None
    return data
