from __future__ import annotations

from collections.abc import Callable


def require_permission(resource: str, action: str) -> Callable:
    """
    Decorator-style API (alternative to route rules in YAML).

    Implementation detail:
    - This decorator does NOT check anything itself.
    - It attaches metadata that the global security dependency reads
      *after* routing (during dependency resolution).
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_permission__", (resource, action))
        return fn

    return decorator


def scoped(enabled: bool = True) -> Callable:
    """
    Decorator-style API.

    Turns scope filtering on (or off) for this endpoint regardless of the
    configured default.
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_scoped__", enabled)
        return fn

    return decorator
