# backend/cranedb/security.py

"""
Request actor helpers.

Authentication happens upstream (the plant portal / API gateway). The gateway
forwards the authenticated user as headers:

- X-Actor-Id   : opaque user reference recorded on manual overrides
- X-Actor-Role : role name used for coarse privilege checks

This module only turns those headers into a `CurrentActor` and provides
role-based FastAPI dependencies for routers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status


# Roles allowed to override statuses and run maintenance triggers
SCHEDULE_ADMIN_ROLES = (
    "SUPERUSER",
    "ADMIN",
    "MAINTENANCE_PLANNER",
)


@dataclass(frozen=True)
class CurrentActor:
    id: str
    role: str


def get_current_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None),
) -> CurrentActor:
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing actor identity",
        )
    return CurrentActor(
        id=x_actor_id.strip(),
        role=(x_actor_role or "").strip().upper(),
    )


def require_roles(*roles: str) -> Callable[..., CurrentActor]:
    """
    Dependency factory: only let actors with one of `roles` through.

    Usage:
        current_actor: CurrentActor = Depends(require_roles("ADMIN"))
    """
    allowed = {role.upper() for role in roles}

    def _dependency(actor: CurrentActor = Depends(get_current_actor)) -> CurrentActor:
        if actor.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient privileges",
            )
        return actor

    return _dependency
