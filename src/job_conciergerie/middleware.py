"""Cookie based route guard for the server-rendered pages."""
from __future__ import annotations

import re
from typing import Optional

from flask import Flask, redirect, request

from .auth.service import AuthService
from .common.logging import get_logger
from .core.constants import USER_ID_PATH_PATTERN
from .database.mysql_base import DatabaseError

LOG = get_logger("job_conciergerie.middleware")

_USER_ID_PATH = re.compile(USER_ID_PATH_PATTERN)

# Registered users sent here are redirected into the app
_ONBOARDING_PATHS = {"/", "/waiting"}


def is_exempt(path: str) -> bool:
    return (
        path.startswith("/static")
        or path.startswith("/api")
        or "." in path
        or path == "/favicon.ico"
        or bool(_USER_ID_PATH.match(path))
    )


def resolve_redirect(
    path: str,
    user_id: Optional[str],
    user_type: Optional[str],
    auth_service: AuthService,
) -> Optional[str]:
    """Target of the redirect for ``path``, or ``None`` to let the request through."""
    if is_exempt(path):
        return None

    if not user_id or not user_type:
        return None if path == "/" else "/"

    try:
        found = auth_service.get_existing_user_type(user_id)
    except DatabaseError:
        LOG.exception("could not classify user %s on %s", user_id, path)
        return None if path == "/" else "/"

    if found is not None and found.value == user_type:
        return "/missions" if path in _ONBOARDING_PATHS else None
    return None if path == "/waiting" else "/waiting"


def register(app: Flask, auth_service: AuthService) -> None:
    @app.before_request
    def guard_pages():
        target = resolve_redirect(
            request.path,
            request.cookies.get("user_id"),
            request.cookies.get("user_type"),
            auth_service,
        )
        if target:
            return redirect(target)
        return None
