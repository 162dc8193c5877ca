from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import Settings

_security = HTTPBasic(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


# PUBLIC_INTERFACE
def get_owner_id(
    request: Request,
    creds: Optional[HTTPBasicCredentials] = Depends(_security),
    x_owner_id: Optional[str] = Header(default=None, description="Ownership scope of the caller"),
) -> str:
    """
    Resolve the ownership scope for the current request.

    Identity is issued elsewhere; this only decides whose lists and tasks the
    request may see:
    - ENABLE_BASIC_AUTH=true: credentials must match BASIC_AUTH_USERNAME/PASSWORD
      and the user name becomes the owner id; otherwise 401 with WWW-Authenticate: Basic.
    - Otherwise: the X-Owner-Id header when present, else DEFAULT_OWNER_ID.
    """
    settings: Settings = request.app.state.settings

    if settings.enable_basic_auth:
        if creds is None or not creds.username or creds.password is None:
            raise _unauthorized("Not authenticated")
        if settings.basic_auth_username is None or settings.basic_auth_password is None:
            # auth enabled but username/password not configured
            raise _unauthorized("Server authentication not configured")
        if not (creds.username == settings.basic_auth_username and creds.password == settings.basic_auth_password):
            raise _unauthorized("Invalid authentication credentials")
        return creds.username

    if x_owner_id and x_owner_id.strip():
        return x_owner_id.strip()
    return settings.default_owner_id
