"""Authentication dependency for admin API endpoints.

Behavior matrix:
  ADMIN_API_KEY set + valid token   → allow
  ADMIN_API_KEY set + wrong/missing → 401 Unauthorized
  ADMIN_API_KEY empty + DEBUG=true  → allow (local dev convenience)
  ADMIN_API_KEY empty + DEBUG=false → 403 Forbidden (locked in production)
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from riad.config import settings

log = logging.getLogger("riad.auth")

_bearer_scheme = HTTPBearer(auto_error=False)


async def require_admin_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> None:
    """FastAPI dependency: protect admin endpoints with a bearer token."""
    # The app's own Settings (create_app(config=...)) win over the process env
    config = getattr(request.app.state, "settings", None) or settings
    key = config.admin_api_key

    if not key:
        if config.debug:
            return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin API key not configured. Set ADMIN_API_KEY in .env.",
        )

    if credentials is None or not secrets.compare_digest(credentials.credentials, key):
        log.warning("Rejected admin request with invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
