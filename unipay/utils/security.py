from __future__ import annotations

import logging
import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from unipay.config import settings

_bearer_scheme = HTTPBearer(auto_error=False, scheme_name="BearerAuth")
logger = logging.getLogger(__name__)


def verify_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),
) -> None:
    """Reject requests whose Bearer token differs from ``API_BEARER_TOKEN``."""
    token = credentials.credentials.strip() if credentials is not None else ""
    if token and secrets.compare_digest(token, settings.api_bearer_token):
        return
    logger.info("unauthorized request", extra={"event": "missing or invalid bearer token"})
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
