import logging
import secrets
from typing import Optional, Set

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from autokatalog.config import Settings, get_settings

logger = logging.getLogger(__name__)

MSG_FORBIDDEN = "No token with sufficient permissions"

bearer_scheme = HTTPBearer(auto_error=False)


def _roles_for(token: str, settings: Settings) -> Optional[Set[str]]:
    for known, roles in settings.tokens.items():
        if secrets.compare_digest(known, token):
            return set(roles)
    return None


def current_roles(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Set[str]:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer token is missing",
            headers={"WWW-Authenticate": "Bearer"},
        )

    roles = _roles_for(credentials.credentials, settings)
    if roles is None:
        logger.debug("current_roles: unknown token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer token is invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return roles


def optional_roles(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Set[str]:
    """Roles of the caller, empty for anonymous callers and unknown tokens."""
    if credentials is None:
        return set()
    return _roles_for(credentials.credentials, settings) or set()


def require_roles(*allowed: str):
    """Dependency accepting callers holding at least one of ``allowed``."""

    def dependency(roles: Set[str] = Depends(current_roles)) -> Set[str]:
        if not roles.intersection(allowed):
            logger.debug("require_roles: roles=%s allowed=%s", roles, allowed)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=MSG_FORBIDDEN)
        return roles

    return dependency
