import logging
from typing import AsyncGenerator, Callable, Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.roles import has_role
from app.core.security import decode_access_token
from app.db.session import AsyncSessionLocal
from app.schemas.auth import AuthContext
from app.schemas.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PageParams

logger = logging.getLogger("vodichron.deps")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


async def get_db() -> AsyncGenerator:
    async with AsyncSessionLocal() as session:
        yield session


async def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> AuthContext:
    """
    Resolve the caller from the Bearer access token.

    Raises 401 when the header is missing, the token is invalid or expired,
    or the mandatory claims are absent.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception

    payload = decode_access_token(token)
    if payload is None or not payload.get("sub") or not payload.get("role"):
        raise credentials_exception

    return AuthContext(
        uuid=payload["sub"],
        role=payload["role"],
        email=payload.get("email"),
        type=payload.get("type", "employee"),
        name=payload.get("name"),
    )


def require_roles(*roles) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        caller: AuthContext = Depends(require_roles(*ADMIN_ROLES))
    """
    allowed = frozenset(roles)

    async def role_checker(caller: AuthContext = Depends(get_current_user)) -> AuthContext:
        if not has_role(caller.role, allowed):
            logger.warning(f"Role {caller.role} of {caller.uuid} not allowed")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied for the operation request.",
            )
        return caller

    return role_checker


def get_page_params(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> PageParams:
    return PageParams(page=page, page_size=page_size)
