from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.core.config import settings
from app.core.errors import BadRequestError
from app.core.rate_limiter import RateLimits, get_real_client_ip, limiter
from app.schemas.auth import (
    AuthContext,
    ExtendSessionResponse,
    GenerateResetLinkRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ResetPasswordRequest,
    ValidateResetLinkRequest,
    ValidateResetLinkResponse,
)
from app.schemas.user import ProfileResponse
from app.services.auth import auth_service, password_reset_service
from app.services.employees import user_service

router = APIRouter()


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        path=settings.REFRESH_COOKIE_PATH,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(RateLimits.AUTH_LOGIN)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate an employee or customer; the refresh token is set as an httponly cookie."""
    issued = await auth_service.login(
        db,
        credentials.email,
        credentials.password,
        user_agent=request.headers.get("User-Agent"),
        ip_address=get_real_client_ip(request),
    )
    _set_refresh_cookie(response, issued.refresh_token)
    return issued.response


@router.post("/extend-session", response_model=ExtendSessionResponse)
@limiter.limit(RateLimits.AUTH_REFRESH)
async def extend_session(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    issued = await auth_service.extend_session(db, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    _set_refresh_cookie(response, issued.refresh_token)
    return auth_service.to_extend_response(issued)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    await auth_service.logout(db, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    response.delete_cookie(settings.REFRESH_COOKIE_NAME, path=settings.REFRESH_COOKIE_PATH)
    return MessageResponse(message="Logged out successfully.")


@router.get("/me", response_model=ProfileResponse)
async def me(caller: AuthContext = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await user_service.get_profile(db, caller)


@router.post("/generate-reset-link", response_model=MessageResponse)
@limiter.limit(RateLimits.AUTH_PASSWORD_RESET)
async def generate_reset_link(
    request: Request,
    payload: GenerateResetLinkRequest,
    db: AsyncSession = Depends(get_db),
):
    await password_reset_service.generate_reset_link(db, payload.email)
    return MessageResponse(message="If the email is registered, a password reset link has been sent.")


@router.post("/validate-reset-link", response_model=ValidateResetLinkResponse)
@limiter.limit(RateLimits.AUTH_PASSWORD_RESET)
async def validate_reset_link(
    request: Request,
    payload: ValidateResetLinkRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await password_reset_service.validate_reset_link(db, payload.token)
    if result is None:
        raise BadRequestError(password_reset_service.EXPIRED_LINK)
    return ValidateResetLinkResponse(**result)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(RateLimits.AUTH_PASSWORD_RESET)
async def reset_password(
    request: Request,
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    await password_reset_service.reset_password(db, payload.token, payload.email, payload.password)
    return MessageResponse(message="Password has been reset successfully.")
