from fastapi import APIRouter, HTTPException, status
from ...services.auth import (
    user_dependency,
    create_access_token,
    create_refresh_token,
    decode_token,
    REFRESH_TOKEN,
)
from ...services.user_service import UserService
from ...db.base import db_dependency
from ...schemas.user import CreateUserRequest, LoginRequest, RefreshTokenRequest, ProfileUpdate, UserProfile, Token
from ...utils.logger import get_logger
from ..errors import ok, to_http_exception

logger = get_logger(__name__)

router = APIRouter(prefix='/auth', tags=['auth'])


def _issue_tokens(user) -> Token:
    return Token(
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
        user=UserProfile.model_validate(user)
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(user_data: CreateUserRequest, db: db_dependency):
    try:
        user = UserService(db).register(user_data)
        return ok(_issue_tokens(user))
    except Exception as e:
        raise to_http_exception(e)


@router.post("/login")
async def login(credentials: LoginRequest, db: db_dependency):
    try:
        user = UserService(db).authenticate(credentials.email, credentials.password)
        logger.info(f"User logged in: {user.id}")
        return ok(_issue_tokens(user))
    except Exception as e:
        raise to_http_exception(e)


@router.post("/refresh")
async def refresh(request: RefreshTokenRequest, db: db_dependency):
    try:
        user_id = decode_token(request.refresh_token, REFRESH_TOKEN)
        user = UserService(db).get_by_id(user_id) if user_id is not None else None

        if not user or not user.is_active:
            raise HTTPException(status_code=401, detail="Invalid refresh token")

        return ok(_issue_tokens(user))
    except Exception as e:
        raise to_http_exception(e)


@router.post("/logout")
async def logout(user: user_dependency):
    # Tokens are stateless; the client drops them
    logger.info(f"User logged out: {user.id}")
    return ok()


@router.get("/me")
async def get_me(user: user_dependency):
    return ok(UserProfile.model_validate(user))


@router.patch("/me")
async def update_me(profile_data: ProfileUpdate, user: user_dependency, db: db_dependency):
    try:
        updated = UserService(db).update_profile(user, profile_data)
        return ok(UserProfile.model_validate(updated))
    except Exception as e:
        raise to_http_exception(e)
