from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging

from promptboard.core.rate_limit import LoginThrottle, client_ip, get_login_throttle
from promptboard.core.security import (
    create_access_token,
    get_current_db_user,
    verify_password,
)
from promptboard.database import get_db
from promptboard.models.user import User
from promptboard.schemas.auth import LoginRequest, LoginResponse, UserInfo
from promptboard.utils.validators import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)

FAILED_LOGIN_MESSAGE = "These credentials do not match our records."


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(get_db),
    throttle: LoginThrottle = Depends(get_login_throttle),
):
    """이메일/비밀번호 로그인 후 액세스 토큰 발급"""
    throttle_key = LoginThrottle.throttle_key(payload.email, client_ip(request))

    if throttle.too_many_attempts(throttle_key):
        seconds = throttle.available_in(throttle_key)
        logger.warning(f"로그인 시도 제한: {throttle_key}")
        raise ValidationError.for_field(
            "email", f"Too many login attempts. Please try again in {seconds} seconds."
        )

    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if user is None or not verify_password(payload.password, user.hashed_password):
        attempts = throttle.hit(throttle_key)
        logger.info(f"로그인 실패: {throttle_key} (attempts={attempts})")
        raise ValidationError.for_field("email", FAILED_LOGIN_MESSAGE)

    throttle.clear(throttle_key)
    token = create_access_token({"sub": user.user_id, "email": user.email})
    logger.info(f"로그인 성공: user_id={user.user_id}")

    return LoginResponse(user=UserInfo.model_validate(user), token=token)


@router.get("/user", response_model=UserInfo)
async def get_me(current_user: User = Depends(get_current_db_user)):
    """현재 로그인한 사용자 정보"""
    return UserInfo.model_validate(current_user)
