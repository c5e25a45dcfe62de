from datetime import datetime, timedelta, timezone
from typing import Optional, Union, Dict
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import logging

from promptboard.core.config import settings
from promptboard.database import get_db
from promptboard.models.user import User

# 로깅 설정
logger = logging.getLogger(__name__)

# 비밀번호 해싱
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT 토큰 스키마 (헤더 누락 시 401로 직접 응답하기 위해 auto_error 비활성화)
security = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# 비밀번호 해싱 함수
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """비밀번호 검증"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """비밀번호 해싱"""
    return pwd_context.hash(password)


def create_access_token(
    data: dict, expires_delta: Union[timedelta, None] = None
) -> str:
    """액세스 토큰 생성"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """토큰 검증"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {str(e)}")
        return None


# 현재 사용자 가져오기 (JWT 페이로드)
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict:
    """현재 인증된 사용자 정보 반환 (전체 JWT 페이로드 포함)"""
    if credentials is None:
        raise _credentials_exception("Not authenticated")

    payload = verify_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise _credentials_exception("Invalid authentication credentials")

    return payload


async def get_current_db_user(
    current_user: Dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """JWT subject에 해당하는 사용자 레코드 반환"""
    user = db.query(User).filter(User.user_id == current_user["sub"]).first()
    if user is None:
        logger.warning(f"Token subject has no matching user: {current_user['sub']}")
        raise _credentials_exception("User not found")
    return user
