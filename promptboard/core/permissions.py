"""
권한 검증 관련 공통 유틸리티
리소스 소유권 체크 등 권한 관련 로직 통합
"""

import logging
from fastapi import HTTPException, status

from promptboard.models.user import User

logger = logging.getLogger(__name__)

FORBIDDEN_DETAIL = "Access forbidden"


def check_resource_ownership(user: User, resource_owner_id: str, resource: str = "resource") -> bool:
    """
    리소스 소유권 체크 함수
    Args:
        user: 현재 인증된 사용자
        resource_owner_id: 리소스의 소유자 ID
        resource: 로그에 남길 리소스 이름
    Returns:
        bool: 소유권 여부 (항상 True, 실패 시 예외)
    Raises:
        HTTPException: 소유자가 아닌 경우 403
    """
    if user.user_id != resource_owner_id:
        logger.warning(
            f"소유권 없음: user_id={user.user_id}, {resource} owner={resource_owner_id}"
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)

    return True
