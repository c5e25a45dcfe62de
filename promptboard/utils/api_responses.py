"""
API 응답 표준화 모듈
일관된 페이지네이션 응답 형식 지원
"""

from typing import Any, List, Optional, Generic, Tuple, TypeVar
from pydantic import BaseModel
from math import ceil

T = TypeVar('T')


class PaginatedResponse(BaseModel, Generic[T]):
    """페이지네이션 응답 모델"""

    success: bool = True
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool
    message: Optional[str] = None

    @classmethod
    def create(
        cls,
        data: List[T],
        total: int,
        page: int,
        limit: int,
        message: Optional[str] = None
    ) -> "PaginatedResponse[T]":
        """페이지네이션 응답 생성 헬퍼"""
        total_pages = ceil(total / limit) if limit > 0 else 0

        return cls(
            data=data,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
            message=message
        )


def paginate(query, page: int, limit: int) -> Tuple[List[Any], int]:
    """
    SQLAlchemy 쿼리에 OFFSET/LIMIT 적용

    Returns:
        (현재 페이지 아이템, 전체 개수)
    """
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total
