"""
공통 검증 유틸리티 모듈
필드 단위 검증 에러 형식 통일
"""

from typing import Any, Dict, Iterable, List, Mapping
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """검증 에러 클래스 (필드 -> 메시지 목록)"""

    def __init__(self, errors: Mapping[str, List[str]]):
        self.errors = {field: list(messages) for field, messages in errors.items()}
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": first_message(self.errors), "errors": self.errors},
        )

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]})


def first_message(errors: Mapping[str, List[str]]) -> str:
    """첫 번째 에러 메시지 (없으면 기본 문구)"""
    for messages in errors.values():
        if messages:
            return messages[0]
    return "The given data was invalid."


def format_request_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """
    pydantic/FastAPI 검증 에러 목록을 필드별 메시지로 변환

    loc의 마지막 문자열 요소를 필드명으로 사용한다.
    ("body", "email") -> "email", ("query", "per_page") -> "per_page"
    """
    formatted: Dict[str, List[str]] = {}
    for error in errors:
        loc = [part for part in error.get("loc", ()) if isinstance(part, str)]
        field = loc[-1] if loc else "non_field"
        if field in ("body", "query", "path", "header") and len(loc) == 1:
            field = "non_field"
        formatted.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return formatted
