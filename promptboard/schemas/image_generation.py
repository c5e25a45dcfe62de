from enum import Enum
from typing import Optional
from pydantic import AliasChoices, Field
from promptboard.schemas.base import TimestampSchema


class SortField(str, Enum):
    """정렬 허용 필드 (이 목록 밖의 값은 쿼리에 사용하지 않음)"""

    CREATED_AT = "created_at"
    GENERATED_PROMPT = "generated_prompt"
    ORIGINAL_FILENAME = "original_filename"
    FILE_SIZE = "file_size"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ImageGeneration(TimestampSchema):
    """프롬프트 생성 이력 응답 스키마"""

    id: str = Field(validation_alias=AliasChoices("image_generation_id", "id"))
    image_path: str
    image_url: Optional[str] = None
    generated_prompt: str
    original_filename: str
    file_size: int
    mime_type: str
