from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from promptboard.schemas.base import TimestampSchema


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be empty")
    return value


# 게시글 생성/전체 수정 스키마
class PostCreate(BaseModel):
    # author_id 등 정의되지 않은 필드는 무시 (소유자는 백엔드에서 설정됨)
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., max_length=255)
    body: str

    @field_validator("title", "body")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        return _not_blank(value)


# 게시글 부분 수정 스키마 (PATCH)
class PostUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, max_length=255)
    body: Optional[str] = None

    @field_validator("title", "body")
    @classmethod
    def check_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class Post(TimestampSchema):
    id: str = Field(validation_alias=AliasChoices("post_id", "id"))
    author_id: str
    title: str
    body: str
