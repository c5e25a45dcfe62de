from pydantic import AliasChoices, BaseModel, EmailStr, Field
from promptboard.schemas.base import BaseSchema


class LoginRequest(BaseModel):
    """로그인 요청 스키마"""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserInfo(BaseSchema):
    """외부로 노출되는 사용자 정보 (비밀번호 해시 제외)"""

    id: str = Field(validation_alias=AliasChoices("user_id", "id"))
    name: str
    email: str


class LoginResponse(BaseModel):
    """로그인 응답 스키마"""

    user: UserInfo
    token: str
    token_type: str = "bearer"
