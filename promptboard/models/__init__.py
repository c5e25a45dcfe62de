# Database models package

from .base import Base, TimestampMixin

from .user import User

# 게시글 모델
from .post import Post

# 프롬프트 생성 이력 모델
from .image_generation import ImageGeneration

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Post",
    "ImageGeneration",
]
