from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from promptboard.models.base import Base, TimestampMixin
import uuid


class User(Base, TimestampMixin):
    """사용자 모델"""

    __tablename__ = "USER"

    user_id = Column(
        String(255),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="내부 사용자 고유 id",
    )
    name = Column(String(100), nullable=False, comment="사용자 이름")
    email = Column(String(255), nullable=False, unique=True, index=True, comment="사용자 이메일")
    hashed_password = Column(String(255), nullable=False, comment="bcrypt 해시 비밀번호")

    # 관계
    posts = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
    )
    image_generations = relationship(
        "ImageGeneration",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User(user_id={self.user_id}, name={self.name})>"
