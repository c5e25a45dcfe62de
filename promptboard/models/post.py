from sqlalchemy import Column, String, ForeignKey, Text
from sqlalchemy.orm import relationship
from promptboard.models.base import Base, TimestampMixin
import uuid


class Post(Base, TimestampMixin):
    """게시글 모델"""

    __tablename__ = "POST"

    post_id = Column(
        String(255),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="게시글 고유 식별자",
    )
    author_id = Column(
        String(255),
        ForeignKey("USER.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="작성자(소유자) 사용자 식별자",
    )
    title = Column(String(255), nullable=False, comment="게시글 제목")
    body = Column(Text, nullable=False, comment="게시글 본문")

    # 관계
    author = relationship("User", back_populates="posts")

    def __repr__(self):
        return f"<Post {self.post_id}: author={self.author_id}>"
