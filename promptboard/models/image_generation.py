"""
이미지 → 프롬프트 생성 이력 모델

업로드된 이미지와 비전 모델이 생성한 설명 프롬프트를 함께 저장한다.
생성 이후에는 수정되지 않는다.
"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from promptboard.models.base import Base, TimestampMixin
import uuid


class ImageGeneration(Base, TimestampMixin):
    """프롬프트 생성 이력 모델"""

    __tablename__ = "IMAGE_GENERATION"

    image_generation_id = Column(
        String(255),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="생성 이력 고유 식별자",
    )
    user_id = Column(
        String(255),
        ForeignKey("USER.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="소유자 사용자 식별자",
    )
    image_path = Column(String(1000), nullable=False, comment="저장소 기준 이미지 경로")
    generated_prompt = Column(Text, nullable=False, comment="비전 모델이 생성한 프롬프트")
    original_filename = Column(String(255), nullable=False, comment="업로드 당시 원본 파일명")
    file_size = Column(Integer, nullable=False, comment="파일 크기(바이트)")
    mime_type = Column(String(100), nullable=False, comment="파일 MIME 타입")

    # 관계
    user = relationship("User", back_populates="image_generations")

    def __repr__(self):
        return f"<ImageGeneration {self.image_generation_id}: {self.original_filename}>"
