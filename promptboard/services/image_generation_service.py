"""
프롬프트 생성 서비스

업로드 이미지 저장 → 비전 모델 호출 → 생성 이력 저장 흐름과
사용자별 이력 검색/정렬/페이지네이션을 담당
"""

import logging
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

from promptboard.core.config import settings
from promptboard.database import get_db
from promptboard.models.image_generation import ImageGeneration
from promptboard.models.user import User
from promptboard.schemas.image_generation import (
    ImageGeneration as ImageGenerationSchema,
    SortDirection,
    SortField,
)
from promptboard.services.openai_vision_service import (
    OpenAIVisionService,
    get_openai_vision_service,
)
from promptboard.services.storage_service import StorageService, get_storage_service
from promptboard.utils.api_responses import paginate
from promptboard.utils.file_handlers import FileHandler, ValidatedImage

logger = logging.getLogger(__name__)

DEFAULT_SORT: Tuple[SortField, SortDirection] = (SortField.CREATED_AT, SortDirection.DESC)

# 허용 필드 -> 컬럼 (클라이언트 문자열을 컬럼명으로 직접 쓰지 않음)
SORT_COLUMNS = {
    SortField.CREATED_AT: ImageGeneration.created_at,
    SortField.GENERATED_PROMPT: ImageGeneration.generated_prompt,
    SortField.ORIGINAL_FILENAME: ImageGeneration.original_filename,
    SortField.FILE_SIZE: ImageGeneration.file_size,
}


def parse_sort(sort: Optional[str]) -> Tuple[SortField, SortDirection]:
    """
    정렬 파라미터 해석

    "-file_size" -> (FILE_SIZE, DESC), "file_size" -> (FILE_SIZE, ASC)
    값이 없거나 허용 목록에 없으면 created_at 내림차순
    """
    if not sort or not sort.strip():
        return DEFAULT_SORT

    sort = sort.strip()
    if sort.startswith("-"):
        name, direction = sort[1:], SortDirection.DESC
    else:
        name, direction = sort, SortDirection.ASC

    try:
        field = SortField(name)
    except ValueError:
        logger.debug(f"허용되지 않은 정렬 필드, 기본값 사용: {name!r}")
        return DEFAULT_SORT
    return field, direction


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ImageGenerationService:
    def __init__(
        self,
        db: Session,
        storage: StorageService,
        vision: OpenAIVisionService,
    ):
        self.db = db
        self.storage = storage
        self.vision = vision

    def list_for_user(
        self,
        user: User,
        search: Optional[str],
        sort: Optional[str],
        page: int,
        limit: int,
    ) -> Tuple[List[ImageGeneration], int]:
        """사용자 본인의 생성 이력 조회 (검색/정렬/페이지네이션)"""
        query = self.db.query(ImageGeneration).filter(ImageGeneration.user_id == user.user_id)

        if search and search.strip():
            query = query.filter(
                ImageGeneration.generated_prompt.ilike(f"%{escape_like(search)}%", escape="\\")
            )

        field, direction = parse_sort(sort)
        column = SORT_COLUMNS[field]
        ordering = column.desc() if direction is SortDirection.DESC else column.asc()
        query = query.order_by(ordering, ImageGeneration.image_generation_id)

        return paginate(query, page, limit)

    async def create_from_upload(self, user: User, image: ValidatedImage) -> ImageGeneration:
        """
        검증된 업로드 이미지로 프롬프트 생성 이력 생성

        Raises:
            InferenceError: 비전 모델 호출 실패 (저장한 파일은 삭제됨)
        """
        filename = FileHandler.generate_safe_filename(image.original_filename, image.extension)
        image_path = await self.storage.store_as(settings.IMAGE_UPLOAD_DIRECTORY, filename, image.content)

        try:
            generated_prompt = await self.vision.generate_prompt_from_image(image.content, image.mime_type)

            record = ImageGeneration(
                user_id=user.user_id,
                image_path=image_path,
                generated_prompt=generated_prompt,
                original_filename=image.original_filename,
                file_size=image.size,
                mime_type=image.mime_type,
            )
            self.db.add(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.storage.delete(image_path)
            logger.warning(f"프롬프트 생성 실패, 저장 파일 정리: {image_path}")
            raise

        self.db.refresh(record)
        logger.info(
            f"프롬프트 생성 이력 저장: id={record.image_generation_id}, user_id={user.user_id}"
        )
        return record

    def to_schema(self, record: ImageGeneration) -> ImageGenerationSchema:
        schema = ImageGenerationSchema.model_validate(record)
        return schema.model_copy(update={"image_url": self.storage.url(record.image_path)})


def get_image_generation_service(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    vision: OpenAIVisionService = Depends(get_openai_vision_service),
) -> ImageGenerationService:
    return ImageGenerationService(db, storage, vision)
