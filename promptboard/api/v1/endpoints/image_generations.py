from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
import logging

from promptboard.core.config import settings
from promptboard.core.security import get_current_db_user
from promptboard.models.user import User
from promptboard.schemas.image_generation import ImageGeneration as ImageGenerationSchema
from promptboard.services.image_generation_service import (
    ImageGenerationService,
    get_image_generation_service,
)
from promptboard.utils.api_responses import PaginatedResponse
from promptboard.utils.file_handlers import ImageUploadValidator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=PaginatedResponse[ImageGenerationSchema])
async def list_image_generations(
    search: Optional[str] = Query(None, description="생성된 프롬프트 검색어"),
    sort: Optional[str] = Query(
        None,
        description="정렬 필드, '-' 접두사는 내림차순 (created_at, generated_prompt, original_filename, file_size)",
    ),
    page: int = Query(1, ge=1, description="페이지 번호"),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="페이지당 항목 수"),
    current_user: User = Depends(get_current_db_user),
    service: ImageGenerationService = Depends(get_image_generation_service),
):
    """
    프롬프트 생성 이력 목록 조회

    로그인된 사용자의 이력만 반환하며 기본 정렬은 최신순.
    - search: generated_prompt 부분 일치 (대소문자 무시)
    - sort: 'created_at', '-created_at', 'generated_prompt', '-file_size' 등
    """
    records, total = service.list_for_user(current_user, search, sort, page, per_page)
    return PaginatedResponse.create(
        data=[service.to_schema(record) for record in records],
        total=total,
        page=page,
        limit=per_page,
    )


@router.post("", response_model=ImageGenerationSchema, status_code=status.HTTP_201_CREATED)
async def create_image_generation(
    image: Optional[UploadFile] = File(None, description="프롬프트를 생성할 이미지"),
    current_user: User = Depends(get_current_db_user),
    service: ImageGenerationService = Depends(get_image_generation_service),
):
    """
    이미지 업로드 후 프롬프트 생성

    1. 업로드 이미지 검증 (타입, 크기, 해상도)
    2. public 저장소에 안전한 파일명으로 저장
    3. OpenAI 비전 모델로 설명 프롬프트 생성
    4. 사용자 생성 이력 저장
    """
    validated = await ImageUploadValidator().validate(image)
    record = await service.create_from_upload(current_user, validated)
    return service.to_schema(record)
