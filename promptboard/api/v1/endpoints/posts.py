from fastapi import APIRouter, Depends, Query, Response, status
import logging

from promptboard.core.config import settings
from promptboard.core.security import get_current_db_user
from promptboard.models.post import Post
from promptboard.models.user import User
from promptboard.schemas.post import Post as PostSchema, PostCreate, PostUpdate
from promptboard.services.post_service import PostService, get_owned_post, get_post_service
from promptboard.utils.api_responses import PaginatedResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=PaginatedResponse[PostSchema])
async def list_posts(
    page: int = Query(1, ge=1, description="페이지 번호"),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="페이지당 항목 수"),
    current_user: User = Depends(get_current_db_user),
    service: PostService = Depends(get_post_service),
):
    """로그인된 사용자가 작성한 게시글 목록 조회"""
    posts, total = service.list_for_user(current_user, page, per_page)
    return PaginatedResponse.create(
        data=[PostSchema.model_validate(post) for post in posts],
        total=total,
        page=page,
        limit=per_page,
    )


@router.post("", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current_user: User = Depends(get_current_db_user),
    service: PostService = Depends(get_post_service),
):
    """게시글 생성 (작성자는 현재 사용자로 고정)"""
    return PostSchema.model_validate(service.create(current_user, payload))


@router.get("/{post_id}", response_model=PostSchema)
async def get_post(post: Post = Depends(get_owned_post)):
    """게시글 상세 조회"""
    return PostSchema.model_validate(post)


@router.put("/{post_id}", response_model=PostSchema)
async def replace_post(
    payload: PostCreate,
    post: Post = Depends(get_owned_post),
    service: PostService = Depends(get_post_service),
):
    """게시글 전체 수정"""
    return PostSchema.model_validate(service.update(post, payload.model_dump()))


@router.patch("/{post_id}", response_model=PostSchema)
async def update_post(
    payload: PostUpdate,
    post: Post = Depends(get_owned_post),
    service: PostService = Depends(get_post_service),
):
    """게시글 부분 수정 (전달된 필드만 반영)"""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return PostSchema.model_validate(service.update(post, changes))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post: Post = Depends(get_owned_post),
    service: PostService = Depends(get_post_service),
):
    """게시글 삭제"""
    service.delete(post)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
