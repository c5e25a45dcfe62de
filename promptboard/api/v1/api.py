from fastapi import APIRouter

from promptboard.api.v1.endpoints import (
    posts,
    image_generations,  # 이미지 → 프롬프트 생성 API
)

api_router = APIRouter()

# 게시글 관리 API
api_router.include_router(posts.router, prefix="/posts", tags=["Posts"])

# 프롬프트 생성 API
api_router.include_router(
    image_generations.router, prefix="/image-generations", tags=["Image Generations"]
)
