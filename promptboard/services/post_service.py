"""
게시글 서비스
소유자 기준 게시글 CRUD (모든 조회/수정/삭제는 소유권 확인 후 수행)
"""

import logging
from typing import Any, Dict, List, Tuple

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from promptboard.core.permissions import check_resource_ownership
from promptboard.core.security import get_current_db_user
from promptboard.database import get_db
from promptboard.models.post import Post
from promptboard.models.user import User
from promptboard.schemas.post import PostCreate
from promptboard.utils.api_responses import paginate

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user: User, page: int, limit: int) -> Tuple[List[Post], int]:
        """사용자가 작성한 게시글만 최신순으로 조회"""
        query = (
            self.db.query(Post)
            .filter(Post.author_id == user.user_id)
            .order_by(Post.created_at.desc(), Post.post_id)
        )
        return paginate(query, page, limit)

    def create(self, user: User, payload: PostCreate) -> Post:
        # 작성자는 항상 현재 사용자
        post = Post(**payload.model_dump(), author_id=user.user_id)
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info(f"게시글 생성: post_id={post.post_id}, author_id={user.user_id}")
        return post

    def get_or_404(self, post_id: str) -> Post:
        post = self.db.query(Post).filter(Post.post_id == post_id).first()
        if post is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
        return post

    def get_owned(self, user: User, post_id: str) -> Post:
        """게시글 조회 후 소유권 확인 (없으면 404, 소유자가 아니면 403)"""
        post = self.get_or_404(post_id)
        check_resource_ownership(user, post.author_id, resource="post")
        return post

    def update(self, post: Post, changes: Dict[str, Any]) -> Post:
        """소유권이 확인된 게시글에 변경 사항 반영"""
        for field, value in changes.items():
            setattr(post, field, value)

        self.db.commit()
        self.db.refresh(post)
        logger.info(f"게시글 수정: post_id={post.post_id}, fields={sorted(changes)}")
        return post

    def delete(self, post: Post) -> None:
        self.db.delete(post)
        self.db.commit()
        logger.info(f"게시글 삭제: post_id={post.post_id}")


def get_post_service(db: Session = Depends(get_db)) -> PostService:
    return PostService(db)


def get_owned_post(
    post_id: str,
    current_user: User = Depends(get_current_db_user),
    service: PostService = Depends(get_post_service),
) -> Post:
    """
    경로의 게시글을 소유권 확인 후 반환하는 의존성

    요청 본문 검증보다 먼저 실행되므로 소유자가 아닌 요청은
    본문 내용과 관계없이 403으로 응답한다.
    """
    return service.get_owned(current_user, post_id)
