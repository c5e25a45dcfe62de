"""Shared pytest fixtures for PromptBoard tests."""

import io
import os
import tempfile

# 앱 임포트 전에 테스트 환경 설정 (settings는 임포트 시점에 로드됨)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="promptboard-storage-")

from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import Session

from promptboard.core.rate_limit import LoginThrottle, get_login_throttle
from promptboard.core.security import create_access_token, get_password_hash
from promptboard.database import SessionLocal, engine, get_db
from promptboard.main import app
from promptboard.models import Base, ImageGeneration, Post, User
from promptboard.services.openai_vision_service import (
    InferenceError,
    get_openai_vision_service,
)
from promptboard.services.storage_service import StorageService, get_storage_service

DEFAULT_PASSWORD = "password"


class FakeVisionService:
    """비전 모델 대역 (호출 기록, 실패 주입 가능)"""

    def __init__(self, prompt: str = "A watercolor cat sitting on a windowsill"):
        self.prompt = prompt
        self.error: Optional[Exception] = None
        self.calls: List[Tuple[bytes, str]] = []

    async def generate_prompt_from_image(self, image_data: bytes, mime_type: str = "image/png") -> str:
        self.calls.append((image_data, mime_type))
        if self.error is not None:
            raise self.error
        return self.prompt


def make_image_bytes(width: int, height: int, image_format: str = "PNG", noise: bool = True) -> bytes:
    """테스트용 이미지 생성 (노이즈 이미지는 압축되지 않아 1KB 이상이 됨)"""
    if noise:
        image = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    else:
        image = Image.new("RGB", (width, height), color=(200, 120, 40))
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    """테스트마다 테이블을 새로 생성"""
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def create_user(db_session: Session) -> Callable[..., User]:
    """사용자 생성 팩토리"""

    def _create_user(
        name: str = "Alice",
        email: str = "alice@example.com",
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(name=name, email=email, hashed_password=get_password_hash(password))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def user(create_user) -> User:
    return create_user()


@pytest.fixture
def other_user(create_user) -> User:
    return create_user(name="Bob", email="bob@example.com")


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """사용자별 Bearer 토큰 헤더 생성"""

    def _auth_headers(user: User) -> Dict[str, str]:
        token = create_access_token({"sub": user.user_id, "email": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def create_post(db_session: Session) -> Callable[..., Post]:
    """게시글 생성 팩토리"""

    def _create_post(
        author: User,
        title: str = "Hello",
        body: str = "First post",
        created_at: Optional[datetime] = None,
    ) -> Post:
        post = Post(author_id=author.user_id, title=title, body=body)
        if created_at is not None:
            post.created_at = created_at
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _create_post


@pytest.fixture
def create_generation(db_session: Session) -> Callable[..., ImageGeneration]:
    """프롬프트 생성 이력 팩토리 (파일 저장 없이 레코드만 생성)"""
    base_time = datetime(2026, 1, 1, 12, 0, 0)
    counter = {"n": 0}

    def _create_generation(
        owner: User,
        generated_prompt: str = "A mountain lake at dawn",
        original_filename: str = "lake.png",
        file_size: int = 2048,
        created_at: Optional[datetime] = None,
    ) -> ImageGeneration:
        counter["n"] += 1
        record = ImageGeneration(
            user_id=owner.user_id,
            image_path=f"uploads/images/fixture_{counter['n']}.png",
            generated_prompt=generated_prompt,
            original_filename=original_filename,
            file_size=file_size,
            mime_type="image/png",
            created_at=created_at or base_time + timedelta(minutes=counter["n"]),
        )
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return _create_generation


@pytest.fixture
def storage(tmp_path: Path) -> StorageService:
    return StorageService(root=str(tmp_path / "public"), url_prefix="/storage")


@pytest.fixture
def vision() -> FakeVisionService:
    return FakeVisionService()


@pytest.fixture
def login_throttle() -> LoginThrottle:
    return LoginThrottle(max_attempts=5, decay_seconds=60)


@pytest.fixture
def client(
    db_session: Session,
    storage: StorageService,
    vision: FakeVisionService,
    login_throttle: LoginThrottle,
) -> Generator[TestClient, None, None]:
    """의존성을 테스트 대역으로 교체한 TestClient"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[get_openai_vision_service] = lambda: vision
    app.dependency_overrides[get_login_throttle] = lambda: login_throttle
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def inference_error() -> InferenceError:
    return InferenceError("Vision model request failed: upstream timeout")


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    return make_image_bytes
