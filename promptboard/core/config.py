from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import secrets
import os
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # model_config는 .env 파일을 읽도록 설정합니다.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding='utf-8', extra='allow')

    # API 설정
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "PromptBoard API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # 데이터베이스 설정
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./promptboard.db")
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_TIMEOUT: int = 30

    # 보안 설정
    SECRET_KEY: str = os.getenv(
        "JWT_SECRET_KEY", os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # CORS 설정
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "https://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # OpenAI 설정 (이미지 → 프롬프트 변환)
    OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")
    OPENAI_VISION_MODEL: str = os.getenv("OPENAI_VISION_MODEL", "gpt-4o-mini")
    OPENAI_MAX_TOKENS: int = int(os.getenv("OPENAI_MAX_TOKENS", "500"))
    OPENAI_TIMEOUT: float = float(os.getenv("OPENAI_TIMEOUT", "60"))

    # 로깅 설정
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # API 제한 설정
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

    # X-Forwarded-For를 신뢰할 프록시 주소 (쉼표 구분, 비어 있으면 헤더 무시)
    TRUSTED_PROXIES: str = os.getenv("TRUSTED_PROXIES", "")

    # 로그인 시도 제한
    LOGIN_MAX_ATTEMPTS: int = int(os.getenv("LOGIN_MAX_ATTEMPTS", "5"))
    LOGIN_DECAY_SECONDS: int = int(os.getenv("LOGIN_DECAY_SECONDS", "60"))

    # 파일 저장소 설정 (public 디스크)
    STORAGE_ROOT: str = os.getenv("STORAGE_ROOT", "storage/public")
    STORAGE_URL_PREFIX: str = os.getenv("STORAGE_URL_PREFIX", "/storage")
    IMAGE_UPLOAD_DIRECTORY: str = "uploads/images"

    # 파일 업로드 설정
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", "10485760"))  # 10MB
    MIN_FILE_SIZE: int = int(os.getenv("MIN_FILE_SIZE", "1024"))  # 1KB
    IMAGE_MIN_DIMENSION: int = 100
    IMAGE_MAX_DIMENSION: int = 10000
    ALLOWED_IMAGE_TYPES: List[str] = ["jpeg", "png", "jpg", "gif", "svg"]

    # 페이지네이션
    DEFAULT_PAGE_SIZE: int = 15
    MAX_PAGE_SIZE: int = 100

    def validate_settings(self):
        """설정 유효성 검증"""
        if (
            not self.SECRET_KEY
            or self.SECRET_KEY == "your-secret-key-here-change-in-production"
        ):
            raise ValueError("SECRET_KEY must be set in production")

        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL must be set")

        if self.ACCESS_TOKEN_EXPIRE_MINUTES < 1:
            raise ValueError("ACCESS_TOKEN_EXPIRE_MINUTES must be at least 1 minute")

        if self.MIN_FILE_SIZE < 0 or self.MIN_FILE_SIZE > self.MAX_FILE_SIZE:
            raise ValueError("MIN_FILE_SIZE must be between 0 and MAX_FILE_SIZE")

        if self.IMAGE_MIN_DIMENSION < 1 or self.IMAGE_MIN_DIMENSION > self.IMAGE_MAX_DIMENSION:
            raise ValueError("IMAGE_MIN_DIMENSION must be between 1 and IMAGE_MAX_DIMENSION")

        if self.DEFAULT_PAGE_SIZE < 1 or self.DEFAULT_PAGE_SIZE > self.MAX_PAGE_SIZE:
            raise ValueError("DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE")

    @property
    def trusted_proxies(self) -> List[str]:
        return [proxy.strip() for proxy in self.TRUSTED_PROXIES.split(",") if proxy.strip()]


settings = Settings()
