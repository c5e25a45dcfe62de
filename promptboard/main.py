from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from promptboard.core.config import settings
from promptboard.core.rate_limit import RateLimitMiddleware
from promptboard.database import init_database, test_database_connection
from promptboard.api.v1.api import api_router
from promptboard.api.v1.endpoints.auth import router as auth_router
from promptboard.services.openai_vision_service import InferenceError
from promptboard.services.storage_service import StorageError
from promptboard.utils.validators import (
    ValidationError,
    first_message,
    format_request_errors,
)

# 로깅 설정
if settings.DEBUG:
    # 개발 환경에서는 더 상세한 로깅
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
        handlers=[
            logging.StreamHandler(),  # 콘솔 출력
        ],
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("promptboard").setLevel(logging.DEBUG)
else:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL), format=settings.LOG_FORMAT
    )

logger = logging.getLogger(__name__)

# 기타 외부 라이브러리 로그 비활성화
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("PIL").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리"""
    logger.info("🚀 Starting PromptBoard API Server...")

    settings.validate_settings()

    # 데이터베이스 연결 테스트
    if not test_database_connection():
        logger.error("❌ Database connection failed")
        raise Exception("Database connection failed")

    init_database()

    if not settings.OPENAI_API_KEY:
        logger.warning("⚠️ OPENAI_API_KEY 미설정 - 프롬프트 생성 요청은 502로 응답합니다")

    logger.info("✅ PromptBoard API Server ready")

    yield

    logger.info("🛑 Shutting down PromptBoard API Server...")


# FastAPI 애플리케이션 생성
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Post management and image-to-prompt generation API",
    lifespan=lifespan,
)

# CORS 미들웨어 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS if not settings.DEBUG else ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=86400,  # CORS preflight 캐시 24시간
)

# API 요청 제한 (IP당 분당 요청 수)
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(
        RateLimitMiddleware, limit_per_minute=settings.RATE_LIMIT_PER_MINUTE
    )


# 요청 로깅 미들웨어
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """요청/응답 로깅"""
    start_time = time.time()

    # 헬스체크는 로그 생략
    skip_paths = ["/health"]
    if request.url.path not in skip_paths:
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"📥 {request.method} {request.url.path} - {client_host}")

    response = await call_next(request)

    if request.url.path not in skip_paths:
        process_time = time.time() - start_time
        logger.info(f"📤 {response.status_code} ({process_time:.3f}s)")

    return response


# 예외 처리 핸들러
@app.exception_handler(ValidationError)
async def field_validation_exception_handler(request: Request, exc: ValidationError):
    """필드 검증 예외 처리 (업로드 검증, 로그인 실패 등)"""
    logger.info(f"Validation failed: {request.url.path} - {exc.errors}")
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """요청 검증 예외 처리"""
    errors = format_request_errors(exc.errors())
    logger.info(f"Validation Error: {request.url.path} - {errors}")
    return JSONResponse(
        status_code=422,
        content={"message": first_message(errors), "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTP 예외 처리"""
    logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP Error",
            "status_code": exc.status_code,
            "detail": exc.detail,
            "path": request.url.path,
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(InferenceError)
async def inference_exception_handler(request: Request, exc: InferenceError):
    """비전 모델 호출 실패 처리"""
    logger.error(f"Inference Error: {exc}")
    return JSONResponse(
        status_code=502,
        content={
            "error": "Inference Error",
            "detail": "Failed to generate a prompt from the image",
            "path": request.url.path,
        },
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    """파일 저장 실패 처리"""
    logger.error(f"Storage Error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Storage Error",
            "detail": "Failed to store the uploaded file",
            "path": request.url.path,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """일반 예외 처리"""
    logger.error(f"Unexpected Error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "path": request.url.path,
        },
    )


# 헬스 체크 엔드포인트
@app.get("/health")
async def health_check():
    """서버 상태 확인"""
    db_healthy = test_database_connection()

    return JSONResponse(
        status_code=200 if db_healthy else 503,
        content={
            "status": "healthy" if db_healthy else "unhealthy",
            "database": "connected" if db_healthy else "disconnected",
            "timestamp": time.time(),
            "version": settings.VERSION,
        },
    )


@app.get("/api/hello")
async def hello():
    """API 동작 확인용 공개 엔드포인트 (기존 클라이언트 호환 고정 응답)"""
    return {"message": "Hello Laravel API"}


# API 라우터 등록
app.include_router(auth_router, prefix="/api", tags=["Authentication"])
app.include_router(api_router, prefix=settings.API_V1_STR)

# 업로드 이미지 공개 서빙 (public 디스크)
Path(settings.STORAGE_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(
    settings.STORAGE_URL_PREFIX,
    StaticFiles(directory=settings.STORAGE_ROOT),
    name="storage",
)
