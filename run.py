import uvicorn

from promptboard.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "promptboard.main:app",
        host="localhost",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
