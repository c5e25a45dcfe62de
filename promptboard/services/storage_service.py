"""
로컬 public 디스크 저장 서비스
업로드 파일을 STORAGE_ROOT 아래에 저장하고 STORAGE_URL_PREFIX로 공개한다.
"""

import logging
from pathlib import Path
from typing import Optional

import aiofiles

from promptboard.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """저장소 입출력 실패"""


class StorageService:
    def __init__(self, root: Optional[str] = None, url_prefix: Optional[str] = None):
        self.root = Path(root or settings.STORAGE_ROOT).resolve()
        self.url_prefix = (url_prefix or settings.STORAGE_URL_PREFIX).rstrip("/")

    def path(self, relative_path: str) -> Path:
        """저장소 기준 경로를 절대 경로로 변환 (루트 밖 접근 차단)"""
        full_path = (self.root / relative_path).resolve()
        if self.root != full_path and self.root not in full_path.parents:
            raise StorageError(f"Path escapes storage root: {relative_path}")
        return full_path

    def url(self, relative_path: str) -> str:
        return f"{self.url_prefix}/{relative_path.lstrip('/')}"

    def exists(self, relative_path: str) -> bool:
        return self.path(relative_path).is_file()

    async def store_as(self, directory: str, filename: str, content: bytes) -> str:
        """
        파일 내용을 directory/filename 으로 저장

        Returns:
            str: 저장소 기준 상대 경로
        """
        relative_path = f"{directory.strip('/')}/{filename}"
        destination = self.path(relative_path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(destination, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"❌ 파일 저장 실패: {destination} - {e}")
            raise StorageError(f"Failed to store file: {relative_path}") from e

        logger.info(f"✅ 파일 저장 완료: {relative_path} ({len(content)} bytes)")
        return relative_path

    def delete(self, relative_path: str) -> bool:
        """파일 삭제 (없으면 False)"""
        target = self.path(relative_path)
        if not target.is_file():
            return False
        target.unlink()
        logger.debug(f"🗑️ 파일 삭제: {relative_path}")
        return True


# 싱글톤 인스턴스
_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """저장 서비스 인스턴스 반환"""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
