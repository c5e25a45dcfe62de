"""
파일 처리 유틸리티 모듈
이미지 업로드 검증, 안전한 저장 파일명 생성 등 공통 파일 작업 모듈화
"""

import io
import os
import re
import secrets
import string
import threading
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Tuple, List, Dict
from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from promptboard.core.config import settings
from promptboard.utils.validators import ValidationError

logger = logging.getLogger(__name__)

SVG_MIME = "image/svg+xml"

# MAX_IMAGE_PIXELS는 Pillow 전역 설정이므로 변경 구간을 직렬화
_pixel_limit_lock = threading.Lock()

# Pillow 포맷 -> (업로드 타입명, MIME, 기본 확장자)
RASTER_FORMATS: Dict[str, Tuple[str, str, str]] = {
    "JPEG": ("jpeg", "image/jpeg", "jpg"),
    "PNG": ("png", "image/png", "png"),
    "GIF": ("gif", "image/gif", "gif"),
}


@dataclass
class ImageProbe:
    """이미지 내용 분석 결과"""

    type_name: str
    mime_type: str
    extension: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass
class ValidatedImage:
    """검증을 통과한 업로드 이미지"""

    content: bytes
    original_filename: str
    extension: str
    size: int
    mime_type: str
    width: Optional[int]
    height: Optional[int]


def _svg_length(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = re.match(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$", value)
    if not match:
        return None
    return int(float(match.group(1)))


def probe_svg(content: bytes) -> Optional[ImageProbe]:
    """SVG 문서 여부 확인 및 width/height(또는 viewBox) 추출"""
    head = content[:1024].lstrip(b"\xef\xbb\xbf \t\r\n").lower()
    if not (head.startswith(b"<?xml") or head.startswith(b"<svg") or head.startswith(b"<!doctype svg")):
        return None
    if b"<svg" not in content[:4096].lower():
        return None

    try:
        root = ET.fromstring(content)
    except ET.ParseError:
        return None
    if not root.tag.lower().endswith("svg"):
        return None

    width = _svg_length(root.get("width"))
    height = _svg_length(root.get("height"))
    if (width is None or height is None) and root.get("viewBox"):
        parts = re.split(r"[\s,]+", root.get("viewBox").strip())
        if len(parts) == 4:
            try:
                width = width if width is not None else int(float(parts[2]))
                height = height if height is not None else int(float(parts[3]))
            except ValueError:
                pass

    return ImageProbe("svg", SVG_MIME, "svg", width, height)


def _read_header(content: bytes) -> Tuple[str, Tuple[int, int]]:
    # Image.open은 헤더만 읽고 픽셀은 디코딩하지 않음
    with Image.open(io.BytesIO(content)) as image:
        return image.format or "", image.size


def probe_image(content: bytes) -> Optional[ImageProbe]:
    """
    파일 내용으로 이미지 타입과 크기를 판별

    Pillow의 픽셀 수 제한(DecompressionBombError)에 걸리는 이미지도 정상 이미지로
    판별하여 해상도 규칙에서 거부되도록 한다.

    Returns:
        ImageProbe 또는 이미지가 아니면 None
    """
    try:
        try:
            image_format, (width, height) = _read_header(content)
        except Image.DecompressionBombError:
            with _pixel_limit_lock:
                pixel_limit = Image.MAX_IMAGE_PIXELS
                Image.MAX_IMAGE_PIXELS = None
                try:
                    image_format, (width, height) = _read_header(content)
                finally:
                    Image.MAX_IMAGE_PIXELS = pixel_limit
    except (UnidentifiedImageError, OSError):
        return probe_svg(content)

    if image_format in RASTER_FORMATS:
        type_name, mime_type, extension = RASTER_FORMATS[image_format]
    else:
        mime_type = Image.MIME.get(image_format, "application/octet-stream")
        type_name = image_format.lower()
        extension = type_name
    return ImageProbe(type_name, mime_type, extension, width, height)


class ImageUploadValidator:
    """이미지 업로드 검증기 (규칙별 메시지 누적)"""

    def __init__(
        self,
        allowed_types: Optional[List[str]] = None,
        max_size: Optional[int] = None,
        min_size: Optional[int] = None,
        min_dimension: Optional[int] = None,
        max_dimension: Optional[int] = None,
        field: str = "image",
    ):
        self.allowed_types = allowed_types or settings.ALLOWED_IMAGE_TYPES
        self.max_size = max_size if max_size is not None else settings.MAX_FILE_SIZE
        self.min_size = min_size if min_size is not None else settings.MIN_FILE_SIZE
        self.min_dimension = min_dimension or settings.IMAGE_MIN_DIMENSION
        self.max_dimension = max_dimension or settings.IMAGE_MAX_DIMENSION
        self.field = field

    @property
    def messages(self) -> Dict[str, str]:
        return {
            "required": "An image file is required.",
            "image": "The uploaded file must be an image.",
            "mimes": f"The image must be a file of type: {', '.join(self.allowed_types)}.",
            "max": f"The image size must not exceed {self.max_size // (1024 * 1024)}MB.",
            "min": f"The image file is too small (minimum {self.min_size // 1024}KB).",
            "dimensions": (
                f"The image dimensions must be between {self.min_dimension}x{self.min_dimension} "
                f"and {self.max_dimension}x{self.max_dimension} pixels."
            ),
        }

    def check(self, content: bytes) -> Tuple[List[str], Optional[ImageProbe]]:
        """내용 검증 후 (실패 메시지 목록, 분석 결과) 반환"""
        messages = self.messages
        failures: List[str] = []
        size = len(content)

        probe = probe_image(content)
        if probe is None:
            failures.append(messages["image"])
            failures.append(messages["mimes"])
        elif probe.type_name not in self.allowed_types:
            failures.append(messages["mimes"])

        if size > self.max_size:
            failures.append(messages["max"])
        if size < self.min_size:
            failures.append(messages["min"])

        if probe is not None:
            width, height = probe.width, probe.height
            if (
                width is None
                or height is None
                or not self.min_dimension <= width <= self.max_dimension
                or not self.min_dimension <= height <= self.max_dimension
            ):
                failures.append(messages["dimensions"])

        return failures, probe

    async def validate(self, upload: Optional[UploadFile]) -> ValidatedImage:
        """
        업로드 파일 검증

        Raises:
            ValidationError: 하나 이상의 규칙을 통과하지 못한 경우 (422)
        """
        if upload is None or not upload.filename:
            raise ValidationError.for_field(self.field, self.messages["required"])

        # 최대 크기 + 1 바이트까지만 읽음
        content = await upload.read(self.max_size + 1)
        failures, probe = self.check(content)
        if failures:
            logger.info(f"이미지 업로드 검증 실패: {upload.filename} - {failures}")
            raise ValidationError({self.field: failures})

        extension = os.path.splitext(os.path.basename(upload.filename))[1].lstrip(".") or probe.extension
        return ValidatedImage(
            content=content,
            original_filename=upload.filename,
            extension=extension,
            size=len(content),
            mime_type=probe.mime_type,
            width=probe.width,
            height=probe.height,
        )


class FileHandler:
    """파일 처리 유틸리티"""

    RANDOM_ALPHABET = string.ascii_letters + string.digits
    UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")

    @staticmethod
    def sanitize_basename(original_filename: str) -> str:
        """확장자를 뺀 파일명에서 허용되지 않는 문자를 '_'로 치환"""
        basename = os.path.basename(original_filename.replace("\\", "/"))
        name, _ = os.path.splitext(basename)
        return FileHandler.UNSAFE_CHARS.sub("_", name)

    @staticmethod
    def random_token(length: int = 32) -> str:
        return "".join(secrets.choice(FileHandler.RANDOM_ALPHABET) for _ in range(length))

    @staticmethod
    def generate_safe_filename(original_filename: str, extension: str) -> str:
        """
        충돌하지 않는 저장 파일명 생성

        Args:
            original_filename: 원본 파일명
            extension: 보존할 확장자 (점 제외)

        Returns:
            str: "<정제된 이름>_<32자 랜덤>.<확장자>"
        """
        sanitized = FileHandler.sanitize_basename(original_filename)
        extension = FileHandler.UNSAFE_CHARS.sub("_", extension)
        return f"{sanitized}_{FileHandler.random_token()}.{extension}"
