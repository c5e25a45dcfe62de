"""
이미지 → 프롬프트 변환 서비스
OpenAI Vision API를 사용하여 업로드된 이미지를 설명하는 프롬프트를 생성
"""

import base64
import logging
from typing import Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from promptboard.core.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert prompt writer for text-to-image models.
Look at the image and write ONE detailed descriptive prompt that could be used
to recreate it: subject, composition, setting, lighting, colors, mood, style
and camera or medium details. Respond with the prompt text only, no preamble."""


class InferenceError(Exception):
    """외부 추론 호출 실패"""


class OpenAIVisionService:
    """OpenAI 비전 모델 호출 서비스"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_VISION_MODEL
        self.timeout = timeout or settings.OPENAI_TIMEOUT
        self._client = client
        if not self.api_key and client is None:
            logger.warning("OpenAI API 키가 설정되지 않았습니다")

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise InferenceError("OpenAI API key is not configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=httpx.Timeout(self.timeout, connect=10.0),
            )
        return self._client

    async def generate_prompt_from_image(self, image_data: bytes, mime_type: str = "image/png") -> str:
        """
        이미지를 분석하여 설명 프롬프트 생성

        Args:
            image_data: 이미지 바이트
            mime_type: 이미지 MIME 타입 (data URL에 사용)

        Returns:
            str: 생성된 프롬프트

        Raises:
            InferenceError: API 키 누락, API 오류, 타임아웃, 빈 응답
        """
        base64_image = base64.b64encode(image_data).decode("utf-8")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "text",
                                "text": "Generate a descriptive prompt for this image.",
                            },
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{mime_type};base64,{base64_image}"},
                            },
                        ],
                    },
                ],
                max_tokens=settings.OPENAI_MAX_TOKENS,
                temperature=0.4,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI Vision API 오류: {e}")
            raise InferenceError(f"Vision model request failed: {e}") from e

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            logger.error("OpenAI Vision API가 빈 응답을 반환했습니다")
            raise InferenceError("Vision model returned an empty prompt")

        logger.info(f"프롬프트 생성 완료 (model={self.model}, length={len(content)})")
        return content


# 싱글톤 인스턴스
_openai_vision_service: Optional[OpenAIVisionService] = None


def get_openai_vision_service() -> OpenAIVisionService:
    """비전 서비스 인스턴스 반환"""
    global _openai_vision_service
    if _openai_vision_service is None:
        _openai_vision_service = OpenAIVisionService()
    return _openai_vision_service
