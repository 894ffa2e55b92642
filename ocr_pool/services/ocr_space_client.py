"""
Клиент OCR.space API.

Отправляет base64 изображение на POST /parse/image
и возвращает распознанный текст всех страниц.

Документация API: https://ocr.space/ocrapi
"""

import logging
from typing import Optional

import httpx

from ocr_pool.config import settings
from ocr_pool.errors import ExternalServiceError
from ocr_pool.schemas import OCRSpaceResponse, mask_key

logger = logging.getLogger(__name__)


class OCRSpaceClient:
    """
    Синхронный клиент OCR.space.

    Если http_client не передан, клиент создаётся внутри
    и закрывается в close() (или при выходе из with).
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        language: Optional[str] = None,
        engine: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_url = api_url or settings.api_url
        self.language = language or settings.language
        self.engine = engine or settings.engine

        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds or settings.timeout_seconds)
        )

    def parse_base64(self, api_key: str, base64_image: str) -> str:
        """
        Распознаёт текст на изображении.

        Args:
            api_key: ключ OCR.space
            base64_image: изображение в base64 с data-URI префиксом

        Returns:
            str: распознанный текст

        Raises:
            ExternalServiceError: сетевая ошибка, не-200 ответ,
                некорректный JSON или ошибка обработки на стороне OCR.space
        """
        data = {
            "apikey": api_key,
            "language": self.language,
            "OCREngine": str(self.engine),
            "base64Image": base64_image,
        }

        try:
            response = self._http.post(self.api_url, data=data)
        except httpx.TimeoutException as e:
            logger.error(f"Таймаут OCR.space (ключ {mask_key(api_key)})")
            raise ExternalServiceError(f"Таймаут ожидания OCR.space: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"OCR.space недоступен (ключ {mask_key(api_key)}): {e}")
            raise ExternalServiceError(f"OCR.space недоступен: {e}") from e

        if response.status_code != 200:
            raise ExternalServiceError(
                f"OCR.space вернул ошибку: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        try:
            result = OCRSpaceResponse.model_validate(response.json())
        except ValueError as e:
            raise ExternalServiceError(f"Некорректный ответ OCR.space: {e}") from e

        if result.is_errored_on_processing:
            raise ExternalServiceError(
                f"Ошибка обработки OCR.space: {result.error_text()}",
                status_code=response.status_code,
            )

        text = result.just_text()
        logger.info(
            f"OCR.space: распознано {len(text)} символов, "
            f"страниц={len(result.parsed_results)}, код={result.ocr_exit_code}"
        )

        return text

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "OCRSpaceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
