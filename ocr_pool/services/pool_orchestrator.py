"""
Оркестратор запроса OCR через пул ключей.

Порядок обработки одного запроса:
    1. Открываем хранилище ключей (закрывается при любом исходе)
    2. Выбираем пригодный ключ — при ошибке OCR.space не вызывается
    3. Нормализуем payload (data-URI префикс ровно один раз)
    4. Вызываем OCR.space — при ошибке лимит не списывается
    5. Списываем одно использование ключа

Ошибка шага 5 только логируется: распознанный текст возвращается
вызывающему в любом случае.
"""

import logging
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Callable, Optional

from ocr_pool.config import settings
from ocr_pool.services.credential_store import CredentialStore, open_firestore_store
from ocr_pool.services.key_selector import select_eligible_key
from ocr_pool.services.ocr_space_client import OCRSpaceClient
from ocr_pool.services.quota_ledger import decrement_usage

logger = logging.getLogger(__name__)

# Фабрика хранилища: каждый вызов открывает хранилище на время одного запроса
StoreFactory = Callable[[], AbstractContextManager[CredentialStore]]


def normalize_payload(base64_image: str, prefix: Optional[str] = None) -> str:
    """
    Добавляет data-URI префикс, если его ещё нет.

    Повторное применение ничего не меняет.

    Args:
        base64_image: изображение в base64 (с префиксом или без)
        prefix: префикс (по умолчанию settings.image_prefix)

    Returns:
        str: base64 изображение ровно с одним префиксом
    """
    prefix = prefix or settings.image_prefix
    if base64_image.startswith(prefix):
        return base64_image
    return prefix + base64_image


class PoolOrchestrator:
    """
    Выполняет OCR через ключ из пула и учитывает расход лимита.

    Args:
        store_factory: фабрика хранилища ключей (context manager)
        ocr_client: клиент OCR.space
        clock: источник текущего времени для проверки срока ключей
    """

    def __init__(
        self,
        store_factory: StoreFactory,
        ocr_client: OCRSpaceClient,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store_factory = store_factory
        self._ocr_client = ocr_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def perform_request(self, base64_image: str) -> str:
        """
        Распознаёт текст на изображении через пригодный ключ пула.

        Args:
            base64_image: изображение в base64

        Returns:
            str: распознанный текст

        Raises:
            NoEligibleKeyError: в пуле нет пригодных ключей
            StoreError: ошибка хранилища при выборе ключа
            ExternalServiceError: ошибка OCR.space (лимит не списан)
        """
        with self._store_factory() as store:
            api_key = select_eligible_key(store, now=self._clock())

            payload = normalize_payload(base64_image)
            text = self._ocr_client.parse_base64(api_key.key, payload)

            try:
                decrement_usage(store, api_key.key)
            except Exception as e:
                logger.exception(
                    f"Не удалось списать использование ключа {api_key.masked}: {e}"
                )

            return text


def space_ocr_text(base64_image: str) -> str:
    """
    Распознаёт текст через пул ключей в Firestore.

    Собирает PoolOrchestrator из глобальных настроек:
    клиент Firestore открывается и закрывается на время запроса.

    Args:
        base64_image: изображение в base64 (с префиксом или без)

    Returns:
        str: распознанный текст
    """
    with OCRSpaceClient() as ocr_client:
        orchestrator = PoolOrchestrator(
            store_factory=open_firestore_store,
            ocr_client=ocr_client,
        )
        return orchestrator.perform_request(base64_image)
