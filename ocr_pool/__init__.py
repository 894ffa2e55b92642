"""
OCR Pool — распознавание текста через пул ключей OCR.space.

Ключи с ограниченным лимитом запросов хранятся в Firestore:
    - для запроса выбирается самый старый пригодный ключ
    - после успешного OCR лимит ключа уменьшается в транзакции
    - ошибка учёта лимита не отменяет уже полученный текст
"""

from ocr_pool.config import settings
from ocr_pool.errors import (
    ExternalServiceError,
    KeyPoolError,
    NoEligibleKeyError,
    RecordNotFoundError,
    StoreConnectionError,
    StoreError,
    StoreQueryError,
    TransactionError,
)
from ocr_pool.schemas import APIKey, PoolStats
from ocr_pool.services import PoolOrchestrator, space_ocr_text

__all__ = [
    "settings",
    "APIKey",
    "PoolStats",
    "PoolOrchestrator",
    "space_ocr_text",
    "KeyPoolError",
    "NoEligibleKeyError",
    "StoreError",
    "StoreConnectionError",
    "StoreQueryError",
    "RecordNotFoundError",
    "TransactionError",
    "ExternalServiceError",
]
