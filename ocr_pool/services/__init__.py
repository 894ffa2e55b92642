"""
Сервисы пула ключей.

Модули:
    - credential_store: хранилище ключей (Firestore / in-memory)
    - key_selector: выбор пригодного ключа
    - quota_ledger: транзакционное списание лимита
    - ocr_space_client: клиент OCR.space API
    - pool_orchestrator: полный цикл запроса через пул
    - pool_stats: статистика пула
"""

from ocr_pool.services.credential_store import (
    FirestoreCredentialStore,
    InMemoryCredentialStore,
    open_firestore_store,
)
from ocr_pool.services.key_selector import select_eligible_key
from ocr_pool.services.ocr_space_client import OCRSpaceClient
from ocr_pool.services.pool_orchestrator import (
    PoolOrchestrator,
    normalize_payload,
    space_ocr_text,
)
from ocr_pool.services.pool_stats import get_pool_stats
from ocr_pool.services.quota_ledger import decrement_usage

__all__ = [
    "FirestoreCredentialStore",
    "InMemoryCredentialStore",
    "open_firestore_store",
    "select_eligible_key",
    "decrement_usage",
    "OCRSpaceClient",
    "PoolOrchestrator",
    "normalize_payload",
    "space_ocr_text",
    "get_pool_stats",
]
