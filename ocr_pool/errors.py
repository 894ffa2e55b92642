"""
Иерархия ошибок пула ключей.

    KeyPoolError
    ├── NoEligibleKeyError      — нет ни одного пригодного ключа
    ├── StoreError              — ошибки хранилища ключей
    │   ├── StoreConnectionError
    │   ├── StoreQueryError
    │   ├── RecordNotFoundError
    │   └── TransactionError
    └── ExternalServiceError    — ошибка OCR.space
"""

from typing import Optional

from ocr_pool.schemas import mask_key


class KeyPoolError(Exception):
    """Базовая ошибка пула ключей."""


class NoEligibleKeyError(KeyPoolError):
    """Нет ключа с usage_count > 0 и неистёкшим expires_at."""


class StoreError(KeyPoolError):
    """Ошибка хранилища ключей."""


class StoreConnectionError(StoreError):
    """Не удалось создать клиент хранилища."""


class StoreQueryError(StoreError):
    """Запрос к хранилищу завершился ошибкой."""


class RecordNotFoundError(StoreError):
    """Документ ключа не найден."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Ключ не найден в хранилище: {mask_key(key)}")


class TransactionError(StoreError):
    """Транзакция прервана (конфликт, отмена, ошибка записи)."""


class ExternalServiceError(KeyPoolError):
    """OCR.space вернул ошибку или недоступен."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
