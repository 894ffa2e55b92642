"""
Хранилище ключей OCR.space.

Контракт хранилища (CredentialStore):
    - find_eligible: выборка пригодных ключей с фильтром и сортировкой
    - update_in_transaction: read-modify-write одного документа
      в сериализуемой транзакции
    - list_keys: все ключи (для статистики)

Реализации:
    - FirestoreCredentialStore: коллекция Firestore, документ = ключ
    - InMemoryCredentialStore: хранение в памяти процесса,
      транзакции сериализуются через threading.Lock

Ключи создаются вне этого модуля и никогда здесь не удаляются.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterator, Optional, Protocol

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ocr_pool.config import settings
from ocr_pool.errors import (
    RecordNotFoundError,
    StoreConnectionError,
    StoreError,
    StoreQueryError,
    TransactionError,
)
from ocr_pool.schemas import APIKey, mask_key

logger = logging.getLogger(__name__)

# Мутация записи внутри транзакции: возвращает словарь изменённых полей
Mutation = Callable[[APIKey], dict[str, Any]]


class CredentialStore(Protocol):
    def find_eligible(self, now: datetime, limit: int = 1) -> list[APIKey]:
        """
        Ключи с usage_count > 0 и expires_at > now,
        отсортированные по created_at, затем по usage_count (по возрастанию).
        """
        ...

    def update_in_transaction(self, key: str, mutate: Mutation) -> APIKey:
        """Читает документ, применяет mutate и записывает результат атомарно."""
        ...

    def list_keys(self) -> list[APIKey]:
        ...


def selection_order(api_key: APIKey) -> tuple[datetime, int]:
    return api_key.created_at, api_key.usage_count


# =============================================================================
# Firestore
# =============================================================================


class FirestoreCredentialStore:
    """
    Хранилище ключей в коллекции Firestore.

    Транзакции выполняются без автоматических повторов (max_attempts=1):
    конфликт сразу завершает операцию ошибкой TransactionError.
    """

    def __init__(self, client: firestore.Client, collection: Optional[str] = None):
        self._client = client
        self._collection = client.collection(collection or settings.keys_collection)

    def find_eligible(self, now: datetime, limit: int = 1) -> list[APIKey]:
        query = (
            self._collection.where(filter=FieldFilter("usage_count", ">", 0))
            .where(filter=FieldFilter("expires_at", ">", now))
            .order_by("created_at", direction=firestore.Query.ASCENDING)
            .order_by("usage_count", direction=firestore.Query.ASCENDING)
            .limit(limit)
        )

        try:
            snapshots = list(query.stream())
        except google_exceptions.GoogleAPICallError as e:
            raise StoreQueryError(f"Ошибка запроса ключей: {e}") from e

        return [self._to_api_key(snapshot) for snapshot in snapshots]

    def update_in_transaction(self, key: str, mutate: Mutation) -> APIKey:
        doc_ref = self._collection.document(key)
        transaction = self._client.transaction(max_attempts=1)

        @firestore.transactional
        def _apply(transaction) -> APIKey:
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise RecordNotFoundError(key)

            api_key = self._to_api_key(snapshot)
            updates = mutate(api_key)
            transaction.update(doc_ref, updates)
            return replace(api_key, **updates)

        try:
            return _apply(transaction)
        except StoreError:
            raise
        except google_exceptions.NotFound as e:
            raise RecordNotFoundError(key) from e
        except (google_exceptions.GoogleAPICallError, ValueError) as e:
            # ValueError — транзакция не закоммичена за max_attempts попыток
            raise TransactionError(
                f"Транзакция для ключа {mask_key(key)} не выполнена: {e}"
            ) from e

    def list_keys(self) -> list[APIKey]:
        try:
            snapshots = list(self._collection.stream())
        except google_exceptions.GoogleAPICallError as e:
            raise StoreQueryError(f"Ошибка чтения коллекции ключей: {e}") from e

        return [self._to_api_key(snapshot) for snapshot in snapshots]

    @staticmethod
    def _to_api_key(snapshot) -> APIKey:
        try:
            return APIKey.from_document(snapshot.id, snapshot.to_dict() or {})
        except (KeyError, TypeError, ValueError) as e:
            raise StoreQueryError(
                f"Повреждён документ ключа {mask_key(snapshot.id)}: {e}"
            ) from e


@contextmanager
def open_firestore_store(
    project_id: Optional[str] = None,
    collection: Optional[str] = None,
) -> Iterator[FirestoreCredentialStore]:
    """
    Открывает клиент Firestore на время одной операции.

    Клиент закрывается при любом выходе из блока with.

    Usage:
        with open_firestore_store() as store:
            api_key = select_eligible_key(store)

    Raises:
        StoreConnectionError: не удалось создать клиент
    """
    try:
        client = firestore.Client(project=project_id or settings.gcp_project_id)
    except (
        auth_exceptions.DefaultCredentialsError,
        google_exceptions.GoogleAPICallError,
        # Учётные данные есть, но проект не задан и не определён из окружения
        OSError,
    ) as e:
        raise StoreConnectionError(f"Не удалось создать клиент Firestore: {e}") from e

    try:
        yield FirestoreCredentialStore(client, collection)
    finally:
        client.close()


# =============================================================================
# In-memory
# =============================================================================


class InMemoryCredentialStore:
    """
    Хранилище ключей в памяти процесса.

    Используется для локального запуска и тестов.
    Все чтения и транзакции выполняются под одной блокировкой,
    поэтому параллельные транзакции сериализуются.
    """

    def __init__(self, keys: Optional[list[APIKey]] = None):
        self._lock = threading.Lock()
        self._store: dict[str, APIKey] = {}
        for api_key in keys or []:
            self.put(api_key)

    def put(self, api_key: APIKey) -> None:
        """Добавляет или заменяет ключ (выдача ключей вне пула)."""
        with self._lock:
            self._store[api_key.key] = api_key

        logger.debug(
            f"Ключ добавлен: {api_key.masked}, всего в хранилище={len(self._store)}"
        )

    def get(self, key: str) -> Optional[APIKey]:
        with self._lock:
            return self._store.get(key)

    def find_eligible(self, now: datetime, limit: int = 1) -> list[APIKey]:
        with self._lock:
            eligible = [k for k in self._store.values() if k.is_eligible(now)]

        eligible.sort(key=selection_order)
        return eligible[:limit]

    def update_in_transaction(self, key: str, mutate: Mutation) -> APIKey:
        with self._lock:
            api_key = self._store.get(key)
            if api_key is None:
                raise RecordNotFoundError(key)

            updated = replace(api_key, **mutate(api_key))
            self._store[key] = updated
            return updated

    def list_keys(self) -> list[APIKey]:
        with self._lock:
            return list(self._store.values())

    @contextmanager
    def session(self) -> Iterator["InMemoryCredentialStore"]:
        """Фабрика хранилища для PoolOrchestrator: всегда один и тот же объект."""
        yield self
