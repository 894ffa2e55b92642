"""
Учёт расхода лимита ключей.

Списание — одна транзакция над одним документом:
чтение usage_count -> usage_count - 1 -> запись.
Параллельные списания по одному ключу сериализуются хранилищем,
поэтому ни одно списание не теряется.

Счётчик не ограничивается нулём: пригодность проверяется при выборе ключа,
а не при списании. Если несколько запросов одновременно выбрали последний
остаток ключа, каждое использование всё равно будет учтено и usage_count
уйдёт в минус.
"""

import logging

from ocr_pool.schemas import APIKey, mask_key
from ocr_pool.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def _decrement(api_key: APIKey) -> dict:
    return {"usage_count": api_key.usage_count - 1}


def decrement_usage(store: CredentialStore, key: str) -> APIKey:
    """
    Списывает одно использование ключа.

    Args:
        store: хранилище ключей
        key: ключ, по которому был выполнен успешный запрос

    Returns:
        APIKey: запись ключа после списания

    Raises:
        RecordNotFoundError: ключа больше нет в хранилище
        TransactionError: конфликт или отмена транзакции
    """
    updated = store.update_in_transaction(key, _decrement)

    if updated.usage_count < 0:
        logger.warning(
            f"Ключ {mask_key(key)} использован сверх лимита: "
            f"usage_count={updated.usage_count}"
        )
    else:
        logger.info(
            f"Списано использование ключа {mask_key(key)}: "
            f"осталось {updated.usage_count}"
        )

    return updated
