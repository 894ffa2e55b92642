"""
Выбор ключа OCR.space из пула.

Политика выбора:
    1. Только пригодные ключи: usage_count > 0 и expires_at > now
    2. Сначала самый старый ключ (created_at по возрастанию)
    3. При равном created_at — ключ с меньшим остатком usage_count

Главный критерий — время выдачи, а не остаток лимита:
это "oldest-first", а не "least-used-first".
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ocr_pool.errors import NoEligibleKeyError, StoreQueryError
from ocr_pool.schemas import APIKey
from ocr_pool.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def select_eligible_key(
    store: CredentialStore,
    now: Optional[datetime] = None,
) -> APIKey:
    """
    Выбирает пригодный ключ из хранилища.

    Args:
        store: хранилище ключей
        now: момент проверки срока действия (по умолчанию — текущее время UTC)

    Returns:
        APIKey: первый ключ по политике выбора

    Raises:
        NoEligibleKeyError: нет ни одного пригодного ключа
        StoreQueryError: ошибка запроса к хранилищу
    """
    now = now or datetime.now(timezone.utc)

    candidates = store.find_eligible(now, limit=1)
    if not candidates:
        logger.warning("Нет доступных ключей с usage_count > 0")
        raise NoEligibleKeyError("Нет доступных ключей с usage_count > 0")

    api_key = candidates[0]

    # Хранилище обязано фильтровать само, но непригодный ключ не отдаём никогда
    if not api_key.is_eligible(now):
        raise StoreQueryError(
            f"Хранилище вернуло непригодный ключ {api_key.masked}: "
            f"usage_count={api_key.usage_count}, expires_at={api_key.expires_at}"
        )

    logger.info(
        f"Выбран ключ {api_key.masked}: usage_count={api_key.usage_count}, "
        f"created_at={api_key.created_at.isoformat()}"
    )

    return api_key
