"""
Статистика пула ключей.

Полезно для мониторинга: сколько ключей ещё пригодно
и сколько запросов осталось в сумме.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ocr_pool.schemas import PoolStats
from ocr_pool.services.credential_store import CredentialStore, selection_order

logger = logging.getLogger(__name__)


def get_pool_stats(
    store: CredentialStore,
    now: Optional[datetime] = None,
) -> PoolStats:
    """
    Возвращает статистику пула.

    Истёкший ключ считается истёкшим независимо от остатка лимита.

    Args:
        store: хранилище ключей
        now: момент проверки срока действия (по умолчанию — текущее время UTC)

    Returns:
        PoolStats: счётчики ключей и следующий ключ по политике выбора
    """
    now = now or datetime.now(timezone.utc)
    keys = store.list_keys()

    expired = [k for k in keys if k.expires_at <= now]
    exhausted = [k for k in keys if k.expires_at > now and k.usage_count <= 0]
    eligible = sorted(
        (k for k in keys if k.is_eligible(now)),
        key=selection_order,
    )

    stats = PoolStats(
        total_keys=len(keys),
        eligible_keys=len(eligible),
        exhausted_keys=len(exhausted),
        expired_keys=len(expired),
        remaining_usage=sum(k.usage_count for k in eligible),
        next_key=eligible[0].masked if eligible else None,
    )

    logger.debug(f"Статистика пула: {stats}")

    return stats
