"""Тесты статистики пула ключей."""

from datetime import timedelta

from ocr_pool.services.credential_store import InMemoryCredentialStore
from ocr_pool.services.pool_stats import get_pool_stats


class TestPoolStats:
    def test_empty_pool(self, store, now):
        stats = get_pool_stats(store, now=now)

        assert stats.total_keys == 0
        assert stats.eligible_keys == 0
        assert stats.remaining_usage == 0
        assert stats.next_key is None

    def test_counts_by_state(self, make_key, now):
        old, young = now - timedelta(hours=2), now - timedelta(hours=1)
        store = InMemoryCredentialStore(
            [
                make_key("oldest-key-AAAA", usage_count=3, created_at=old),
                make_key("newest-key-BBBB", usage_count=7, created_at=young),
                make_key("exhausted", usage_count=0),
                make_key("overdrawn", usage_count=-1),
                make_key("expired", usage_count=9, expires_at=now),
                make_key(
                    "expired_and_empty",
                    usage_count=0,
                    expires_at=now - timedelta(days=1),
                ),
            ]
        )

        stats = get_pool_stats(store, now=now)

        assert stats.total_keys == 6
        assert stats.eligible_keys == 2
        assert stats.exhausted_keys == 2
        assert stats.expired_keys == 2
        assert stats.remaining_usage == 10
        assert stats.next_key == "olde…AAAA"

    def test_next_key_matches_selection_policy(self, make_key, now):
        store = InMemoryCredentialStore(
            [
                make_key("same-time-rich", usage_count=50),
                make_key("same-time-poor", usage_count=2),
            ]
        )

        assert get_pool_stats(store, now=now).next_key == "same…poor"
