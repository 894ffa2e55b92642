"""
Общие фикстуры тестов пула ключей.

    - now / make_key: фиксированное время и фабрика ключей
    - store: InMemoryCredentialStore
    - ocr_calls / ocr_client: OCRSpaceClient поверх httpx.MockTransport
    - tracked_factory: фабрика хранилища, считающая открытия/закрытия
"""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from ocr_pool.schemas import APIKey
from ocr_pool.services.credential_store import InMemoryCredentialStore
from ocr_pool.services.ocr_space_client import OCRSpaceClient

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return T0 + timedelta(minutes=10)


@pytest.fixture
def make_key():
    """Фабрика ключей: по умолчанию 5 запросов, выдан в T0, живёт час."""

    def _make(
        key: str = "k1",
        usage_count: int = 5,
        created_at: datetime = T0,
        expires_at: datetime = T0 + timedelta(hours=1),
    ) -> APIKey:
        return APIKey(
            key=key,
            usage_count=usage_count,
            created_at=created_at,
            expires_at=expires_at,
        )

    return _make


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


def ocr_space_ok(text: str) -> dict:
    return {
        "ParsedResults": [
            {
                "ParsedText": text,
                "FileParseExitCode": 1,
                "ErrorMessage": "",
                "ErrorDetails": "",
            }
        ],
        "OCRExitCode": 1,
        "IsErroredOnProcessing": False,
        "ProcessingTimeInMilliseconds": "312",
    }


@pytest.fixture
def ocr_calls() -> list:
    """Сюда пишутся все запросы к OCR.space, сделанные в тесте."""
    return []


@pytest.fixture
def ocr_response():
    """Ответ OCR.space, который вернёт mock (можно заменить в тесте)."""
    return {"status_code": 200, "json": ocr_space_ok("Hello, world")}


@pytest.fixture
def ocr_client(ocr_calls, ocr_response):
    def handler(request: httpx.Request) -> httpx.Response:
        ocr_calls.append(request)
        return httpx.Response(ocr_response["status_code"], json=ocr_response["json"])

    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    client = OCRSpaceClient(
        api_url="https://api.ocr.space/parse/image",
        language="eng",
        engine=2,
        http_client=http_client,
    )
    yield client
    http_client.close()


class TrackedFactory:
    """Фабрика хранилища для PoolOrchestrator с учётом открытий и закрытий."""

    def __init__(self, store):
        self.store = store
        self.opened = 0
        self.closed = 0

    @contextmanager
    def __call__(self):
        self.opened += 1
        try:
            yield self.store
        finally:
            self.closed += 1


@pytest.fixture
def tracked_factory(store) -> TrackedFactory:
    return TrackedFactory(store)
