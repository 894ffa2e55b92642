"""
Схемы данных пула ключей.

Определяет запись ключа OCR.space в хранилище, статистику пула
и формат ответа OCR.space API.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def mask_key(key: str) -> str:
    """
    Маскирует ключ для логов: видны только первые и последние 4 символа.

    Args:
        key: API ключ

    Returns:
        str: например "K123…abcd" или "***" для коротких ключей
    """
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}…{key[-4:]}"


# =============================================================================
# Записи хранилища
# =============================================================================


@dataclass
class APIKey:
    """
    Ключ OCR.space в хранилище (один документ на ключ).

    Attributes:
        key: сам ключ, он же id документа
        usage_count: сколько запросов ещё можно выполнить этим ключом
        created_at: время выдачи ключа (не меняется)
        expires_at: время истечения ключа (не меняется)
    """

    key: str
    usage_count: int
    created_at: datetime
    expires_at: datetime

    def is_eligible(self, now: datetime) -> bool:
        """Ключ пригоден, если остался лимит и срок ещё не истёк."""
        return self.usage_count > 0 and self.expires_at > now

    @property
    def masked(self) -> str:
        return mask_key(self.key)

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "APIKey":
        """
        Собирает запись из документа хранилища.

        Если поле key отсутствует, ключом считается id документа.

        Raises:
            KeyError, TypeError, ValueError: документ повреждён
        """
        return cls(
            key=data.get("key") or doc_id,
            usage_count=int(data["usage_count"]),
            created_at=data["created_at"],
            expires_at=data["expires_at"],
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "usage_count": self.usage_count,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }


@dataclass
class PoolStats:
    """
    Статистика пула ключей.

    Attributes:
        total_keys: всего ключей в хранилище
        eligible_keys: пригодных ключей (лимит > 0, не истекли)
        exhausted_keys: ключей с исчерпанным лимитом (но не истёкших)
        expired_keys: истёкших ключей
        remaining_usage: суммарный остаток запросов по пригодным ключам
        next_key: маскированный ключ, который будет выбран следующим
    """

    total_keys: int
    eligible_keys: int
    exhausted_keys: int
    expired_keys: int
    remaining_usage: int
    next_key: Optional[str] = None


# =============================================================================
# Ответ OCR.space API
# =============================================================================


class ParsedResult(BaseModel):
    """
    Результат разбора одной страницы/изображения.

    Attributes:
        parsed_text: распознанный текст
        file_parse_exit_code: код результата (1 — успех)
        error_message: сообщение об ошибке страницы
        error_details: подробности ошибки
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    parsed_text: str = Field(default="", alias="ParsedText")
    file_parse_exit_code: Optional[Union[int, str]] = Field(
        default=None, alias="FileParseExitCode"
    )
    error_message: Optional[str] = Field(default=None, alias="ErrorMessage")
    error_details: Optional[str] = Field(default=None, alias="ErrorDetails")


class OCRSpaceResponse(BaseModel):
    """
    Ответ POST /parse/image.

    OCR.space возвращает 200 даже при ошибке обработки —
    признак ошибки в поле IsErroredOnProcessing.

    Attributes:
        parsed_results: результаты по страницам
        ocr_exit_code: общий код результата (1 — всё распознано)
        is_errored_on_processing: флаг ошибки обработки
        error_message: строка или список строк с ошибками
        error_details: подробности ошибки
        processing_time_ms: время обработки на стороне OCR.space
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    parsed_results: list[ParsedResult] = Field(default=[], alias="ParsedResults")
    ocr_exit_code: Optional[int] = Field(default=None, alias="OCRExitCode")
    is_errored_on_processing: bool = Field(
        default=False, alias="IsErroredOnProcessing"
    )
    error_message: Optional[Union[str, list[str]]] = Field(
        default=None, alias="ErrorMessage"
    )
    error_details: Optional[str] = Field(default=None, alias="ErrorDetails")
    processing_time_ms: Optional[Union[int, str]] = Field(
        default=None, alias="ProcessingTimeInMilliseconds"
    )

    def just_text(self) -> str:
        """Текст всех страниц одной строкой."""
        return "".join(result.parsed_text for result in self.parsed_results)

    def error_text(self) -> str:
        """Сообщения об ошибках одной строкой."""
        if isinstance(self.error_message, list):
            messages = list(self.error_message)
        elif self.error_message:
            messages = [self.error_message]
        else:
            messages = []

        if self.error_details:
            messages.append(self.error_details)

        return "; ".join(messages) or "Unknown error"
