"""
Конфигурация пула ключей OCR.space.

Все значения читаются из .env файла (или переменных окружения).
Единый префикс: OCR_
Исключение — GCP_PROJECT_ID: читается и без префикса,
чтобы совпадать с переменной окружения Google Cloud.
"""

import logging
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Настройки пула ключей.

    Читает переменные с префиксом OCR_ из .env файла.
    """

    model_config = SettingsConfigDict(
        env_prefix="OCR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Хранилище ключей (Firestore) ---
    # None — проект берётся из Application Default Credentials
    gcp_project_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OCR_GCP_PROJECT_ID", "GCP_PROJECT_ID"),
    )
    keys_collection: str = "OcrSpaceKey"

    # --- OCR.space ---
    api_url: str = "https://api.ocr.space/parse/image"
    language: str = "eng"
    engine: int = Field(default=2, ge=1, le=3)
    timeout_seconds: float = 30.0
    image_prefix: str = "data:image/jpeg;base64,"

    # --- Логирование ---
    log_level: str = "INFO"


# Глобальный экземпляр настроек
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Настраивает корневой логгер для приложения, встраивающего пул.

    Args:
        level: уровень логирования (по умолчанию settings.log_level)
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s [OCR-Pool] %(message)s",
        datefmt="%H:%M:%S",
    )
