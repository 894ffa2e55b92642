"""Тесты настроек пула."""

import pytest

from ocr_pool.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GCP_PROJECT_ID", "OCR_GCP_PROJECT_ID", "OCR_ENGINE", "OCR_LANGUAGE"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.gcp_project_id is None
        assert settings.keys_collection == "OcrSpaceKey"
        assert settings.api_url == "https://api.ocr.space/parse/image"
        assert settings.language == "eng"
        assert settings.engine == 2
        assert settings.image_prefix == "data:image/jpeg;base64,"

    def test_project_id_from_gcp_variable(self, monkeypatch):
        monkeypatch.setenv("GCP_PROJECT_ID", "scanner-prod")

        assert Settings(_env_file=None).gcp_project_id == "scanner-prod"

    def test_prefixed_project_id(self, monkeypatch):
        monkeypatch.setenv("OCR_GCP_PROJECT_ID", "scanner-dev")

        assert Settings(_env_file=None).gcp_project_id == "scanner-dev"

    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("OCR_LANGUAGE", "rus")
        monkeypatch.setenv("OCR_ENGINE", "1")

        settings = Settings(_env_file=None)

        assert settings.language == "rus"
        assert settings.engine == 1

    def test_invalid_engine(self, monkeypatch):
        monkeypatch.setenv("OCR_ENGINE", "7")

        with pytest.raises(ValueError):
            Settings(_env_file=None)
