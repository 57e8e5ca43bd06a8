"""Tests for application settings."""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from src.config import InvoicingSettings, get_settings


class TestInvoicingSettings:
    def test_defaults(self):
        settings = InvoicingSettings()

        assert settings.number_prefix == "FACT"
        assert settings.number_timezone == "UTC"
        assert settings.max_number_attempts == 10

    def test_timezone_from_environment(self, monkeypatch):
        monkeypatch.setenv("INVOICE_NUMBER_TIMEZONE", "Africa/Dakar")

        settings = InvoicingSettings()

        assert settings.number_tz == ZoneInfo("Africa/Dakar")

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError, match="Unknown time zone"):
            InvoicingSettings(number_timezone="Mars/Olympus_Mons")

    def test_attempt_budget_must_be_positive(self):
        with pytest.raises(ValidationError):
            InvoicingSettings(max_number_attempts=0)


def test_data_dir_follows_environment(tmp_path):
    # conftest points STORAGE_DATA_DIR at a per-test directory
    assert get_settings().storage.db_path == tmp_path / "data" / "facturier.db"
