"""
Tests for core utilities, records and notifications
"""
import logging
from datetime import timezone

import pytest

from conecta_rua.core.config import Settings
from conecta_rua.core.constants import (
    Category,
    category_options,
    get_category_badge,
    get_category_label,
)
from conecta_rua.core.logging import get_logger, setup_logging
from conecta_rua.notifications import NotificationLevel, Notifier
from conecta_rua.reports import Comment, Report
from conecta_rua.reports.models import parse_timestamp


class TestConstants:
    """Test suite for category reference data."""

    def test_parse(self):
        """Test category parsing."""
        assert Category.parse("bueiro") is Category.STORM_DRAIN
        assert Category.parse("Bueiro") is None
        assert Category.parse(None) is None

    def test_labels(self):
        """Test Portuguese category labels."""
        assert get_category_label("calcada") == "Calçada"
        assert get_category_label("desconhecida") == "Outros"

    def test_badge_fallback(self):
        """Test unknown category badge fallback."""
        assert get_category_badge("xyz") == get_category_badge("outros")

    def test_options_without_all(self):
        """Test category options without 'all'."""
        options = category_options()
        assert len(options) == 6
        assert options[0] == {"value": "buraco", "label": "Buraco", "color": "#ef4444"}


class TestSettings:
    """Test suite for configuration."""

    def test_defaults(self):
        """Test default settings."""
        settings = Settings(_env_file=None)
        assert (settings.default_latitude, settings.default_longitude) == (-25.0916, -50.1668)
        assert settings.map_zoom == 13
        assert settings.max_images == 5
        assert settings.max_image_bytes == 10 * 1024 * 1024

    def test_environment_override(self, monkeypatch):
        """Test settings read from the environment."""
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
        monkeypatch.setenv("APP_ENV", "production")

        settings = Settings(_env_file=None)

        assert settings.supabase_url == "https://abc.supabase.co"
        assert settings.is_production is True


class TestLogging:
    """Test suite for logging setup."""

    def test_setup_logging_level(self):
        """Test logging level is applied."""
        logger = setup_logging("DEBUG")
        assert logger.name == "conecta_rua"
        assert logger.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_get_logger_is_cached(self):
        """Test logger instances are reused."""
        assert get_logger("conecta_rua.test") is get_logger("conecta_rua.test")


class TestModels:
    """Test suite for report and comment records."""

    def test_parse_timestamp_z_suffix(self):
        """Test timestamp with Z suffix."""
        value = parse_timestamp("2025-03-05T17:30:00Z")
        assert value.tzinfo is not None
        assert value.hour == 17

    def test_parse_naive_timestamp_is_utc(self):
        """Test naive timestamp is read as UTC."""
        assert parse_timestamp("2025-03-05T17:30:00").tzinfo == timezone.utc

    def test_report_from_row(self, sample_report_rows):
        """Test report built from a row."""
        report = Report.from_row(sample_report_rows[2])

        assert report.image_urls == []
        assert report.first_image is None
        assert report.user_name == "João Souza"
        assert report.category_label == "Buraco"

    def test_report_to_dict(self, sample_report_rows):
        """Test report serialization."""
        data = Report.from_row(sample_report_rows[0]).to_dict()

        assert data["id"] == "r3"
        assert data["created_at"] == "2025-03-05T17:30:00+00:00"
        assert data["category_label"] == "Buraco"

    def test_report_missing_coordinates(self):
        """Test row without coordinates is rejected."""
        with pytest.raises(KeyError):
            Report.from_row({"id": "x", "title": "Sem local"})

    def test_comment_from_row(self, sample_comment_rows):
        """Test comment built from a row."""
        comment = Comment.from_row(sample_comment_rows[1])
        assert comment.user_name == "Usuário anônimo"
        assert comment.to_dict()["report_id"] == "r3"


class TestNotifier:
    """Test suite for toasts."""

    def test_levels_and_order(self):
        """Test toast levels keep their order."""
        notifier = Notifier()
        notifier.info("a")
        notifier.error("b")
        notifier.success("c")

        assert notifier.messages() == ["a", "b", "c"]
        assert notifier.messages(NotificationLevel.ERROR) == ["b"]
        assert notifier.last.message == "c"

    def test_drain(self):
        """Test drain empties the queue."""
        notifier = Notifier()
        notifier.warning("cuidado")

        drained = notifier.drain()

        assert drained[0]["level"] == "warning"
        assert drained[0]["message"] == "cuidado"
        assert len(notifier) == 0
        assert notifier.last is None
