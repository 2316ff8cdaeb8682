"""
Tests for the geolocation helper
"""
import asyncio

import pytest

from conecta_rua.core.config import settings
from conecta_rua.notifications import NotificationLevel
from conecta_rua.reports import ReportForm
from conecta_rua.reports.geolocation import (
    Coordinates,
    GeolocationHelper,
    LocationError,
    LocationErrorCode,
    ReportedLocationProvider,
)


class SlowProvider:
    """Provider that never answers in time."""

    async def get_current_position(self, high_accuracy, timeout):
        await asyncio.sleep(5)
        return Coordinates(0.0, 0.0)


class TestReportedLocationProvider:
    """Test suite for browser-reported positions."""

    def test_returns_coordinates(self):
        """Test reported coordinates are returned."""
        provider = ReportedLocationProvider(latitude=-25.1, longitude=-50.2, accuracy_m=12.0)
        position = asyncio.run(provider.get_current_position(high_accuracy=True, timeout=1))
        assert position == Coordinates(-25.1, -50.2, 12.0)

    def test_reported_error_code(self):
        """Test reported error code is raised."""
        provider = ReportedLocationProvider(error="permission_denied")
        with pytest.raises(LocationError) as exc_info:
            asyncio.run(provider.get_current_position(high_accuracy=True, timeout=1))
        assert exc_info.value.code == LocationErrorCode.PERMISSION_DENIED

    def test_unknown_error_code(self):
        """Test unknown error code maps to position unavailable."""
        provider = ReportedLocationProvider(error="algo estranho")
        with pytest.raises(LocationError) as exc_info:
            asyncio.run(provider.get_current_position(high_accuracy=True, timeout=1))
        assert exc_info.value.code == LocationErrorCode.POSITION_UNAVAILABLE

    def test_out_of_range_coordinates(self):
        """Test out-of-range coordinates are rejected."""
        provider = ReportedLocationProvider(latitude=123.0, longitude=-50.0)
        with pytest.raises(LocationError):
            asyncio.run(provider.get_current_position(high_accuracy=True, timeout=1))


class TestGeolocationHelper:
    """Test suite for the form position lookup."""

    def test_success_updates_form(self, notifier):
        """Test located position fills the form."""
        form = ReportForm()
        helper = GeolocationHelper(notifier, ReportedLocationProvider(latitude=-25.05, longitude=-50.12))

        located = asyncio.run(helper.locate(form))

        assert located is True
        assert (form.latitude, form.longitude) == (-25.05, -50.12)
        assert notifier.messages() == ["Obtendo sua localização...", "Localização obtida com sucesso!"]

    def test_failure_keeps_default_location(self, notifier):
        """Test failure keeps the default location."""
        form = ReportForm()
        helper = GeolocationHelper(notifier, ReportedLocationProvider(error="position_unavailable"))

        located = asyncio.run(helper.locate(form))

        assert located is False
        assert (form.latitude, form.longitude) == (settings.default_latitude, settings.default_longitude)
        assert notifier.last.level == NotificationLevel.WARNING
        assert notifier.last.message == (
            "Erro ao obter localização. Usando localização padrão de Ponta Grossa."
        )

    def test_failure_keeps_user_typed_location(self, notifier):
        """Test failure keeps a typed location."""
        form = ReportForm(latitude=-25.2, longitude=-50.3)
        helper = GeolocationHelper(notifier, ReportedLocationProvider(error="permission_denied"))

        asyncio.run(helper.locate(form))

        assert (form.latitude, form.longitude) == (-25.2, -50.3)

    def test_timeout(self, notifier):
        """Test slow provider times out."""
        form = ReportForm()
        helper = GeolocationHelper(notifier, SlowProvider(), timeout=0.01)

        located = asyncio.run(helper.locate(form))

        assert located is False
        assert notifier.last.level == NotificationLevel.WARNING

    def test_unsupported(self, notifier):
        """Test unsupported browser."""
        form = ReportForm()
        located = asyncio.run(GeolocationHelper(notifier).locate(form))

        assert located is False
        assert notifier.messages() == ["Geolocalização não suportada pelo seu navegador"]
        assert notifier.last.level == NotificationLevel.ERROR
