"""
Geolocation helper for the report creation dialog.

Fills the form with the user's current position. The position itself comes
from a location provider (on the web, the browser's geolocation API reports
its result to the server).
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from conecta_rua.core.config import settings
from conecta_rua.core.exceptions import ConectaRuaError
from conecta_rua.notifications import Notifier
from conecta_rua.reports.models import ReportForm

logger = logging.getLogger(__name__)


class LocationErrorCode(str, Enum):
    """Failure reasons, mirroring the browser's PositionError codes."""
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"


class LocationError(ConectaRuaError):
    """Raised by a provider when no position can be obtained."""

    def __init__(self, code: LocationErrorCode, message: str = ""):
        super().__init__(message or code.value)
        self.code = code


@dataclass
class Coordinates:
    """A position in decimal degrees."""
    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None


class LocationProvider(Protocol):
    """Anything able to answer a single position request."""

    async def get_current_position(self, high_accuracy: bool, timeout: float) -> Coordinates:
        ...


class ReportedLocationProvider:
    """
    Provider backed by a position the browser already obtained.

    The page calls ``navigator.geolocation.getCurrentPosition`` and posts
    either the coordinates or the error code it got.
    """

    def __init__(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        accuracy_m: Optional[float] = None,
        error: Optional[str] = None,
    ):
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy_m = accuracy_m
        self.error = error

    async def get_current_position(self, high_accuracy: bool, timeout: float) -> Coordinates:
        if self.error:
            try:
                code = LocationErrorCode(self.error)
            except ValueError:
                code = LocationErrorCode.POSITION_UNAVAILABLE
            raise LocationError(code, self.error)

        if self.latitude is None or self.longitude is None:
            raise LocationError(LocationErrorCode.POSITION_UNAVAILABLE)

        if not (-90 <= self.latitude <= 90 and -180 <= self.longitude <= 180):
            raise LocationError(LocationErrorCode.POSITION_UNAVAILABLE, "Coordenadas inválidas")

        return Coordinates(self.latitude, self.longitude, self.accuracy_m)


class GeolocationHelper:
    """
    Single-shot position lookup that updates a report form.

    Failures are never fatal: the form keeps its coordinates (the city
    center by default) and the user gets a warning.
    """

    def __init__(
        self,
        notifier: Notifier,
        provider: Optional[LocationProvider] = None,
        timeout: float = settings.geolocation_timeout_seconds,
    ):
        self.notifier = notifier
        self.provider = provider
        self.timeout = timeout

    async def locate(self, form: ReportForm) -> bool:
        """
        Overwrite the form's coordinates with the current position.

        Args:
            form: Form whose latitude/longitude are updated on success

        Returns:
            True when the position was obtained
        """
        if self.provider is None:
            self.notifier.error("Geolocalização não suportada pelo seu navegador")
            return False

        self.notifier.info("Obtendo sua localização...")

        try:
            position = await asyncio.wait_for(
                self.provider.get_current_position(high_accuracy=True, timeout=self.timeout),
                timeout=self.timeout,
            )
        except (LocationError, asyncio.TimeoutError) as e:
            logger.warning(f"Erro ao obter localização: {e!r}")
            self.notifier.warning(
                "Erro ao obter localização. Usando localização padrão de Ponta Grossa."
            )
            return False

        form.latitude = position.latitude
        form.longitude = position.longitude
        self.notifier.success("Localização obtida com sucesso!")
        return True
