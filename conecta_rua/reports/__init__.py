"""
Conecta Rua - Reports Module
Report creation, listing, detail/comments and the session header.
"""

from conecta_rua.reports.models import Report, Comment, ReportForm
from conecta_rua.reports.images import ImageSelection, SelectedImage
from conecta_rua.reports.geolocation import (
    GeolocationHelper,
    ReportedLocationProvider,
    Coordinates,
    LocationError,
)
from conecta_rua.reports.creation import (
    CreateReportFlow,
    CreationOutcome,
    CreationState,
    ErrorKind,
)
from conecta_rua.reports.store import ReportStore, filter_reports
from conecta_rua.reports.detail import ReportDetail
from conecta_rua.reports.session import SessionHeader, resolve_session

__all__ = [
    # Models
    "Report",
    "Comment",
    "ReportForm",
    # Creation
    "ImageSelection",
    "SelectedImage",
    "GeolocationHelper",
    "ReportedLocationProvider",
    "Coordinates",
    "LocationError",
    "CreateReportFlow",
    "CreationOutcome",
    "CreationState",
    "ErrorKind",
    # Listing and detail
    "ReportStore",
    "filter_reports",
    "ReportDetail",
    # Session
    "SessionHeader",
    "resolve_session",
]
