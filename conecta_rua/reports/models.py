"""
Report and comment records as read from the rows collaborator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from conecta_rua.core.config import settings
from conecta_rua.core.constants import ANONYMOUS_USER, get_category_label


def parse_timestamp(value: Any) -> datetime:
    """Parse a PostgREST timestamptz (ISO 8601) into an aware datetime."""
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def author_name(row: Dict[str, Any]) -> str:
    """Display name from the embedded profiles join, anonymous when absent."""
    profile = row.get("profiles") or {}
    return profile.get("full_name") or row.get("user_name") or ANONYMOUS_USER


@dataclass
class Report:
    """
    Civic issue reported by a citizen.

    Contains location, category and up to five photos.
    """
    id: str
    title: str
    description: str
    category: str
    latitude: float
    longitude: float
    image_urls: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: Optional[str] = None
    user_name: str = ANONYMOUS_USER

    @property
    def category_label(self) -> str:
        return get_category_label(self.category)

    @property
    def first_image(self) -> Optional[str]:
        return self.image_urls[0] if self.image_urls else None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Report":
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            description=row.get("description") or "",
            category=row.get("category") or "",
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            image_urls=list(row.get("image_urls") or []),
            created_at=parse_timestamp(row.get("created_at")),
            user_id=row.get("user_id"),
            user_name=author_name(row),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "category_label": self.category_label,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "image_urls": list(self.image_urls),
            "created_at": self.created_at.isoformat(),
            "user_id": self.user_id,
            "user_name": self.user_name,
        }


@dataclass
class Comment:
    """Text reply attached to one report."""
    id: str
    content: str
    report_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_name: str = ANONYMOUS_USER

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Comment":
        return cls(
            id=str(row["id"]),
            content=row.get("content") or "",
            report_id=str(row.get("report_id")),
            created_at=parse_timestamp(row.get("created_at")),
            user_name=author_name(row),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "report_id": self.report_id,
            "created_at": self.created_at.isoformat(),
            "user_name": self.user_name,
        }


@dataclass
class ReportForm:
    """In-progress values of the creation dialog."""
    title: str = ""
    description: str = ""
    category: str = ""
    latitude: float = settings.default_latitude
    longitude: float = settings.default_longitude
