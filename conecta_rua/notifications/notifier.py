"""
Conecta Rua - Notifications
Transient toast messages shown to the user (always in Portuguese).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Toast severity levels."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    """A single toast message."""
    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }


class Notifier:
    """
    Collects toasts raised during one user interaction.

    The web layer returns them to the browser, which renders them as toasts.
    """

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.notifications.append(notification)
        logger.debug(f"Toast [{level.value}]: {message}")
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    def warning(self, message: str) -> Notification:
        return self.notify(NotificationLevel.WARNING, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def messages(self, level: Optional[NotificationLevel] = None) -> List[str]:
        """Messages in emission order, optionally for one level only."""
        return [
            n.message for n in self.notifications
            if level is None or n.level == level
        ]

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def drain(self) -> List[Dict[str, Any]]:
        """Return all toasts as dictionaries and clear the queue."""
        drained = [n.to_dict() for n in self.notifications]
        self.notifications.clear()
        return drained

    def __len__(self) -> int:
        return len(self.notifications)
