"""
Conecta Rua - Notifications Module
"""

from conecta_rua.notifications.notifier import (
    Notifier,
    Notification,
    NotificationLevel,
)

__all__ = [
    "Notifier",
    "Notification",
    "NotificationLevel",
]
