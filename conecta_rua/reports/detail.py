"""
Report detail view and its comment thread.
"""

import logging
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from conecta_rua.backend import DataClient, UserSession
from conecta_rua.core.config import settings
from conecta_rua.core.constants import COMMENTS_SELECT, COMMENTS_TABLE, get_category_badge
from conecta_rua.core.exceptions import BackendError
from conecta_rua.notifications import Notifier
from conecta_rua.reports.models import Comment, Report

logger = logging.getLogger(__name__)

EMPTY_THREAD_MESSAGE = "Nenhum comentário ainda. Seja o primeiro a comentar!"
LOGIN_TO_COMMENT_MESSAGE = "Faça login para adicionar comentários"


def format_date(value: datetime) -> str:
    """pt-BR date and time, e.g. ``05/03/2025, 14:30``."""
    if value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(settings.display_timezone))
    return value.strftime("%d/%m/%Y, %H:%M")


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"


class ReportDetail:
    """
    Detail dialog for one report.

    Manages its own comment list; a new comment is never appended locally,
    the thread is re-read from the backend instead.
    """

    def __init__(
        self,
        report: Report,
        data: DataClient,
        notifier: Notifier,
        session: Optional[UserSession] = None,
    ):
        self.report = report
        self.data = data
        self.notifier = notifier
        self.session = session

        self.comments: List[Comment] = []
        self.new_comment = ""
        self.loading = False
        self.comments_loading = True

    @property
    def can_comment(self) -> bool:
        return self.session is not None

    @property
    def badge_colors(self):
        return get_category_badge(self.report.category)

    @property
    def created_at_display(self) -> str:
        return format_date(self.report.created_at)

    @property
    def coordinates_display(self) -> str:
        return format_coordinates(self.report.latitude, self.report.longitude)

    async def open(self) -> List[Comment]:
        """Load the thread when the dialog opens."""
        return await self.fetch_comments()

    async def fetch_comments(self) -> List[Comment]:
        """
        Fetch the report's comments, oldest first.

        Failures are logged and leave the current list in place.
        """
        try:
            rows = await self.data.select(
                COMMENTS_TABLE,
                columns=COMMENTS_SELECT,
                filters={"report_id": self.report.id},
                order=("created_at", True),
                access_token=self.session.access_token if self.session else None,
            )
            comments = [Comment.from_row(row) for row in rows]
        except BackendError as e:
            logger.error(f"Error fetching comments: {e.message}")
            return self.comments
        except (KeyError, TypeError, ValueError) as e:
            logger.exception(f"Error fetching comments: {e}")
            return self.comments
        finally:
            self.comments_loading = False

        # Display order must not depend on the order rows come back in
        self.comments = sorted(comments, key=lambda c: c.created_at)
        return self.comments

    async def add_comment(self, content: Optional[str] = None) -> bool:
        """
        Post a comment as the current user.

        Args:
            content: Comment text; the composer's text when omitted

        Returns:
            True when the comment was stored
        """
        if content is not None:
            self.new_comment = content

        if self.session is None:
            self.notifier.error("Você precisa estar logado para comentar")
            return False

        text = self.new_comment.strip()
        if not text:
            self.notifier.error("Digite um comentário")
            return False

        self.loading = True
        try:
            await self.data.insert(
                COMMENTS_TABLE,
                {
                    "content": text,
                    "report_id": self.report.id,
                    "user_id": self.session.id,
                },
                access_token=self.session.access_token,
            )
        except BackendError as e:
            logger.error(f"Error adding comment: {e.message}")
            self.notifier.error("Erro ao adicionar comentário")
            return False
        except Exception:
            logger.exception("Error adding comment")
            self.notifier.error("Erro ao adicionar comentário")
            return False
        finally:
            self.loading = False

        self.new_comment = ""
        await self.fetch_comments()
        self.notifier.success("Comentário adicionado!")
        return True
