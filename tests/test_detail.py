"""
Tests for the report detail view and comments
"""
import asyncio
from datetime import datetime, timezone

import pytest

from conecta_rua.core.exceptions import DataError
from conecta_rua.reports import Report, ReportDetail
from conecta_rua.reports.detail import format_coordinates, format_date


class TestFormatting:
    """Test suite for display helpers."""

    def test_format_date_uses_brazil_time(self):
        """Test dates are shown in Brazil time."""
        value = datetime(2025, 3, 5, 17, 30, tzinfo=timezone.utc)
        assert format_date(value) == "05/03/2025, 14:30"

    def test_format_naive_date(self):
        """Test naive dates are formatted."""
        assert format_date(datetime(2025, 12, 1, 9, 5)) == "01/12/2025, 09:05"

    def test_format_coordinates(self):
        """Test coordinate formatting."""
        assert format_coordinates(-25.0916, -50.1668) == "-25.091600, -50.166800"


class TestReportDetail:
    """Test suite for the comment thread."""

    @pytest.fixture(autouse=True)
    def setup_detail(self, fake_data, notifier, user_session, sample_report_rows):
        self.data = fake_data
        self.notifier = notifier
        self.session = user_session
        self.report = Report.from_row(sample_report_rows[0])

    def make_detail(self, session=None):
        return ReportDetail(self.report, self.data, self.notifier, session=session)

    def test_open_loads_comments_oldest_first(self):
        """Test opening loads comments oldest first."""
        detail = self.make_detail()

        comments = asyncio.run(detail.open())

        assert [c.id for c in comments] == ["c1", "c2"]
        assert [c.user_name for c in comments] == ["Usuário anônimo", "João Souza"]
        assert detail.comments_loading is False

        call = self.data.select_calls[0]
        assert call["table"] == "comments"
        assert call["filters"] == {"report_id": "r3"}
        assert call["order"] == ("created_at", True)

    def test_fetch_failure_keeps_current_list(self):
        """Test failed fetch keeps the thread."""
        detail = self.make_detail()
        asyncio.run(detail.open())
        self.data.select_error = DataError("timeout")

        comments = asyncio.run(detail.fetch_comments())

        assert len(comments) == 2
        assert len(self.notifier) == 0

    def test_can_comment_requires_session(self):
        """Test commenting requires a session."""
        assert self.make_detail().can_comment is False
        assert self.make_detail(self.session).can_comment is True

    def test_display_properties(self):
        """Test detail display properties."""
        detail = self.make_detail()
        assert detail.badge_colors == ("#fee2e2", "#991b1b")
        assert detail.created_at_display == "05/03/2025, 14:30"
        assert detail.coordinates_display == "-25.095000, -50.160000"

    def test_add_comment_signed_out(self):
        """Test signed-out comment is refused."""
        detail = self.make_detail()

        assert asyncio.run(detail.add_comment("Olá")) is False

        assert self.notifier.messages() == ["Você precisa estar logado para comentar"]
        assert self.data.insert_calls == []

    def test_add_empty_comment(self):
        """Test blank comment is rejected."""
        detail = self.make_detail(self.session)

        assert asyncio.run(detail.add_comment("   ")) is False

        assert self.notifier.messages() == ["Digite um comentário"]
        assert self.data.insert_calls == []

    def test_add_comment_refetches_thread(self):
        """Test new comment refetches the thread."""
        detail = self.make_detail(self.session)
        asyncio.run(detail.open())

        assert asyncio.run(detail.add_comment("  Precisa de conserto urgente  ")) is True

        assert self.data.insert_calls[0]["row"] == {
            "content": "Precisa de conserto urgente",
            "report_id": "r3",
            "user_id": "user-1",
        }
        assert self.data.insert_calls[0]["access_token"] == "token-123"
        assert [c.content for c in detail.comments][-1] == "Precisa de conserto urgente"
        assert len(detail.comments) == 3
        assert detail.new_comment == ""
        assert self.notifier.messages() == ["Comentário adicionado!"]

    def test_add_comment_failure_keeps_text(self):
        """Test failed comment keeps the typed text."""
        detail = self.make_detail(self.session)
        self.data.insert_error = DataError("permission denied", status_code=403)

        assert asyncio.run(detail.add_comment("Texto")) is False

        assert detail.new_comment == "Texto"
        assert self.notifier.messages() == ["Erro ao adicionar comentário"]
        assert detail.loading is False
