"""
Tests for the report creation flow
"""
import asyncio

import pytest

from conecta_rua.core.exceptions import DataError
from conecta_rua.notifications import NotificationLevel
from conecta_rua.reports import CreateReportFlow, CreationState, ErrorKind, ReportStore
from conecta_rua.reports.creation import build_storage_path

FIXED_CLOCK = lambda: 1700000000.0


class TestBuildStoragePath:
    """Test suite for object paths."""

    def test_path_layout(self):
        """Test storage path layout."""
        assert build_storage_path("user-1", 1700000000000, 2, "jpg") == "user-1/1700000000000-2.jpg"


class TestCreateReportFlow:
    """Test suite for report submission."""

    @pytest.fixture(autouse=True)
    def setup_flow(self, user_session, fake_storage, fake_data, notifier):
        self.storage = fake_storage
        self.data = fake_data
        self.notifier = notifier
        self.created_calls = []
        self.flow = CreateReportFlow(
            session=user_session,
            storage=fake_storage,
            data=fake_data,
            notifier=notifier,
            on_created=lambda: self.created_calls.append(True),
            clock=FIXED_CLOCK,
        )
        self.flow.form.title = "  Buraco na Rua Balduíno Taques  "
        self.flow.form.description = "Buraco fundo na faixa da direita"
        self.flow.form.category = "buraco"

    def submit(self):
        return asyncio.run(self.flow.submit())

    def test_missing_fields(self):
        """Test missing fields are rejected."""
        self.flow.form.description = "   "

        outcome = self.submit()

        assert outcome.success is False
        assert outcome.error_kind == ErrorKind.VALIDATION
        assert outcome.message == "Por favor, preencha todos os campos obrigatórios"
        assert self.data.insert_calls == []
        assert self.storage.uploads == []
        assert self.flow.state == CreationState.IDLE

    def test_missing_category(self):
        """Test missing category is rejected."""
        self.flow.form.category = ""
        outcome = self.submit()
        assert outcome.message == "Por favor, preencha todos os campos obrigatórios"

    def test_unknown_category(self):
        """Test unknown category is rejected."""
        self.flow.form.category = "enchente"

        outcome = self.submit()

        assert outcome.error_kind == ErrorKind.VALIDATION
        assert outcome.message == "Categoria inválida"
        assert self.data.insert_calls == []

    def test_requires_session(self):
        """Test submission requires a session."""
        self.flow.session = None

        outcome = self.submit()

        assert outcome.error_kind == ErrorKind.AUTHENTICATION
        assert self.notifier.messages() == ["Você precisa estar logado para criar um reporte"]
        assert self.data.insert_calls == []

    def test_create_without_images(self):
        """Test report creation without photos."""
        outcome = self.submit()

        assert outcome.success is True
        assert outcome.image_count == 0
        assert len(self.data.insert_calls) == 1

        call = self.data.insert_calls[0]
        assert call["table"] == "reports"
        assert call["access_token"] == "token-123"
        assert call["row"] == {
            "title": "Buraco na Rua Balduíno Taques",
            "description": "Buraco fundo na faixa da direita",
            "category": "buraco",
            "latitude": -25.0916,
            "longitude": -50.1668,
            "image_urls": [],
            "user_id": "user-1",
        }
        assert outcome.report.user_name == "Maria Silva"
        assert self.notifier.messages() == ["Reporte criado com sucesso!"]
        assert self.created_calls == [True]
        assert self.flow.loading is False

    def test_create_with_images(self, make_image):
        """Test photos are uploaded before the insert."""
        self.flow.images.add([make_image("a.jpg"), make_image("b.png", "image/png")])

        outcome = self.submit()

        assert outcome.success is True
        assert outcome.image_count == 2
        assert sorted(u["path"] for u in self.storage.uploads) == [
            "user-1/1700000000000-0.jpg",
            "user-1/1700000000000-1.png",
        ]
        assert all(u["bucket"] == "report-images" for u in self.storage.uploads)

        row = self.data.insert_calls[0]["row"]
        assert row["image_urls"] == [
            "https://storage.test/object/public/report-images/user-1/1700000000000-0.jpg",
            "https://storage.test/object/public/report-images/user-1/1700000000000-1.png",
        ]
        assert self.notifier.messages() == [
            "Fazendo upload das imagens...",
            "Reporte criado com sucesso!",
        ]

    def test_one_upload_failure_fails_batch(self, make_image):
        """Test one failed upload fails the batch."""
        self.storage.fail_when = lambda path: path.endswith("-1.jpg")
        self.flow.images.add([make_image("a.jpg"), make_image("b.jpg"), make_image("c.jpg")])

        outcome = self.submit()

        assert outcome.success is False
        assert outcome.error_kind == ErrorKind.UPSTREAM
        assert outcome.message == "Erro inesperado ao criar reporte"
        # Every upload was attempted, none was turned into a report
        assert len(self.storage.uploads) == 3
        assert self.data.insert_calls == []
        assert self.created_calls == []
        assert self.notifier.last.level == NotificationLevel.ERROR

    def test_all_uploads_fail(self, make_image):
        """Test every upload failing."""
        self.storage.fail_when = lambda path: True
        self.flow.images.add([make_image("a.jpg"), make_image("b.jpg")])

        outcome = self.submit()

        assert outcome.success is False
        assert self.data.insert_calls == []
        assert self.flow.loading is False
        assert self.flow.state == CreationState.IDLE

    def test_insert_failure(self, make_image):
        """Test insert failure message."""
        self.data.insert_error = DataError("new row violates row-level security policy", status_code=403)
        self.flow.images.add([make_image("a.jpg")])

        outcome = self.submit()

        assert outcome.success is False
        assert outcome.error_kind == ErrorKind.UPSTREAM
        assert outcome.message == "Erro ao criar reporte: new row violates row-level security policy"
        assert self.created_calls == []

    def test_unexpected_failure(self):
        """Test unexpected error is reported generically."""
        self.data.insert_error = RuntimeError("boom")

        outcome = self.submit()

        assert outcome.error_kind == ErrorKind.UNEXPECTED
        assert outcome.message == "Erro inesperado ao criar reporte"

    def test_on_created_refreshes_store(self):
        """Test success refreshes the report list."""
        store = ReportStore(self.data, self.notifier)
        self.flow.on_created = store.refresh

        outcome = self.submit()

        assert outcome.success is True
        assert len(store.reports) == 4
        assert store.reports[0].title == "Buraco na Rua Balduíno Taques"
        # One insert and one refetch, nothing more
        assert len(self.data.insert_calls) == 1
        assert len(self.data.select_calls) == 1

    def test_close_runs_continuation(self):
        """Test closing runs the continuation."""
        closed = []
        self.flow.on_close = lambda: closed.append(True)

        asyncio.run(self.flow.close())

        assert closed == [True]
