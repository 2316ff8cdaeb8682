"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from conecta_rua.backend import UserSession
from conecta_rua.core.exceptions import AuthError, StorageError
from conecta_rua.notifications import Notifier
from conecta_rua.reports import SelectedImage


class FakeDataClient:
    """In-memory stand-in for the rows collaborator."""

    def __init__(self, tables=None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.select_calls = []
        self.insert_calls = []
        self.select_error = None
        self.insert_error = None

    async def select(self, table, columns="*", filters=None, order=None, access_token=None):
        self.select_calls.append({
            "table": table,
            "columns": columns,
            "filters": filters,
            "order": order,
            "access_token": access_token,
        })
        if self.select_error:
            raise self.select_error
        return [
            dict(row) for row in self.tables.get(table, [])
            if all(str(row.get(k)) == str(v) for k, v in (filters or {}).items())
        ]

    async def insert(self, table, row, access_token=None):
        self.insert_calls.append({"table": table, "row": dict(row), "access_token": access_token})
        if self.insert_error:
            raise self.insert_error
        rows = self.tables.setdefault(table, [])
        stored = dict(row)
        stored.setdefault("id", f"{table}-new-{len(rows) + 1}")
        stored.setdefault("created_at", "2025-03-10T12:00:00+00:00")
        # New rows go first, like the newest-first listing
        rows.insert(0, stored)
        return [stored]


class FakeStorageClient:
    """In-memory stand-in for the object storage collaborator."""

    def __init__(self):
        self.uploads = []
        self.fail_when = lambda path: False

    async def upload(self, bucket, path, data, content_type="application/octet-stream", access_token=None):
        self.uploads.append({
            "bucket": bucket,
            "path": path,
            "size": len(data),
            "content_type": content_type,
            "access_token": access_token,
        })
        if self.fail_when(path):
            raise StorageError("The resource already exists", status_code=409)
        return path

    def get_public_url(self, bucket, path):
        return f"https://storage.test/object/public/{bucket}/{path}"


class FakeAuthClient:
    """Stand-in for the auth collaborator with one known token."""

    def __init__(self, session):
        self.sessions = {session.access_token: session}
        self.sign_in_result = session
        self.sign_up_result = None
        self.error = None
        self.sign_out_error = None
        self.signed_out = []
        self.calls = []

    async def get_session(self, access_token):
        if access_token not in self.sessions:
            raise AuthError("invalid JWT", status_code=401)
        return self.sessions[access_token]

    async def sign_in_with_password(self, email, password):
        self.calls.append(("sign_in", email, password))
        if self.error:
            raise self.error
        return self.sign_in_result

    async def sign_up(self, email, password, full_name=None):
        self.calls.append(("sign_up", email, password, full_name))
        if self.error:
            raise self.error
        return self.sign_up_result

    async def sign_out(self, access_token):
        self.signed_out.append(access_token)
        if self.sign_out_error:
            raise self.sign_out_error


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def user_session():
    """Signed-in citizen."""
    return UserSession(
        id="user-1",
        email="maria@example.com",
        full_name="Maria Silva",
        access_token="token-123",
    )


@pytest.fixture
def sample_report_rows():
    """Report rows as returned by the reports query, newest first."""
    return [
        {
            "id": "r3",
            "title": "Buraco na Rua XV",
            "description": "Buraco grande perto da escola",
            "category": "buraco",
            "latitude": -25.0950,
            "longitude": -50.1600,
            "image_urls": ["https://storage.test/object/public/report-images/user-1/1-0.jpg"],
            "created_at": "2025-03-05T17:30:00Z",
            "user_id": "user-1",
            "profiles": {"full_name": "Maria Silva"},
        },
        {
            "id": "r2",
            "title": "Poste apagado",
            "description": "Poste sem luz há uma semana",
            "category": "iluminacao",
            "latitude": -25.0900,
            "longitude": -50.1700,
            "image_urls": [],
            "created_at": "2025-03-04T10:00:00Z",
            "user_id": "user-2",
            "profiles": None,
        },
        {
            "id": "r1",
            "title": "Outro buraco",
            "description": "Buraco na calçada da praça",
            "category": "buraco",
            "latitude": -25.0880,
            "longitude": -50.1650,
            "image_urls": None,
            "created_at": "2025-03-01T08:15:00Z",
            "user_id": "user-3",
            "profiles": {"full_name": "João Souza"},
        },
    ]


@pytest.fixture
def sample_comment_rows():
    """Comments of report r3, deliberately out of order."""
    return [
        {
            "id": "c2",
            "content": "Continua lá",
            "report_id": "r3",
            "user_id": "user-3",
            "created_at": "2025-03-06T09:00:00Z",
            "profiles": {"full_name": "João Souza"},
        },
        {
            "id": "c1",
            "content": "Também vi esse buraco",
            "report_id": "r3",
            "user_id": "user-2",
            "created_at": "2025-03-05T18:00:00Z",
            "profiles": None,
        },
        {
            "id": "c9",
            "content": "Comentário de outra denúncia",
            "report_id": "r2",
            "user_id": "user-2",
            "created_at": "2025-03-05T12:00:00Z",
            "profiles": None,
        },
    ]


@pytest.fixture
def fake_data(sample_report_rows, sample_comment_rows):
    return FakeDataClient({"reports": sample_report_rows, "comments": sample_comment_rows})


@pytest.fixture
def fake_storage():
    return FakeStorageClient()


@pytest.fixture
def fake_auth(user_session):
    return FakeAuthClient(user_session)


@pytest.fixture
def make_image():
    """Factory for selected files."""
    def _make(filename="foto.jpg", content_type="image/jpeg", size=1024):
        return SelectedImage(filename=filename, content_type=content_type, data=b"\xff" * size)
    return _make
