"""
Report creation flow.

Validates the form, uploads the selected photos concurrently, then inserts
one report row. On success the caller's ``on_created`` continuation runs
(the list is refetched and the dialog closed).

Known gap: when an upload or the insert fails after some photos were already
stored, those objects stay orphaned in the bucket. They are logged, not
removed.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Union

from conecta_rua.backend import DataClient, StorageClient, UserSession
from conecta_rua.core.config import settings
from conecta_rua.core.constants import REPORTS_TABLE, Category
from conecta_rua.core.exceptions import (
    AuthenticationRequiredError,
    DataError,
    StorageError,
    ValidationError,
)
from conecta_rua.notifications import Notifier
from conecta_rua.reports.images import ImageSelection, SelectedImage
from conecta_rua.reports.models import Report, ReportForm

logger = logging.getLogger(__name__)

Continuation = Callable[[], Union[None, Awaitable[Any]]]


class CreationState(Enum):
    """Where a submission currently is."""
    IDLE = "idle"
    VALIDATING = "validating"
    UPLOADING = "uploading"
    INSERTING = "inserting"


class ErrorKind(str, Enum):
    """Error taxonomy for failed submissions."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    UPSTREAM = "upstream"
    UNEXPECTED = "unexpected"


@dataclass
class CreationOutcome:
    """Result of one submission."""
    success: bool
    report: Optional[Report] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None
    image_count: int = 0


def build_storage_path(user_id: str, timestamp_ms: int, index: int, extension: str) -> str:
    """Object path namespaced by user; timestamp and index avoid collisions."""
    return f"{user_id}/{timestamp_ms}-{index}.{extension}"


async def _run_continuation(callback: Optional[Continuation]) -> None:
    if callback is None:
        return
    result = callback()
    if inspect.isawaitable(result):
        await result


class CreateReportFlow:
    """
    The "Nova Denúncia" dialog.

    State machine:
        IDLE -> VALIDATING -> (invalid) IDLE
                           -> UPLOADING -> INSERTING -> IDLE
    """

    def __init__(
        self,
        session: Optional[UserSession],
        storage: StorageClient,
        data: DataClient,
        notifier: Notifier,
        on_created: Optional[Continuation] = None,
        on_close: Optional[Continuation] = None,
        bucket: str = settings.storage_bucket,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the flow.

        Args:
            session: Current user session, None when signed out
            storage: Object storage collaborator
            data: Rows collaborator
            notifier: Toast sink
            on_created: Continuation run once after a successful insert
            on_close: Continuation run when the dialog is dismissed
            bucket: Storage bucket for the photos
            clock: Time source in seconds, used for upload paths
        """
        self.session = session
        self.storage = storage
        self.data = data
        self.notifier = notifier
        self.on_created = on_created
        self.on_close = on_close
        self.bucket = bucket
        self.clock = clock

        self.form = ReportForm()
        self.images = ImageSelection(notifier)
        self.state = CreationState.IDLE
        self.loading = False

    def validate(self) -> Category:
        """
        Check required fields.

        Returns:
            The selected category

        Raises:
            ValidationError: Missing title, description or category
        """
        category = Category.parse(self.form.category)
        if not self.form.title.strip() or not self.form.description.strip() or not self.form.category:
            raise ValidationError("Por favor, preencha todos os campos obrigatórios")
        if category is None:
            raise ValidationError("Categoria inválida")
        return category

    async def submit(self) -> CreationOutcome:
        """Run the whole submission and report how it ended."""
        self.state = CreationState.VALIDATING
        try:
            category = self.validate()
            if self.session is None:
                raise AuthenticationRequiredError("Você precisa estar logado para criar um reporte")
        except ValidationError as e:
            return self._fail(ErrorKind.VALIDATION, str(e))
        except AuthenticationRequiredError as e:
            return self._fail(ErrorKind.AUTHENTICATION, str(e))

        self.loading = True
        image_urls: List[str] = []
        try:
            if self.images:
                self.notifier.info("Fazendo upload das imagens...")
                self.state = CreationState.UPLOADING
                image_urls = await self.upload_images(self.images.files)

            self.state = CreationState.INSERTING
            rows = await self.data.insert(
                REPORTS_TABLE,
                {
                    "title": self.form.title.strip(),
                    "description": self.form.description.strip(),
                    "category": category.value,
                    "latitude": float(self.form.latitude),
                    "longitude": float(self.form.longitude),
                    "image_urls": image_urls,
                    "user_id": self.session.id,
                },
                access_token=self.session.access_token,
            )
        except StorageError as e:
            logger.error(f"Erro ao fazer upload das imagens: {e.message}")
            return self._fail(ErrorKind.UPSTREAM, "Erro inesperado ao criar reporte")
        except DataError as e:
            if image_urls:
                logger.warning(f"Insert failed; {len(image_urls)} uploaded image(s) left orphaned: {image_urls}")
            return self._fail(ErrorKind.UPSTREAM, f"Erro ao criar reporte: {e.message}")
        except Exception:
            logger.exception("Erro inesperado ao criar reporte")
            return self._fail(ErrorKind.UNEXPECTED, "Erro inesperado ao criar reporte")
        finally:
            self.loading = False

        report = None
        if rows:
            report = Report.from_row(rows[0])
            report.user_name = self.session.full_name or report.user_name
        logger.info(f"Report created by {self.session.id} with {len(image_urls)} image(s)")

        self.state = CreationState.IDLE
        self.notifier.success("Reporte criado com sucesso!")
        await _run_continuation(self.on_created)
        return CreationOutcome(success=True, report=report, image_count=len(image_urls))

    async def upload_images(self, files: List[SelectedImage]) -> List[str]:
        """
        Upload all files concurrently and resolve their public URLs.

        Waits for every upload to settle; any failure fails the batch.

        Raises:
            StorageError: (first) failed upload
        """
        timestamp_ms = int(self.clock() * 1000)
        results = await asyncio.gather(
            *(self._upload_one(image, index, timestamp_ms) for index, image in enumerate(files)),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            stored = [r for r in results if isinstance(r, str)]
            if stored:
                logger.warning(
                    f"{len(failures)} upload(s) failed; {len(stored)} object(s) left orphaned "
                    f"in {self.bucket}: {stored}"
                )
            raise failures[0]

        return [self.storage.get_public_url(self.bucket, path) for path in results]

    async def _upload_one(self, image: SelectedImage, index: int, timestamp_ms: int) -> str:
        path = build_storage_path(self.session.id, timestamp_ms, index, image.extension)
        try:
            return await self.storage.upload(
                self.bucket,
                path,
                image.data,
                content_type=image.content_type,
                access_token=self.session.access_token,
            )
        except StorageError as e:
            logger.error(f"Erro ao fazer upload de {image.filename}: {e.message}")
            raise

    async def close(self) -> None:
        await _run_continuation(self.on_close)

    def _fail(self, kind: ErrorKind, message: str) -> CreationOutcome:
        self.state = CreationState.IDLE
        self.notifier.error(message)
        return CreationOutcome(success=False, error_kind=kind, message=message)
