"""
Photo selection for the report creation dialog.

Files are only validated and kept in memory here; uploading happens when
the report is submitted.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from conecta_rua.core.config import settings
from conecta_rua.notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass
class SelectedImage:
    """A file chosen by the user, not yet uploaded."""
    filename: str
    content_type: str
    data: bytes
    size: Optional[int] = None

    def __post_init__(self):
        if self.size is None:
            self.size = len(self.data)

    @property
    def extension(self) -> str:
        # Text after the last dot; the whole name when there is none
        return self.filename.rsplit(".", 1)[-1]

    @property
    def is_image(self) -> bool:
        return (self.content_type or "").startswith("image/")


def rejection_reason(image: SelectedImage, max_bytes: int) -> Optional[str]:
    """
    Toast message for a file that cannot be attached, None when it is valid.
    """
    if not image.is_image:
        return f"{image.filename} não é uma imagem válida"
    if image.size > max_bytes:
        return f"{image.filename} é muito grande (máximo {max_bytes // (1024 * 1024)}MB)"
    return None


class ImageSelection:
    """
    Pending photos of a report.

    Keeps at most ``max_images`` files, earliest selected first.
    """

    def __init__(
        self,
        notifier: Notifier,
        max_images: int = settings.max_images,
        max_bytes: int = settings.max_image_bytes,
    ):
        self.notifier = notifier
        self.max_images = max_images
        self.max_bytes = max_bytes
        self._files: List[SelectedImage] = []

    @property
    def files(self) -> List[SelectedImage]:
        return list(self._files)

    def add(self, files: Iterable[SelectedImage]) -> List[SelectedImage]:
        """
        Validate newly chosen files and append the accepted ones.

        Args:
            files: Files from one selection event

        Returns:
            The files that passed validation (some may still be dropped by
            the count limit)
        """
        accepted = []
        for image in files:
            reason = rejection_reason(image, self.max_bytes)
            if reason:
                self.notifier.error(reason)
                logger.info(f"Rejected file {image.filename}: {reason}")
                continue
            accepted.append(image)

        self._files = (self._files + accepted)[:self.max_images]
        return accepted

    def remove(self, index: int) -> None:
        """Drop the file at ``index``; out-of-range indexes are ignored."""
        self._files = [f for i, f in enumerate(self._files) if i != index]

    def clear(self) -> None:
        self._files = []

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[SelectedImage]:
        return iter(list(self._files))

    def __bool__(self) -> bool:
        return bool(self._files)
