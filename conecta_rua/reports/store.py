"""
Report list with category filter.

Owns the canonical report collection; the map only ever sees the derived
filtered view.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from conecta_rua.backend import DataClient
from conecta_rua.core.constants import ALL_CATEGORIES, REPORTS_SELECT, REPORTS_TABLE, Category
from conecta_rua.core.exceptions import BackendError, ValidationError
from conecta_rua.notifications import Notifier
from conecta_rua.reports.models import Report

logger = logging.getLogger(__name__)


def filter_reports(reports: Sequence[Report], category: str) -> List[Report]:
    """
    Reports matching a category filter.

    Args:
        reports: Source collection (left untouched)
        category: Category value, or ``"all"`` for no filtering

    Returns:
        New list in the source order
    """
    if category == ALL_CATEGORIES:
        return list(reports)
    return [r for r in reports if r.category == category]


class ReportStore:
    """
    Canonical report collection plus the selected filter.

    ``filtered`` is re-derived whenever the collection or the selected
    category changes.
    """

    def __init__(
        self,
        data: DataClient,
        notifier: Notifier,
        access_token: Optional[str] = None,
    ):
        self.data = data
        self.notifier = notifier
        self.access_token = access_token

        self._reports: Tuple[Report, ...] = ()
        self._selected_category = ALL_CATEGORIES
        self._filtered: List[Report] = []
        self.loading = False
        self.loaded = False

    @property
    def reports(self) -> Tuple[Report, ...]:
        return self._reports

    @property
    def selected_category(self) -> str:
        return self._selected_category

    @property
    def filtered(self) -> List[Report]:
        return list(self._filtered)

    async def refresh(self) -> bool:
        """
        Fetch every report, newest first, with the author's name.

        Returns:
            False when the fetch failed (the previous collection is kept)
        """
        self.loading = True
        try:
            rows = await self.data.select(
                REPORTS_TABLE,
                columns=REPORTS_SELECT,
                order=("created_at", False),
                access_token=self.access_token,
            )
            reports = tuple(Report.from_row(row) for row in rows)
        except BackendError as e:
            logger.error(f"Error fetching reports: {e.message}")
            self.notifier.error("Erro ao carregar denúncias")
            return False
        except (KeyError, TypeError, ValueError) as e:
            logger.exception(f"Malformed report row: {e}")
            self.notifier.error("Erro ao carregar denúncias")
            return False
        finally:
            self.loading = False

        self.set_reports(reports)
        self.loaded = True
        return True

    def set_reports(self, reports: Sequence[Report]) -> None:
        self._reports = tuple(reports)
        self._derive()

    def select_category(self, category: Optional[str]) -> None:
        """
        Change the filter.

        Raises:
            ValidationError: Value is neither ``"all"`` nor a known category
        """
        category = category or ALL_CATEGORIES
        if category != ALL_CATEGORIES and Category.parse(category) is None:
            raise ValidationError(f"Categoria inválida: {category}")
        self._selected_category = category
        self._derive()

    async def fetch(self, report_id: str) -> Optional[Report]:
        """
        Fetch a single report by id, with the author's name.

        The loaded collection is left untouched.

        Returns:
            The report, or None when no row has that id

        Raises:
            BackendError: The query failed
        """
        rows = await self.data.select(
            REPORTS_TABLE,
            columns=REPORTS_SELECT,
            filters={"id": report_id},
            access_token=self.access_token,
        )
        return Report.from_row(rows[0]) if rows else None

    def count_by_category(self) -> Dict[str, int]:
        """Number of loaded reports per category value."""
        counts = {category.value: 0 for category in Category}
        for report in self._reports:
            counts[report.category] = counts.get(report.category, 0) + 1
        return counts

    def _derive(self) -> None:
        self._filtered = filter_reports(self._reports, self._selected_category)
