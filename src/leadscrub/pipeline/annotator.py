"""RowAnnotator — one sequential pass over the data rows of a worksheet."""

from __future__ import annotations

from datetime import date
from typing import Optional

from openpyxl.worksheet.worksheet import Worksheet

from leadscrub.core.protocols import IRunObserver
from leadscrub.core.types import RowNumber, RunId
from leadscrub.matching.fingerprint import identity_fingerprint, normalize
from leadscrub.matching.lookup import SuppressionLookup
from leadscrub.models.matching import DateStatus, IdentityFields, MatchResult
from leadscrub.models.pipeline import (
    COMPANY_NAME,
    FIRST_NAME,
    LAST_NAME,
    AnnotationStats,
    ColumnMap,
    PipelineOptions,
    StatusColumns,
)

FIRST_DATA_ROW = 2


class RowAnnotator:
    """Fingerprints each row, looks it up, and writes the status cells.

    Rows are visited in sheet order; each lookup completes before the next
    row is read. Every match column receives the label from the same
    MatchResult so split status columns can never diverge.
    """

    def __init__(
        self,
        lookup: SuppressionLookup,
        options: PipelineOptions,
        observer: IRunObserver,
        *,
        run_id: RunId,
        today: Optional[date] = None,
    ) -> None:
        self._lookup = lookup
        self._options = options
        self._observer = observer
        self._run_id = run_id
        self._today = today

    def read_identity(self, sheet: Worksheet, row: RowNumber, columns: ColumnMap) -> IdentityFields:
        values = {}
        for field, label, col in (
            ("first_name", FIRST_NAME, columns.first_name),
            ("last_name", LAST_NAME, columns.last_name),
            ("company_name", COMPANY_NAME, columns.company_name),
        ):
            raw = sheet.cell(row=row, column=col).value
            if raw is None:
                self._observer.field_defaulted(self._run_id, row, label)
            values[field] = normalize(raw)
        return IdentityFields(**values)

    def annotate_row(self, sheet: Worksheet, row: RowNumber, columns: ColumnMap,
                     status: StatusColumns, values: Optional[Worksheet] = None) -> Optional[MatchResult]:
        identity = self.read_identity(sheet if values is None else values, row, columns)
        if identity.is_blank:
            self._observer.row_skipped(self._run_id, row)
            return None

        fp = identity_fingerprint(identity)
        result = self._lookup.lookup_fingerprint(
            fp,
            self._options.client_scope,
            self._options.recency_window_months,
            today=self._today,
        )

        label = str(result.label)
        for col in status.match:
            sheet.cell(row=row, column=col, value=label)
        if status.date is not None and result.date_status is not None:
            sheet.cell(row=row, column=status.date, value=str(result.date_status))

        self._observer.row_annotated(self._run_id, row, result)
        return result

    def annotate(self, sheet: Worksheet, columns: ColumnMap, status: StatusColumns,
                 values: Optional[Worksheet] = None) -> AnnotationStats:
        """Annotate rows 2..max_row of ``sheet``.

        Identity cells are read from ``values`` when given (a data-only view
        of the same sheet) so formula cells contribute their cached result.
        """
        stats = AnnotationStats()
        for row in range(FIRST_DATA_ROW, sheet.max_row + 1):
            stats.rows_seen += 1
            result = self.annotate_row(sheet, row, columns, status, values)
            if result is None:
                stats.rows_skipped += 1
                continue
            if not result.exists:
                stats.rows_unmatched += 1
                continue
            stats.rows_matched += 1
            if result.date_status == DateStatus.SUPPRESSION_CLEARED:
                stats.rows_cleared += 1
            elif result.date_status == DateStatus.STILL_SUPPRESSED:
                stats.rows_still_suppressed += 1
        return stats
