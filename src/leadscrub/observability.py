"""Pipeline event observers."""

from __future__ import annotations

import logging

from leadscrub.core.types import RowNumber, RunId
from leadscrub.models.matching import MatchResult
from leadscrub.utils.logging import get_logger


class LoggingRunObserver:
    """IRunObserver that writes every pipeline event to the package logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or get_logger("pipeline")

    def _emit(self, level: int, event: str, msg: str, *args: object) -> None:
        self._log.log(level, msg, *args, extra={"event": event})

    def run_started(self, run_id: RunId, source: str) -> None:
        self._emit(logging.INFO, "run_started", "[%s] run started for %s", run_id, source)

    def state_changed(self, run_id: RunId, state: str) -> None:
        self._emit(logging.DEBUG, "state_changed", "[%s] -> %s", run_id, state)

    def field_defaulted(self, run_id: RunId, row: RowNumber, label: str) -> None:
        self._emit(logging.INFO, "field_defaulted",
                   "[%s] row %d: %r is empty, normalized to ''", run_id, row, label)

    def row_skipped(self, run_id: RunId, row: RowNumber) -> None:
        self._emit(logging.INFO, "row_skipped", "[%s] row %d skipped (no identity fields)", run_id, row)

    def row_annotated(self, run_id: RunId, row: RowNumber, result: MatchResult) -> None:
        self._emit(logging.DEBUG, "row_annotated", "[%s] row %d: %s%s", run_id, row, result.label,
                   f" / {result.date_status}" if result.date_status else "")

    def run_aborted(self, run_id: RunId, error: Exception) -> None:
        self._emit(logging.ERROR, "run_aborted", "[%s] run aborted: %s", run_id, error)

    def run_finished(self, run_id: RunId, output_path: str, rows_looked_up: int) -> None:
        self._emit(logging.INFO, "run_finished", "[%s] wrote %s (%d rows looked up)",
                   run_id, output_path, rows_looked_up)
