"""SuppressionPipeline — end-to-end sequencing of one run.

LOADED -> HEADER_RESOLVED -> STREAMING -> FINALIZED, or ABORTED on the first
fatal error. Nothing is written to the output directory unless the run
reaches FINALIZED.
"""

from __future__ import annotations

import os
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Union

from leadscrub.core.protocols import IRunObserver, ISuppressionStore
from leadscrub.core.types import RunId
from leadscrub.matching.lookup import SuppressionLookup
from leadscrub.models.pipeline import PipelineOptions, RunResult, RunState, StatusColumns
from leadscrub.observability import LoggingRunObserver
from leadscrub.pipeline.annotator import RowAnnotator
from leadscrub.pipeline.workbook import (
    Source,
    append_status_headers,
    first_sheet,
    load_workbook,
    resolve_columns,
    save_workbook,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SuppressionPipeline:
    """Runs the suppression check over one spreadsheet per call to run()."""

    def __init__(
        self,
        store: ISuppressionStore,
        output_dir: Union[str, os.PathLike],
        *,
        observer: Optional[IRunObserver] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._lookup = SuppressionLookup(store)
        self._output_dir = Path(output_dir)
        self._observer = observer or LoggingRunObserver()
        self._clock = clock

    def _enter(self, run_id: RunId, state: RunState) -> RunState:
        self._observer.state_changed(run_id, str(state))
        return state

    def run(self, source: Source, options: Optional[PipelineOptions] = None) -> RunResult:
        options = options or PipelineOptions()
        run_id = uuid.uuid4().hex[:12]
        started_at = self._clock()
        today: date = started_at.date()
        self._observer.run_started(run_id, str(getattr(source, "name", source)))

        try:
            wb = load_workbook(source)
            values = first_sheet(load_workbook(source, data_only=True))
            sheet = first_sheet(wb)
            self._enter(run_id, RunState.LOADED)

            columns = resolve_columns(sheet)
            self._enter(run_id, RunState.HEADER_RESOLVED)

            indices = append_status_headers(sheet, options.status_headers)
            n_match = len(options.match_headers)
            status = StatusColumns(
                match=indices[:n_match],
                date=indices[n_match] if len(indices) > n_match else None,
            )
            self._enter(run_id, RunState.STREAMING)

            annotator = RowAnnotator(self._lookup, options, self._observer, run_id=run_id, today=today)
            stats = annotator.annotate(sheet, columns, status, values)

            output_path = save_workbook(wb, self._output_dir)
            state = self._enter(run_id, RunState.FINALIZED)
        except Exception as exc:
            self._enter(run_id, RunState.ABORTED)
            self._observer.run_aborted(run_id, exc)
            raise

        self._observer.run_finished(run_id, str(output_path), stats.rows_looked_up)
        return RunResult(
            run_id=run_id,
            state=state,
            output_path=str(output_path),
            options=options,
            stats=stats,
            started_at=started_at,
            finished_at=self._clock(),
        )
