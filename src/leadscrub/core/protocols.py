"""Protocol interfaces for LeadScrub abstractions.

The pipeline depends only on these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from leadscrub.core.types import ClientCode, RowNumber, RunId
from leadscrub.models.matching import MatchResult, SuppressionRecord


# ---------------------------------------------------------------------------
# Persistence: Suppression Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ISuppressionStore(Protocol):
    """Read-only lookup surface over the suppression registry."""

    def find_match(
        self, left_3: str, left_4: str, client: ClientCode | None = None
    ) -> SuppressionRecord | None: ...

    def ping(self) -> None: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Observability
# ---------------------------------------------------------------------------

@runtime_checkable
class IRunObserver(Protocol):
    """Receives pipeline events; the core never logs or prints directly."""

    def run_started(self, run_id: RunId, source: str) -> None: ...

    def state_changed(self, run_id: RunId, state: str) -> None: ...

    def field_defaulted(self, run_id: RunId, row: RowNumber, label: str) -> None: ...

    def row_skipped(self, run_id: RunId, row: RowNumber) -> None: ...

    def row_annotated(self, run_id: RunId, row: RowNumber, result: MatchResult) -> None: ...

    def run_aborted(self, run_id: RunId, error: Exception) -> None: ...

    def run_finished(self, run_id: RunId, output_path: str, rows_looked_up: int) -> None: ...
