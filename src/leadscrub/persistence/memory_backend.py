"""In-memory backends for unit tests — list-backed fakes."""

from __future__ import annotations

from datetime import date

from leadscrub.core.exceptions import StoreUnavailableError
from leadscrub.models.matching import SuppressionRecord


class MemorySuppressionStore:
    """List-backed ISuppressionStore for unit tests.

    Records every query so tests can assert how many lookups a run issued,
    and can be switched into an outage to exercise the abort path.
    """

    def __init__(self, records: list[SuppressionRecord] | None = None) -> None:
        self._records: list[SuppressionRecord] = list(records or [])
        self.queries: list[tuple[str, str, str | None]] = []
        self.available = True
        self.closed = False

    def add(self, left_3: str, left_4: str, client: str | None = None,
            date_: date | None = None) -> SuppressionRecord:
        record = SuppressionRecord(left_3=left_3, left_4=left_4, client=client, date_=date_)
        self._records.append(record)
        return record

    def find_match(self, left_3: str, left_4: str, client: str | None = None) -> SuppressionRecord | None:
        self.queries.append((left_3, left_4, client))
        if not self.available:
            raise StoreUnavailableError("memory store is offline")
        hits = [
            r for r in self._records
            if r.left_3 == left_3 and r.left_4 == left_4 and (client is None or r.client == client)
        ]
        if not hits:
            return None
        return max(hits, key=lambda r: (r.date_ is not None, r.date_ or date.min))

    def ping(self) -> None:
        if not self.available:
            raise StoreUnavailableError("memory store is offline")

    def close(self) -> None:
        self.closed = True
