"""Suppression lookup and recency classification."""

from __future__ import annotations

from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from leadscrub.core.protocols import ISuppressionStore
from leadscrub.models.matching import DateStatus, Fingerprint, MatchResult, SuppressionRecord


def recency_cutoff(today: date, months: int) -> date:
    """Return ``today`` moved back ``months`` calendar months (day clamped to month end)."""
    return today - relativedelta(months=months)


def classify_recency(record_date: Optional[date], cutoff: date) -> DateStatus:
    # A record dated exactly on the cutoff is still inside the window; an
    # undated record can never age out.
    if record_date is not None and record_date < cutoff:
        return DateStatus.SUPPRESSION_CLEARED
    return DateStatus.STILL_SUPPRESSED


class SuppressionLookup:
    """Stateless per-row lookup against an ISuppressionStore.

    Each call issues exactly one store query; the existence flag and the
    date used for classification come from the same returned record.
    Store failures propagate as StoreUnavailableError.
    """

    def __init__(self, store: ISuppressionStore) -> None:
        self._store = store

    def lookup(
        self,
        key3: str,
        key4: str,
        client_scope: Optional[str] = None,
        recency_window_months: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> MatchResult:
        record = self._store.find_match(key3, key4, client_scope)
        return self._classify(record, recency_window_months, today or date.today())

    def lookup_fingerprint(
        self,
        fp: Fingerprint,
        client_scope: Optional[str] = None,
        recency_window_months: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> MatchResult:
        return self.lookup(fp.key3, fp.key4, client_scope, recency_window_months, today=today)

    @staticmethod
    def _classify(
        record: SuppressionRecord | None, recency_window_months: Optional[int], today: date
    ) -> MatchResult:
        if record is None:
            return MatchResult(exists=False, date_status=DateStatus.FRESH_LEAD)
        if recency_window_months is None:
            return MatchResult(exists=True)
        cutoff = recency_cutoff(today, recency_window_months)
        return MatchResult(exists=True, date_status=classify_recency(record.date_, cutoff))
