"""Identity, fingerprint and match-result models."""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel


class MatchLabel(StrEnum):
    MATCH = "Match"
    UNMATCH = "Unmatch"


class DateStatus(StrEnum):
    SUPPRESSION_CLEARED = "Suppression Cleared"
    STILL_SUPPRESSED = "Still Suppressed"
    FRESH_LEAD = "Fresh Lead GTG"


class Fingerprint(BaseModel):
    """Prefix lookup keys built from first name, last name and company."""

    model_config = {"frozen": True}

    key3: str
    key4: str


class IdentityFields(BaseModel):
    """Normalized identity triple read from one spreadsheet row."""

    model_config = {"frozen": True}

    first_name: str = ""
    last_name: str = ""
    company_name: str = ""

    @property
    def is_blank(self) -> bool:
        return not (self.first_name or self.last_name or self.company_name)


class SuppressionRecord(BaseModel):
    """A row of the external suppression store (read-only to this package)."""

    left_3: str
    left_4: str
    client: Optional[str] = None
    date_: Optional[date] = None


class MatchResult(BaseModel):
    """Outcome of one suppression lookup.

    ``date_status`` is ``None`` when a record matched but no recency window
    was requested; a non-match always carries ``Fresh Lead GTG``.
    """

    exists: bool
    date_status: Optional[DateStatus] = None

    @property
    def label(self) -> MatchLabel:
        return MatchLabel.MATCH if self.exists else MatchLabel.UNMATCH
