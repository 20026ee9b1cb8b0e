"""Run configuration, header mapping and run outcome models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

FIRST_NAME = "First Name"
LAST_NAME = "Last Name"
COMPANY_NAME = "Company Name"
EMAIL_ID = "Email ID"
PHONE_NUMBER = "Phone Number"

REQUIRED_LABELS: tuple[str, ...] = (COMPANY_NAME, FIRST_NAME, LAST_NAME)
OPTIONAL_LABELS: tuple[str, ...] = (EMAIL_ID, PHONE_NUMBER)

STATUS_HEADER = "Status"
MATCH_STATUS_HEADER = "Match Status"
CLIENT_CODE_STATUS_HEADER = "Client Code Status"
DATE_STATUS_HEADER = "Date Status"


class RunState(StrEnum):
    LOADED = "LOADED"
    HEADER_RESOLVED = "HEADER_RESOLVED"
    STREAMING = "STREAMING"
    FINALIZED = "FINALIZED"
    ABORTED = "ABORTED"


class PipelineOptions(BaseModel):
    """Per-run parameters, fixed for every row of the run."""

    model_config = {"frozen": True}

    client_scope_enabled: bool = False
    client_code: Optional[str] = None
    recency_window_months: Optional[int] = Field(default=None, ge=0)
    split_status_columns: bool = True

    @model_validator(mode="after")
    def _client_code_required_when_scoped(self) -> "PipelineOptions":
        if self.client_scope_enabled and not (self.client_code or "").strip():
            raise ValueError("client_code is required when client scope is enabled")
        return self

    @property
    def client_scope(self) -> Optional[str]:
        return self.client_code if self.client_scope_enabled else None

    @property
    def match_headers(self) -> list[str]:
        if self.split_status_columns:
            return [MATCH_STATUS_HEADER, CLIENT_CODE_STATUS_HEADER]
        return [STATUS_HEADER]

    @property
    def status_headers(self) -> list[str]:
        headers = self.match_headers
        if self.recency_window_months is not None:
            headers.append(DATE_STATUS_HEADER)
        return headers


class ColumnMap(BaseModel):
    """1-based column positions resolved once from the header row."""

    first_name: int
    last_name: int
    company_name: int
    email: Optional[int] = None
    phone: Optional[int] = None


class StatusColumns(BaseModel):
    """1-based positions of the appended status columns."""

    match: list[int]
    date: Optional[int] = None


class AnnotationStats(BaseModel):
    rows_seen: int = 0
    rows_skipped: int = 0
    rows_matched: int = 0
    rows_unmatched: int = 0
    rows_cleared: int = 0
    rows_still_suppressed: int = 0

    @property
    def rows_looked_up(self) -> int:
        return self.rows_matched + self.rows_unmatched


class RunResult(BaseModel):
    """Outcome of a finalized pipeline run."""

    run_id: str
    state: RunState
    output_path: str
    options: PipelineOptions
    stats: AnnotationStats = Field(default_factory=AnnotationStats)
    started_at: datetime
    finished_at: Optional[datetime] = None
