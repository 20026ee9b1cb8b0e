"""Shared test doubles — memory store, recording observer, workbook builder."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any, Iterable

import openpyxl

from leadscrub.models.matching import MatchResult
from leadscrub.persistence.memory_backend import MemorySuppressionStore

HEADER = ["Company Name", "First Name", "Last Name", "Email ID", "Phone Number"]


class RecordingObserver:
    """IRunObserver that keeps every event as a (name, payload) tuple."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> list[Any]:
        return [payload for n, payload in self.events if n == name]

    def run_started(self, run_id: str, source: str) -> None:
        self.events.append(("run_started", source))

    def state_changed(self, run_id: str, state: str) -> None:
        self.events.append(("state_changed", state))

    def field_defaulted(self, run_id: str, row: int, label: str) -> None:
        self.events.append(("field_defaulted", (row, label)))

    def row_skipped(self, run_id: str, row: int) -> None:
        self.events.append(("row_skipped", row))

    def row_annotated(self, run_id: str, row: int, result: MatchResult) -> None:
        self.events.append(("row_annotated", (row, result)))

    def run_aborted(self, run_id: str, error: Exception) -> None:
        self.events.append(("run_aborted", error))

    def run_finished(self, run_id: str, output_path: str, rows_looked_up: int) -> None:
        self.events.append(("run_finished", (output_path, rows_looked_up)))


def write_workbook(path: Path, rows: Iterable[Iterable[Any]], header: list[str] | None = None) -> Path:
    """Write a single-sheet .xlsx with ``header`` in row 1 followed by ``rows``."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(HEADER if header is None else header)
    for row in rows:
        ws.append(list(row))
    wb.save(path)
    return path


def contact(first: Any, last: Any, company: Any, email: str = "", phone: str = "") -> list[Any]:
    """Row in HEADER order (company first, as in the source spreadsheets)."""
    return [company, first, last, email, phone]


def read_rows(path: Path) -> list[tuple[Any, ...]]:
    wb = openpyxl.load_workbook(path)
    return list(wb.worksheets[0].iter_rows(values_only=True))


def truncate_part(path: Path, part: str = "xl/worksheets/sheet1.xml") -> Path:
    """Cut one XML part of a saved workbook in half, keeping the zip valid."""
    with zipfile.ZipFile(path) as zf:
        members = {name: zf.read(name) for name in zf.namelist()}
    members[part] = members[part][: len(members[part]) // 2]
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return path


__all__ = [
    "HEADER",
    "MemorySuppressionStore",
    "RecordingObserver",
    "contact",
    "read_rows",
    "truncate_part",
    "write_workbook",
]
