"""Spreadsheet loading, header resolution and output serialization (openpyxl)."""

from __future__ import annotations

import os
import time
import uuid
from pathlib import Path
from typing import BinaryIO, Union

import openpyxl
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from leadscrub.core.exceptions import MalformedInputError, MissingColumnsError
from leadscrub.matching.fingerprint import normalize
from leadscrub.models.pipeline import (
    COMPANY_NAME,
    EMAIL_ID,
    FIRST_NAME,
    LAST_NAME,
    PHONE_NUMBER,
    REQUIRED_LABELS,
    ColumnMap,
)

Source = Union[str, os.PathLike, BinaryIO]

OUTPUT_PREFIX = "Updated-"
OUTPUT_SUFFIX = ".xlsx"


def load_workbook(source: Source, *, data_only: bool = False) -> Workbook:
    """Parse an .xlsx workbook; anything unreadable is MalformedInputError.

    ``data_only=True`` yields the cached values of formula cells instead of
    the formula text. File objects are rewound so one source can be loaded
    in both modes.
    """
    if hasattr(source, "seek"):
        source.seek(0)
    try:
        return openpyxl.load_workbook(source, data_only=data_only)
    except OSError:
        raise
    except Exception as exc:
        raise MalformedInputError(f"Input is not a readable spreadsheet: {exc}") from exc


def first_sheet(wb: Workbook) -> Worksheet:
    if not wb.worksheets:
        raise MalformedInputError("Workbook has no worksheets")
    return wb.worksheets[0]


def header_labels(sheet: Worksheet) -> dict[str, int]:
    """Map each trimmed header label in row 1 to its 1-based column index.

    A label that appears more than once resolves to its right-most column.
    """
    labels: dict[str, int] = {}
    for cell in next(sheet.iter_rows(min_row=1, max_row=1), ()):
        label = normalize(cell.value)
        if label:
            labels[label] = cell.column
    return labels


def resolve_columns(sheet: Worksheet) -> ColumnMap:
    labels = header_labels(sheet)
    missing = [label for label in REQUIRED_LABELS if label not in labels]
    if missing:
        raise MissingColumnsError(missing)
    return ColumnMap(
        first_name=labels[FIRST_NAME],
        last_name=labels[LAST_NAME],
        company_name=labels[COMPANY_NAME],
        email=labels.get(EMAIL_ID),
        phone=labels.get(PHONE_NUMBER),
    )


def append_status_headers(sheet: Worksheet, headers: list[str]) -> list[int]:
    """Write status headers after the last used column; return their indices."""
    start = sheet.max_column + 1
    indices: list[int] = []
    for offset, header in enumerate(headers):
        col = start + offset
        sheet.cell(row=1, column=col, value=header)
        indices.append(col)
    return indices


def output_filename() -> str:
    return f"{OUTPUT_PREFIX}{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{OUTPUT_SUFFIX}"


def save_workbook(wb: Workbook, output_dir: Union[str, os.PathLike]) -> Path:
    """Serialize ``wb`` under a fresh unique name inside ``output_dir``.

    The file only appears under its final name once fully written.
    """
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / output_filename()
    partial = target.with_name(target.name + ".part")
    try:
        wb.save(partial)
        os.replace(partial, target)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    return target
