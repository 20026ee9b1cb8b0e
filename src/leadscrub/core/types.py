"""Type aliases used across LeadScrub."""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

RunId = str
ClientCode = str
RowNumber = int
CellValue = Union[str, int, float, bool, date, datetime, None]
