"""Upload form and spreadsheet annotation endpoints."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, HTMLResponse
from pydantic import ValidationError

from leadscrub.core.config import AppSettings
from leadscrub.core.exceptions import MalformedInputError, MissingColumnsError, StoreUnavailableError
from leadscrub.models.pipeline import PipelineOptions
from leadscrub.pipeline.orchestrator import SuppressionPipeline
from leadscrub.utils.logging import get_logger

router = APIRouter(tags=["upload"])
log = get_logger("api.upload")

UPLOAD_CHUNK_SIZE = 1024 * 1024
ALLOWED_SUFFIXES = (".xlsx", ".xlsm")
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

UPLOAD_FORM = """<!doctype html>
<html>
  <head><title>Suppression Check</title></head>
  <body>
    <h1>Suppression Check</h1>
    <form action="/upload" method="post" enctype="multipart/form-data">
      <p><label>Spreadsheet (.xlsx) <input type="file" name="excelFile" accept=".xlsx,.xlsm" required></label></p>
      <p><label>Client code <input type="text" name="clientCode"></label></p>
      <p><label>Suppression window (months) <input type="number" name="dateFilter" min="0"></label></p>
      <p><button type="submit">Upload</button></p>
    </form>
  </body>
</html>
"""


def _remove(*paths: Path) -> None:
    for path in paths:
        path.unlink(missing_ok=True)


def build_options(client_code: Optional[str], date_filter: Optional[str],
                  split_status_columns: bool = True) -> PipelineOptions:
    """Translate raw form fields into run options (400 on bad input)."""
    code = (client_code or "").strip() or None
    raw_months = (date_filter or "").strip()
    months: Optional[int] = None
    if raw_months:
        try:
            months = int(raw_months)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="dateFilter must be a whole number of months.") from exc
    try:
        return PipelineOptions(
            client_scope_enabled=code is not None,
            client_code=code,
            recency_window_months=months,
            split_status_columns=split_status_columns,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid run parameters: {exc.errors()[0]['msg']}") from exc


async def save_upload(file: UploadFile, upload_dir: Path, max_bytes: int) -> Path:
    """Stream the upload to a uniquely named temp file with a size guard."""
    name = file.filename or ""
    suffix = Path(name).suffix.lower()
    if suffix not in ALLOWED_SUFFIXES:
        raise HTTPException(status_code=400, detail="Only .xlsx uploads are supported.")

    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / f"{uuid.uuid4().hex}{suffix}"
    total = 0
    try:
        with target.open("wb") as fh:
            while True:
                chunk = await file.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > max_bytes:
                    raise HTTPException(
                        status_code=413,
                        detail=f"Upload exceeds {max_bytes // (1024 * 1024)}MB limit.",
                    )
                fh.write(chunk)
        if total == 0:
            raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    except BaseException:
        _remove(target)
        raise
    return target


@router.get("/", response_class=HTMLResponse)
async def upload_form() -> str:
    return UPLOAD_FORM


@router.post("/upload")
async def upload(
    request: Request,
    excel_file: Optional[UploadFile] = File(None, alias="excelFile"),
    client_code: Optional[str] = Form(None, alias="clientCode"),
    date_filter: Optional[str] = Form(None, alias="dateFilter"),
):
    """Annotate the uploaded spreadsheet and return it as a download."""
    if excel_file is None:
        raise HTTPException(status_code=400, detail="No file uploaded.")

    settings: AppSettings = request.app.state.settings
    pipeline: SuppressionPipeline = request.app.state.pipeline
    options = build_options(client_code, date_filter, settings.pipeline.split_status_columns)

    input_path = await save_upload(
        excel_file, Path(settings.storage.upload_dir), settings.storage.max_upload_bytes,
    )
    try:
        result = await run_in_threadpool(pipeline.run, input_path, options)
    except MissingColumnsError as exc:
        _remove(input_path)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except MalformedInputError as exc:
        _remove(input_path)
        raise HTTPException(status_code=400, detail="Uploaded file is not a readable spreadsheet.") from exc
    except StoreUnavailableError as exc:
        _remove(input_path)
        log.error("Suppression store unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Suppression store unavailable, try again.") from exc
    except BaseException:
        _remove(input_path)
        raise

    output_path = Path(result.output_path)
    cleanup = BackgroundTasks()
    cleanup.add_task(_remove, output_path, input_path)
    return FileResponse(
        output_path,
        media_type=XLSX_MEDIA_TYPE,
        filename=output_path.name,
        background=cleanup,
    )
