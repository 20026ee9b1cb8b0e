"""Pluggable suppression store backends behind Protocol interfaces."""

from __future__ import annotations

from leadscrub.core.config import AppSettings
from leadscrub.persistence.sql_backend import SQLSuppressionStore


def create_persistence(settings: AppSettings | None = None) -> SQLSuppressionStore:
    """Create the production suppression store from application settings."""
    if settings is None:
        settings = AppSettings()

    db = settings.database
    return SQLSuppressionStore(
        db.url,
        table=db.table,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_pre_ping=db.pool_pre_ping,
    )
