"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from leadscrub.core.protocols import ISuppressionStore

__all__ = ["ISuppressionStore"]
