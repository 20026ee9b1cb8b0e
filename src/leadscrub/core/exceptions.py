"""LeadScrub exception hierarchy."""

from __future__ import annotations


class LeadScrubError(Exception):
    """Base exception for all LeadScrub errors."""


class PipelineError(LeadScrubError):
    """Error that aborts a pipeline run."""


class MalformedInputError(PipelineError):
    """The input artifact could not be parsed as a table."""


class MissingColumnsError(PipelineError):
    """Required header labels are absent from the input table."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required column(s): {', '.join(self.missing)}")


class StoreUnavailableError(PipelineError):
    """The suppression store could not be reached or a query failed."""
