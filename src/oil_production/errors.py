# file: src/oil_production/errors.py
"""Error taxonomy for the state oil production pipeline.

Fetch-stage errors (TransientFetchError, MalformedResponseError) are isolated
per state by the orchestrator. Everything else is fatal.
"""

from __future__ import annotations

from typing import Optional


class OilPipelineError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(OilPipelineError):
    """Bad or missing API key, series template, or state code. Aborts the run."""


class TransientFetchError(OilPipelineError):
    """Network failure or non-success HTTP status for one state."""

    def __init__(self, message: str, *, entity_code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.entity_code = entity_code
        self.status_code = status_code


class MalformedResponseError(OilPipelineError):
    """Payload could not be parsed or does not match the expected series schema."""

    def __init__(self, message: str, *, entity_code: Optional[str] = None):
        super().__init__(message)
        self.entity_code = entity_code


class DataTypeError(OilPipelineError, ValueError):
    """A period or value could not be coerced (upstream schema drift)."""


class IntegrityError(OilPipelineError):
    """Duplicate (entity_code, period) keys in the merged dataset."""


class EntityLookupError(OilPipelineError, LookupError):
    """A state code has no display-name mapping."""


class PipelineStageError(OilPipelineError):
    """Wraps a fatal error with the name of the stage that raised it."""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"[{stage}] {type(cause).__name__}: {cause}")
        self.stage = stage
        self.cause = cause
