"""
State Oil Production: EIA Data Pipeline

Simple, step-by-step functions:
1. config - Load API key and settings
2. request / client - One GET per state
3. normalize - Payload -> string-typed SeriesRecord list
4. fetch - Batch over all states with per-state failure isolation
5. prepare - Coerce, enrich, derive rate, sort and key
6. validate - Check dataset integrity
"""

from .config import Settings, load_api_key, load_settings
from .errors import (
    ConfigurationError,
    DataTypeError,
    EntityLookupError,
    IntegrityError,
    MalformedResponseError,
    OilPipelineError,
    PipelineStageError,
    TransientFetchError,
)
from .fetch import FetchResult, FetchSummary, StateProductionFetcher
from .normalize import SeriesRecord, parse_series_payload
from .pipeline import PipelineResult, run_pipeline
from .prepare import build_dataset
from .request import SeriesRequest, build_request
from .validate import print_validation_report, validate_dataset

__all__ = [
    "Settings",
    "load_api_key",
    "load_settings",
    "ConfigurationError",
    "DataTypeError",
    "EntityLookupError",
    "IntegrityError",
    "MalformedResponseError",
    "OilPipelineError",
    "PipelineStageError",
    "TransientFetchError",
    "FetchResult",
    "FetchSummary",
    "StateProductionFetcher",
    "SeriesRecord",
    "parse_series_payload",
    "PipelineResult",
    "run_pipeline",
    "build_dataset",
    "SeriesRequest",
    "build_request",
    "print_validation_report",
    "validate_dataset",
]
