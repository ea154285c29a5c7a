"""Business logic services package."""

from error_monitor.services.error_cache import (
    CacheState,
    ErrorCache,
    PersistenceResult,
)
from error_monitor.services.ingestion import (
    NormalizedBatch,
    PayloadFormat,
    classify_payload,
    normalize_batch,
)
from error_monitor.services.upstream import (
    TransientUpstreamError,
    UpstreamError,
    UpstreamNotConfiguredError,
)
from error_monitor.services.n8n_client import N8NClient, get_n8n_client
from error_monitor.services.close_client import CloseClient, get_close_client

__all__ = [
    'CacheState',
    'ErrorCache',
    'PersistenceResult',
    'NormalizedBatch',
    'PayloadFormat',
    'classify_payload',
    'normalize_batch',
    'TransientUpstreamError',
    'UpstreamError',
    'UpstreamNotConfiguredError',
    'N8NClient',
    'get_n8n_client',
    'CloseClient',
    'get_close_client',
]
