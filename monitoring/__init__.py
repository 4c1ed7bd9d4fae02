"""
Monitoring package initializer.

This package exposes Prometheus metrics and helper decorators for tracking how
commands move through dispatch and the reply chain.
"""

from .metrics import (
    COMMAND_COUNT,
    COMMAND_PROCESSING_TIME,
    REPLY_TIER_OUTCOMES,
    ERROR_COUNT,
    LLM_REQUEST_TIME,
    track_latency,
    track_errors,
)

__all__ = [
    'COMMAND_COUNT',
    'COMMAND_PROCESSING_TIME',
    'REPLY_TIER_OUTCOMES',
    'ERROR_COUNT',
    'LLM_REQUEST_TIME',
    'track_latency',
    'track_errors',
]
