"""
Core metrics and monitoring decorators for the command center.

This module defines Prometheus metrics and decorators for tracking:
- Command counts by outcome and end-to-end processing time
- Reply tier outcomes (which tier answered, which ones failed)
- Error rates
- External API latency (LLM provider)
"""

import inspect
import time
import functools
import logging
from typing import Optional, Callable
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# Command metrics
COMMAND_COUNT = Counter(
    'commands_total',
    'Total number of commands processed by the orchestrator',
    ['outcome']  # outcome: 'replied', 'dispatch_failed', 'error'
)

COMMAND_PROCESSING_TIME = Histogram(
    'command_processing_duration_seconds',
    'Time from command submission to appended reply',
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, float("inf")]
)

# Reply chain metrics
REPLY_TIER_OUTCOMES = Counter(
    'reply_tier_outcomes_total',
    'Reply tier attempts by outcome',
    ['tier', 'outcome']  # outcome: 'success', 'failure', 'skipped'
)

# Error metrics
ERROR_COUNT = Counter(
    'error_total',
    'Total number of errors',
    ['type', 'location']  # type: e.g., 'dispatch', 'proxy', 'orchestrator'; location: specific component
)

# External API metrics
LLM_REQUEST_TIME = Histogram(
    'llm_request_duration_seconds',
    'Time spent waiting for LLM API',
    ['model'],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, float("inf")]
)

def _observe(metric, labels: Optional[Callable], args, duration: float, func_name: str) -> None:
    if labels and args:
        # For instance methods, first arg is 'self'
        metric.labels(**labels(args[0])).observe(duration)
    else:
        metric.observe(duration)
    logger.debug(
        f"Function {func_name} execution time: {duration:.2f} seconds",
        extra={'duration': duration, 'function': func_name}
    )

def track_latency(metric: Histogram, labels: Optional[Callable] = None) -> Callable:
    """
    A decorator factory that tracks the execution time of a function using a Prometheus Histogram.

    Works for both plain functions and coroutine functions.

    Args:
        metric (Histogram): The Prometheus Histogram to record the timing in
        labels (Callable, optional): Function that receives `self` and returns a metric labels dictionary

    Returns:
        Callable: The decorated function
    """
    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return await func(*args, **kwargs)
                finally:
                    _observe(metric, labels, args, time.time() - start_time, func.__name__)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                _observe(metric, labels, args, time.time() - start_time, func.__name__)
        return wrapper
    return decorator

def track_errors(error_type: str, location: str) -> Callable:
    """
    A decorator factory that counts and logs errors raised by a function, then re-raises them.

    Args:
        error_type (str): Type of error (e.g., 'proxy', 'dispatch')
        location (str): Where the error occurred

    Returns:
        Callable: The decorated function

    Example:
        @track_errors('proxy', 'request_completion')
        def request_completion(command, history):
            ...
    """
    def record(e: Exception) -> None:
        ERROR_COUNT.labels(type=error_type, location=location).inc()
        logger.error(
            f"Error in {location} ({error_type}): {str(e)}",
            extra={
                'error_type': error_type,
                'location': location,
                'error': str(e)
            },
            exc_info=True
        )

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    record(e)
                    raise
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                record(e)
                raise  # Re-raise the exception after tracking
        return wrapper
    return decorator
