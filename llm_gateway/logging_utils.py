"""
Centralized logging and error handling utilities for the gateway.

This module provides decorators and helper functions that standardize
logging and error reporting across the provider clients and routes.

Features:
- Structured logging with contextual information
- Error classification into HTTP status codes and categories
- Decorator that turns httpx failures into gateway errors
- Performance timing for provider operations
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from llm_gateway.exceptions import (
    DecodeError,
    GatewayError,
    InvalidResponseError,
    ProviderError,
    TransportError,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]

logger = structlog.get_logger(__name__)

HTTP_BAD_REQUEST = 400
HTTP_BAD_GATEWAY = 502
HTTP_GATEWAY_TIMEOUT = 504
HTTP_INTERNAL_ERROR = 500


def setup_logging(logging_config: dict[str, Any] | None = None) -> None:
    """Configure the stdlib root logger that structlog writes through."""
    logging_config = logging_config or {}
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = logging.getLevelNamesMapping().get(level_name)
    if level is None:
        raise ValueError(f"Unknown logging level '{level_name}'")

    logging.basicConfig(
        level=level,
        format=logging_config.get("format", "%(message)s"),
    )
    logging.getLogger().setLevel(level)


class GatewayErrorHandler:
    """Centralized error classification with structured logging."""

    @staticmethod
    def classify_error(error: Exception) -> tuple[int, str]:
        """
        Classify an error and return an HTTP status and error category.

        Args:
            error: The exception to classify

        Returns:
            Tuple of (http_status, error_category)
        """
        if isinstance(error, InvalidResponseError):
            return error.status_code or HTTP_BAD_GATEWAY, "invalid_response"
        if isinstance(error, DecodeError):
            return HTTP_BAD_GATEWAY, "decode_error"
        if isinstance(error, TransportError):
            if isinstance(error.cause, TimeoutError | httpx.TimeoutException):
                return HTTP_GATEWAY_TIMEOUT, "timeout_error"
            return HTTP_BAD_GATEWAY, "transport_error"
        if isinstance(error, ProviderError):
            return HTTP_BAD_REQUEST, "provider_error"
        if isinstance(error, ValidationError):
            return HTTP_BAD_REQUEST, "validation_error"
        if isinstance(error, TimeoutError | httpx.TimeoutException):
            return HTTP_GATEWAY_TIMEOUT, "timeout_error"
        if isinstance(error, httpx.HTTPError | ConnectionError | OSError):
            return HTTP_BAD_GATEWAY, "connection_error"
        if isinstance(error, ValueError | TypeError):
            return HTTP_BAD_REQUEST, "parameter_error"
        return HTTP_INTERNAL_ERROR, "unknown_error"

    @staticmethod
    def to_gateway_error(
        error: Exception,
        operation: str,
        provider: str,
        context: dict[str, Any] | None = None,
    ) -> GatewayError:
        """
        Wrap an arbitrary exception into a GatewayError and log it.

        Args:
            error: Original exception
            operation: Description of the operation that failed
            provider: Provider the operation targeted
            context: Additional context for logging

        Returns:
            GatewayError carrying the original error as its cause
        """
        status, category = GatewayErrorHandler.classify_error(error)
        context = context or {}

        logger.error(
            "Operation failed",
            operation=operation,
            provider=provider,
            error_type=type(error).__name__,
            error_category=category,
            status=status,
            error_message=str(error),
            **context,
        )

        if isinstance(error, GatewayError):
            return error
        if isinstance(error, httpx.HTTPError | OSError):
            return TransportError(
                f"Request error: {error!s}", cause=error, provider=provider
            )
        if isinstance(error, ValidationError):
            return DecodeError(
                f"JSON error: {error!s}", cause=error, provider=provider
            )
        return GatewayError(f"{operation} failed: {error!s}", provider=provider)


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


def _failure_fields(error: Exception, start_time: float) -> dict[str, Any]:
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "duration_ms": _elapsed_ms(start_time),
    }


def log_operation(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator that times a provider call and logs its outcome.

    Success is logged at debug, failures at error and re-raised unchanged.
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            call_logger = logger.bind(
                operation=operation, function=func.__name__, **(context or {})
            )
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                call_logger.error("Operation failed", **_failure_fields(e, start_time))
                raise
            call_logger.debug("Operation completed", duration_ms=_elapsed_ms(start_time))
            return result

        return wrapper
    return decorator


def handle_provider_errors(
    operation: str,
    *,
    provider: str,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator that converts httpx and validation failures into GatewayErrors.

    GatewayError instances raised by the wrapped function pass through as-is.

    Args:
        operation: Description of the operation for error context
        provider: Provider name attached to converted errors
        context: Additional context to include in logs

    Returns:
        Decorated function with provider error handling
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except GatewayError:
                raise
            except (httpx.HTTPError, OSError, ValidationError) as e:
                raise GatewayErrorHandler.to_gateway_error(
                    e, operation, provider, context
                ) from e

        return wrapper
    return decorator


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
):
    """
    Async context manager that logs one timed operation at info.

    Yields:
        Logger bound to the operation name and context
    """
    operation_logger = logger.bind(operation=operation, **(context or {}))
    start_time = time.perf_counter()
    try:
        yield operation_logger
    except Exception as e:
        operation_logger.error("Operation failed", **_failure_fields(e, start_time))
        raise
    operation_logger.info("Operation completed", duration_ms=_elapsed_ms(start_time))
