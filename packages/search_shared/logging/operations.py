"""Invocation/completion logging for asynchronous SDK operations.

``operation_logged`` wraps one coroutine function so every call emits a
structured invocation log, then a completion log carrying the outcome and
duration. Exceptions are logged and re-raised unchanged.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from time import perf_counter
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from . import fields
from .context import log_context

TResult = TypeVar("TResult")


@dataclass(frozen=True)
class OperationInvocation:
    """Structured metadata describing one operation call."""

    operation: str
    references: Mapping[str, str]


def operation_logged(
    *,
    logger: Any,
    operation: str | None = None,
    id_fields: tuple[str, ...] = (),
) -> Callable[
    [Callable[..., Awaitable[TResult]]], Callable[..., Awaitable[TResult]]
]:
    """Decorate one coroutine function with invocation/completion logging.

    ``id_fields`` names call arguments, passed positionally or by keyword, or
    attributes of the bound instance (for example ``sid``) that should be
    attached to both log lines. Enum values are logged by member name.
    """

    def decorator(
        func: Callable[..., Awaitable[TResult]],
    ) -> Callable[..., Awaitable[TResult]]:
        name = operation or func.__qualname__
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> TResult:
            invocation = OperationInvocation(
                operation=name,
                references=_references(id_fields, signature, args, kwargs),
            )
            with log_context(_invocation_fields(invocation)):
                logger.debug("Operation invocation")

            started = perf_counter()
            try:
                result = await func(*args, **kwargs)
            except asyncio.CancelledError:
                _log_completion(
                    logger,
                    invocation,
                    started=started,
                    success=False,
                    errors=["cancelled"],
                    error_code="CANCELLED",
                )
                raise
            except Exception as exc:
                _log_completion(
                    logger,
                    invocation,
                    started=started,
                    success=False,
                    errors=[f"{type(exc).__name__}: {exc}"],
                    error_code=str(getattr(exc, "code", "UNEXPECTED_EXCEPTION")),
                )
                raise

            _log_completion(logger, invocation, started=started, success=True)
            return result

        return wrapper

    return decorator


def _references(
    id_fields: tuple[str, ...],
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
) -> dict[str, str]:
    """Resolve identifier fields from call arguments or the bound instance."""
    try:
        bound = signature.bind_partial(*args, **kwargs)
        arguments: Mapping[str, Any] = bound.arguments
    except TypeError:
        # The call itself will fail with the same TypeError.
        arguments = kwargs
    instance = args[0] if args else None
    references: dict[str, str] = {}
    for name in id_fields:
        value = arguments.get(name)
        if value is None and instance is not None:
            value = getattr(instance, name, None)
        if value is None or value == "":
            continue
        references[name] = value.name if isinstance(value, Enum) else str(value)
    return references


def _invocation_fields(invocation: OperationInvocation) -> dict[str, object]:
    """Build common structured fields for one invocation event."""
    return {
        fields.EVENT: fields.OPERATION_INVOCATION_EVENT,
        fields.OPERATION: invocation.operation,
        **invocation.references,
    }


def _log_completion(
    logger: Any,
    invocation: OperationInvocation,
    *,
    started: float,
    success: bool,
    errors: list[str] | None = None,
    error_code: str | None = None,
) -> None:
    """Emit one structured completion log."""
    payload = _invocation_fields(invocation)
    payload.update(
        {
            fields.EVENT: fields.OPERATION_COMPLETION_EVENT,
            fields.SUCCESS: success,
            fields.DURATION_MS: round((perf_counter() - started) * 1000.0, 3),
            fields.ERRORS: errors or [],
            fields.ERROR_CODE: error_code,
        }
    )
    with log_context(payload):
        if success:
            logger.info("Operation completion")
        else:
            logger.warning("Operation completion")
