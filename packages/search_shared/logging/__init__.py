"""Structured logging shared by the searchjobs SDK, event writer and CLI."""

from . import fields
from .config import configure_logging, get_logger
from .context import bind_context, clear_context, get_context, log_context
from .operations import OperationInvocation, operation_logged

__all__ = [
    "OperationInvocation",
    "bind_context",
    "clear_context",
    "configure_logging",
    "fields",
    "get_context",
    "get_logger",
    "log_context",
    "operation_logged",
]
