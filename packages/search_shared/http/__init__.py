"""Shared async HTTP client and its typed errors."""

from .client import AsyncHttpClient, decode_json, response_text
from .errors import HttpError, HttpJsonDecodeError, HttpRequestError

__all__ = [
    "AsyncHttpClient",
    "HttpError",
    "HttpJsonDecodeError",
    "HttpRequestError",
    "decode_json",
    "response_text",
]
