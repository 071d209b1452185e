"""Public search SDK interface for CLI and embedding callers."""

from packages.search_sdk.addressing import Namespace, ResourceName
from packages.search_sdk.args import (
    Argument,
    ExecutionMode,
    JobArgs,
    JobFilter,
    SearchMode,
    SortDirection,
    build_job_arguments,
    parse_argument_pairs,
)
from packages.search_sdk.client import SearchClient
from packages.search_sdk.collection import ResourceCollection
from packages.search_sdk.config import PollPolicy, SearchSdkConfig
from packages.search_sdk.errors import (
    CommunicationError,
    ConfigurationError,
    NotFoundError,
    ResponseFormatError,
    SearchSdkError,
    TerminalStateError,
    UnexpectedStatusError,
)
from packages.search_sdk.job import Job, JobMessage, JobSnapshot
from packages.search_sdk.job_collection import JobCollection
from packages.search_sdk.states import DispatchState

__all__ = [
    "Argument",
    "CommunicationError",
    "ConfigurationError",
    "DispatchState",
    "ExecutionMode",
    "Job",
    "JobArgs",
    "JobCollection",
    "JobFilter",
    "JobMessage",
    "JobSnapshot",
    "Namespace",
    "NotFoundError",
    "PollPolicy",
    "ResourceCollection",
    "ResourceName",
    "ResponseFormatError",
    "SearchClient",
    "SearchMode",
    "SearchSdkConfig",
    "SearchSdkError",
    "SortDirection",
    "TerminalStateError",
    "UnexpectedStatusError",
    "build_job_arguments",
    "parse_argument_pairs",
]
