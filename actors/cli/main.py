"""searchjobs CLI actor implemented with Typer."""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer
from pydantic import ValidationError

from packages.modinput import Event, EventFormatError, encode_event
from packages.search_sdk import (
    CommunicationError,
    ConfigurationError,
    DispatchState,
    ExecutionMode,
    Job,
    JobArgs,
    JobFilter,
    SearchClient,
    SearchSdkConfig,
    SearchSdkError,
    SortDirection,
    parse_argument_pairs,
)
from packages.search_shared.config import SearchJobsSettings, load_settings
from packages.search_shared.logging import configure_logging

SUCCESS_EXIT_CODE = 0
CONFIGURATION_ERROR_EXIT_CODE = 2
DOMAIN_ERROR_EXIT_CODE = 3
COMMUNICATION_ERROR_EXIT_CODE = 4


class WaitState(str, Enum):
    """Dispatch states a caller may wait for after submitting a job."""

    QUEUED = "queued"
    PARSING = "parsing"
    RUNNING = "running"
    FINALIZING = "finalizing"
    DONE = "done"

    def dispatch_state(self) -> DispatchState:
        return DispatchState[self.name]


@dataclass(frozen=True)
class CliConfig:
    """Global CLI runtime options propagated to SDK calls."""

    settings: SearchJobsSettings
    as_json: bool


def _job_summary(job: Job) -> dict[str, Any]:
    """Convert one job handle to a JSON-serializable mapping."""
    snapshot = job.snapshot
    summary: dict[str, Any] = {"sid": job.sid, "state": job.state.name}
    if snapshot is not None:
        summary.update(
            {
                "done_progress": snapshot.done_progress,
                "event_count": snapshot.event_count,
                "result_count": snapshot.result_count,
                "run_duration": snapshot.run_duration,
                "messages": [str(message) for message in snapshot.messages],
            }
        )
    return summary


def _emit_output(data: Any, as_json: bool) -> None:
    """Render command output in requested format."""
    if as_json:
        typer.echo(json.dumps(data, sort_keys=True, separators=(",", ":")))
        return
    typer.echo(_render_human(data))


def _emit_error(exc: Exception, as_json: bool) -> None:
    """Render mapped SDK errors to stderr."""
    code = getattr(exc, "code", None)
    if as_json:
        typer.echo(json.dumps({"error": str(exc), "code": code}), err=True)
        return
    typer.echo(f"error: {exc}", err=True)


def _render_human(data: Any) -> str:
    """Return human-oriented rendering for recognized response shapes."""
    if isinstance(data, dict) and "jobs" in data:
        jobs = data["jobs"]
        if len(jobs) == 0:
            return "No jobs found."
        lines = [_render_job_line(job) for job in jobs]
        lines.append(f"({len(jobs)} of {data.get('total', len(jobs))})")
        return "\n".join(lines)
    if isinstance(data, dict) and "sid" in data:
        lines = [_render_job_line(data)]
        lines.extend(f"  {message}" for message in data.get("messages", []))
        return "\n".join(lines)
    return str(data)


def _render_job_line(job: dict[str, Any]) -> str:
    line = f"{job['sid']}  {job['state']}"
    if "done_progress" in job:
        line = f"{line}  {job['done_progress'] * 100:.0f}%  events={job['event_count']}"
    return line


def _build_client(cfg: CliConfig) -> SearchClient:
    """Return one SDK client built from global CLI settings."""
    return SearchClient(config=SearchSdkConfig.from_settings(cfg.settings))


def _run_command(
    cfg: CliConfig, invoke: Callable[[SearchClient], Awaitable[Any]]
) -> None:
    """Execute one SDK call and map outputs/errors to process semantics."""

    async def _call() -> Any:
        async with _build_client(cfg) as client:
            return await invoke(client)

    try:
        result = asyncio.run(_call())
    except ConfigurationError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=CONFIGURATION_ERROR_EXIT_CODE) from exc
    except CommunicationError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=COMMUNICATION_ERROR_EXIT_CODE) from exc
    except SearchSdkError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE) from exc

    _emit_output(result, cfg.as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(no_args_is_help=True, help="Search job command-line interface")
jobs_app = typer.Typer(help="Search job commands")
events_app = typer.Typer(help="Event record commands")


@app.callback()
def main(
    ctx: typer.Context,
    base_url: str | None = typer.Option(None, help="Search service base URL"),
    timeout: float | None = typer.Option(
        None, min=0.001, help="Request timeout in seconds"
    ),
    owner: str | None = typer.Option(None, help="Namespace owner"),
    app_name: str | None = typer.Option(None, "--app", help="Namespace app"),
    config: Path | None = typer.Option(None, help="YAML settings file"),
    log_level: str | None = typer.Option(None, help="Log level override"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
) -> None:
    """Resolve settings and store global options for all commands."""
    service: dict[str, Any] = {}
    if base_url is not None:
        service["base_url"] = base_url
    if timeout is not None:
        service["timeout_seconds"] = timeout
    if owner is not None:
        service["owner"] = owner
    if app_name is not None:
        service["app"] = app_name
    cli_params: dict[str, Any] = {"service": service} if service else {}
    if log_level is not None:
        cli_params["logging"] = {"level": log_level.upper()}

    try:
        settings = load_settings(cli_params=cli_params, config_path=config)
    except ValidationError as exc:
        _emit_error(exc, as_json)
        raise typer.Exit(code=CONFIGURATION_ERROR_EXIT_CODE) from exc

    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
        stream=sys.stderr,
    )
    ctx.obj = CliConfig(settings=settings, as_json=as_json)


@jobs_app.command("create")
def jobs_create(
    ctx: typer.Context,
    search: str = typer.Argument(..., help="Search string"),
    earliest: str | None = typer.Option(None, help="Earliest time bound"),
    latest: str | None = typer.Option(None, help="Latest time bound"),
    exec_mode: ExecutionMode | None = typer.Option(
        None, case_sensitive=False, help="Execution mode"
    ),
    arg: list[str] = typer.Option([], "--arg", help="Extra argument as name=value"),
    wait_for: WaitState = typer.Option(
        WaitState.RUNNING, case_sensitive=False, help="Dispatch state to wait for"
    ),
) -> None:
    """Submit a search job and wait for a dispatch state."""
    cfg = _require_config(ctx)

    async def _invoke(client: SearchClient) -> dict[str, Any]:
        job = await client.jobs().create(
            search,
            JobArgs(exec_mode=exec_mode, earliest_time=earliest, latest_time=latest),
            parse_argument_pairs(arg),
            target_state=wait_for.dispatch_state(),
        )
        return _job_summary(job)

    _run_command(cfg, _invoke)


@jobs_app.command("list")
def jobs_list(
    ctx: typer.Context,
    count: int = typer.Option(30, help="Maximum entries, 0 for all"),
    offset: int = typer.Option(0, help="Zero-based first entry"),
    search: str | None = typer.Option(None, help="Filter expression"),
    sort_dir: SortDirection = typer.Option(
        SortDirection.DESCENDING, case_sensitive=False, help="Sort direction"
    ),
    sort_key: str = typer.Option("dispatch_time", help="Job property to sort by"),
) -> None:
    """List one slice of search jobs."""
    cfg = _require_config(ctx)

    async def _invoke(client: SearchClient) -> dict[str, Any]:
        criteria = JobFilter(
            count=count,
            offset=offset,
            search=search,
            sort_direction=sort_dir,
            sort_key=sort_key,
        )
        jobs = await client.jobs().fetch_slice(criteria)
        return {"jobs": [_job_summary(job) for job in jobs], "total": jobs.total}

    _run_command(cfg, _invoke)


@jobs_app.command("status")
def jobs_status(
    ctx: typer.Context, sid: str = typer.Argument(..., help="Search id")
) -> None:
    """Fetch the current state of one job."""
    cfg = _require_config(ctx)

    async def _invoke(client: SearchClient) -> dict[str, Any]:
        job = client.job(sid)
        await job.fetch_snapshot()
        return _job_summary(job)

    _run_command(cfg, _invoke)


@events_app.command("encode")
def events_encode(
    ctx: typer.Context,
    data: str | None = typer.Option(None, help="Event body"),
    time: float | None = typer.Option(None, help="Event time as epoch seconds"),
    source: str | None = typer.Option(None, help="Event source"),
    sourcetype: str | None = typer.Option(None, help="Event source type"),
    index: str | None = typer.Option(None, help="Destination index"),
    host: str | None = typer.Option(None, help="Event host"),
    stanza: str | None = typer.Option(None, help="Input stanza name"),
    done: bool = typer.Option(False, "--done", help="Mark the event as complete"),
    unbroken: bool = typer.Option(
        False, "--unbroken", help="Mark the record as an event fragment"
    ),
) -> None:
    """Print one encoded event record."""
    cfg = _require_config(ctx)
    event = Event(
        data=data,
        source=source,
        source_type=sourcetype,
        index=index,
        host=host,
        time=None if time is None else datetime.fromtimestamp(time, UTC),
        done=done,
        unbroken=unbroken,
        stanza=stanza,
    )
    try:
        encoded = encode_event(event)
    except EventFormatError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=CONFIGURATION_ERROR_EXIT_CODE) from exc
    typer.echo(encoded.decode("utf-8"))


app.add_typer(jobs_app, name="jobs")
app.add_typer(events_app, name="events")


if __name__ == "__main__":
    app()
