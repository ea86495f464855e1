"""Dispatch and drain commands."""

import json
import sys
from pathlib import Path

import click

from notification_service.cli.utils import coro, error, header, info, section, success, warning


def _load_event_data(data: str | None, data_file: Path | None) -> dict:
    if data and data_file:
        raise click.UsageError("Use either --data or --file, not both")
    raw = data_file.read_text(encoding="utf-8") if data_file else (data or "{}")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Event data is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.BadParameter("Event data must be a JSON object")
    return parsed


@click.command(name="dispatch")
@click.argument("event_type")
@click.option("--data", "data", default=None, help="Event data as an inline JSON object")
@click.option(
    "--file",
    "data_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read event data from a JSON file",
)
@click.option("--max-retries", type=click.IntRange(0, 20), default=None, help="Override retries")
@click.option(
    "--retry-delay",
    type=click.FloatRange(0.0, 3600.0),
    default=None,
    help="Override delay between attempts (seconds)",
)
@coro
async def dispatch(
    event_type: str,
    data: str | None,
    data_file: Path | None,
    max_retries: int | None,
    retry_delay: float | None,
) -> None:
    """Dispatch EVENT_TYPE to every subscribed integration.

    \b
    Example:
      notification-service dispatch signup --data '{"userName": "Ana", "userEmail": "ana@example.com"}'
    """
    from notification_service.core.exceptions import InputError
    from notification_service.core.settings import get_delivery_settings
    from notification_service.features.delivery import Event, NotificationDispatcher, RetryPolicy
    from notification_service.features.integrations import get_integration_registry

    payload = _load_event_data(data, data_file)
    settings = get_delivery_settings()
    policy = RetryPolicy(
        max_retries=settings.max_retries if max_retries is None else max_retries,
        retry_delay_seconds=settings.retry_delay_seconds if retry_delay is None else retry_delay,
    )

    header(f"Dispatching '{event_type}'")
    dispatcher = NotificationDispatcher(get_integration_registry(), settings)
    try:
        summary = await dispatcher.dispatch(Event(event_type=event_type, payload=payload), policy)
    except InputError as exc:
        error(exc.detail)
        sys.exit(1)

    if summary.total == 0:
        warning("No integrations subscribed to this event")
        return

    section("Results")
    for outcome in summary.outcomes:
        attempts = f"{outcome.attempts} attempt{'s' if outcome.attempts != 1 else ''}"
        if outcome.success:
            success(f"{outcome.integration_name} ({attempts})")
        else:
            error(f"{outcome.integration_name} ({attempts}): {outcome.last_error}")

    click.echo()
    info(
        f"Processed {summary.total} integrations: "
        f"{summary.successful} successful, {summary.failed} failed"
    )
    if summary.failed:
        sys.exit(2)


@click.command(name="drain")
@coro
async def drain() -> None:
    """Dispatch every pending job once, oldest first."""
    from sqlalchemy.exc import SQLAlchemyError

    from notification_service.core.exceptions import StorageError
    from notification_service.core.settings import get_delivery_settings
    from notification_service.features.delivery import NotificationDispatcher
    from notification_service.features.integrations import get_integration_registry
    from notification_service.features.jobs import PendingJobDrainer
    from notification_service.infra.database import (
        close_database,
        get_session_factory,
        init_database,
    )

    header("Draining pending jobs")
    dispatcher = NotificationDispatcher(get_integration_registry(), get_delivery_settings())
    try:
        await init_database()
        result = await PendingJobDrainer(get_session_factory(), dispatcher).drain_pending()
    except StorageError as exc:
        error(exc.detail)
        sys.exit(1)
    except SQLAlchemyError as exc:
        error(f"Database unavailable: {exc}")
        sys.exit(1)
    finally:
        await close_database()

    if result.processed == 0:
        info("No pending jobs")
        return

    for job in result.results:
        if job.error:
            error(f"{job.job_id} [{job.event_type}] {job.status}: {job.error}")
        else:
            success(f"{job.job_id} [{job.event_type}] {job.status}")
    click.echo()
    info(f"Processed {result.processed} jobs")
