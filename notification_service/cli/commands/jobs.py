"""Pending-job queue commands."""

import json
import sys

import click

from notification_service.cli.utils import coro, error, header, info, success


@click.group(name="jobs")
def jobs() -> None:
    """Manage queued notification jobs."""


@jobs.command(name="enqueue")
@click.argument("event_type")
@click.option("--data", "data", default="{}", help="Event data as an inline JSON object")
@coro
async def enqueue(event_type: str, data: str) -> None:
    """Queue EVENT_TYPE for the next drain pass."""
    from sqlalchemy.exc import SQLAlchemyError

    from notification_service.features.jobs import NotificationJobRepository
    from notification_service.infra.database import close_database, get_async_session, init_database

    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Event data is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise click.BadParameter("Event data must be a JSON object")

    try:
        await init_database()
        async with get_async_session() as session:
            job = await NotificationJobRepository().enqueue(session, event_type, payload)
            await session.commit()
    except SQLAlchemyError as exc:
        error(f"Failed to enqueue job: {exc}")
        sys.exit(1)
    finally:
        await close_database()

    success(f"Queued job {job.id} ({event_type})")


@jobs.command(name="list")
@click.option(
    "--status",
    type=click.Choice(["pending", "processing", "sent", "failed"]),
    default=None,
    help="Filter by status",
)
@click.option("--limit", default=50, type=int, help="Maximum jobs to display (default: 50)")
@coro
async def list_jobs(status: str | None, limit: int) -> None:
    """List jobs oldest first."""
    from sqlalchemy.exc import SQLAlchemyError

    from notification_service.features.jobs import NotificationJobRepository
    from notification_service.infra.database import close_database, get_async_session, init_database

    header("Notification Jobs")
    try:
        await init_database()
        async with get_async_session() as session:
            items = await NotificationJobRepository().find_by_status(session, status, limit=limit)
    except SQLAlchemyError as exc:
        error(f"Failed to list jobs: {exc}")
        sys.exit(1)
    finally:
        await close_database()

    if not items:
        info("No jobs found")
        return

    click.echo()
    for job in items:
        click.echo(f"  {job.id}  {job.status:<10}  {job.event_type}  {job.created_at.isoformat()}")
        if job.error_message:
            click.echo(f"    Error: {job.error_message}")
    click.echo()
    info(f"Total: {len(items)}")
