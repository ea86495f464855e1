"""Main CLI entry point for notification-service."""

import click

from notification_service import __version__
from notification_service.cli.commands import integrations, jobs, notifications, server
from notification_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="notification-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Notification Service CLI - dispatch events and manage the job queue.

    \b
    Commands:
      serve         Run the HTTP API
      dispatch      Dispatch an event to subscribed integrations
      drain         Process pending jobs once
      integrations  Inspect configured integrations
      jobs          Queue and list notification jobs

    \b
    Quick Start:
      notification-service integrations list
      notification-service dispatch signup --data '{"userName": "Ana"}'
      notification-service jobs enqueue signup --data '{"userName": "Ana"}'
      notification-service drain
    """
    ctx.ensure_object(dict)


cli.add_command(server.serve)
cli.add_command(notifications.dispatch)
cli.add_command(notifications.drain)
cli.add_command(integrations.integrations)
cli.add_command(jobs.jobs)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
