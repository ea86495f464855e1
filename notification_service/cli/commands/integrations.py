"""Integration registry commands."""

import sys

import click

from notification_service.cli.utils import error, header, info


@click.group(name="integrations")
def integrations() -> None:
    """Inspect configured integrations."""


@integrations.command(name="list")
@click.option("--event-type", default=None, help="Only integrations selected for this event type")
def list_integrations(event_type: str | None) -> None:
    """List configured integrations in registry order."""
    from notification_service.core.exceptions import InputError
    from notification_service.features.integrations import get_integration_registry

    try:
        registry = get_integration_registry()
    except InputError as exc:
        error(exc.detail)
        sys.exit(1)

    header("Configured Integrations")
    items = registry.select(event_type) if event_type else list(registry)
    if not items:
        info("No integrations found")
        return

    click.echo()
    for integration in items:
        status = (
            click.style("Enabled", fg="green")
            if integration.enabled
            else click.style("Disabled", fg="red")
        )
        click.echo(f"  {integration.id}  [{integration.channel}]  {status}")
        click.echo(f"    Name: {integration.name}")
        if integration.endpoint:
            click.echo(f"    Endpoint: {integration.method} {integration.endpoint}")
        click.echo(f"    Events: {', '.join(integration.events) or '-'}")
        click.echo()
    info(f"Total: {len(items)}")
