"""Coloured status lines for the notification-service CLI.

Errors go to stderr so ``dispatch`` output can be piped while failures stay
visible.
"""

import click

RULE_WIDTH = 60


def _status(symbol: str, message: str, colour: str, *, err: bool = False) -> None:
    click.secho(f"{symbol} {message}", fg=colour, err=err)


def success(message: str) -> None:
    _status("✓", message, "green")


def error(message: str) -> None:
    _status("✗", message, "red", err=True)


def warning(message: str) -> None:
    _status("⚠", message, "yellow")


def info(message: str) -> None:
    _status("ℹ", message, "blue")


def header(message: str) -> None:
    """Bold title printed before a command's output."""
    click.secho(f"\n{message}", fg="cyan", bold=True)


def section(title: str) -> None:
    """Title framed by horizontal rules, e.g. before per-integration results."""
    rule = "=" * RULE_WIDTH
    click.secho(f"\n{rule}", dim=True)
    click.secho(title, bold=True)
    click.secho(rule, dim=True)
