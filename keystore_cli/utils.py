"""Utility functions for keystore-cli."""

from keystore_cli.defaults import EXPIRY_CRITICAL_DAYS, EXPIRY_WARNING_DAYS


def is_blank(value: str | None) -> bool:
    """Return True for None, the empty string, or whitespace only."""
    return value is None or not value.strip()


def format_expiry_days(days: int) -> str:
    """Format days remaining until certificate expiry with color coding."""
    if days < 0:
        return f"[bold red]{days} (expired)[/bold red]"
    if days < EXPIRY_CRITICAL_DAYS:
        return f"[bold red]{days}[/bold red]"
    if days < EXPIRY_WARNING_DAYS:
        return f"[bold yellow]{days}[/bold yellow]"
    return str(days)
