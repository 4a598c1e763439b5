"""Shared console, theme and display helpers for the cookiepm CLI."""

import json

from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

from cookiepm.models import AgreementStatus

# ── Theme ──
COOKIEPM_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "muted": "dim",
})

console = Console(theme=COOKIEPM_THEME)


def print_json_output(data: dict | list) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


def status_panel(status: AgreementStatus, backend: str, title: str = "Cookie agreement"):
    """Display the agreement status and the storage backend in use."""
    if status.allowed:
        allowed = "[success]allowed[/success]"
    else:
        allowed = "[error]not allowed[/error]"
    because = status.because or "[muted]no decision yet[/muted]"
    console.print(Panel(
        f"Status:  {allowed}\n"
        f"Because: {because}\n"
        f"Storage: {backend}",
        title=title,
        border_style="cyan",
    ))
