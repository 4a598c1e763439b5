"""Unified CLI error handler for cookiepm commands."""

from __future__ import annotations

import functools
import logging
import os
import traceback

import typer

from cookiepm.errors import (
    ConfigError,
    CookiePMError,
    InvalidAgreementTypeError,
    InvalidCallbackError,
)
from cookiepm.ui import console

logger = logging.getLogger("cookiepm.error_handler")


def _debug_mode() -> bool:
    """Check if debug output is enabled via COOKIEPM_DEBUG env var."""
    return os.environ.get("COOKIEPM_DEBUG", "").lower() in ("1", "true", "yes")


def _render_error(e: CookiePMError) -> None:
    """Render a CookiePMError with Rich formatting and context."""
    console.print(f"\n[bold red]Error:[/bold red] {e}")

    if e.context and _debug_mode():
        context_parts = [
            f"  [dim]{key}:[/dim] {value}" for key, value in e.context.items() if value
        ]
        if context_parts:
            console.print("[dim]Context:[/dim]")
            for part in context_parts:
                console.print(part)

    if isinstance(e, InvalidAgreementTypeError):
        console.print("[dim]Example: cookiepm update explicit close-button[/dim]")
    elif isinstance(e, ConfigError):
        console.print("[dim]Check the --config path or remove it to use the defaults.[/dim]")
    elif isinstance(e, InvalidCallbackError):
        console.print("[dim]Pass a function taking no arguments to action().[/dim]")


def handle_errors(func):
    """Decorator that catches CookiePMError and renders formatted CLI output.

    Usage::

        @app.command()
        @handle_errors
        def my_command(...):
            ...
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CookiePMError as e:
            _render_error(e)
            if _debug_mode():
                console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            raise typer.Exit(e.exit_code)
        except KeyboardInterrupt:
            console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(130)
        except (typer.Exit, typer.Abort, SystemExit):
            raise
        except OSError as e:
            console.print(f"\n[bold red]Profile error:[/bold red] {e}")
            console.print(
                "[dim]Check that the --profile directory (or COOKIEPM_HOME) "
                "is a writable directory.[/dim]"
            )
            raise typer.Exit(1)
        except Exception as e:
            logger.debug("Unhandled error in %s", func.__name__, exc_info=True)
            console.print(f"\n[bold red]Unexpected error:[/bold red] {e}")
            if _debug_mode():
                console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            else:
                console.print("[dim]Set COOKIEPM_DEBUG=1 for full traceback.[/dim]")
            raise typer.Exit(1)

    return wrapper
