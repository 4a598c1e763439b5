#!/usr/bin/env python3
"""
cookiepm: inspect and drive a cookie agreement stored in an on-disk
browser profile.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from cookiepm.config import get_profile_dir, load_settings
from cookiepm.environment import end_session as _end_session
from cookiepm.environment import profile_environment
from cookiepm.error_handler import handle_errors
from cookiepm.manager import CookiePolicyManager
from cookiepm.ui import console, print_json_output, status_panel

logger = logging.getLogger("cookiepm.cli")

app = typer.Typer(
    name="cookiepm",
    help="Record and inspect cookie policy agreement.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    profile: Path = typer.Option(
        None, "--profile", "-p",
        help="Browser profile directory. Overrides COOKIEPM_HOME.",
    ),
    private: bool = typer.Option(
        False, "--private",
        help="Block durable storage, as a private window does.",
    ),
    config: Path = typer.Option(
        None, "--config", "-c",
        help="Config file with a [manager] table.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Record and inspect cookie policy agreement."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    ctx.obj = {
        "profile": profile or get_profile_dir(),
        "private": private,
        "config": config,
    }
    logger.debug("Using profile %s (private=%s)", ctx.obj["profile"], private)


def _manager(ctx: typer.Context, url: str = "about:blank", settings=None) -> CookiePolicyManager:
    env = profile_environment(ctx.obj["profile"], url=url, private=ctx.obj["private"])
    return CookiePolicyManager(env=env, settings=settings)


@app.command()
@handle_errors
def status(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a panel."),
):
    """Show the current [bold]agreement status[/bold]."""
    manager = _manager(ctx)
    current = manager.status()
    if as_json:
        print_json_output({**current.to_dict(), "storage": manager.store.backend})
        return
    status_panel(current, manager.store.backend)


@app.command()
@handle_errors
def update(
    ctx: typer.Context,
    agreement_type: str = typer.Argument(..., help="deny, explicit or implicit"),
    sub_type: str = typer.Argument("", help="Where the decision came from (e.g. close-button)"),
):
    """[bold cyan]Record[/bold cyan] the user's decision."""
    manager = _manager(ctx)
    if manager.update(agreement_type, sub_type):
        console.print(f"[success]Recorded[/success] {manager.status().because}")
    else:
        console.print(
            f"[warning]Agreement ignored:[/warning] "
            f"already recorded as '{manager.status().because}'"
        )


@app.command()
@handle_errors
def clear(ctx: typer.Context):
    """[bold]Remove[/bold] the recorded agreement and page view marker."""
    _manager(ctx).clear()
    console.print("[success]Cleared[/success] cookie agreement data.")


@app.command()
@handle_errors
def visit(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL of the page being loaded"),
    navigation: Optional[bool] = typer.Option(
        None, "--navigation/--no-navigation",
        help="Count a second page view as implicit agreement.",
    ),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i",
        help="URL that never counts as a page view (repeatable).",
    ),
):
    """Simulate a [bold cyan]page load[/bold cyan] and show the outcome."""
    settings = load_settings(ctx.obj["config"])
    if navigation is not None:
        settings.navigation = navigation
    if ignore:
        settings.ignore_urls = list(ignore)

    manager = _manager(ctx, url=url, settings=settings)
    manager.action(lambda: console.print("[success]Consent-gated scripts run.[/success]"))
    current = manager.status()
    if not current.allowed:
        console.print("[info]Cookie notice shown.[/info]")
    status_panel(current, manager.store.backend, title=url)


@app.command("end-session")
@handle_errors
def end_session(ctx: typer.Context):
    """Discard session storage, as closing the browser does."""
    if _end_session(ctx.obj["profile"]):
        console.print("[success]Session ended.[/success]")
    else:
        console.print("[muted]No session data.[/muted]")


def main():
    app()


if __name__ == "__main__":
    main()
