"""Authentication commands for the StackEye CLI."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from stackeye.auth.constants import DEFAULT_LOGIN_TIMEOUT_SECONDS
from stackeye.auth.credentials import (
    clear_config,
    find_context_by_api_url,
    get_current_context,
    mask_api_key,
    remove_context,
    resolve_api_key,
    save_context,
)
from stackeye.auth.flow import browser_login
from stackeye.auth.types import LoginOptions
from stackeye.client import StackEyeClient
from stackeye.config import DEFAULT_API_URL
from stackeye.exceptions import ConfigError, LoginError, LoginTimeoutError, StackEyeError
from stackeye.log import get_debug_logger

app = typer.Typer(help="Manage authentication")
console = Console()


def _org_from_email(email: str) -> str:
    """Guess an organization name from an email domain (``bob@acme.io`` -> ``acme``)."""
    _, _, domain = email.partition("@")
    return domain.split(".", 1)[0] if domain else ""


def _on_browser_open(url: str) -> None:
    console.print("\n[bold]Opening browser for authentication...[/bold]")
    console.print(f"If it doesn't open, visit: {escape(url)}\n")


def _on_waiting() -> None:
    console.print("[dim]Waiting for authentication...[/dim]")


@app.command()
def login(
    api_url: str = typer.Option(DEFAULT_API_URL, "--api-url", help="StackEye API URL"),
    timeout: int = typer.Option(
        int(DEFAULT_LOGIN_TIMEOUT_SECONDS), help="Seconds to wait for the browser callback"
    ),
    debug: bool = typer.Option(False, "--debug", help="Print login debug output to stderr"),
    verify: bool = typer.Option(True, "--verify/--no-verify", help="Verify the new API key"),
    force: bool = typer.Option(False, "--force", help="Log in again even if already authenticated"),
) -> None:
    """Authenticate with StackEye via browser.

    Opens your browser to the StackEye web UI. After you approve, an API key
    is sent back to the CLI and stored in ~/.config/stackeye/config.json.
    """
    try:
        existing = find_context_by_api_url(api_url)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if existing and not force:
        console.print(f"[yellow]Already authenticated to {escape(api_url)} (context {escape(existing)}).[/yellow]")
        console.print("Run [bold]stackeye auth logout[/bold] first or pass [bold]--force[/bold].")
        raise typer.Exit(1)

    options = LoginOptions(
        api_url=api_url,
        timeout=float(timeout),
        on_browser_open=_on_browser_open,
        on_waiting=_on_waiting,
        logger=get_debug_logger(debug),
    )

    try:
        result = browser_login(options)
    except LoginTimeoutError as e:
        console.print(f"\n[red]Login failed: {escape(str(e))}[/red]")
        console.print("Run [bold]stackeye auth login[/bold] to try again.")
        raise typer.Exit(1)
    except LoginError as e:
        console.print(f"\n[red]Login failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    org_name = result.org_name
    if verify:
        console.print("Verifying credentials...", end="")
        try:
            with StackEyeClient(result.api_key, base_url=api_url) as client:
                user = client.get_current_user()
        except (StackEyeError, httpx.HTTPError) as e:
            console.print(" [red]failed[/red]")
            console.print(f"[red]Failed to verify API key: {escape(str(e))}[/red]")
            raise typer.Exit(1)
        console.print(" done")
        if not org_name:
            org_name = _org_from_email(user.get("user", {}).get("email", ""))

    try:
        context_name = save_context(result.api_key, api_url, org_id=result.org_id, org_name=org_name)
    except (ConfigError, OSError) as e:
        console.print(f"[red]Failed to save credentials: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print("\n[green]Successfully authenticated![/green]")
    if org_name:
        console.print(f"  Organization: {escape(org_name)}")
    console.print(f"  Context: {escape(context_name)}")


@app.command()
def logout(
    all_contexts: bool = typer.Option(False, "--all", help="Remove every stored context"),
) -> None:
    """Remove stored credentials."""
    try:
        if all_contexts:
            removed = clear_config()
        else:
            current = get_current_context()
            removed = bool(current) and remove_context(current[0])
    except (ConfigError, OSError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if removed:
        console.print("[green]Successfully logged out.[/green]")
    else:
        console.print("[yellow]No credentials found.[/yellow]")


@app.command()
def status() -> None:
    """Show current authentication status."""
    try:
        current = get_current_context()
        api_key = resolve_api_key()
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not api_key:
        console.print("[yellow]Not authenticated.[/yellow]")
        console.print("Run [bold]stackeye auth login[/bold] to authenticate.")
        raise typer.Exit(1)

    console.print("[green]Authenticated[/green]")
    console.print(f"  API Key: {mask_api_key(api_key)}")

    api_url = DEFAULT_API_URL
    if current:
        name, context = current
        api_url = context.get("api_url") or DEFAULT_API_URL
        console.print(f"  Context: {escape(name)}")
        if context.get("organization_name"):
            console.print(f"  Organization: {escape(context['organization_name'])}")
    console.print(f"  API URL: {escape(api_url)}")

    try:
        with StackEyeClient(api_key, base_url=api_url) as client:
            user = client.get_current_user()
        email = user.get("user", {}).get("email")
        if email:
            console.print(f"  User: {escape(email)}")
        console.print("\n[green]API key is valid.[/green]")
    except (StackEyeError, httpx.HTTPError) as e:
        console.print(f"\n[yellow]Warning: Could not verify API key: {escape(str(e))}[/yellow]")
