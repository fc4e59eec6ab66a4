"""CLI commands for authentication."""

import asyncio
from dataclasses import replace
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.prompt import Prompt as RichPrompt
from rich.table import Table

from uberauth.auth.dispatcher import UberAuth
from uberauth.auth.models import (
    AuthContext,
    AuthDestination,
    AuthorizationCodeConfig,
    InApp,
    Native,
    Prefill,
    Prompt,
    UberApp,
)
from uberauth.auth.provider import AuthorizationCodeAuthProvider
from uberauth.auth.result import Failure, Result
from uberauth.auth.session import is_loopback_redirect
from uberauth.auth.storage import TokenManager
from uberauth.exceptions import UberAuthError
from uberauth.settings import get_settings

auth_app = typer.Typer(name="auth", help="Log in to Uber and manage the stored token.")
console = Console()


def _build_context(
    native: bool,
    apps: list[UberApp] | None,
    prompts: list[str] | None,
    exchange: bool,
    scopes: list[str] | None,
    prefill: Prefill | None,
) -> AuthContext:
    prompt = Prompt(0)
    for name in prompts or []:
        prompt |= Prompt[name.upper()]

    destination: AuthDestination
    if not native:
        destination = InApp()
    elif apps:
        destination = Native(tuple(apps))
    else:
        destination = Native()

    config = AuthorizationCodeConfig(prompt=prompt, should_exchange_auth_code=exchange)
    if scopes:
        config = replace(config, scopes=tuple(scopes))
    return AuthContext(destination=destination, config=config, prefill=prefill)


@auth_app.command()
def login(
    native: Annotated[
        bool,
        typer.Option("--native", help="Hand off to an installed Uber app."),
    ] = False,
    app: Annotated[
        Optional[list[UberApp]],
        typer.Option(help="App to try, in priority order."),
    ] = None,
    prompt: Annotated[
        Optional[list[str]],
        typer.Option(help="Force 'login' and/or 'consent'."),
    ] = None,
    exchange: Annotated[
        bool,
        typer.Option(help="Exchange the code for an access token."),
    ] = True,
    scope: Annotated[
        Optional[list[str]],
        typer.Option(help="Scope to request."),
    ] = None,
    email: Annotated[Optional[str], typer.Option(help="Prefill email.")] = None,
    phone: Annotated[Optional[str], typer.Option(help="Prefill phone number.")] = None,
    first_name: Annotated[Optional[str], typer.Option(help="Prefill first name.")] = None,
    last_name: Annotated[Optional[str], typer.Option(help="Prefill last name.")] = None,
) -> None:
    """Log in with the authorization code flow."""
    for name in prompt or []:
        if name.upper() not in Prompt.__members__:
            raise typer.BadParameter(f"Unknown prompt: {name}", param_hint="--prompt")

    prefill = None
    if any((email, phone, first_name, last_name)):
        prefill = Prefill(email=email, phone_number=phone, first_name=first_name, last_name=last_name)

    context = _build_context(native, app, prompt, exchange, scope, prefill)
    result = asyncio.run(_login_async(context))
    if isinstance(result, Failure):
        raise typer.Exit(code=1)


def _needs_pasted_redirect(provider: AuthorizationCodeAuthProvider) -> bool:
    """True unless a browser session is listening for the redirect itself."""
    if provider.current_session is None:
        return True
    return not is_loopback_redirect(provider.configuration_provider.redirect_uri)


async def _login_async(context: AuthContext) -> Result:
    """Async implementation of login command."""
    uber = UberAuth()
    future: asyncio.Future[Result] = asyncio.get_running_loop().create_future()

    def on_complete(result: Result) -> None:
        if not future.done():
            future.set_result(result)

    console.print("\n[dim]Starting authorization...[/dim]")
    await uber.login(context, on_complete)

    provider = uber.current_provider
    if not future.done() and provider is not None and _needs_pasted_redirect(provider):
        console.print("[bold]After approving, paste the redirect URL here:[/bold]")
        url = await asyncio.to_thread(RichPrompt.ask, "Redirect URL")
        if not await uber.handle(url.strip()):
            console.print("[red]URL does not match the configured redirect URI. Aborting.[/red]")
            return Failure(UberAuthError.invalid_response())

    result = await future
    if isinstance(result, Failure):
        console.print(f"\n[red]Authentication failed: {result.error}[/red]")
        return result

    client = result.value
    if client.access_token:
        console.print("\n[green bold]Successfully authenticated with Uber![/green bold]")
    else:
        console.print(f"\n[green]Authorization code:[/green] {client.authorization_code}")
    return result


@auth_app.command()
def status() -> None:
    """Show client configuration and stored token."""
    asyncio.run(_status_async())


async def _status_async() -> None:
    """Async implementation of status command."""
    settings = get_settings()
    token = await TokenManager().get_token()

    table = Table(title="Authentication Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Client ID", settings.client_id or "Not configured")
    table.add_row("Redirect URI", settings.redirect_uri or "Not configured")
    if token:
        table.add_row("Access token", f"{token.token_type} (stored)")
        table.add_row("Scopes", " ".join(token.scope or []) or "-")
    else:
        table.add_row("Access token", "Not logged in")

    console.print(table)


@auth_app.command()
def logout() -> None:
    """Remove the stored access token."""
    if asyncio.run(UberAuth().logout()):
        console.print("[green]Logged out[/green]")
    else:
        console.print("[yellow]No stored token[/yellow]")
