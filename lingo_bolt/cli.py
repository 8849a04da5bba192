"""lingo-bolt CLI."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer

from lingo_bolt.bot.commands import CommandParser
from lingo_bolt.bot.locales import SUPPORTED_LOCALES
from lingo_bolt.server.app import ServerApp
from lingo_bolt.server.github_auth import load_github_credentials_from_env
from lingo_bolt.shared.settings import configure_logging, get_bot_settings


app = typer.Typer(add_completion=False, help="lingo-bolt: language-aware GitHub bot")


@app.command()
def status() -> None:
    """Print resolved configuration with secrets redacted."""
    settings = get_bot_settings()
    typer.echo(
        json.dumps(
            {
                "mention": settings.mention,
                "sqlite_path": str(settings.sqlite_path),
                "app_id": settings.app_id or "unset",
                "credentials": load_github_credentials_from_env().redacted(),
            },
            indent=2,
        )
    )


@app.command("parse-command")
def parse_command(text: str, mention: str = typer.Option("", "--mention")) -> None:
    """Show how a comment body would be interpreted."""
    parser = CommandParser(mention=mention or get_bot_settings().mention)
    command = parser.parse(text)
    if command is None:
        typer.echo(json.dumps({"command": None}))
        raise typer.Exit(code=1)
    typer.echo(json.dumps({"command": command.action, "language": command.language}))


@app.command()
def locales() -> None:
    """List supported locale codes."""
    for code, label in SUPPORTED_LOCALES.items():
        typer.echo(f"{code}\t{label}")


@app.command("effective-settings")
def effective_settings(
    installation_id: int = typer.Option(..., "--installation-id"),
    repo: str = typer.Option(..., "--repo"),
) -> None:
    """Print the merged settings for one repository."""
    settings = get_bot_settings()
    service = ServerApp(db_path=settings.sqlite_path, settings=settings)
    resolved = service.resolver.resolve(installation_id, repo)
    if resolved is None:
        typer.echo(f"Error: installation {installation_id} is not configured", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps({"repo_full_name": repo, **resolved.as_dict()}, indent=2))


@app.command()
def dispatch(
    event: str = typer.Option(..., "--event"),
    file: Path = typer.Option(..., "--file"),
) -> None:
    """Run one webhook payload through the dispatcher and print the result."""
    settings = get_bot_settings()
    configure_logging(settings.log_level)
    try:
        payload = json.loads(file.read_text())
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: {file} is not valid JSON: {exc.msg}", err=True)
        raise typer.Exit(code=2) from exc
    service = ServerApp(db_path=settings.sqlite_path, settings=settings)
    result = asyncio.run(service.handle_webhook(event, payload, delivery_id="cli"))
    typer.echo(json.dumps(result, indent=2))
    if any(row["status"] == "failed" for row in result["actions"]):
        raise typer.Exit(code=1)


@app.command()
def serve() -> None:
    """Print the supported uvicorn startup command."""
    typer.echo(
        "uvicorn lingo_bolt.server.app:create_asgi_app --factory --host 127.0.0.1 --port 8000"
    )


if __name__ == "__main__":
    app()
