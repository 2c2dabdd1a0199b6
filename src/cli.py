"""Click CLI for running and checking the notification gateway."""

from __future__ import annotations

import asyncio
import json

import click

from src.actions.base import ActionPayload
from src.actions.telegram import TelegramAction
from src.config import GatewayConfig


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Turnstile-gated Telegram notification gateway."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = GatewayConfig.from_env()


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", default=8080, type=int, help="Port to listen on.")
def serve(host: str, port: int) -> None:
    """Run the HTTP gateway under uvicorn."""
    import uvicorn

    uvicorn.run("src.proxy.app:create_app_from_env", factory=True, host=host, port=port)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show which credentials are configured (never their values)."""
    config: GatewayConfig = ctx.obj["config"]
    click.echo(json.dumps(config.health().model_dump(by_alias=True), indent=2))


@cli.command()
@click.argument("message")
@click.option("--subject", default=None, help="Bold title line.")
@click.option("--meta", multiple=True, help="Metadata entry as key=value; repeatable.")
@click.pass_context
def send(ctx: click.Context, message: str, subject: str | None, meta: tuple[str, ...]) -> None:
    """Send MESSAGE straight to Telegram, bypassing Turnstile."""
    config: GatewayConfig = ctx.obj["config"]
    metadata: dict[str, object] = {}
    for entry in meta:
        key, sep, value = entry.partition("=")
        if not sep:
            raise click.BadParameter(f"expected key=value, got {entry!r}", param_hint="--meta")
        metadata[key] = value

    action = TelegramAction(config.telegram_bot_token, config.telegram_chat_id)
    result = asyncio.run(action.execute(
        ActionPayload(message=message, subject=subject, metadata=metadata),
    ))
    if not result.success:
        click.echo(f"Send failed: {result.message}", err=True)
        ctx.exit(1)
    click.echo(result.message)
