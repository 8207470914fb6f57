"""
meshtransfer CLI.

Usage:
    meshtransfer send report.csv --to X26ABC2
    meshtransfer inbox
    meshtransfer read 20240101120000000000_ABCDEF --output report.csv
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from meshtransfer import __version__
from meshtransfer.client import AsyncMeshClient
from meshtransfer.config import MeshSettings
from meshtransfer.exceptions import ProtocolViolationError
from meshtransfer.logging import setup_logging
from meshtransfer.transfer import TransferResult

console = Console()
err_console = Console(stderr=True)


def get_settings_from_context(ctx: click.Context) -> MeshSettings:
    """Build settings from global options and the environment, requiring credentials."""
    overrides = {k: v for k, v in (ctx.obj or {}).items() if v is not None}
    settings = MeshSettings(**overrides)
    if not settings.has_credentials:
        err_console.print(
            "[red]Error:[/red] Set MESH_MAILBOX_ID, MESH_MAILBOX_PASSWORD "
            "and MESH_SHARED_KEY environment variables",
            soft_wrap=True,
        )
        raise SystemExit(1)
    return settings


def run_operation(
    settings: MeshSettings,
    call: Callable[[AsyncMeshClient], Awaitable[TransferResult]],
) -> TransferResult:
    """
    Run one client operation and apply the CLI's termination policy.

    Protocol violations and transport failures both exit with status 1
    after a diagnostic.
    """
    setup_logging(settings.log_level, settings.log_json)

    async def runner() -> TransferResult:
        async with AsyncMeshClient(settings) as client:
            return await call(client)

    try:
        result = asyncio.run(runner())
    except ProtocolViolationError as e:
        err_console.print(f"[red]ERROR:[/red] {escape(str(e))}", soft_wrap=True)
        raise SystemExit(1)

    if not result.success:
        err_console.print(f"[red]ERROR:[/red] {escape(result.error or '')}", soft_wrap=True)
        raise SystemExit(1)
    return result


@click.group()
@click.option("--url", envvar="MESH_URL", help="Message exchange base URL")
@click.option("--mailbox-id", envvar="MESH_MAILBOX_ID", help="Own mailbox id")
@click.option("--mailbox-password", envvar="MESH_MAILBOX_PASSWORD", help="Mailbox password")
@click.option("--shared-key", envvar="MESH_SHARED_KEY", help="Shared HMAC key")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level",
)
@click.version_option(version=__version__, package_name="meshtransfer")
@click.pass_context
def main(
    ctx: click.Context,
    url: str | None,
    mailbox_id: str | None,
    mailbox_password: str | None,
    shared_key: str | None,
    log_level: str | None,
) -> None:
    """meshtransfer: chunked mailbox message transfer."""
    ctx.ensure_object(dict)
    ctx.obj.update(
        url=url,
        mailbox_id=mailbox_id,
        mailbox_password=mailbox_password,
        shared_key=shared_key,
        log_level=log_level.upper() if log_level else None,
    )


# =============================================================================
# Send Command
# =============================================================================


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--to", "recipient", required=True, help="Recipient mailbox id")
@click.option("--workflow-id", "-w", help="Workflow tag (mex-workflowid)")
@click.option("--filename", "-f", help="Logical filename (mex-filename)")
@click.option("--chunk-size", type=click.IntRange(min=1), help="Uncompressed bytes per chunk")
@click.pass_context
def send(
    ctx: click.Context,
    file: Path,
    recipient: str,
    workflow_id: str | None,
    filename: str | None,
    chunk_size: int | None,
) -> None:
    """Send a file to another mailbox.

    Large files are split into gzip-compressed chunks automatically.

    Examples:

        meshtransfer send report.csv --to X26ABC2

        meshtransfer send data.bin --to X26ABC2 --workflow-id TRANSFER_1
    """
    settings = get_settings_from_context(ctx)
    payload = file.read_bytes()
    result = run_operation(
        settings,
        lambda client: client.send_message(
            payload,
            recipient,
            workflow_id=workflow_id,
            filename=filename,
            chunk_size=chunk_size,
        ),
    )
    console.print(f"[green]Sent[/green] {file.name} ({result.stats.chunks_count} chunk(s))")
    if result.message_id:
        console.print(f"[dim]Message id:[/dim] {result.message_id}")


# =============================================================================
# Read Command
# =============================================================================


@main.command()
@click.argument("message_id")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write message to file instead of stdout",
)
@click.pass_context
def read(ctx: click.Context, message_id: str, output: Path | None) -> None:
    """Download a message, reassembling chunked messages."""
    settings = get_settings_from_context(ctx)
    result = run_operation(settings, lambda client: client.read_message(message_id))
    data = _as_bytes(result.data)

    if output is None:
        sys.stdout.buffer.write(data)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    err_console.print(
        f"[green]Saved[/green] {output} ({len(data):,} bytes, "
        f"{result.stats.chunks_count} chunk(s))"
    )


# =============================================================================
# Inbox Command
# =============================================================================


@main.command()
@click.pass_context
def inbox(ctx: click.Context) -> None:
    """List messages waiting in the inbox."""
    settings = get_settings_from_context(ctx)
    result = run_operation(settings, lambda client: client.inbox())
    message_ids = result.message_ids

    console.print(f"[dim]Messages:[/dim] {len(message_ids)}")
    if not message_ids:
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", width=4)
    table.add_column("Message ID")
    for i, message_id in enumerate(message_ids, start=1):
        table.add_row(str(i), message_id)
    console.print(table)


def _as_bytes(data: Any) -> bytes:
    if data is None:
        return b""
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode("utf-8")
    return str(data).encode("utf-8")


if __name__ == "__main__":
    main()
