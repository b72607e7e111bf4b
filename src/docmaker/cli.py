"""Command line interface: generate, list and export living trust packets."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .config import ENV_MIRROR_TOKEN, ENV_MIRROR_URL, ENV_PDFCO_API_KEY, ENV_ROOT, DocMakerConfig
from .core.errors import NotFoundError, RenderError
from .core.models import DocumentMetadata, FormSnapshot, GenerationMethod
from .pipeline import build_services

console = Console()

METHOD_MAP = {
    "on-device": GenerationMethod.ON_DEVICE,
    "remote-render": GenerationMethod.REMOTE_RENDER,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.version_option(version=__version__, prog_name="docmaker")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=ENV_ROOT,
    default=None,
    help="Workspace directory holding the document database (default: ~/.docmaker).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, home: Path | None, verbose: bool):
    """docmaker: generate and store estate-planning document packets."""
    _setup_logging(verbose)
    config = DocMakerConfig.from_env()
    if home is not None:
        config.root = home.expanduser()
    ctx.obj = config


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-m", "--method",
    type=click.Choice(list(METHOD_MAP), case_sensitive=False),
    default="on-device",
    help="Generation method (default: on-device).",
)
@click.option(
    "--api-key",
    envvar=ENV_PDFCO_API_KEY,
    default=None,
    help="PDF.co API key for remote rendering (or set PDFCO_API_KEY).",
)
@click.option(
    "--mirror-url",
    envvar=ENV_MIRROR_URL,
    default=None,
    help="Remote record store URL (or set DOCMAKER_MIRROR_URL).",
)
@click.option(
    "--mirror-token",
    envvar=ENV_MIRROR_TOKEN,
    default=None,
    help="Bearer token for the remote record store.",
)
@click.option(
    "--no-wait",
    is_flag=True,
    default=False,
    help="Exit without waiting for the remote mirror upload.",
)
@click.pass_obj
def generate(
    config: DocMakerConfig,
    snapshot: Path,
    method: str,
    api_key: str | None,
    mirror_url: str | None,
    mirror_token: str | None,
    no_wait: bool,
):
    """Generate a living trust packet from a SNAPSHOT JSON file."""
    if api_key:
        config.pdfco_api_key = api_key
    if mirror_url:
        config.mirror_url = mirror_url
    if mirror_token:
        config.mirror_token = mirror_token

    form = FormSnapshot.load(snapshot)
    chosen = METHOD_MAP[method.lower()]

    async def _run() -> DocumentMetadata:
        services = build_services(config)
        store = services.store
        await store.start()
        try:
            meta = await services.orchestrator.generate(form, chosen)
            if not no_wait:
                await store.wait_for_uploads()
            return store.get(meta.id) or meta
        finally:
            await store.close()

    console.print(f"[bold blue]📄 Generating packet[/] [dim](method={method})[/]")
    try:
        meta = asyncio.run(_run())
    except RenderError as exc:
        console.print(f"[bold red]❌ Could not generate documents:[/] {exc}")
        raise SystemExit(1)

    console.print(f"[green]✓[/] {meta.title}")
    console.print(
        f"  [dim]id:[/] {meta.id}  [dim]size:[/] {meta.formatted_size}"
        f"  [dim]status:[/] {meta.cloud_status_description}"
    )


@main.command(name="list")
@click.pass_obj
def list_documents(config: DocMakerConfig):
    """List stored documents, newest first."""
    from rich.table import Table as RichTable

    async def _run() -> list[DocumentMetadata]:
        services = build_services(config)
        await services.store.start()
        try:
            return services.store.all_documents()
        finally:
            await services.store.close()

    documents = asyncio.run(_run())

    table = RichTable(title="Stored Documents", show_lines=False)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold cyan")
    table.add_column("Created")
    table.add_column("Size", justify="right")
    table.add_column("Status")

    for doc in documents:
        status = (
            f"[green]{doc.cloud_status_description}[/]"
            if doc.is_synced
            else f"[yellow]{doc.cloud_status_description}[/]"
        )
        table.add_row(str(doc.id), doc.title, doc.formatted_date, doc.formatted_size, status)

    console.print(table)


@main.command()
@click.argument("document_id")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.pass_obj
def export(config: DocMakerConfig, document_id: str, output: Path | None):
    """Write the stored PDF DOCUMENT_ID to OUTPUT (default: the exports dir)."""
    target = output or config.exports_dir / f"document-{document_id}.pdf"

    async def _run() -> Path:
        services = build_services(config)
        await services.store.start(seed_samples=False)
        try:
            return services.store.export(document_id, target)
        finally:
            await services.store.close()

    try:
        path = asyncio.run(_run())
    except NotFoundError as exc:
        console.print(f"[bold red]❌ {exc}[/]")
        raise SystemExit(1)
    console.print(f"[green]✓[/] Saved {path}")


@main.command()
@click.pass_obj
def seed(config: DocMakerConfig):
    """Populate an empty store with the sample documents."""

    async def _run() -> int:
        services = build_services(config)
        await services.store.start(seed_samples=True)
        try:
            return len(services.store.all_documents())
        finally:
            await services.store.close()

    count = asyncio.run(_run())
    console.print(f"[green]✓[/] Store holds {count} document(s)")


if __name__ == "__main__":
    main()
