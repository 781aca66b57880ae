from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import typer
from rich.console import Console
from rich.table import Table

from veritas.clients.veritas_api import VeritasApiClient
from veritas.config.settings import settings
from veritas.db.engine import build_engine
from veritas.db.init_db import init_db
from veritas.errors import VeritasError
from veritas.logging_conf import setup_logging
from veritas.models.domain import ClaimInput, ProductInput
from veritas.services.batch_id import extract_prefix, generate_batch_id, is_valid_batch_id, parse_batch_id
from veritas.services.executor import error_text

app = typer.Typer(help="Veritas CLI (init DB, submit and verify products).")
console = Console()


@app.callback()
def _setup(
    base_url: str = typer.Option(settings.api_base_url, "--base-url", help="Veritas API base URL."),
    log_level: str = typer.Option(settings.log_level, "--log-level"),
) -> None:
    setup_logging(log_level)
    settings.api_base_url = base_url


def _parse_claim(raw: str) -> ClaimInput:
    claim_type, sep, description = raw.partition(":")
    if not sep:
        raise typer.BadParameter(f"expected TYPE:DESCRIPTION, got {raw!r}", param_hint="--claim")
    return ClaimInput(claim_type=claim_type.strip(), description=description.strip())


def _banner(result) -> None:
    text = error_text(result)
    if text:
        console.print(f"[yellow]⚠ {text}[/yellow]")


@app.command("init-db")
def init_db_cmd() -> None:
    engine = build_engine()
    init_db(engine)
    typer.echo("✅ Database initialized and reachable.")


@app.command("submit")
def submit_cmd(
    name: str = typer.Option(..., "--name", help="Product name."),
    supplier: str = typer.Option(..., "--supplier", help="Supplier name."),
    description: str = typer.Option("", "--description"),
    claim: list[str] = typer.Option([], "--claim", help="TYPE:DESCRIPTION, repeatable."),
) -> None:
    """Register a product and notarize its claims."""
    try:
        product_input = ProductInput(
            product_name=name,
            supplier_name=supplier,
            description=description,
            claims=[_parse_claim(c) for c in claim],
        )
    except ValueError as e:
        console.print(f"[red]✗[/red] Invalid input: {e}")
        raise typer.Exit(1)

    async def _run():
        async with VeritasApiClient() as client:
            return await client.submit_product(product_input)

    result = asyncio.run(_run())
    _banner(result)
    report = result.data
    console.print(f"[green]✓[/green] batch_id={report.product.batch_id}")
    console.print(f"verify at {report.qr_code.verification_url}")

    table = Table(title="Ledger results")
    table.add_column("Type", style="cyan")
    table.add_column("Claim", style="magenta")
    table.add_column("Transaction", style="green")
    table.add_column("OK", justify="center")
    for r in report.ledger_results:
        table.add_row(r.type, r.claim_id or "", r.transaction_id or (r.error or ""), "✓" if r.success else "✗")
    console.print(table)


@app.command("verify")
def verify_cmd(batch_id: str = typer.Argument(..., help="Batch ID to verify.")) -> None:
    """Verify every claim of a product against the ledger."""

    async def _run():
        async with VeritasApiClient() as client:
            return await client.verify_product(batch_id)

    result = asyncio.run(_run())
    _banner(result)
    report = result.data
    v = report.verification
    console.print(
        f"[bold]{report.product.product_name}[/bold] by {report.product.supplier_name}: "
        f"{v.overall_status.value} ({v.verified_claims}/{v.total_claims} claims, {v.verification_percentage}%)"
    )

    outcomes = {o.claim_id: o for o in report.ledger_verifications}
    links = {p.claim_id: p.links for p in report.proof_links}
    table = Table(title=f"Claims for {batch_id}")
    table.add_column("Type", style="cyan")
    table.add_column("Description")
    table.add_column("Verified", justify="center")
    table.add_column("Explorer", style="blue")
    for c in report.claims:
        o = outcomes.get(c.id)
        mark = "-" if o is None else ("✓" if o.verified else "✗")
        link = links.get(c.id)
        table.add_row(c.claim_type, c.description, mark, link.explorer if link else "")
    console.print(table)


@app.command("status")
def status_cmd() -> None:
    """Force a health check and show the cached availability."""

    async def _run():
        async with VeritasApiClient() as client:
            await client.refresh_backend_status()
            return client.backend_status()

    record = asyncio.run(_run())
    checked = datetime.fromtimestamp(record.last_checked_at, tz=timezone.utc).isoformat()
    style = "green" if record.status.value == "available" else "red"
    console.print(f"backend {settings.api_base_url}: [{style}]{record.status.value}[/{style}] (checked {checked})")


@app.command("batch-id")
def batch_id_cmd(product_name: str = typer.Argument(..., help="Product name to derive the prefix from.")) -> None:
    """Generate a batch ID locally."""
    batch_id = generate_batch_id(extract_prefix(product_name))
    typer.echo(batch_id)
    parts = parse_batch_id(batch_id)
    issued = datetime.fromtimestamp(parts.timestamp_ms / 1000, tz=timezone.utc).isoformat()
    typer.echo(f"prefix={parts.prefix} issued={issued} suffix={parts.suffix}")
    typer.echo(f"display format valid: {is_valid_batch_id(batch_id)}")


@app.command("stats")
def stats_cmd() -> None:
    """Batch ID prefix usage from the backend."""

    async def _run():
        async with VeritasApiClient() as client:
            return await client.get_batch_stats()

    try:
        rows = asyncio.run(_run())
    except VeritasError as e:
        console.print(f"[red]✗[/red] Error: {e.message}")
        raise typer.Exit(1)

    table = Table(title="Batch ID prefixes")
    table.add_column("Prefix", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("First used")
    table.add_column("Last used")
    for r in rows:
        table.add_row(
            r.prefix,
            str(r.count),
            r.first_used.isoformat() if r.first_used else "",
            r.last_used.isoformat() if r.last_used else "",
        )
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
