from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from pricewright_cli.utils import ctx_flag

console = Console()

catalog_app = typer.Typer(
    name="catalog",
    help="Browse the canonical service catalog.",
    no_args_is_help=True,
)


@catalog_app.callback(invoke_without_command=True)
def catalog_callback(ctx: typer.Context) -> None:
    # Propagate json/verbose flags from parent ctx into this sub-app's ctx
    if ctx.obj is None and ctx.parent and ctx.parent.obj:
        ctx.obj = ctx.parent.obj
    elif ctx.obj is None:
        ctx.ensure_object(dict)


@catalog_app.command("list")
def catalog_list(
    ctx: typer.Context,
    category: Annotated[str | None, typer.Option(help="Filter by category (compute, database, ...)")] = None,
) -> None:
    """List canonical services and their pricing class."""
    from pricewright.catalog import get_catalog

    services = get_catalog().list_services(category)

    if ctx_flag(ctx, "json"):
        import json

        print(json.dumps({"services": [s.to_dict() for s in services]}))
        return

    if not services:
        console.print("[yellow]No services found.[/yellow]")
        return

    table = Table(title="Service Catalog" + (f": {category}" if category else ""))
    table.add_column("Service", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Pricing Class")
    table.add_column("Providers", style="dim")
    for svc in services:
        table.add_row(svc.service_id, svc.name, svc.category, svc.pricing_class, ", ".join(sorted(svc.products)) or "-")
    console.print(table)


@catalog_app.command("show")
def catalog_show(
    ctx: typer.Context,
    service_id: Annotated[str, typer.Argument(help="Canonical service id or alias")],
) -> None:
    """Show products and resource types for one service."""
    from pricewright.catalog import COST_EFFECTIVE, HIGH_PERFORMANCE, get_catalog

    catalog = get_catalog()
    svc = catalog.get(service_id)
    if svc is None:
        console.print(f"[red]Error:[/red] Unknown service: {service_id}")
        raise typer.Exit(1)

    if ctx_flag(ctx, "json"):
        import json

        print(json.dumps(svc.to_dict()))
        return

    console.print(f"[bold cyan]{svc.service_id}[/bold cyan]: {svc.name} ({svc.category}, {svc.pricing_class})")
    table = Table()
    table.add_column("Provider", style="cyan")
    table.add_column("Cost Effective")
    table.add_column("High Performance")
    table.add_column("Resource Type", style="dim")
    for provider in sorted(svc.products):
        table.add_row(
            provider.upper(),
            catalog.display_name(catalog.resolve_product(provider, svc.service_id, COST_EFFECTIVE)),
            catalog.display_name(catalog.resolve_product(provider, svc.service_id, HIGH_PERFORMANCE)),
            svc.resource_type(provider) or "-",
        )
    console.print(table)
