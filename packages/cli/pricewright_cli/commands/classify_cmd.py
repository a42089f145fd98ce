from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from pricewright import ArchitectureSpec
from rich.console import Console
from rich.table import Table

from pricewright_cli.utils import ctx_flag, handle_error

console = Console()


def classify(
    ctx: typer.Context,
    spec_file: Annotated[Path, typer.Argument(help="Path to architecture YAML file", exists=True)],
) -> None:
    """Show the pricing mode and pricing class of every deployable service."""
    from pricewright.classifier import classify as classify_workload
    from pricewright.resolver import classify_pricing, resolve_deployable
    from pricewright.sizing import scale_tier_for

    try:
        spec = ArchitectureSpec.from_file(spec_file)
        result = classify_workload(spec)
        deployable = resolve_deployable(spec)
        pricing = classify_pricing(deployable)
    except Exception as e:
        handle_error(ctx, e)
        return

    if ctx_flag(ctx, "json"):
        print(
            json.dumps(
                {
                    "mode": result.mode,
                    "rule": result.rule,
                    "operational": result.operational,
                    "scale_tier": scale_tier_for(spec.scale),
                    "deployable": deployable,
                    "pricing": pricing.to_dict(),
                }
            )
        )
        return

    console.print(f"[bold]Pricing mode:[/bold] {result.mode} [dim](rule: {result.rule})[/dim]")
    console.print(f"[bold]Scale tier:[/bold] {scale_tier_for(spec.scale)}")

    table = Table(title=f"Deployable Services: {spec.name}")
    table.add_column("Service", style="cyan")
    table.add_column("Pricing Class")
    table.add_column("Reason", style="dim")
    for service_id, detail in pricing.details.items():
        table.add_row(service_id, detail["pricing_class"], detail["reason"])
    console.print(table)

    dropped = [s for s in spec.service_ids() if s not in deployable]
    if dropped:
        console.print(f"[yellow]Not deployable:[/yellow] {', '.join(dropped)}")
