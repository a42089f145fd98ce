from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from pricewright import ArchitectureSpec, CostReport, UsageProfile
from pricewright.models import PROVIDERS, SCENARIOS
from rich.console import Console
from rich.table import Table

from pricewright_cli.utils import ctx_flag, handle_error

console = Console()


def estimate(
    ctx: typer.Context,
    spec_file: Annotated[Path, typer.Argument(help="Path to architecture YAML file", exists=True)],
    usage_file: Annotated[Path | None, typer.Option("--usage", help="Usage profile YAML (low/expected/high)", exists=True)] = None,
    oracle: Annotated[bool, typer.Option("--oracle/--no-oracle", help="Price with infracost when available")] = True,
    profile: Annotated[str | None, typer.Option(help="Cost profile (cost_effective, high_performance)")] = None,
    provider: Annotated[str | None, typer.Option(help="Comma-separated providers to price (aws, gcp, azure)")] = None,
    parallel: Annotated[bool, typer.Option("--parallel", help="Price provider/scenario runs concurrently")] = False,
) -> None:
    """Estimate monthly cost across providers and recommend one."""
    from pricewright.catalog import normalize_profile
    from pricewright.config import PricewrightSettings
    from pricewright.estimator import CostEstimator

    try:
        spec = ArchitectureSpec.from_file(spec_file)
        if profile:
            spec = spec.model_copy(update={"cost_profile": normalize_profile(profile)})
        usage = UsageProfile.from_yaml(usage_file.read_text()) if usage_file else UsageProfile()
        settings = PricewrightSettings.from_env(parallel=parallel or None)
        providers = [p.strip() for p in provider.split(",") if p.strip()] if provider else None

        estimator = CostEstimator(settings=settings, use_oracle=oracle)
        if ctx_flag(ctx, "json"):
            report = estimator.estimate(spec, usage, providers=providers)
        else:
            with console.status("Pricing architecture..."):
                report = estimator.estimate(spec, usage, providers=providers)
    except Exception as e:
        handle_error(ctx, e)
        return

    if ctx_flag(ctx, "json"):
        print(json.dumps(report.to_dict(), default=str))
        return

    _print_report(spec, report)


def _print_report(spec: ArchitectureSpec, report: CostReport) -> None:
    if report.is_placeholder:
        console.print("[bold red]Placeholder estimate: pricing failed, figures are not real.[/bold red]")

    table = Table(title=f"Monthly Cost: {spec.name} ({report.pricing_mode}, {report.scale_tier})")
    table.add_column("Provider", style="cyan")
    for scenario in SCENARIOS:
        table.add_column(scenario.capitalize(), justify="right")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Confidence", justify="right")

    for p in PROVIDERS:
        expected = report.estimate_for(p, "expected")
        if expected is None:
            continue
        cells = []
        for scenario in SCENARIOS:
            est = report.estimate_for(p, scenario)
            cells.append(f"${est.total_monthly_cost:,.2f}" if est else "-")
        status_style = "green" if expected.pricing_status == "COMPLETE" else "yellow"
        table.add_row(
            p.upper(),
            *cells,
            expected.estimate_type,
            f"[{status_style}]{expected.pricing_status}[/{status_style}]",
            f"{expected.confidence:.0%}",
        )
    console.print(table)

    if report.recommended:
        rec = report.recommended
        console.print(
            f"\n[bold green]Recommended:[/bold green] {rec.provider.upper()} at ${rec.monthly_cost:,.2f}/month "
            f"(score {rec.score}), range {report.cost_range.formatted}, confidence {report.confidence_percentage}%"
        )

    if report.per_service_breakdown:
        svc_table = Table(title="Per-Service Breakdown (recommended, expected usage)", show_footer=True)
        svc_table.add_column("Service", style="cyan")
        svc_table.add_column("Product")
        svc_table.add_column("Category")
        total = sum(s.monthly_cost for s in report.per_service_breakdown)
        svc_table.add_column("Monthly", justify="right", footer=f"${total:,.2f}")
        for s in report.per_service_breakdown:
            svc_table.add_row(s.service_class, s.display_name, s.category, f"${s.monthly_cost:,.2f}")
        console.print(svc_table)

    if report.drivers:
        console.print("\n[bold]Cost drivers:[/bold]")
        for d in report.drivers:
            console.print(f"  {d.name}: ${d.monthly_cost:,.2f} ({d.share:.0f}%) [dim]{d.impact}[/dim]")

    console.print(f"\n[bold]Sensitivity:[/bold] {report.sensitivity.label} ({report.sensitivity.level}), driven by {report.sensitivity.factor}")

    if report.missing_components:
        console.print("\n[bold]Potential additions:[/bold]")
        for m in report.missing_components:
            console.print(f"  {m.name} ({m.impact} impact): {m.estimated_additional_cost}/month")

    for w in report.warnings:
        console.print(f"[yellow]Warning:[/yellow] {w}")
