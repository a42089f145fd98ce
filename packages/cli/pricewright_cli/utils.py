from __future__ import annotations

import json

import typer
from rich.console import Console

_err_console = Console(stderr=True)


def ctx_flag(ctx: typer.Context, name: str) -> bool:
    # Sub-apps get their own ctx, so walk up to the root callback's obj
    obj = ctx.obj or (ctx.parent.obj if ctx.parent else None)
    return bool(obj and obj.get(name))


def handle_error(ctx: typer.Context, e: Exception) -> None:
    """Print a clean error message and exit 1."""
    import yaml
    from pricewright.errors import PricingIntegrityError, ProviderLeakError

    verbose = ctx_flag(ctx, "verbose")
    json_mode = ctx_flag(ctx, "json")

    if isinstance(e, FileNotFoundError):
        msg = f"File not found: {e}"
    elif isinstance(e, yaml.YAMLError):
        msg = f"Invalid YAML: {e}"
    elif isinstance(e, (PricingIntegrityError, ProviderLeakError)):
        msg = f"Pricing integrity failure: {e}"
    elif "validation" in type(e).__name__.lower():
        msg = f"Invalid input: {e}"
    elif isinstance(e, ValueError):
        msg = str(e)
    else:
        msg = f"Error: {e}"

    if json_mode:
        print(json.dumps({"error": msg}))
    else:
        _err_console.print(f"[red]Error:[/red] {msg}")

    if verbose:
        _err_console.print_exception()

    raise typer.Exit(1)
