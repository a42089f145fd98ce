import logging

import typer

from pricewright_cli import __version__
from pricewright_cli.commands.catalog_cmd import catalog_app
from pricewright_cli.commands.classify_cmd import classify
from pricewright_cli.commands.estimate_cmd import estimate


def _version_callback(value: bool) -> None:
    if value:
        print(f"pricewright {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="pricewright",
    help="Multi-provider cost estimation for cloud architectures",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version", callback=_version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["json"] = json_output
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


app.command()(estimate)
app.command()(classify)
app.add_typer(catalog_app, name="catalog")
