"""Command-line entry point: print a Nix recipe for an Ollama model."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .errors import OllamaNixError
from .generator import GenerationResult, GeneratorConfig, generate
from .logging_utils import configure_logging
from .manifest import RegistryClient
from .reference import DEFAULT_REGISTRY

app = typer.Typer(
    name="ollama-nix",
    help="Generate a Nix expression that reproduces an Ollama model store",
    add_completion=False,
)
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _layer_table(result: GenerationResult) -> Table:
    table = Table(title=f"Layers ({result.recipe.request.model}:{result.recipe.request.version})")
    table.add_column("Symbol")
    table.add_column("Digest")
    table.add_column("Media type")
    table.add_column("Size", justify="right")
    for decl, layer in zip(result.recipe.blobs, result.fetched.manifest.layers):
        table.add_row(decl.symbol, layer.digest, layer.media_type, f"{layer.size:,}")
    return table


def _fail(message: str) -> None:
    err_console.print(Text(f"Error: {message}", style="red"), soft_wrap=True)


@app.command()
def main(
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-model",
        help="Model to package, e.g. mistral-nemo or mistral-nemo:7b",
    ),
    registry: str = typer.Option(
        DEFAULT_REGISTRY, "--registry", "-registry", help="Registry host to read from"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the recipe to a file instead of stdout"
    ),
    show_layers: bool = typer.Option(
        False, "--show-layers", help="Print a table of manifest layers to stderr"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write log records to this file"
    ),
) -> None:
    """Fetch a model manifest and print a reproducible Nix recipe for it."""
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING, log_file=log_file)
    logger.debug("Registry %s, model %s", registry, model)
    config = GeneratorConfig(model=model or "", registry=registry, output=output)
    try:
        config.validate()
        with RegistryClient() as client:
            result = generate(config, client)
    except OllamaNixError as exc:
        _fail(str(exc))
        raise typer.Exit(code=1) from exc

    if show_layers:
        err_console.print(_layer_table(result))

    if config.output is None:
        typer.echo(result.text, nl=False)
        return
    try:
        config.output.write_text(result.text, encoding="utf-8")
    except OSError as exc:
        _fail(f"failed to write recipe: {exc}")
        raise typer.Exit(code=1) from exc
    logger.info("Recipe written to %s", config.output)


if __name__ == "__main__":  # pragma: no cover
    app()
