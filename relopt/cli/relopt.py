"""Command-line entry point: optimise a canonical query against a catalogue."""

from __future__ import annotations

from typing import Optional

import click

from ..catalogue import Catalogue, CatalogueError, load_catalogue
from ..config import Config, load_config
from ..optimiser import Optimiser
from ..parser import QueryParser
from ..plan import ExplainFormat, LogicalPlanNode, explain_plan
from ..utils.logging import get_contextual_logger, setup_logging


class ReloptRuntime:
    """Wraps the parse -> optimise pipeline for one catalogue."""

    def __init__(self, catalogue: Catalogue, config: Config):
        self.catalogue = catalogue
        self.parser = QueryParser(catalogue)
        self.optimiser = Optimiser(config.optimizer)

    def plan(self, query: str) -> LogicalPlanNode:
        """Parse a query into its canonical plan."""
        return self.parser.parse(query)

    def optimise(self, plan: LogicalPlanNode) -> LogicalPlanNode:
        return self.optimiser.optimise(plan)


def _load_settings(config_path: Optional[str], catalogue_path: Optional[str]):
    config = load_config(config_path) if config_path else Config()
    if catalogue_path:
        config.catalogue = catalogue_path
    if not config.catalogue:
        raise click.UsageError("No catalogue given; use --catalogue or set it in --config")
    return config


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file.",
)
@click.option(
    "--catalogue",
    "catalogue_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Serialised catalogue file. Overrides the config file's catalogue.",
)
@click.option(
    "-q",
    "--query",
    "query_file",
    type=click.File("r"),
    default="-",
    show_default="stdin",
    help="File holding the canonical query.",
)
@click.option(
    "--explain",
    "explain_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    help="Also print the optimised plan with per-node estimates.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured log level.",
)
def cli(
    config_path: Optional[str],
    catalogue_path: Optional[str],
    query_file,
    explain_format: Optional[str],
    log_level: Optional[str],
) -> None:
    """Print the canonical and optimised plans of a query."""
    config = _load_settings(config_path, catalogue_path)
    setup_logging(
        level=log_level or config.logging.level,
        structured=config.logging.structured,
        log_file=config.logging.log_file,
    )
    logger = get_contextual_logger(__name__, {"query": query_file.name})

    try:
        catalogue = load_catalogue(config.catalogue)
        runtime = ReloptRuntime(catalogue, config)
        plan = runtime.plan(query_file.read())
    except (CatalogueError, ValueError, FileNotFoundError) as exc:
        logger.error(f"Failed to build query plan: {exc}")
        click.echo(f"error: {exc}", err=True)
        raise click.exceptions.Exit(1)

    click.echo(f"Query Plan: {plan}")
    optimised = runtime.optimise(plan)
    logger.info(f"Optimised plan estimated at {optimised.output.tuple_count} tuples")
    click.echo(f"Optimised Plan: {optimised}")

    if explain_format:
        click.echo(explain_plan(optimised, ExplainFormat(explain_format.upper())))


if __name__ == "__main__":
    cli()
