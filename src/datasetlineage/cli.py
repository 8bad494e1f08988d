"""
Command line access to lineage queries over a YAML catalog snapshot.

    datasetlineage lineage hive:///tracking/page_view --catalog catalog.yaml
    datasetlineage ancestors urn:a urn:b --catalog catalog.yaml
    datasetlineage dependents 42 --catalog catalog.yaml

Responses are printed as JSON. The exit status is 0 for a ``200`` response
and 1 for a ``404`` response.
"""

import json
import sys
from typing import Any, Dict, Optional

import click

from datasetlineage import initialize_logging, logger
from .api import OK, get_common_ancestors, get_dependents, get_lineage
from .config.yaml_config import load_settings
from .exceptions import DatasetLineageError
from .export import export_report
from .repository.memory import InMemoryDatasetRepository

catalog_option = click.option(
    "--catalog", "-c", "catalog_path", required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML catalog snapshot to query",
)


def _emit(payload: Dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))
    sys.exit(0 if payload.get("return_code") == OK else 1)


def _fail(error: DatasetLineageError) -> None:
    logger.error(str(error))
    raise click.ClickException(error.message)


@click.group()
@click.option("--settings", "settings_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="YAML settings file")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Enable verbose (DEBUG) logging")
@click.pass_context
def main(ctx: click.Context, settings_path: Optional[str], verbose: bool) -> None:
    """Resolve dataset lineage against a catalog snapshot."""
    initialize_logging(console_level="DEBUG" if verbose else "WARNING")
    try:
        ctx.obj = load_settings(settings_path)
    except DatasetLineageError as e:
        _fail(e)


@main.command()
@click.argument("uri")
@click.option("--cluster", default=None, help="Cluster for URIs that do not name one")
@catalog_option
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Also export the report to this file (.json, .yaml or .csv)")
@click.pass_obj
def lineage(settings, uri: str, cluster: Optional[str], catalog_path: str, output: Optional[str]) -> None:
    """Print the dependency tree of URI."""
    try:
        repository = InMemoryDatasetRepository.from_yaml(catalog_path)
        response = get_lineage(uri, cluster, repository=repository, settings=settings)
    except DatasetLineageError as e:
        _fail(e)
        return
    if output and response.report is not None:
        try:
            export_report(response.report, output)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="'--output'") from e
    _emit(response.to_dict())


@main.command()
@click.argument("urn_a")
@click.argument("urn_b")
@catalog_option
@click.option("--legacy", is_flag=True, default=False,
              help="Compare the first urn's parents with themselves, as the historical service did")
@click.pass_obj
def ancestors(settings, urn_a: str, urn_b: str, catalog_path: str, legacy: bool) -> None:
    """Print the direct parents URN_A and URN_B have in common."""
    if legacy:
        settings = settings.model_copy(update={"ancestor_mode": "legacy"})
    try:
        repository = InMemoryDatasetRepository.from_yaml(catalog_path)
        response = get_common_ancestors(urn_a, urn_b, repository=repository, settings=settings)
    except DatasetLineageError as e:
        _fail(e)
        return
    _emit(response.to_dict())


@main.command()
@click.argument("dataset_id", type=int)
@catalog_option
def dependents(dataset_id: int, catalog_path: str) -> None:
    """Print the datasets that depend on DATASET_ID."""
    try:
        repository = InMemoryDatasetRepository.from_yaml(catalog_path)
        response = get_dependents(dataset_id, repository=repository)
    except DatasetLineageError as e:
        _fail(e)
        return
    _emit(response.to_dict())


if __name__ == "__main__":
    main()
