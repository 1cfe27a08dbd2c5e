"""CLI entry point for api-doc-extractor."""

import fnmatch
import logging
from pathlib import Path

import click
import yaml

from api_doc_extractor.config import ExtractorConfig, load_config
from api_doc_extractor.errors import ExtractorError
from api_doc_extractor.extractor import Extraction, Extractor
from api_doc_extractor.facts.loader import load_facts
from api_doc_extractor.generator.validator import validate_document
from api_doc_extractor.generator.writer import write_document
from api_doc_extractor.parser.base import Summary
from api_doc_extractor.routing.collector import ResolvedRoute


def _filter_routes(routes: list[ResolvedRoute], patterns: tuple[str, ...]) -> list[ResolvedRoute]:
    """Keep routes matching any ``METHOD /path`` or ``/path`` glob pattern."""
    if not patterns:
        return routes
    result = []
    for route in routes:
        for pattern in patterns:
            if " " in pattern.strip():
                method, path = pattern.split(None, 1)
                if method.lower() != route.method.lower():
                    continue
            else:
                path = pattern.strip()
            if fnmatch.fnmatchcase(route.path, path):
                result.append(route)
                break
    return result


def _load_config(config_path: Path | None, **overrides) -> ExtractorConfig:
    config = load_config(config_path) if config_path else ExtractorConfig()
    info = {key: value for key, value in overrides.pop("info").items() if value is not None}
    if info:
        config.info = config.info.model_copy(update=info)
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    return config


def _extract(facts_path: Path, config: ExtractorConfig) -> tuple[Extractor, Extraction]:
    click.echo(f"Reading facts from {facts_path}...")
    try:
        facts = load_facts(facts_path)
    except ExtractorError as e:
        raise click.ClickException(str(e)) from e
    extractor = Extractor(config)
    return extractor, extractor.extract(facts)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log heuristics and recoveries.")
def main(verbose: bool):
    """API Doc Extractor: generate OpenAPI documents from routing code and its comments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("facts_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file (.json, .yaml or .yml).")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("--title", default=None, help="Document title.")
@click.option("--version", "api_version", default=None, help="API version.")
@click.option("--content-type", default=None, help="Default media type for bodies and responses.")
@click.option("--route", "routes", multiple=True, help='Only document matching routes, e.g. "GET /users/*".')
@click.option("--strict", is_flag=True, help="Fail when the generated document has problems.")
def generate(
    facts_path: Path,
    output: Path | None,
    config_path: Path | None,
    title: str | None,
    api_version: str | None,
    content_type: str | None,
    routes: tuple[str, ...],
    strict: bool,
):
    """Generate an OpenAPI document from a fact sheet."""
    try:
        config = _load_config(
            config_path,
            info={"title": title, "version": api_version},
            default_content_type=content_type,
            output_file=output,
        )
    except ExtractorError as e:
        raise click.ClickException(str(e)) from e

    extractor, extraction = _extract(facts_path, config)
    selected = _filter_routes(extraction.routes, routes or tuple(config.routes))
    click.echo(f"Found {len(selected)} routes.")

    document = extractor.document(extraction, selected)
    problems = validate_document(document)
    for location, message in problems.items():
        click.echo(f"  {location}: {message}", err=True)
    if problems and strict:
        raise click.ClickException(f"{len(problems)} problems in the generated document")

    try:
        write_document(document, config.output_file)
    except ExtractorError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"OpenAPI document saved to {config.output_file}")


@main.command()
@click.argument("facts_path", type=click.Path(exists=True, path_type=Path))
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("--route", "routes", multiple=True, help='Only list matching routes, e.g. "/users/*".')
def routes(facts_path: Path, config_path: Path | None, routes: tuple[str, ...]):
    """List the routes found in a fact sheet."""
    try:
        config = _load_config(config_path, info={})
    except ExtractorError as e:
        raise click.ClickException(str(e)) from e

    _, extraction = _extract(facts_path, config)
    selected = _filter_routes(extraction.routes, routes or tuple(config.routes))
    for route in selected:
        summary = next((f.text for f in route.fields if isinstance(f, Summary)), "")
        click.echo(f"{route.method.upper():<8}{route.path}  {summary}".rstrip())
    click.echo(f"{len(selected)} routes.")


@main.command()
@click.argument("document_path", type=click.Path(exists=True, path_type=Path))
def check(document_path: Path):
    """Validate an existing OpenAPI document."""
    try:
        document = yaml.safe_load(document_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise click.ClickException(f"Cannot parse {document_path}: {e}") from e
    if not isinstance(document, dict):
        raise click.ClickException(f"{document_path} is not an OpenAPI document")

    problems = validate_document(document)
    for location, message in problems.items():
        click.echo(f"  {location}: {message}")
    if problems:
        raise click.ClickException(f"{len(problems)} problems found")
    click.echo(f"{document_path} is valid.")
