"""CLI entry point for api-doc-builder."""

from pathlib import Path

import click

from api_doc_builder import config
from api_doc_builder.aggregator import AggregationResult, aggregate
from api_doc_builder.errors import GroupLoadError
from api_doc_builder.loader.sources import load_groups
from api_doc_builder.log import configure_logging
from api_doc_builder.swagger.dsl import Info
from api_doc_builder.swagger.serialize import dump_json, dump_yaml


def _aggregate_sources(sources: tuple[str, ...], info: Info, host: str | None = None, base_path: str | None = None) -> AggregationResult:
    """Load every path group source and aggregate them."""
    try:
        groups = load_groups(sources)
    except GroupLoadError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Loaded {len(groups)} path group(s).", err=True)
    return aggregate(info, groups, host=host, base_path=base_path)


def _report_errors(result: AggregationResult) -> None:
    click.echo(f"Found {len(result.errors)} error(s):", err=True)
    for error in result.errors:
        click.echo(f"  {type(error).__name__}: {error}", err=True)
    raise SystemExit(1)


def _resolve_format(fmt: str | None, output: Path | None) -> str:
    if fmt:
        return fmt
    if output is not None and output.suffix.lower() in (".yaml", ".yml"):
        return "yaml"
    return config.DEFAULT_FORMAT


@click.group()
def main():
    """API Doc Builder: aggregate path groups into one Swagger 2.0 document."""
    pass


@main.command()
@click.argument("sources", nargs=-1, required=True)
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file; stdout when omitted.")
@click.option("--format", "fmt", default=None, type=click.Choice(config.OUTPUT_FORMATS), help="Output format (defaults from the output suffix).")
@click.option("--title", default=config.DEFAULT_TITLE, envvar=config.ENV_TITLE, help="API title.")
@click.option("--version", "api_version", default=config.DEFAULT_VERSION, envvar=config.ENV_VERSION, help="API version.")
@click.option("--description", default=None, envvar=config.ENV_DESCRIPTION, help="API description.")
@click.option("--host", default=None, envvar=config.ENV_HOST, help="Host serving the API.")
@click.option("--base-path", default=None, envvar=config.ENV_BASE_PATH, help="Base path of every route.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
def build(
    sources: tuple[str, ...],
    output: Path | None,
    fmt: str | None,
    title: str,
    api_version: str,
    description: str | None,
    host: str | None,
    base_path: str | None,
    verbose: bool,
):
    """Aggregate path groups and write the Swagger document."""
    configure_logging(verbose)
    info = Info(title=title, version=api_version, description=description)
    result = _aggregate_sources(sources, info, host=host, base_path=base_path)
    if not result.ok:
        _report_errors(result)

    document = result.unwrap()
    fmt = _resolve_format(fmt, output)
    text = dump_yaml(document) if fmt == "yaml" else dump_json(document)

    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Swagger document saved to {output}", err=True)


@main.command()
@click.argument("sources", nargs=-1, required=True)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
def check(sources: tuple[str, ...], verbose: bool):
    """Validate path groups and report every error at once."""
    configure_logging(verbose)
    info = Info(title=config.DEFAULT_TITLE, version=config.DEFAULT_VERSION)
    result = _aggregate_sources(sources, info)
    if not result.ok:
        _report_errors(result)

    document = result.unwrap()
    click.echo(f"OK: {len(document.paths)} path(s), {len(document.definitions)} definition(s).")
