"""CLI entry point for api-mocker."""

import json
import logging
from pathlib import Path

import click
import yaml

from api_mocker.config import load_config
from api_mocker.engine import MockEngine
from api_mocker.errors import ApiMockerError
from api_mocker.parser.export import document_to_dict
from api_mocker.results import (
    MethodNotAllowed,
    MockResponse,
    NoDefaultSpecConfigured,
    NoResponseDefined,
    RouteNotFound,
    SpecNotFound,
)

# Transport status for each non-success result
RESULT_STATUS = {
    RouteNotFound: 404,
    MethodNotAllowed: 405,
    SpecNotFound: 400,
    NoDefaultSpecConfigured: 400,
    NoResponseDefined: 200,
}


class _NoAliasDumper(yaml.SafeDumper):
    def ignore_aliases(self, data):
        return True


def _engine(ctx: click.Context) -> MockEngine:
    """Build the engine lazily so `--help` never touches the specs directory."""
    if ctx.obj.get("engine") is None:
        try:
            config = load_config(ctx.obj["config_path"])
        except ApiMockerError as e:
            raise click.ClickException(str(e)) from e
        if ctx.obj.get("specs_dir") is not None:
            config.specs_dir = ctx.obj["specs_dir"]
        engine = MockEngine(config)
        report = engine.reload()
        for name, reason in report.failures.items():
            click.echo(f"Skipped {name}: {reason}", err=True)
        ctx.obj["engine"] = engine
    return ctx.obj["engine"]


def _dump_json(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


@click.group()
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("-s", "--specs-dir", default=None, type=click.Path(file_okay=False, path_type=Path), help="Directory of OpenAPI documents (overrides the configuration).")
@click.option("--log-level", default="WARNING", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]), help="Logging verbosity.")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, specs_dir: Path | None, log_level: str):
    """Serve synthetic responses from OpenAPI documents."""
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj.update(config_path=config_path, specs_dir=specs_dir)


@main.command()
@click.pass_context
def specs(ctx: click.Context):
    """List loaded specifications."""
    engine = _engine(ctx)
    click.echo(_dump_json(engine.list_loaded_specs()))


@main.command()
@click.argument("spec_name")
@click.pass_context
def endpoints(ctx: click.Context, spec_name: str):
    """List endpoints declared by one specification."""
    result = _engine(ctx).list_endpoints(spec_name)
    if isinstance(result, SpecNotFound):
        raise click.ClickException(result.message)
    click.echo(_dump_json(result))


@main.command()
@click.argument("method")
@click.argument("path")
@click.option("--spec", "spec_name", default=None, help="Specification to answer from (default spec when omitted).")
@click.option("--data", default=None, help="Request body as JSON.")
@click.pass_context
def mock(ctx: click.Context, method: str, path: str, spec_name: str | None, data: str | None):
    """Answer one request with a synthetic response."""
    body = None
    if data is not None:
        try:
            body = json.loads(data)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--data") from e

    result = _engine(ctx).handle(method, path, spec_name=spec_name, body=body)
    if isinstance(result, MockResponse):
        click.echo(f"HTTP {result.status}")
        if result.body is not None:
            click.echo(_dump_json(result.body))
        return

    status = RESULT_STATUS[type(result)]
    click.echo(f"HTTP {status}")
    click.echo(result.message)
    if isinstance(result, MethodNotAllowed):
        click.echo(f"Allowed: {', '.join(result.allowed_methods)}")
    if status >= 400:
        ctx.exit(1)


@main.command()
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the merged YAML document.")
@click.pass_context
def merge(ctx: click.Context, output: Path):
    """Write the merged view of all loaded specifications."""
    engine = _engine(ctx)
    merged = engine.registry.get(engine.config.merged_spec_name)
    if isinstance(merged, SpecNotFound):
        raise click.ClickException("No merged specification available (merge_specs disabled or no specs loaded).")

    output.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.dump(document_to_dict(merged), Dumper=_NoAliasDumper, sort_keys=False, allow_unicode=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Merged {len(merged.paths)} paths into {output}")


@main.command()
@click.argument("spec_name")
@click.argument("schema_name")
@click.pass_context
def generate(ctx: click.Context, spec_name: str, schema_name: str):
    """Print a synthetic value for a component schema."""
    try:
        value = _engine(ctx).generate_schema(spec_name, schema_name)
    except ApiMockerError as e:
        raise click.ClickException(str(e)) from e
    if isinstance(value, SpecNotFound):
        raise click.ClickException(value.message)
    click.echo(_dump_json(value))
