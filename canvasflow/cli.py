"""Command-line interface for canvasflow."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

from canvasflow.config import EngineSettings, load_canvasflow_toml


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        click.echo(f"Error: {path} is not valid JSON: {e}", err=True)
        sys.exit(1)


def _write_json(payload: Any, output: str | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        click.echo(f"✓ Wrote {output}")
    else:
        click.echo(text)


def parse_trigger(spec: str) -> tuple[str, str, dict[str, Any] | None]:
    """Parse ``NODE:EVENT[=VALUE]`` into execute_node_events arguments."""
    head, sep, value = spec.partition("=")
    node_id, colon, event_type = head.rpartition(":")
    if not colon or not node_id or not event_type:
        raise click.BadParameter(f"expected NODE:EVENT[=VALUE], got {spec!r}")
    return node_id, event_type, ({"value": value} if sep else None)


# ---------------------------------------------------------------------------
# Click CLI
# ---------------------------------------------------------------------------


@click.group()
@click.option("--config", "config_path", help="Path to canvasflow.toml")
@click.pass_context
def cli(ctx, config_path):
    """canvasflow - run and check no-code canvas projects"""
    load_dotenv(Path.cwd() / ".env")
    settings = EngineSettings.from_config(load_canvasflow_toml(config_path))
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@cli.command("validate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def validate(file):
    """Check a project file for structural errors and wiring mistakes."""
    from canvasflow.validation import check_project

    report = check_project(_read_json(file))
    for err in report.errors:
        click.echo(f"  error: {err}", err=True)
    for warning in report.warnings:
        click.echo(f"  warning: {warning}", err=True)
    if not report.ok:
        sys.exit(1)
    click.echo(f"✓ {file} is a valid project ({len(report.data.nodes)} nodes).")


@cli.command("migrate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", help="Write the migrated data here instead of stdout")
def migrate(file, output):
    """Upgrade a project file saved in an older format."""
    from canvasflow.migration import load_project_data, unwrap_project_payload
    from canvasflow.model import ProjectValidationError

    try:
        data = load_project_data(unwrap_project_payload(_read_json(file)))
    except ProjectValidationError as e:
        for issue in e.issues:
            click.echo(f"  error: {issue}", err=True)
        sys.exit(1)
    _write_json(data.to_json_dict(), output)


@cli.command("templates")
def templates():
    """List the built-in starter projects."""
    from canvasflow.templates import list_templates

    for template in list_templates():
        click.echo(
            f"{template.icon} {template.id:<18} {template.name} "
            f"({template.components} components) - {template.description}"
        )


@cli.command("template")
@click.argument("template_id")
@click.option("-o", "--output", help="Write the template here instead of stdout")
def template(template_id, output):
    """Dump a starter project's data."""
    from canvasflow.templates import TemplateNotFound, get_template_data

    try:
        data = get_template_data(template_id)
    except TemplateNotFound as e:
        click.echo(f"Error: {e.args[0]}", err=True)
        sys.exit(1)
    _write_json(data.to_json_dict(), output)


@cli.command("preview")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-t",
    "--trigger",
    "triggers",
    multiple=True,
    help="NODE:EVENT[=VALUE], e.g. button-1:onClick or input-1:onChange=Ada",
)
@click.option("--interpolate/--no-interpolate", default=None, help="Interpolate action values")
@click.pass_obj
def preview(settings, file, triggers, interpolate):
    """Run triggers against a project headlessly and print what happened."""
    from canvasflow.validation import check_project
    from canvasflow.testing import PreviewHarness

    report = check_project(_read_json(file))
    if not report.ok:
        for err in report.errors:
            click.echo(f"  error: {err}", err=True)
        sys.exit(1)

    settings = settings or EngineSettings()
    if interpolate is not None:
        settings.interpolate_actions = interpolate
    harness = PreviewHarness(report.data, settings=settings)
    try:
        for spec in triggers:
            node_id, event_type, event_data = parse_trigger(spec)
            matched = harness.trigger(node_id, event_type, event_data)
            click.echo(f"→ {node_id}:{event_type} ran {matched} event(s)")
        for message in harness.calls.alerts:
            click.echo(f"alert: {message}")
        for diagnostic in harness.calls.diagnostics:
            click.echo(f"skipped: {diagnostic.message}", err=True)
        engine = harness.engine
        summary = {
            "variables": harness.variables,
            "nodeValues": engine.node_values() if engine else {},
            "history": [
                entry.model_dump(mode="json") for entry in harness.recorder.history
            ],
        }
        click.echo(json.dumps(summary, indent=2, ensure_ascii=False, default=str))
    finally:
        harness.close()


def main() -> None:
    """Main CLI entry point (delegates to click)."""
    cli()


if __name__ == "__main__":
    main()
