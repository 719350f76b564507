"""formforge CLI: check form definitions and validate records against them."""

import asyncio
import json
from pathlib import Path

import click
import yaml

from formforge.config import Settings, load_form_file
from formforge.definitions import check_form_file, check_forms_dir
from formforge.form import Form
from formforge.logging_config import configure_logging
from formforge.validation.types import ConfigurationError


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """formforge — form field validation toolkit."""
    settings = Settings.from_env()
    configure_logging(settings.log_level, verbose=verbose)


@cli.command()
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
def check(paths: tuple[Path, ...], strict: bool):
    """Check form definition files (defaults to $FORMFORGE_FORMS_PATH or ./forms)."""
    if not paths:
        forms_path = Settings.from_env().forms_path
        if not forms_path.exists():
            click.echo(f"Error: Forms directory not found at {forms_path}", err=True)
            raise SystemExit(1)
        paths = (forms_path,)

    issues = []
    for path in paths:
        if path.is_dir():
            issues.extend(check_forms_dir(path, strict=strict))
        else:
            file_issues = check_form_file(path)
            if strict:
                for issue in file_issues:
                    issue.severity = "error"
            issues.extend(file_issues)

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    click.echo(click.style("All form definitions are valid.", fg="green", bold=True))


@cli.command()
@click.argument("form_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("record_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def validate(form_file: Path, record_file: Path, as_json: bool):
    """Validate a JSON or YAML record against a form definition."""
    try:
        definition = load_form_file(form_file)
    except ConfigurationError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    with record_file.open() as fh:
        if record_file.suffix == ".json":
            record = json.load(fh)
        else:
            record = yaml.safe_load(fh)
    if not isinstance(record, dict):
        click.echo(click.style("Error: record must be a mapping", fg="red"), err=True)
        raise SystemExit(1)

    form = Form.from_definition(definition)
    form.set_fields_value(record)
    try:
        result = asyncio.run(form.validate())
    except ConfigurationError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        failed = result.errors_by_field()
        for f in form.registry.fields():
            if f.name in failed:
                click.echo(click.style(f"  ✗ {f.name}: {failed[f.name]}", fg="red"))
            else:
                click.echo(f"  ✓ {f.name}")

    if not result.valid:
        if not as_json:
            click.echo(
                click.style(f"\n{len(result.errors)} field(s) invalid", fg="red", bold=True)
            )
        raise SystemExit(1)

    if not as_json:
        click.echo(click.style(f"\nForm '{definition.name}' is valid.", fg="green", bold=True))


def main():
    cli()
