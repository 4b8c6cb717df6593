"""Command-line interface for the sheet importer.

This module provides a CLI with support for:
- Importing a workbook and exporting its first worksheet as JSON or CSV
- Converting column labels and numbers
- Normalizing day-first date strings
- Configuration checks
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from sheet_importer import __version__
from sheet_importer.config.config_manager import config_manager
from sheet_importer.converters.column_codec import to_label, to_number
from sheet_importer.converters.date_normalizer import normalize
from sheet_importer.models.data_models import ConfigurationError, SheetImporterError
from sheet_importer.pipeline.import_pipeline import ImportPipeline
from sheet_importer.transformers import to_dataframe, to_records
from sheet_importer.utils.logger import logger_manager, setup_logging
from sheet_importer.utils.metrics import get_metrics_collector

STAGES = ("workbook_load", "table_extraction", "source_cleanup")


def _load_config(ctx: click.Context):
    config_path = ctx.obj.get('config_path')
    try:
        config = config_manager.load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    if not logger_manager.is_configured:
        setup_logging(config.logging)
    return config


def _echo_status(message: str) -> None:
    click.echo(message, err=True)


def _echo_stats() -> None:
    collector = get_metrics_collector()
    click.echo("Stage timings:", err=True)
    for stage in STAGES:
        summary = collector.get_metrics_summary(stage)
        if summary["total_operations"] == 0:
            continue
        click.echo(
            f"  {stage}: {summary.get('total_duration_ms', 0):.1f}ms "
            f"({summary['successful_operations']} ok, {summary['failed_operations']} failed)",
            err=True
        )


@click.group(invoke_without_command=True)
@click.option('--config', '-c', type=click.Path(exists=True), help='Configuration file path')
@click.option('--version', is_flag=True, help='Show version information')
@click.pass_context
def main(ctx: click.Context, config: Optional[str], version: bool) -> None:
    """Sheet Importer - convert the first worksheet of a workbook into rows.

    Reads .xlsx and .xls files, skips blank rows and trims every cell.
    """
    if version:
        click.echo(f"Sheet Importer v{__version__}")
        return

    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command(name='import')
@click.argument('file_path', type=click.Path(path_type=Path))
@click.option('--delete/--keep', default=None, help='Delete the source file after a successful import')
@click.option('--header', is_flag=True, help='Treat the first non-blank row as column names')
@click.option('--format', 'output_format', type=click.Choice(['json', 'csv']), default=None,
              help='Output format (defaults to the configured format)')
@click.option('--output', '-o', type=click.Path(path_type=Path), help='Write output to a file instead of stdout')
@click.option('--stats', is_flag=True, help='Show timing for each import stage')
@click.pass_context
def import_file(
    ctx: click.Context,
    file_path: Path,
    delete: Optional[bool],
    header: bool,
    output_format: Optional[str],
    output: Optional[Path],
    stats: bool
) -> None:
    """Import a workbook and print its first worksheet.

    FILE_PATH: Path to the .xlsx or .xls file to import
    """
    config = _load_config(ctx)
    settings = config.import_settings

    output_format = output_format or settings.output_format
    delete = settings.delete_after_finished if delete is None else delete

    def transformer(table):
        if output_format == 'csv':
            rendered = to_dataframe(table, header=header).to_csv()
        else:
            header_row = next(iter(table), None) if header else None
            rendered = json.dumps(to_records(table, header_row=header_row), ensure_ascii=False, indent=2)

        # Must run before the pipeline deletes the source
        if output:
            output.write_text(rendered, encoding='utf-8')
        return rendered

    pipeline = (
        ImportPipeline(status_callback=_echo_status)
        .source(file_path)
        .transformer(transformer)
        .delete_after_finished(delete)
        .lift_resource_limits(settings.lift_resource_limits)
    )

    try:
        rendered = pipeline.process()
    except SheetImporterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"Error: Cannot write output: {e}", err=True)
        sys.exit(1)

    if output:
        click.echo(f"Output written to {output}", err=True)
    else:
        click.echo(rendered)

    if stats:
        _echo_stats()


@main.command()
@click.argument('value')
def column(value: str) -> None:
    """Convert a column number to its label or a label to its number.

    VALUE: A column number such as 27 or a label such as AA
    """
    try:
        if value.isdecimal():
            click.echo(to_label(int(value)))
        else:
            click.echo(to_number(value))
    except SheetImporterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument('text')
def date(text: str) -> None:
    """Normalize a DD/MM/YYYY, DD-MM-YYYY, DD/MM/YY or DD-MM-YY date to ISO.

    TEXT: The date string to normalize
    """
    try:
        iso = normalize(text)
    except SheetImporterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if iso is None:
        click.echo(f"Not a recognized date: {text}", err=True)
        sys.exit(1)

    click.echo(iso)


@main.command()
@click.pass_context
def config_check(ctx: click.Context) -> None:
    """Validate and display current configuration."""
    config = _load_config(ctx)
    settings = config.import_settings

    click.echo("Configuration loaded successfully")
    click.echo()
    click.echo("Configuration Summary:")
    click.echo(f"  Delete after finished: {settings.delete_after_finished}")
    click.echo(f"  Lift resource limits: {settings.lift_resource_limits}")
    click.echo(f"  Output format: {settings.output_format}")
    click.echo(f"  Logging level: {config.logging.level}")
    click.echo(f"  Log file: {config.logging.file_path if config.logging.file_enabled else 'disabled'}")


if __name__ == '__main__':
    main()
