"""Export stored lighthouse scores.

Reads the most recent results from the store, applies the same domain and
device filters and sort as the dashboard, and writes either the CSV export
or a colored summary table.

Examples:
  python scripts/export_results.py --domain www.example.com --strategy mobile
  python scripts/export_results.py --format table --sort total_blocking_time --direction asc
  python scripts/export_results.py -o - > results.csv
"""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from speedboard.lib.database import is_database_configured
from speedboard.models.pagespeed import MetricRecord
from speedboard.services.history import (
  NUMERIC_FIELDS,
  SORT_FIELDS,
  export_csv,
  export_filename,
  format_fixed,
  format_timestamp,
  numeric_value,
  rate_metric,
  results_view,
)
from speedboard.services.results_service import ResultsService

env_path = Path(__file__).parent.parent / '.env.local'
if env_path.exists():
  load_dotenv(env_path)

console = Console(stderr=True)

RATING_STYLES = {
  'good': 'green',
  'needs-improvement': 'yellow',
  'poor': 'red',
  'unknown': 'dim',
}


def build_table(records: list[MetricRecord]) -> Table:
  """Summary table with each measurement colored by its Core Web Vitals rating."""
  table = Table(title=f'Lighthouse results ({len(records)})')
  table.add_column('ID', justify='right')
  table.add_column('Created At')
  table.add_column('URL')
  table.add_column('Device')
  table.add_column('FCP (s)', justify='right')
  table.add_column('SI (s)', justify='right')
  table.add_column('LCP (s)', justify='right')
  table.add_column('TBT (ms)', justify='right')
  table.add_column('TTI (s)', justify='right')

  for record in records:
    cells = []
    for field in NUMERIC_FIELDS:
      value = numeric_value(record, field)
      digits = 0 if field == 'total_blocking_time' else 1
      style = RATING_STYLES[rate_metric(field, value)]
      cells.append(f'[{style}]{format_fixed(value, digits)}[/{style}]')
    table.add_row(
      str(record.id) if record.id is not None else '',
      format_timestamp(record.created_at),
      record.url or '',
      record.device_strategy or '',
      *cells,
    )
  return table


@click.command()
@click.option('--limit', default=100, show_default=True, type=click.IntRange(1, 1000), help='Most recent records to read')
@click.option('--domain', default=None, help='Exact hostname filter (e.g. www.example.com)')
@click.option('--strategy', default='all', show_default=True, type=click.Choice(['all', 'desktop', 'mobile']))
@click.option('--sort', 'sort_field', default='created_at', show_default=True, type=click.Choice(SORT_FIELDS))
@click.option('--direction', default='desc', show_default=True, type=click.Choice(['asc', 'desc']))
@click.option('--format', 'output_format', default='csv', show_default=True, type=click.Choice(['csv', 'table']))
@click.option('--output', '-o', default=None, help='CSV destination; "-" for stdout (default: generated file name)')
def main(limit, domain, strategy, sort_field, direction, output_format, output):
  """Export lighthouse scores as CSV or print them as a table."""
  if not is_database_configured():
    console.print('[red]✗ Results store is not configured.[/red] Set DATABASE_URL, or PGHOST, PGDATABASE and PGUSER.')
    sys.exit(1)

  try:
    rows = ResultsService().list_results(limit)
  except Exception as e:
    console.print(f'[red]✗ Failed to read results: {e}[/red]')
    sys.exit(1)

  records = [MetricRecord.model_validate(row) for row in rows]
  view = results_view(records, domain, strategy, sort_field, direction)

  if output_format == 'table':
    Console().print(build_table(view))
    return

  content = export_csv(view)
  if output == '-':
    click.echo(content)
    return

  destination = Path(output or export_filename(domain, strategy))
  destination.write_text(content + '\n', encoding='utf-8')
  console.print(f'[green]✓ Wrote {len(view)} results to {destination}[/green]')


if __name__ == '__main__':
  main()
