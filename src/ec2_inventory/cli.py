import logging
import os
import sys
from datetime import datetime

import click

from .config import load_accounts, load_settings
from .discovery import AccountFetcher, FanOutCoordinator, create_base_session, merge_records
from .exceptions import ConfigError, OutputError
from .reporting import export_to_excel, output_filename, render_failures, render_table, write_csv
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_ACCOUNTS_FAILED = 3


@click.command()
@click.argument('accounts_file', type=click.Path(dir_okay=False))
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML settings file')
@click.option('--profile', '-p', help='AWS profile used to assume the account roles')
@click.option('--region', '-r', help='Region to query in every account')
@click.option('--max-workers', '-w', type=int, help='Maximum number of accounts queried at once')
@click.option('--timeout', 'task_timeout', type=float, help='Per-account timeout in seconds')
@click.option('--output-dir', '-o', help='Directory for the CSV file')
@click.option('--excel', 'excel_path', type=click.Path(dir_okay=False),
              help='Also export the inventory to this Excel file')
@click.option('--first-page-only', is_flag=True, default=False,
              help='Read only the first DescribeInstances page per account')
@click.option('--strict', is_flag=True, default=False,
              help=f'Exit with status {EXIT_ACCOUNTS_FAILED} if any account could not be queried')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Also write logs to this file')
@click.option('--log-format', type=click.Choice(['console', 'json', 'detailed']), default='console',
              help='Log output format')
def cli(accounts_file, config_path, profile, region, max_workers, task_timeout, output_dir,
        excel_path, first_page_only, strict, log_level, log_file, log_format):
    """Collect EC2 instances across AWS accounts listed in ACCOUNTS_FILE.

    ACCOUNTS_FILE is a JSON array of {"account_id": ..., "role_arn": ...} objects.
    """
    started_at = datetime.now()

    try:
        settings = load_settings(
            config_path,
            profile=profile,
            region=region,
            max_workers=max_workers,
            task_timeout=task_timeout,
            output_dir=output_dir,
            log_level=log_level.upper() if log_level else None,
            paginate=False if first_page_only else None
        )
    except ConfigError as e:
        setup_logging(log_level or 'INFO', log_file, log_format)
        logger.error(f"Failed to load settings: {e}")
        sys.exit(EXIT_FAILURE)

    setup_logging(settings.log_level, log_file, log_format)

    logger.info(f"Loading accounts from {accounts_file}")
    try:
        accounts = load_accounts(accounts_file)
        base_session = create_base_session(settings.profile, settings.region)
    except ConfigError as e:
        logger.error(f"Failed to load accounts: {e}")
        sys.exit(EXIT_FAILURE)
    logger.info(f"Loaded {len(accounts)} accounts")

    fetcher = AccountFetcher(base_session, settings)
    coordinator = FanOutCoordinator(fetcher, max_workers=settings.max_workers)
    results = coordinator.run_all_results(accounts)
    records = merge_records(results)

    click.echo(render_table(records), nl=False)
    failures = render_failures(results)
    if failures:
        click.secho(failures, fg='red', err=True, nl=False)

    output_file = os.path.join(settings.output_dir, output_filename(started_at))
    try:
        write_csv(output_file, records)
        if excel_path:
            export_to_excel(excel_path, records, results)
    except OutputError as e:
        logger.error(str(e))
        sys.exit(EXIT_FAILURE)

    click.echo(f"\n✓ CSV file saved: {output_file}")
    if excel_path:
        click.echo(f"✓ Excel file saved: {excel_path}")

    if strict and any(not r.succeeded for r in results):
        sys.exit(EXIT_ACCOUNTS_FAILED)


if __name__ == '__main__':
    cli()
