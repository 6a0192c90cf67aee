#!/usr/bin/env python3
"""
Example script: collect EC2 inventory from code and summarise it per account
"""
import sys
from collections import Counter

from ec2_inventory import (
    AccountFetcher, FanOutCoordinator, create_base_session, load_accounts, load_settings
)
from ec2_inventory.discovery import merge_records
from ec2_inventory.reporting import export_to_excel, render_failures, render_table
from ec2_inventory.utils import setup_logging


def main(accounts_file: str = 'config/accounts.example.json'):
    """Query every account, print per-account counts and write an Excel workbook"""
    setup_logging('INFO')

    settings = load_settings(max_workers=5, task_timeout=60)
    accounts = load_accounts(accounts_file)

    fetcher = AccountFetcher(create_base_session(settings.profile, settings.region), settings)
    results = FanOutCoordinator(fetcher, max_workers=settings.max_workers).run_all_results(accounts)
    records = merge_records(results)

    print(render_table(records))
    print(render_failures(results))

    print("Instances per account:")
    for account_id, count in sorted(Counter(r.account_id for r in records).items()):
        print(f"  {account_id}: {count}")

    print("\nInstances per type:")
    for instance_type, count in Counter(r.instance_type for r in records).most_common(10):
        print(f"  {instance_type}: {count}")

    export_to_excel('ec2_inventory.xlsx', records, results)
    print("\nExcel report saved to ec2_inventory.xlsx")


if __name__ == '__main__':
    main(*sys.argv[1:2])
