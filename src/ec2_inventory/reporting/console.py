"""
Console rendering of the instance inventory
"""
from typing import List

from tabulate import tabulate

from ..models import AccountResult, InstanceRecord

SEPARATOR = '=' * 95
ROW_FORMAT = '{:<15} {:<20} {:<30} {:<20}'
HEADERS = ('Account ID', 'Instance ID', 'Tag Name', 'Instance Type')
EMPTY_MESSAGE = 'No EC2 instances found.'


def format_row(values) -> str:
    # Long values widen the row; nothing is truncated
    return ROW_FORMAT.format(*values)


def summary_line(count: int) -> str:
    return f"Total: {count} instance(s) retrieved"


def render_table(records: List[InstanceRecord]) -> str:
    """Render the records as a fixed-width table followed by a count summary"""
    lines = ['', SEPARATOR, format_row(HEADERS), SEPARATOR]

    if records:
        lines.extend(format_row(record.as_row()) for record in records)
    else:
        lines.append(EMPTY_MESSAGE)

    lines.append(SEPARATOR)
    lines.append(summary_line(len(records)))
    return '\n'.join(lines) + '\n'


def render_failures(results: List[AccountResult]) -> str:
    """Render a table of accounts that could not be queried, or '' if none failed"""
    failed = sorted((r for r in results if not r.succeeded), key=lambda r: r.account_id)
    if not failed:
        return ''

    rows = [[r.account_id, r.role_arn, r.error] for r in failed]
    table = tabulate(rows, headers=['Account ID', 'Role ARN', 'Reason'], tablefmt='simple')
    return f"\n{len(failed)} account(s) could not be queried:\n{table}\n"
