"""
Excel export of the instance inventory
"""
import logging
from typing import List

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..exceptions import OutputError
from ..models import AccountResult, InstanceRecord
from .console import HEADERS

logger = logging.getLogger(__name__)

ACCOUNT_COLUMNS = ['Account ID', 'Role ARN', 'Status', 'Instances', 'Duration (s)', 'Error']


def _cell_text(value: str) -> str:
    # Tag values may hold control characters that worksheets cannot store
    return ILLEGAL_CHARACTERS_RE.sub('', value)


def _instances_frame(records: List[InstanceRecord]) -> pd.DataFrame:
    rows = [[_cell_text(value) for value in record.as_row()] for record in records]
    df = pd.DataFrame(rows, columns=list(HEADERS))
    return df.sort_values(['Account ID', 'Instance ID']) if not df.empty else df


def _accounts_frame(results: List[AccountResult]) -> pd.DataFrame:
    rows = [
        [_cell_text(r.account_id), _cell_text(r.role_arn), r.status.value, len(r.records),
         round(r.duration_seconds, 2), _cell_text(r.error or '')]
        for r in results
    ]
    df = pd.DataFrame(rows, columns=ACCOUNT_COLUMNS)
    return df.sort_values('Account ID') if not df.empty else df


def _format_sheet(worksheet):
    for column in worksheet.columns:
        max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        column_letter = get_column_letter(column[0].column)
        worksheet.column_dimensions[column_letter].width = min(max_length + 2, 50)

    for cell in worksheet[1]:
        cell.fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        cell.font = Font(color="FFFFFF", bold=True)
        cell.alignment = Alignment(horizontal="center")


def export_to_excel(path: str, records: List[InstanceRecord], results: List[AccountResult]) -> str:
    """
    Export instances and per-account outcomes to an Excel workbook

    Raises:
        OutputError: the workbook could not be written
    """
    try:
        with pd.ExcelWriter(path, engine='openpyxl') as writer:
            _instances_frame(records).to_excel(writer, sheet_name='Instances', index=False)
            _accounts_frame(results).to_excel(writer, sheet_name='Accounts', index=False)

            for worksheet in writer.book.worksheets:
                _format_sheet(worksheet)
    except (OSError, ValueError) as e:
        raise OutputError(f"Failed to write Excel file {path}: {e}") from e

    logger.info(f"Exported {len(records)} instances from {len(results)} accounts to {path}")
    return path
