"""Console, CSV and Excel output of the instance inventory"""

from .console import SEPARATOR, HEADERS, render_table, render_failures
from .csv_report import output_filename, render_csv, write_csv, read_csv
from .excel_report import export_to_excel
from .report import render

__all__ = [
    'SEPARATOR',
    'HEADERS',
    'render_table',
    'render_failures',
    'output_filename',
    'render_csv',
    'write_csv',
    'read_csv',
    'export_to_excel',
    'render'
]
