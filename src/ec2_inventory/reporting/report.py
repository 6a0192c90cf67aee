from typing import List, Tuple

from ..models import InstanceRecord
from .console import render_table
from .csv_report import render_csv


def render(records: List[InstanceRecord]) -> Tuple[str, bytes]:
    """Render the records as (console table text, CSV bytes)"""
    return render_table(records), render_csv(records)
