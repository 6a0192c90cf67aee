"""
CSV rendering and file output
"""
import csv
import io
import logging
import os
from datetime import datetime
from typing import List, Optional

from ..exceptions import OutputError
from ..models import InstanceRecord
from .console import HEADERS

logger = logging.getLogger(__name__)

FILENAME_PREFIX = 'ec2_instances'
TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'


def output_filename(started_at: Optional[datetime] = None) -> str:
    """Name of the CSV file for a run started at the given local time"""
    started_at = started_at or datetime.now()
    return f"{FILENAME_PREFIX}_{started_at.strftime(TIMESTAMP_FORMAT)}.csv"


def render_csv(records: List[InstanceRecord]) -> bytes:
    """Render the header and one row per record as UTF-8 CSV"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(HEADERS)
    writer.writerows(record.as_row() for record in records)
    return buffer.getvalue().encode('utf-8')


def write_csv(path: str, records: List[InstanceRecord]) -> str:
    """
    Write the records to a CSV file

    Raises:
        OutputError: the file could not be created or written
    """
    logger.info(f"Writing CSV file: {path}")
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(render_csv(records))
    except OSError as e:
        raise OutputError(f"Failed to write CSV file {path}: {e}") from e

    logger.info(f"Wrote {len(records)} rows to {path}")
    return path


def read_csv(path: str) -> List[InstanceRecord]:
    """Read a CSV file produced by write_csv back into records"""
    with open(path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None or tuple(header) != HEADERS:
            raise ValueError(f"{path} is not an instance inventory CSV")
        return [InstanceRecord.from_row(row) for row in reader]
