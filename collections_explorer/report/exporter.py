"""CSV export of reports.

Each analysis kind has a fixed column schema: the fields of its record class,
in declaration order. List-valued fields are packed into a single cell as a
``|``-delimited CSV sub-row, so delimiters, quotes and newlines inside list
items survive a write/read cycle unchanged.
"""
import csv
import io
from dataclasses import fields
from pathlib import Path
from typing import Iterable, List, Optional

import structlog

from collections_explorer.analyzer.records import column_names, list_columns
from collections_explorer.report.context import ReportContext


logger = structlog.get_logger()

LIST_DELIMITER = '|'
_SUB_ROW_TERMINATOR = '\r\n'


def encode_list(values: List[str]) -> str:
    """Pack a list of strings into one cell.

    An empty list packs to '' and a list holding one empty string to '""',
    so the two stay distinguishable.
    """
    if not values:
        return ''
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=LIST_DELIMITER, lineterminator=_SUB_ROW_TERMINATOR)
    writer.writerow(values)
    return buffer.getvalue()[:-len(_SUB_ROW_TERMINATOR)]


def decode_list(cell: str) -> List[str]:
    """Inverse of encode_list."""
    if cell == '':
        return []
    reader = csv.reader(io.StringIO(cell, newline=''), delimiter=LIST_DELIMITER)
    return next(reader)


def write_info(output_path: str | Path, records: Iterable, record_type: type) -> int:
    """Write records as CSV: header first, then one row per record, in order.

    Args:
        output_path: Destination file (overwritten)
        records: Records of record_type, already in report order
        record_type: Record dataclass defining the column schema

    Returns:
        Number of rows written
    """
    columns = column_names(record_type)
    packed = set(list_columns(record_type))

    rows = 0
    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(columns)
        for record in records:
            writer.writerow([
                encode_list(getattr(record, column)) if column in packed else getattr(record, column)
                for column in columns
            ])
            rows += 1
    return rows


def read_info(input_path: str | Path, record_type: type) -> List:
    """Parse a file written by write_info back into records."""
    converters = {}
    for f in fields(record_type):
        if f.default_factory is list:
            converters[f.name] = decode_list
        elif f.type is int:
            converters[f.name] = int
        else:
            converters[f.name] = str

    with open(input_path, 'r', encoding='utf-8', newline='') as f:
        return [
            record_type(**{name: converters[name](value) for name, value in row.items()})
            for row in csv.DictReader(f)
        ]


def export_reports(context: ReportContext, output_dir: Optional[str | Path] = None) -> List[Path]:
    """Write one CSV per configured analysis kind.

    Args:
        context: Context holding the run's reports
        output_dir: Target directory; the working directory when None

    Returns:
        Paths of the written files, in AnalysisKind order
    """
    directory = Path(output_dir) if output_dir is not None else Path.cwd()
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for kind, report in context.reports.items():
        output_file = directory / kind.output_file
        logger.info("writing_report", kind=kind.label, entries=report.record_count, path=str(output_file))
        write_info(output_file, report.records(), kind.record_type)
        written.append(output_file)
    return written
