"""
MarkPort v1 - CSV Row Reader

Shared RFC-4180 row reading for the CSV-based export formats.
"""

import csv
import io
import logging
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


def iter_csv_rows(content: str) -> Iterator[Dict[str, str]]:
    """
    Iterate CSV records as dicts keyed by lower-cased header names.

    Quoted fields may contain commas, doubled quotes and newlines. Missing
    trailing fields read as empty strings and extra fields are ignored.
    Records the csv module cannot read are skipped.
    """
    text = content.lstrip("\ufeff").lstrip()
    reader = csv.reader(io.StringIO(text))

    try:
        header = next(reader)
    except (StopIteration, csv.Error):
        return
    keys = [column.strip().lower() for column in header]

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            logger.debug("Skipping malformed CSV record at line %d: %s", reader.line_num, e)
            continue

        if not any(field.strip() for field in row):
            continue

        yield {key: (row[i] if i < len(row) else "") for i, key in enumerate(keys)}
