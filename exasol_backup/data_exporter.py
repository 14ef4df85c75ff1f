"""
Row data export for Exasol Backup.
"""

import csv
import logging
from typing import Any, Callable, TextIO

from .ddl import quote_ident
from .exceptions import ExtractionError
from .models import ObjectRecord


class DataExporter:
    """Exports table and view rows as CSV."""

    CSV_BATCH_SIZE = 5000

    def __init__(self):
        # Pre-build type formatters for faster dispatch
        self._type_formatters: dict[type, Callable[[Any], str]] = {
            type(None): lambda v: '',
            bool: lambda v: '1' if v else '0',
            int: str,
            float: repr,
            str: lambda v: v,
        }

    def build_select_query(self, record: ObjectRecord, row_cap: int) -> str:
        """Build the capped SELECT; the cap is enforced by the database."""
        return (
            f"SELECT * FROM {quote_ident(record.schema)}.{quote_ident(record.name)} "
            f"LIMIT {int(row_cap)}"
        )

    def _format_value(self, value: Any) -> str:
        formatter = self._type_formatters.get(type(value))
        if formatter:
            return formatter(value)
        return str(value)

    def export_rows(self, source, record: ObjectRecord, row_cap: int, file_handle: TextIO) -> int:
        """
        Stream up to ``row_cap`` rows of a table or view into a CSV handle.

        Fields are quoted only when they contain the delimiter, a quote
        or a line break. Nothing is written for an empty result.

        Returns:
            Number of rows written.

        Raises:
            ExtractionError: When the data query fails.
        """
        if row_cap <= 0:
            raise ValueError(f"row_cap must be positive, got {row_cap}")

        query = self.build_select_query(record, row_cap)
        logging.debug(f"Exporting '{record.label}' with query: {query}")
        writer = csv.writer(file_handle, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')

        rows_written = 0
        batch = []
        try:
            for row in source.iter_rows(query):
                batch.append([self._format_value(v) for v in row])
                rows_written += 1

                if len(batch) >= self.CSV_BATCH_SIZE:
                    writer.writerows(batch)
                    batch = []
        except OSError:
            raise
        except Exception as e:
            raise ExtractionError(record.kind, f"data export of '{record.name}' failed: {e}",
                                  record.schema) from e

        if batch:
            writer.writerows(batch)
        return rows_written
