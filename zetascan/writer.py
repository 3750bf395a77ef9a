"""Writers for outputting results to CSV and JSON Lines formats."""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

VERIFICATION_FIELDS = (
    "item",
    "match",
    "expected",
    "passed",
    "time_elapsed_ms",
    "error",
)

RESULT_FIELDS = (
    "item",
    "found",
    "score",
    "webscore",
    "fromSubnet",
    "sources",
    "wl",
    "wldata",
    "extended",
    "executionTime",
    "status",
    "transport",
    "returnCodes",
    "categories",
)


class Serializable(Protocol):
    def to_dict(self) -> Dict[str, Any]: ...


class CSVWriter:
    """CSV writer for verification or query results."""

    def __init__(self, file_path: Path, fieldnames: Sequence[str] = VERIFICATION_FIELDS):
        self.file_path = file_path
        self.fieldnames = list(fieldnames)
        self._file = None
        self._writer = None

    def __enter__(self):
        self._file = open(self.file_path, mode='w', newline='', encoding='utf-8')
        self._writer = csv.DictWriter(self._file, fieldnames=self.fieldnames, extrasaction='ignore')
        self._writer.writeheader()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file:
            self._file.close()

    def write_result(self, result: Serializable) -> None:
        """
        Write a result as one CSV row.

        Lists and nested records are serialized as JSON.

        Args:
            result: Object with a ``to_dict()`` method
        """
        row = {
            key: json.dumps(value) if isinstance(value, (list, dict)) else value
            for key, value in result.to_dict().items()
        }
        self._writer.writerow(row)
        self._file.flush()


class JSONLWriter:
    """JSON Lines writer for verification or query results."""

    def __init__(self, file_path: Path):
        self.file_path = file_path
        self._file = None

    def __enter__(self):
        self._file = open(self.file_path, mode='w', encoding='utf-8')
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file:
            self._file.close()

    def write_result(self, result: Serializable) -> None:
        """Write a result as one JSON line."""
        json_line = json.dumps(result.to_dict(), ensure_ascii=False)
        self._file.write(json_line + '\n')
        self._file.flush()


class ResultsManager:
    """
    Manages the configured result writers behind one interface.
    """

    def __init__(
        self,
        csv_path: Optional[Path] = None,
        jsonl_path: Optional[Path] = None,
        fieldnames: Sequence[str] = VERIFICATION_FIELDS
    ):
        self.csv_path = csv_path
        self.jsonl_path = jsonl_path
        self.fieldnames = fieldnames

        self._csv_writer: Optional[CSVWriter] = None
        self._jsonl_writer: Optional[JSONLWriter] = None
        self._written = 0

    def __enter__(self):
        if self.csv_path:
            self._csv_writer = CSVWriter(self.csv_path, self.fieldnames).__enter__()

        if self.jsonl_path:
            self._jsonl_writer = JSONLWriter(self.jsonl_path).__enter__()

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._csv_writer:
            self._csv_writer.__exit__(exc_type, exc_val, exc_tb)

        if self._jsonl_writer:
            self._jsonl_writer.__exit__(exc_type, exc_val, exc_tb)

    def write_result(self, result: Serializable) -> None:
        """Write a result to all configured writers."""
        if self._csv_writer:
            self._csv_writer.write_result(result)

        if self._jsonl_writer:
            self._jsonl_writer.write_result(result)

        self._written += 1
        logger.debug(f"Wrote result {self._written}")

    def get_written_count(self) -> int:
        """Get the number of results written."""
        return self._written
