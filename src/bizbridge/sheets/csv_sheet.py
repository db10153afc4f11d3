"""A CSV file addressed like a spreadsheet tab.

Row 1 is the header; data starts at row 2. ``rowIndex`` is the sheet row
number, so deleting a row shifts every row below it up by one.
"""

import csv
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from ..errors import NotFoundError
from ..utils.logging import get_logger

logger = get_logger(__name__)

FIRST_DATA_ROW = 2


class CsvSheet:
    def __init__(self, path: Path, headers: Sequence[str]):
        if not headers:
            raise ValueError("CsvSheet needs at least one header")
        self.path = Path(path)
        self.headers = list(headers)

    def ensure(self) -> None:
        """Create the file with its header row if it doesn't exist."""
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write([])
        logger.info(f"Created sheet file: {self.path}")

    def _read(self) -> List[Dict[str, str]]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            return [{h: (row.get(h) or "") for h in self.headers} for row in reader]

    def _write(self, rows: List[Mapping[str, Any]]) -> None:
        with self.path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self.headers, extrasaction="ignore")
            writer.writeheader()
            for row in rows:
                writer.writerow({h: "" if row.get(h) is None else row.get(h) for h in self.headers})

    def _check_row(self, rows: List[Dict[str, str]], row_index: int) -> int:
        position = int(row_index) - FIRST_DATA_ROW
        if position < 0 or position >= len(rows):
            raise NotFoundError(f"Row in {self.path.name}", row_index)
        return position

    def read_rows(self) -> List[Dict[str, Any]]:
        """All data rows, each with its ``rowIndex``."""
        rows = []
        for offset, row in enumerate(self._read()):
            record: Dict[str, Any] = dict(row)
            record["rowIndex"] = offset + FIRST_DATA_ROW
            rows.append(record)
        return rows

    def append_row(self, values: Mapping[str, Any]) -> int:
        """Append a row and return its row index."""
        self.ensure()
        rows = self._read()
        rows.append({h: values.get(h, "") for h in self.headers})
        self._write(rows)
        return len(rows) - 1 + FIRST_DATA_ROW

    def update_row(self, row_index: int, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Overwrite the given columns of one row; other columns are kept."""
        rows = self._read()
        position = self._check_row(rows, row_index)
        for header in self.headers:
            if header in values:
                rows[position][header] = values[header]
        self._write(rows)
        updated: Dict[str, Any] = dict(rows[position])
        updated["rowIndex"] = int(row_index)
        return updated

    def delete_row(self, row_index: int) -> None:
        rows = self._read()
        position = self._check_row(rows, row_index)
        del rows[position]
        self._write(rows)
