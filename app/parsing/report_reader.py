"""
app/parsing/report_reader.py

Decodes an uploaded report and splits it into header and raw rows.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

from app.domain.errors import ParseFatalError

RawRow = dict[str, str]


@dataclass(frozen=True)
class ParsedReport:
    """
    Header row plus ``(line_number, raw_row)`` pairs for every data line.
    """

    headers: list[str]
    delimiter: str
    rows: list[tuple[int, RawRow]] = field(default_factory=list)


def detect_delimiter(header_line: str) -> str:
    return ";" if ";" in header_line else ","


class ReportReader:
    """
    Reads UTF-8 report text (optionally BOM-prefixed) into raw rows.
    """

    def read(self, content: bytes) -> ParsedReport:
        """
        Parse a whole report file.

        Blank lines are skipped. Quoted fields may contain the delimiter,
        line breaks, and doubled quotes.
        """

        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseFatalError("Report must be UTF-8 encoded.") from exc

        header_line = next((line for line in text.splitlines() if line.strip()), None)
        if header_line is None:
            raise ParseFatalError("Report header row is missing.")
        delimiter = detect_delimiter(header_line)

        reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, quotechar='"')
        headers: list[str] | None = None
        rows: list[tuple[int, RawRow]] = []
        try:
            for cells in reader:
                is_blank = not any(cell.strip() for cell in cells)
                if is_blank and (headers is None or len(cells) <= 1):
                    continue
                if headers is None:
                    headers = [cell.strip() for cell in cells]
                    continue
                rows.append((reader.line_num, _to_raw_row(headers, cells)))
        except csv.Error as exc:
            raise ParseFatalError(f"Invalid CSV format: {exc}") from exc

        if not headers:
            raise ParseFatalError("Report header row is missing.")
        return ParsedReport(headers=headers, delimiter=delimiter, rows=rows)


def _to_raw_row(headers: list[str], cells: list[str]) -> RawRow:
    row: RawRow = {}
    for index, header in enumerate(headers):
        if header in row:
            continue
        row[header] = cells[index].strip() if index < len(cells) else ""
    return row
