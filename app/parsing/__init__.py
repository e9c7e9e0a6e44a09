"""
app/parsing package marker.
"""

from app.parsing.report_reader import ParsedReport, RawRow, ReportReader, detect_delimiter

__all__ = [
    "ParsedReport",
    "RawRow",
    "ReportReader",
    "detect_delimiter",
]
