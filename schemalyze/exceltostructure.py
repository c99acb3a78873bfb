"""
Placeholder for spreadsheet workbooks.

The format is registered so that option discovery can describe it, but it
cannot be analyzed yet; the registry reports it as registered and not usable.
"""

from typing import Dict, List, Optional, Sequence

from schemalyze.errors import UnsupportedFormatError
from schemalyze.structure import FileFormat, StructureElement


class ExcelParser:
    """Registered stand-in for Excel workbooks. Every operation that would read data fails."""

    file_format = FileFormat.EXCEL
    implemented = False

    def can_handle(self, request) -> bool:
        return False

    def available_options(self) -> Dict[str, str]:
        return {
            'sheetName': "Name of the worksheet to read",
            'sheetIndex': "0-based index of the worksheet when no name is given (default: 0)",
            'startRow': "0-based row where data starts (default: 0)",
            'hasHeader': "Whether the first row holds column names (default: true)",
            'endRow': "0-based row where data ends (default: last row)",
        }

    def parse(self, request, warnings: Optional[List[str]] = None) -> StructureElement:
        raise UnsupportedFormatError("Excel parsing is not implemented yet", FileFormat.EXCEL.code)

    def merge_samples(self, structures: Sequence[StructureElement]) -> StructureElement:
        raise UnsupportedFormatError("Excel parsing is not implemented yet", FileFormat.EXCEL.code)
