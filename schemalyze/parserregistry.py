"""
Lookup table from file formats to parsers.
"""

import logging
import threading
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

from schemalyze.errors import UnsupportedFormatError
from schemalyze.structure import FileFormat, StructureElement

logger = logging.getLogger(__name__)


@runtime_checkable
class FileParser(Protocol):
    """The operations every format parser provides."""

    file_format: FileFormat
    implemented: bool

    def can_handle(self, request) -> bool:
        ...

    def parse(self, request, warnings: Optional[List[str]] = None) -> StructureElement:
        ...

    def merge_samples(self, structures: Sequence[StructureElement]) -> StructureElement:
        ...

    def available_options(self) -> Dict[str, str]:
        ...


def default_parsers() -> List[FileParser]:
    """One instance of every built-in parser, in format declaration order."""
    from schemalyze.csvtostructure import CsvParser
    from schemalyze.exceltostructure import ExcelParser
    from schemalyze.fixedlengthtostructure import FixedLengthParser
    from schemalyze.jsontostructure import JsonParser
    from schemalyze.variablelengthtostructure import VariableLengthParser
    from schemalyze.xmltostructure import XmlParser
    return [CsvParser(), JsonParser(), XmlParser(), FixedLengthParser(), VariableLengthParser(), ExcelParser()]


class ParserRegistry:
    """
    Holds one parser per file format.

    Lookups are frequent and registrations rare; both go through a lock so
    that parsers can be swapped while requests are being served.
    """

    def __init__(self, parsers: Optional[Sequence[FileParser]] = None):
        self._lock = threading.RLock()
        self._parsers: Dict[FileFormat, FileParser] = {}
        for parser in parsers or []:
            self.register(parser)

    @classmethod
    def default(cls) -> "ParserRegistry":
        registry = cls(default_parsers())
        logger.info("Parser registry initialized with formats: %s",
                    ', '.join(f.code for f in registry.registered_formats()))
        return registry

    def register(self, parser: FileParser, file_format: Optional[FileFormat] = None) -> None:
        """Register a parser for its format, replacing any parser already registered for it."""
        file_format = FileFormat.from_code(file_format or parser.file_format)
        with self._lock:
            existing = self._parsers.get(file_format)
            if existing is not None and existing is not parser:
                logger.warning("Replacing parser %s for format %s with %s",
                               type(existing).__name__, file_format.code, type(parser).__name__)
            self._parsers[file_format] = parser

    def unregister(self, file_format) -> Optional[FileParser]:
        with self._lock:
            return self._parsers.pop(FileFormat.from_code(file_format), None)

    def has_parser(self, file_format) -> bool:
        with self._lock:
            return FileFormat.from_code(file_format) in self._parsers

    def get(self, file_format) -> FileParser:
        """
        Look up the parser for a format.

        Raises:
            UnsupportedFormatError: If no parser is registered for the format.
        """
        file_format = FileFormat.from_code(file_format)
        with self._lock:
            parser = self._parsers.get(file_format)
            registered = [f.code for f in self._parsers]
        if parser is None:
            raise UnsupportedFormatError(f"No parser registered for format '{file_format.code}'",
                                         file_format.code, registered)
        return parser

    def registered_formats(self) -> List[FileFormat]:
        with self._lock:
            return list(self._parsers.keys())

    def usable_formats(self) -> List[FileFormat]:
        """Registered formats whose parser can actually parse content."""
        with self._lock:
            return [f for f, parser in self._parsers.items() if getattr(parser, 'implemented', True)]

    def describe_options(self, file_format) -> Dict[str, str]:
        return dict(self.get(file_format).available_options())

    def clear(self) -> None:
        with self._lock:
            self._parsers.clear()

    def reset(self) -> None:
        """Drop all registrations and register the built-in parsers again."""
        with self._lock:
            self._parsers.clear()
            for parser in default_parsers():
                self.register(parser)

    def summary(self) -> Dict[str, Dict[str, object]]:
        """Parser class, usability and option names per registered format."""
        with self._lock:
            items = list(self._parsers.items())
        return {
            f.code: {
                'parser': type(parser).__name__,
                'usable': bool(getattr(parser, 'implemented', True)),
                'options': sorted(parser.available_options().keys()),
            }
            for f, parser in items
        }

    def __len__(self):
        with self._lock:
            return len(self._parsers)
