"""
Infers a structure tree from variable-length records.

Two layouts are understood:

* delimited lines, 'A|B|C', with an optional header line and quoting;
* tag-value lines, 'ID=1|NAME=X', where every record names its own fields.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence

from schemalyze.common import split_lines
from schemalyze.errors import OptionError, ParseError
from schemalyze.structure import FileFormat, StructureElement
from schemalyze.structuremerge import merge_structure_list
from schemalyze.tabular import ColumnCollector, record_tree

logger = logging.getLogger(__name__)

FORMAT = FileFormat.VARIABLE_LENGTH.code


def split_delimited(line: str, delimiter: str, quote_char: Optional[str]) -> List[str]:
    """
    Split a delimited line into trimmed values.

    Delimiters inside quotes do not split; the quote characters themselves
    are dropped.
    """
    values = []
    current = []
    in_quotes = False
    for ch in line:
        if quote_char and ch == quote_char:
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            values.append(''.join(current).strip())
            current = []
        else:
            current.append(ch)
    values.append(''.join(current).strip())
    return values


class VariableLengthParser:
    """Parser for delimited and tag-value records."""

    file_format = FileFormat.VARIABLE_LENGTH
    implemented = True

    def can_handle(self, request) -> bool:
        return request is not None and request.file_format == self.file_format

    def available_options(self) -> Dict[str, str]:
        return {
            'delimiter': "Field delimiter (default: '|')",
            'encoding': "Character encoding of byte content (default: UTF-8)",
            'hasHeader': "Whether the first line holds field names (default: false)",
            'skipLines': "Number of lines to skip before reading (default: 0)",
            'quoteChar': "Quote character for values containing the delimiter (default: '\"')",
            'tagValuePairs': "Whether records are TAG=VALUE pairs (default: false)",
            'tagValueDelimiter': "Separator between tag and value (default: '=')",
        }

    def parse(self, request, warnings: Optional[List[str]] = None) -> StructureElement:
        """
        Infer the record tree of one sample.

        Args:
            request: The analysis request holding the content and options.
            warnings: Receives non-fatal findings such as field count mismatches.

        Returns:
            StructureElement: Array root named after the schema, one 'item' object per record shape.

        Raises:
            OptionError: If an option is malformed, or skipLines exceeds the content.
            ParseError: If there are no records or the header repeats a name.
        """
        if warnings is None:
            warnings = []
        tag_value = request.get_bool_option('tagValuePairs', False)
        lines = self._data_lines(request)
        if tag_value:
            collector = self._parse_tag_value(request, lines, warnings)
        else:
            collector = self._parse_delimited(request, lines, warnings)
        logger.debug("Parsed %d %s records with %d fields", collector.records,
                     "tag-value" if tag_value else "delimited", len(collector.names))
        return record_tree(request.schema_name, collector.fields(track_presence=tag_value))

    def merge_samples(self, structures: Sequence[StructureElement]) -> StructureElement:
        return merge_structure_list(structures, FORMAT)

    def _data_lines(self, request):
        lines = split_lines(request.text)
        skip_lines = request.get_int_option('skipLines', 0)
        if skip_lines and skip_lines >= len(lines):
            raise OptionError(f"skipLines ({skip_lines}) must be less than the number of lines ({len(lines)})",
                              'skipLines', FORMAT)
        numbered = [(number, line) for number, line in enumerate(lines, start=1)
                    if number > skip_lines and line.strip()]
        if not numbered:
            raise ParseError("Content contains no data lines", FORMAT)
        return numbered

    def _parse_delimited(self, request, lines, warnings: List[str]) -> ColumnCollector:
        delimiter = request.get_text_option('delimiter', '|')
        if len(delimiter) != 1:
            raise OptionError(f"Delimiter must be a single character, got '{delimiter}'", 'delimiter', FORMAT)
        quote_char = request.get_char_option('quoteChar', '"')
        has_header = request.get_bool_option('hasHeader', False)

        if has_header:
            header_number, header_line = lines[0]
            names = self._header_names(split_delimited(header_line, delimiter, quote_char), header_number)
            records = lines[1:]
            if not records:
                self._warn(warnings, "Header line found but no data records")
        else:
            first = split_delimited(lines[0][1], delimiter, quote_char)
            names = [f"field{i}" for i in range(1, len(first) + 1)]
            records = lines

        collector = ColumnCollector(names)
        for number, line in records:
            values = split_delimited(line, delimiter, quote_char)
            if len(values) != len(names):
                self._warn(warnings, f"Line {number}: expected {len(names)} fields but found {len(values)}")
            collector.add_record({name: values[i] if i < len(values) else None for i, name in enumerate(names)})
        return collector

    def _header_names(self, tokens: List[str], line_number: int) -> List[str]:
        names = []
        for index, token in enumerate(tokens, start=1):
            name = token or f"field{index}"
            if name in names:
                raise ParseError(f"Duplicate header name '{name}'", FORMAT, line_number)
            names.append(name)
        return names

    def _parse_tag_value(self, request, lines, warnings: List[str]) -> ColumnCollector:
        pair_delimiter = request.get_text_option('delimiter', '|')
        tag_delimiter = request.get_text_option('tagValueDelimiter', '=')
        pair_pattern = re.compile(r'^\s*(.+?)\s*' + re.escape(tag_delimiter) + r'(.*)$', re.DOTALL)

        collector = ColumnCollector()
        for number, line in lines:
            record: Dict[str, Optional[str]] = {}
            for pair in line.split(pair_delimiter):
                if not pair.strip():
                    continue
                match = pair_pattern.match(pair)
                if not match:
                    self._warn(warnings, f"Line {number}: invalid tag-value pair '{pair.strip()}'")
                    continue
                tag, value = match.group(1), match.group(2).strip()
                if tag in record:
                    self._warn(warnings, f"Line {number}: tag '{tag}' repeated, keeping the first value")
                    continue
                record[tag] = value
            if record:
                collector.add_record(record)
            else:
                self._warn(warnings, f"Line {number}: no valid tag-value pairs")
        if not collector.records:
            raise ParseError("Content contains no valid tag-value records", FORMAT)
        return collector

    @staticmethod
    def _warn(warnings: List[str], message: str) -> None:
        logger.warning(message)
        warnings.append(message)
