# coding: utf-8
"""
Infers a structure tree from CSV content.
"""

import io
import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from schemalyze.common import split_lines
from schemalyze.errors import OptionError, ParseError
from schemalyze.structure import FileFormat, StructureElement
from schemalyze.structuremerge import merge_structure_list
from schemalyze.tabular import record_tree
from schemalyze.typeinference import infer_field_type

logger = logging.getLogger(__name__)

FORMAT = FileFormat.CSV.code


class CsvParser:
    """
    Parser for comma-separated (or otherwise delimited) files with quoting.

    Every cell is read as text so that the type lattice, not pandas, decides
    the column types.
    """

    file_format = FileFormat.CSV
    implemented = True

    def can_handle(self, request) -> bool:
        return request is not None and request.file_format == self.file_format

    def available_options(self) -> Dict[str, str]:
        return {
            'delimiter': "Field delimiter (default: ',')",
            'hasHeader': "Whether the first row holds column names (default: true)",
            'encoding': "Character encoding of byte content (default: UTF-8)",
            'quoteChar': "Quote character (default: '\"')",
            'escapeChar': "Escape character (default: none)",
            'skipLines': "Number of lines to skip before reading (default: 0)",
        }

    def parse(self, request, warnings: Optional[List[str]] = None) -> StructureElement:
        """
        Infer the record tree of one sample.

        Rows with more fields than the header are skipped and reported as warnings.

        Raises:
            OptionError: If an option is malformed or skipLines exceeds the content.
            ParseError: If the content has no columns or cannot be tokenized.
        """
        if warnings is None:
            warnings = []
        delimiter = request.get_char_option('delimiter', ',')
        has_header = request.get_bool_option('hasHeader', True)
        quote_char = request.get_char_option('quoteChar', '"')
        escape_char = request.get_char_option('escapeChar', None)
        skip_lines = request.get_int_option('skipLines', 0)

        text = request.text
        line_count = len(split_lines(text))
        if skip_lines and skip_lines >= line_count:
            raise OptionError(f"skipLines ({skip_lines}) must be less than the number of lines ({line_count})",
                              'skipLines', FORMAT)

        def bad_line(fields):
            message = f"Skipped row with {len(fields)} fields: {delimiter.join(fields)}"
            logger.warning(message)
            warnings.append(message)
            return None

        try:
            df = pd.read_csv(io.StringIO(text), sep=delimiter, header=0 if has_header else None, dtype=str,
                             keep_default_na=False, skiprows=skip_lines, quotechar=quote_char,
                             escapechar=escape_char, skip_blank_lines=True, engine='python',
                             on_bad_lines=bad_line)
        except pd.errors.EmptyDataError as e:
            raise ParseError("Content contains no columns", FORMAT) from e
        except pd.errors.ParserError as e:
            raise ParseError(f"Malformed CSV: {e}", FORMAT) from e

        if df.empty and len(df.columns) and has_header:
            message = "Header row found but no data rows"
            logger.warning(message)
            warnings.append(message)

        fields = []
        used = set()
        for index, column in enumerate(df.columns, start=1):
            name = self._column_name(column, index, has_header)
            while name in used:
                name = f"{name}_{index}"
            used.add(name)
            values = [v for v in df[column].tolist() if isinstance(v, str) and v.strip()]
            fields.append(StructureElement(name=name, type=infer_field_type(values)))
        logger.debug("Parsed %d CSV rows with %d columns", len(df), len(fields))
        return record_tree(request.schema_name, fields)

    @staticmethod
    def _column_name(column, index: int, has_header: bool) -> str:
        if not has_header:
            return f"field{index}"
        name = str(column).strip()
        if not name or name.startswith('Unnamed: '):
            return f"field{index}"
        return name

    def merge_samples(self, structures: Sequence[StructureElement]) -> StructureElement:
        return merge_structure_list(structures, FORMAT)
