"""
Infers a structure tree from a JSON document.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import json5

from schemalyze.errors import ParseError
from schemalyze.structure import (BOOLEAN, INTEGER, ITEM_NAME, NULL, NUMBER, OBJECT, STRING, FileFormat,
                                  StructureElement, array_element)
from schemalyze.structuremerge import merge_structure_list

logger = logging.getLogger(__name__)

FORMAT = FileFormat.JSON.code


def _reject_duplicates(pairs):
    result = {}
    for key, value in pairs:
        if key in result:
            raise ValueError(f"Duplicate key '{key}'")
        result[key] = value
    return result


def _reject_constant(name):
    raise ValueError(f"Non-standard constant '{name}'")


class JsonParser:
    """Parser for JSON documents."""

    file_format = FileFormat.JSON
    implemented = True

    def can_handle(self, request) -> bool:
        return request is not None and request.file_format == self.file_format

    def available_options(self) -> Dict[str, str]:
        return {
            'strictMode': "Standard JSON only; rejects duplicate keys and NaN/Infinity constants. "
                          "When false, JSON5 syntax (single quotes, unquoted keys, comments, "
                          "trailing commas) is accepted (default: true)",
            'allowComments': "Accept // and /* */ comments (default: false)",
            'allowTrailingCommas': "Accept trailing commas in objects and arrays (default: false)",
            'encoding': "Character encoding of byte content (default: UTF-8)",
        }

    def parse(self, request, warnings: Optional[List[str]] = None) -> StructureElement:
        """
        Infer the tree of one document.

        The root node is named after the schema. Arrays take the shape of
        their first element; empty arrays get an empty object item.

        Raises:
            OptionError: If a boolean option is not 'true' or 'false'.
            ParseError: If the content is empty, not valid JSON, or nested too deeply.
        """
        document = self.load(request)
        try:
            structure = _value_to_structure(request.schema_name, document)
        except RecursionError as e:
            raise ParseError("JSON document is nested too deeply", FORMAT) from e
        logger.debug("Parsed JSON document into %d elements", structure.count_elements())
        return structure

    def load(self, request) -> Any:
        """
        Decode the request content into Python values.

        Strict content without relaxed-syntax options goes through the
        standard json decoder; everything else is read as JSON5.
        """
        strict = request.get_bool_option('strictMode', True)
        allow_comments = request.get_bool_option('allowComments', False)
        allow_trailing_commas = request.get_bool_option('allowTrailingCommas', False)
        text = request.text
        if not text or not text.strip():
            raise ParseError("No file content provided", FORMAT)
        kwargs = {}
        if strict:
            kwargs = {'object_pairs_hook': _reject_duplicates, 'parse_constant': _reject_constant}
        try:
            if strict and not allow_comments and not allow_trailing_commas:
                return json.loads(text, **kwargs)
            logger.debug("Reading JSON content with relaxed syntax")
            return json5.loads(text, **kwargs)
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse JSON: {e.msg} at column {e.colno}", FORMAT, e.lineno) from e
        except RecursionError as e:
            raise ParseError("Failed to parse JSON: document is nested too deeply", FORMAT) from e
        except ValueError as e:
            raise ParseError(f"Failed to parse JSON: {e}", FORMAT, _json5_line(e)) from e

    def merge_samples(self, structures: Sequence[StructureElement]) -> StructureElement:
        return merge_structure_list(structures, FORMAT)


def _json5_line(error: ValueError) -> Optional[int]:
    match = re.match(r'<string>:(\d+)', str(error))
    return int(match.group(1)) if match else None


def _value_to_structure(name: str, value: Any) -> StructureElement:
    if isinstance(value, dict):
        children = [_value_to_structure(key, member) for key, member in value.items()]
        return StructureElement(name=name, type=OBJECT, children=tuple(children))
    if isinstance(value, list):
        if value:
            item = _value_to_structure(ITEM_NAME, value[0])
        else:
            item = StructureElement(name=ITEM_NAME, type=OBJECT)
        return array_element(name, item)
    return StructureElement(name=name, type=_primitive_type(value))


def _primitive_type(value: Any) -> str:
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INTEGER
    if isinstance(value, float):
        return NUMBER
    return STRING
