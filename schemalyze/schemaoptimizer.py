"""
Adds BeanIO code-generation hints to generated schemas.

The optimizer only ever adds vendor keys. It works on a copy, and applying
it twice gives the same document as applying it once.
"""

import copy
import logging
from typing import Any, Dict, Mapping, Optional

from schemalyze.common import java_field_name, parse_bool, unescape
from schemalyze.structure import FileFormat

logger = logging.getLogger(__name__)

STREAM_FORMATS = {
    FileFormat.CSV: 'csv',
    FileFormat.JSON: 'json',
    FileFormat.XML: 'xml',
    FileFormat.FIXED_LENGTH: 'fixedlength',
    FileFormat.VARIABLE_LENGTH: 'delimited',
}

TYPE_HANDLERS = {
    'integer': 'java.lang.Integer',
    'number': 'java.math.BigDecimal',
    'boolean': 'java.lang.Boolean',
    'string': 'java.lang.String',
    'array': 'java.util.List',
    'object': 'java.lang.Object',
    'null': 'java.lang.Object',
}


class SchemaOptimizer:
    """Annotates JSON Schema documents with hints for BeanIO stream mapping."""

    def optimize(self, schema: Dict[str, Any], file_format, enable_hints: bool,
                 options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Return an annotated copy of a schema.

        Args:
            schema: The generated schema document; it is not modified.
            file_format: FileFormat or format code of the analyzed content.
            enable_hints: When False the copy is returned without changes.
            options: Parser options of the analysis; delimiter and header
                hints reflect them.

        Returns:
            Dict[str, Any]: The copy, with 'x-beanio' at the document level,
            'x-java-field' and 'x-beanio-field' on every property, and the
            format's layout hints.
        """
        result = copy.deepcopy(schema)
        if not enable_hints:
            return result
        file_format = FileFormat.from_code(file_format)
        options = options or {}

        result['x-beanio'] = {
            'streamFormat': STREAM_FORMATS.get(file_format, file_format.code),
            'generatePOJO': True,
            'useBuilders': True,
        }
        self._add_field_hints(result)

        record_properties = self._record_properties(result)
        if file_format == FileFormat.CSV:
            result['x-csv'] = {
                'delimiter': _text(options, 'delimiter', ','),
                'hasHeader': _flag(options, 'hasHeader', True),
            }
            _number_properties(record_properties, 'x-csv-position')
        elif file_format == FileFormat.VARIABLE_LENGTH:
            result['x-variable-length'] = {
                'delimiter': _text(options, 'delimiter', '|'),
                'format': 'delimited',
                'tagValuePairs': _flag(options, 'tagValuePairs', False),
            }
            _number_properties(record_properties, 'x-csv-position')
        elif file_format == FileFormat.FIXED_LENGTH:
            result['x-fixed-length'] = {'format': 'fixedlength'}
            _number_properties(record_properties, 'x-field-position')
        elif file_format == FileFormat.JSON:
            result['x-json'] = {'prettyPrint': True}
        elif file_format == FileFormat.XML:
            result['x-xml'] = {
                'preserveNamespaces': _flag(options, 'preserveNamespaces', True),
                'includeAttributes': _flag(options, 'includeAttributes', True),
            }
        logger.debug("Added BeanIO hints for %s stream", result['x-beanio']['streamFormat'])
        return result

    def _add_field_hints(self, node: Dict[str, Any]) -> None:
        properties = node.get('properties')
        if isinstance(properties, dict):
            for name, prop in properties.items():
                if not isinstance(prop, dict):
                    continue
                java_name = java_field_name(name)
                prop['x-java-field'] = java_name
                prop['x-beanio-field'] = {
                    'name': name,
                    'javaName': java_name,
                    'typeHandler': TYPE_HANDLERS.get(prop.get('type'), 'java.lang.String'),
                }
                self._add_field_hints(prop)
        items = node.get('items')
        if isinstance(items, dict):
            self._add_field_hints(items)

    @staticmethod
    def _record_properties(schema: Dict[str, Any]) -> Dict[str, Any]:
        """Properties of one record: the root's own, or those of its items for array roots."""
        if schema.get('type') == 'array' and isinstance(schema.get('items'), dict):
            return schema['items'].get('properties', {})
        return schema.get('properties', {})


def _number_properties(properties: Dict[str, Any], key: str) -> None:
    for position, prop in enumerate(properties.values()):
        if isinstance(prop, dict):
            prop[key] = position


def _text(options: Mapping[str, Any], name: str, default: str) -> str:
    value = options.get(name)
    if value is None or value == '':
        return default
    return unescape(str(value))


def _flag(options: Mapping[str, Any], name: str, default: bool) -> bool:
    value = options.get(name)
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    parsed = parse_bool(value)
    return default if parsed is None else parsed
