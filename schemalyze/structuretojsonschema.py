"""
Renders a structure tree as a JSON Schema (draft-07) document.

Besides the standard keywords the generator emits a few vendor keys that
code generators downstream rely on:

* x-metadata: source format and generator identity
* x-namespace: namespace prefix of an element or attribute
* x-description: free-form note attached to an element
* x-occurrence: minOccurs / maxOccurs when they differ from 0..1
* x-attribute: marks properties that come from XML attributes
"""

import json
import logging
from typing import Any, Dict, List, Optional

from schemalyze._version import version
from schemalyze.errors import GenerationError
from schemalyze.request import SCHEMA_VERSION
from schemalyze.structure import ARRAY, OBJECT, UNBOUNDED, ElementAttribute, StructureElement

logger = logging.getLogger(__name__)

GENERATOR_NAME = "schemalyze"

_TYPE_MAP = {
    'int': 'integer',
    'long': 'integer',
    'integer': 'integer',
    'decimal': 'number',
    'double': 'number',
    'float': 'number',
    'number': 'number',
    'bool': 'boolean',
    'boolean': 'boolean',
    'string': 'string',
    'null': 'null',
    'object': 'object',
    'array': 'array',
}


def json_type(type_name: Optional[str]) -> str:
    """Map a structure type name to its JSON Schema type; unknown names map to 'string'."""
    if not type_name:
        return 'string'
    return _TYPE_MAP.get(type_name.lower(), 'string')


class JsonSchemaGenerator:
    """Converts structure trees into JSON Schema documents."""

    def generate(self, tree: Optional[StructureElement], request=None) -> Dict[str, Any]:
        """
        Build the schema document for a tree.

        Args:
            tree: Root of the structure tree.
            request: The analysis request; supplies the title and source format.

        Returns:
            Dict[str, Any]: The schema document with '$schema', 'title' and
            'x-metadata' ahead of the root's own keywords.

        Raises:
            GenerationError: If the tree is missing.
        """
        if tree is None:
            raise GenerationError("Cannot generate a schema from an empty structure",
                                  file_format=request.format_code if request is not None else None)
        title = request.schema_name if request is not None else tree.name
        metadata: Dict[str, Any] = {}
        if request is not None:
            metadata['sourceType'] = request.format_code
        metadata['generatedBy'] = GENERATOR_NAME
        metadata['generatorVersion'] = version

        schema: Dict[str, Any] = {
            '$schema': SCHEMA_VERSION,
            'title': title,
            'x-metadata': metadata,
        }
        schema.update(self.element_schema(tree))
        logger.debug("Generated schema '%s' with %d properties", title, count_properties(schema))
        return schema

    def generate_string(self, tree: Optional[StructureElement], request=None) -> str:
        return json.dumps(self.generate(tree, request), indent=2)

    def element_schema(self, element: StructureElement) -> Dict[str, Any]:
        """The schema of one node, without document-level keys."""
        if element.type == OBJECT:
            schema = self._object_schema(element)
        elif element.type == ARRAY:
            schema = {'type': 'array'}
            if element.item is not None:
                schema['items'] = self.element_schema(element.item)
        else:
            schema = {'type': json_type(element.type)}
        if element.namespace:
            schema['x-namespace'] = element.namespace
        if element.description:
            schema['x-description'] = element.description
        if element.min_occurs > 0 or element.max_occurs != 1:
            schema['x-occurrence'] = {
                'minOccurs': element.min_occurs,
                'maxOccurs': 'unbounded' if element.max_occurs == UNBOUNDED else element.max_occurs,
            }
        return schema

    def _object_schema(self, element: StructureElement) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        required: List[str] = []
        for child in element.children:
            properties[child.name] = self.element_schema(child)
            if child.required:
                required.append(child.name)
        for attribute in element.attributes:
            key = attribute.name if attribute.name not in properties else f"@{attribute.name}"
            properties[key] = self._attribute_schema(attribute)
            if attribute.required:
                required.append(key)
        schema: Dict[str, Any] = {'type': 'object', 'properties': properties}
        if required:
            schema['required'] = required
        return schema

    def _attribute_schema(self, attribute: ElementAttribute) -> Dict[str, Any]:
        schema: Dict[str, Any] = {'type': json_type(attribute.type), 'x-attribute': True}
        if attribute.default_value is not None:
            schema['default'] = attribute.default_value
        if attribute.namespace:
            schema['x-namespace'] = attribute.namespace
        return schema


def count_properties(schema: Dict[str, Any]) -> int:
    """Count property definitions at every depth of a schema."""
    total = 0
    properties = schema.get('properties')
    if isinstance(properties, dict):
        total += len(properties)
        for value in properties.values():
            if isinstance(value, dict):
                total += count_properties(value)
    items = schema.get('items')
    if isinstance(items, dict):
        total += count_properties(items)
    return total


def validate_schema(schema: Dict[str, Any]) -> List[str]:
    """
    Check a generated schema for structural problems.

    Returns:
        List[str]: One message per problem; empty when the schema is sound.
    """
    problems: List[str] = []
    if schema.get('$schema') != SCHEMA_VERSION:
        problems.append("Missing or unexpected '$schema'")
    if not schema.get('title'):
        problems.append("Missing 'title'")
    _validate_node(schema, '#', problems)
    return problems


def _validate_node(node: Dict[str, Any], path: str, problems: List[str]) -> None:
    node_type = node.get('type')
    if node_type is None:
        problems.append(f"{path}: missing 'type'")
    if node_type == 'object':
        properties = node.get('properties', {})
        for name in node.get('required', []):
            if name not in properties:
                problems.append(f"{path}: required property '{name}' is not defined")
        for name, value in properties.items():
            _validate_node(value, f"{path}/properties/{name}", problems)
    elif node_type == 'array' and isinstance(node.get('items'), dict):
        _validate_node(node['items'], f"{path}/items", problems)
