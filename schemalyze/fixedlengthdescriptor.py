"""
Field descriptors for fixed-length records.

A descriptor lists the fields of a record by byte offset:

    [{"name": "id", "start": 0, "length": 5, "type": "integer"},
     {"name": "name", "start": 5, "length": 10}]

The document may also be an object with a "fields" array.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from schemalyze.common import parse_bool
from schemalyze.errors import DescriptorError
from schemalyze.structure import PRIMITIVE_TYPES


@dataclass(frozen=True)
class FieldDefinition:
    """
    One field of a fixed-length record.

    Attributes:
        name: Field name.
        start: 0-based byte offset of the field.
        length: Width of the field in bytes.
        type: Declared primitive type; None lets the values decide.
        trim: Whether to strip surrounding whitespace; None follows the
            parser's 'trimFields' option.
    """

    name: str
    start: int
    length: int
    type: Optional[str] = None
    trim: Optional[bool] = None

    @property
    def end(self) -> int:
        """Exclusive end offset."""
        return self.start + self.length

    @property
    def range_text(self) -> str:
        return f"[{self.start}-{self.end - 1}]"


class FixedLengthDescriptor:
    """An ordered, validated list of field definitions."""

    def __init__(self, fields: List[FieldDefinition]):
        self.fields: Tuple[FieldDefinition, ...] = tuple(fields)
        self.validate()

    @classmethod
    def from_json(cls, text: str) -> "FixedLengthDescriptor":
        """
        Parse and validate a descriptor document.

        Args:
            text (str): JSON array of field objects, or an object with a 'fields' array.

        Returns:
            FixedLengthDescriptor: The validated descriptor.

        Raises:
            DescriptorError: If the document is not valid JSON, has the wrong
                shape, or describes invalid or overlapping fields.
        """
        if text is None or not str(text).strip():
            raise DescriptorError("Field descriptor is empty")
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise DescriptorError(f"Field descriptor is not valid JSON: {e.msg}",
                                  context=f"line {e.lineno}, column {e.colno}") from e
        if isinstance(document, dict):
            document = document.get('fields')
        if not isinstance(document, list):
            raise DescriptorError("Field descriptor must be a JSON array of field definitions")
        return cls([_field_from_json(entry, index) for index, entry in enumerate(document)])

    def validate(self) -> None:
        """
        Check field names, offsets, widths, declared types and overlaps.

        Raises:
            DescriptorError: On the first problem found.
        """
        if not self.fields:
            raise DescriptorError("Field descriptor must define at least one field")
        names = set()
        for index, definition in enumerate(self.fields):
            if not definition.name or not definition.name.strip():
                raise DescriptorError(f"Field at index {index} has no name")
            if definition.start < 0:
                raise DescriptorError(f"Field '{definition.name}' has negative start {definition.start}")
            if definition.length <= 0:
                raise DescriptorError(f"Field '{definition.name}' must have a positive length, got {definition.length}")
            if definition.type is not None and definition.type not in PRIMITIVE_TYPES:
                raise DescriptorError(
                    f"Field '{definition.name}' has invalid type '{definition.type}'. "
                    f"Valid types: {', '.join(PRIMITIVE_TYPES)}")
            if definition.name in names:
                raise DescriptorError(f"Duplicate field name '{definition.name}'")
            names.add(definition.name)
        ordered = sorted(self.fields, key=lambda f: (f.start, f.end))
        for previous, current in zip(ordered, ordered[1:]):
            if current.start < previous.end:
                raise DescriptorError(
                    f"Fields '{previous.name}' and '{current.name}' overlap: "
                    f"{previous.range_text} and {current.range_text}")

    @property
    def expected_record_length(self) -> int:
        return max(definition.end for definition in self.fields)

    @property
    def field_names(self) -> List[str]:
        return [definition.name for definition in self.fields]

    def __len__(self):
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)


def _field_from_json(entry: Any, index: int) -> FieldDefinition:
    if not isinstance(entry, dict):
        raise DescriptorError(f"Field at index {index} must be a JSON object")
    name = entry.get('name')
    if not isinstance(name, str):
        raise DescriptorError(f"Field at index {index} has no name")
    start = _int_value(entry, 'start', name)
    length = _int_value(entry, 'length', name)
    declared_type = entry.get('type')
    if declared_type is not None:
        declared_type = str(declared_type).strip().lower() or None
    trim = entry.get('trim')
    if trim is not None and not isinstance(trim, bool):
        trim = parse_bool(trim)
        if trim is None:
            raise DescriptorError(f"Field '{name}' has invalid trim flag '{entry.get('trim')}'")
    return FieldDefinition(name=name, start=start, length=length, type=declared_type, trim=trim)


def _int_value(entry: dict, key: str, name: str) -> int:
    value = entry.get(key)
    if isinstance(value, bool) or value is None:
        raise DescriptorError(f"Field '{name}' must define an integer '{key}'")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DescriptorError(f"Field '{name}' has non-numeric '{key}' value '{value}'") from e
