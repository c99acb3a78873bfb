"""
Canonical structure tree shared by every format parser.

A parser turns sample content into a tree of StructureElement nodes; the
merge routine combines trees from several samples; the JSON Schema generator
renders the result. Nodes are immutable: merging and marking fields optional
always build new nodes.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from schemalyze.errors import RequestError

NULL = "null"
BOOLEAN = "boolean"
INTEGER = "integer"
NUMBER = "number"
STRING = "string"
OBJECT = "object"
ARRAY = "array"

PRIMITIVE_TYPES = (NULL, BOOLEAN, INTEGER, NUMBER, STRING)
ELEMENT_TYPES = PRIMITIVE_TYPES + (OBJECT, ARRAY)

UNBOUNDED = -1
ITEM_NAME = "item"
TEXT_NAME = "#text"


class FileFormat(Enum):
    """Formats that sample files can be analyzed in."""

    CSV = "csv"
    JSON = "json"
    XML = "xml"
    FIXED_LENGTH = "fixed-length"
    VARIABLE_LENGTH = "variable-length"
    EXCEL = "excel"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, value) -> "FileFormat":
        """
        Resolve a format from a member, its code, or its member name.

        Args:
            value: A FileFormat, or a string such as 'fixed-length',
                'FIXED_LENGTH' or 'Fixed_Length'.

        Returns:
            FileFormat: The matching format.

        Raises:
            RequestError: If the value names no known format.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace('_', '-')
            for member in cls:
                if member.value == key:
                    return member
        known = ', '.join(member.value for member in cls)
        raise RequestError(f"Unknown file format '{value}'. Known formats: {known}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class ElementAttribute:
    """
    An attribute attached to a structure element (XML attributes).

    Two attributes are the same attribute when name and namespace match;
    type and the other metadata do not take part in equality.
    """

    name: str
    type: str = STRING
    required: bool = False
    default_value: Optional[str] = None
    namespace: Optional[str] = None

    def __eq__(self, other):
        if not isinstance(other, ElementAttribute):
            return NotImplemented
        return (self.name, self.namespace) == (other.name, other.namespace)

    def __hash__(self):
        return hash((self.name, self.namespace))

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.name, self.namespace)


@dataclass(frozen=True)
class StructureElement:
    """
    A node of the canonical structure tree.

    Attributes:
        name: Field, element, or column name.
        type: One of the primitive types, 'object' or 'array'.
        attributes: Attributes of the node, in discovery order.
        children: Object members, or the single representative item of an array.
        namespace: Namespace prefix, when one is known.
        min_occurs: Minimum number of occurrences.
        max_occurs: Maximum number of occurrences, -1 for unbounded.
        required: Whether every sample had this node.
        description: Free-form note, e.g. 'CDATA'.
    """

    name: str
    type: str
    attributes: Tuple[ElementAttribute, ...] = ()
    children: Tuple["StructureElement", ...] = ()
    namespace: Optional[str] = None
    min_occurs: int = 0
    max_occurs: int = 1
    required: bool = True
    description: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'attributes', tuple(self.attributes or ()))
        object.__setattr__(self, 'children', tuple(self.children or ()))
        if self.type not in ELEMENT_TYPES:
            raise ValueError(f"Element '{self.name}' has unknown type '{self.type}'")
        if self.type == ARRAY:
            if len(self.children) > 1:
                raise ValueError(f"Array element '{self.name}' must have at most one item, found {len(self.children)}")
        elif self.type == OBJECT:
            seen = set()
            for child in self.children:
                if child.name in seen:
                    raise ValueError(f"Object element '{self.name}' has duplicate child '{child.name}'")
                seen.add(child.name)
        elif self.children:
            raise ValueError(f"Primitive element '{self.name}' of type '{self.type}' cannot have children")

    @property
    def is_array(self) -> bool:
        return self.type == ARRAY

    @property
    def is_object(self) -> bool:
        return self.type == OBJECT

    @property
    def is_primitive(self) -> bool:
        return self.type in PRIMITIVE_TYPES

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    @property
    def has_attributes(self) -> bool:
        return len(self.attributes) > 0

    @property
    def item(self) -> Optional["StructureElement"]:
        """The representative item of an array node."""
        if self.is_array and self.children:
            return self.children[0]
        return None

    @property
    def child_names(self) -> List[str]:
        return [child.name for child in self.children]

    def find_child(self, name: str) -> Optional["StructureElement"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_attribute(self, name: str, namespace: Optional[str] = None) -> Optional[ElementAttribute]:
        for attribute in self.attributes:
            if attribute.key == (name, namespace):
                return attribute
        return None

    def with_required(self, required: bool) -> "StructureElement":
        if self.required == required:
            return self
        return replace(self, required=required)

    def with_children(self, children) -> "StructureElement":
        return replace(self, children=tuple(children))

    def count_elements(self) -> int:
        """Count this node and all of its descendants."""
        return 1 + sum(child.count_elements() for child in self.children)

    def count_attributes(self) -> int:
        """Count the attributes of this node and all of its descendants."""
        return len(self.attributes) + sum(child.count_attributes() for child in self.children)

    def array_paths(self, prefix: str = '') -> List[str]:
        """Dotted paths of every array node, this node included."""
        path = f"{prefix}.{self.name}" if prefix else self.name
        paths = [path] if self.is_array else []
        for child in self.children:
            paths.extend(child.array_paths(path))
        return paths

    def to_dict(self) -> Dict:
        """A plain dictionary view of the tree, used for logging and debugging."""
        result: Dict = {'name': self.name, 'type': self.type}
        if self.namespace:
            result['namespace'] = self.namespace
        if not self.required:
            result['required'] = False
        if self.attributes:
            result['attributes'] = [{'name': a.name, 'type': a.type, 'required': a.required} for a in self.attributes]
        if self.children:
            result['children'] = [child.to_dict() for child in self.children]
        return result

    def _lines(self, depth: int) -> List[str]:
        label = f"{'  ' * depth}{self.name}: {self.type}"
        if self.is_array:
            label += "[]"
        if not self.required:
            label += " (optional)"
        if self.attributes:
            label += " @" + ",".join(a.name for a in self.attributes)
        lines = [label]
        for child in self.children:
            lines.extend(child._lines(depth + 1))
        return lines

    def __str__(self) -> str:
        return "\n".join(self._lines(0))


def object_element(name: str, children=(), **kwargs) -> StructureElement:
    return StructureElement(name=name, type=OBJECT, children=tuple(children), **kwargs)


def array_element(name: str, item: Optional[StructureElement] = None, **kwargs) -> StructureElement:
    kwargs.setdefault('max_occurs', UNBOUNDED)
    return StructureElement(name=name, type=ARRAY, children=(item,) if item is not None else (), **kwargs)
