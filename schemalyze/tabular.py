"""
Record trees for line-oriented formats.

Delimited, tag-value, fixed-length and CSV content all describe a sequence
of flat records, so they share one tree shape: an array root named after the
schema whose single 'item' object holds one primitive child per field.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from schemalyze.structure import ITEM_NAME, StructureElement, array_element, object_element
from schemalyze.typeinference import infer_field_type


class ColumnCollector:
    """
    Collects raw values per column while preserving first-seen column order.
    """

    def __init__(self, names: Optional[Sequence[str]] = None):
        self._values: Dict[str, List[Optional[str]]] = {}
        self._seen_in: Dict[str, int] = {}
        self.records = 0
        for name in names or []:
            self.add_column(name)

    def add_column(self, name: str) -> None:
        if name not in self._values:
            self._values[name] = []
            self._seen_in[name] = 0

    def add_record(self, record: Dict[str, Optional[str]]) -> None:
        """Add one record; columns not seen before are appended in order."""
        self.records += 1
        for name, value in record.items():
            self.add_column(name)
            self._values[name].append(value)
            self._seen_in[name] += 1

    @property
    def names(self) -> List[str]:
        return list(self._values.keys())

    def values(self, name: str) -> List[Optional[str]]:
        return self._values[name]

    def seen_in_every_record(self, name: str) -> bool:
        return self._seen_in[name] == self.records

    def fields(self, declared_types: Optional[Dict[str, str]] = None,
               track_presence: bool = False) -> List[StructureElement]:
        """
        Build one primitive element per column.

        Args:
            declared_types: Column types that override inference.
            track_presence: Mark columns missing from some records as optional.
        """
        declared_types = declared_types or {}
        result = []
        for name in self.names:
            field_type = declared_types.get(name) or infer_field_type(v for v in self._values[name] if v is not None and v.strip())
            required = self.seen_in_every_record(name) if track_presence else True
            result.append(StructureElement(name=name, type=field_type, required=required))
        return result


def record_tree(schema_name: str, fields: Iterable[StructureElement]) -> StructureElement:
    """The array-of-records tree shared by all line formats."""
    item = object_element(ITEM_NAME, fields)
    return array_element(schema_name, item)
