"""
Merging of structure trees inferred from several samples of the same format.

Fields seen in every sample stay required; fields missing from some samples
become optional. Primitive types widen through the type lattice.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from schemalyze.errors import MergeError
from schemalyze.structure import ARRAY, NULL, OBJECT, UNBOUNDED, ElementAttribute, StructureElement
from schemalyze.typeinference import merge_types

logger = logging.getLogger(__name__)


def merge_structure_list(structures: Optional[Sequence[StructureElement]],
                         file_format: Optional[str] = None) -> StructureElement:
    """
    Fold a list of sample trees into one tree.

    Args:
        structures: Trees of the same format, in sample order.
        file_format: Format code, used in error messages.

    Returns:
        StructureElement: The single tree unchanged when only one is given,
        otherwise the left fold of merge_structures.

    Raises:
        MergeError: If the list is None or empty, or two roots are incompatible.
    """
    if not structures:
        raise MergeError("No structures to merge", file_format=file_format)
    result = structures[0]
    if result is None:
        raise MergeError("Cannot merge a missing structure", file_format=file_format)
    for index, structure in enumerate(structures[1:], start=1):
        if structure is None:
            raise MergeError(f"Cannot merge a missing structure at position {index}", file_format=file_format)
        result = merge_structures(result, structure, file_format)
    logger.debug("Merged %d structures into '%s'", len(structures), result.name)
    return result


def merge_structures(first: StructureElement, second: StructureElement,
                     file_format: Optional[str] = None) -> StructureElement:
    """
    Merge two root trees.

    Roots must agree on their kind: two arrays, two objects, or two primitives
    with the same name.

    Raises:
        MergeError: If the roots are of different kinds or primitive roots differ in name.
    """
    if _kind(first) != _kind(second):
        raise MergeError(
            f"Cannot merge '{first.name}' of type {first.type} with '{second.name}' of type {second.type}",
            file_format=file_format)
    if first.is_primitive and first.name != second.name:
        raise MergeError(
            f"Cannot merge primitive roots with different names '{first.name}' and '{second.name}'",
            file_format=file_format)
    return _merge_nodes(first, second)


def _kind(element: StructureElement) -> str:
    if element.type in (ARRAY, OBJECT):
        return element.type
    return "primitive"


def _merge_nodes(first: StructureElement, second: StructureElement) -> StructureElement:
    if first.type != second.type:
        if first.type == NULL or second.type == NULL:
            typed, untyped = (second, first) if first.type == NULL else (first, second)
            typed = replace(typed, attributes=merge_attributes(first.attributes, second.attributes))
            return _merge_occurrence(typed, untyped)
        if first.is_array or second.is_array:
            return _merge_array_with_single(first, second)
        if first.is_object or second.is_object:
            return _merge_object_with_primitive(first, second)
        merged = replace(first, type=merge_types(first.type, second.type),
                         attributes=merge_attributes(first.attributes, second.attributes))
        return _merge_occurrence(merged, second)
    if first.is_array:
        merged = replace(first, children=_merged_items(first.item, second.item))
    elif first.is_object:
        merged = replace(first, children=_merge_children(first.children, second.children))
    else:
        merged = first
    merged = replace(merged, attributes=merge_attributes(first.attributes, second.attributes))
    return _merge_occurrence(merged, second)


def _merged_items(first: Optional[StructureElement], second: Optional[StructureElement]):
    if first is None and second is None:
        return ()
    if first is None:
        return (second,)
    if second is None:
        return (first,)
    return (_merge_nodes(first, second),)


def _merge_array_with_single(first: StructureElement, second: StructureElement) -> StructureElement:
    """An array merged with a single occurrence: the singleton joins the item shape."""
    array, single = (first, second) if first.is_array else (second, first)
    single_as_item = replace(single, name=array.item.name if array.item is not None else single.name,
                             required=True)
    merged = replace(array, children=_merged_items(array.item, single_as_item))
    return _merge_occurrence(merged, single)


def _merge_object_with_primitive(first: StructureElement, second: StructureElement) -> StructureElement:
    """An object merged with a primitive keeps the object's shape."""
    obj, primitive = (first, second) if first.is_object else (second, first)
    merged = replace(obj, attributes=merge_attributes(obj.attributes, primitive.attributes))
    return _merge_occurrence(merged, primitive)


def _merge_occurrence(merged: StructureElement, other: StructureElement) -> StructureElement:
    if merged.max_occurs == UNBOUNDED or other.max_occurs == UNBOUNDED:
        max_occurs = UNBOUNDED
    else:
        max_occurs = max(merged.max_occurs, other.max_occurs)
    return replace(
        merged,
        required=merged.required and other.required,
        min_occurs=min(merged.min_occurs, other.min_occurs),
        max_occurs=max_occurs,
        namespace=merged.namespace if merged.namespace is not None else other.namespace,
        description=merged.description if merged.description is not None else other.description)


def _merge_children(first: Sequence[StructureElement], second: Sequence[StructureElement]):
    """Union of two child lists in first-seen order; one-sided children become optional."""
    second_by_name: Dict[str, StructureElement] = {child.name: child for child in second}
    first_names = {child.name for child in first}
    merged: List[StructureElement] = []
    for child in first:
        other = second_by_name.get(child.name)
        if other is None:
            merged.append(child.with_required(False))
        else:
            merged.append(_merge_nodes(child, other))
    for child in second:
        if child.name not in first_names:
            merged.append(child.with_required(False))
    return tuple(merged)


def merge_attributes(first: Sequence[ElementAttribute], second: Sequence[ElementAttribute]):
    """
    Union of two attribute lists keyed by name and namespace.

    The earliest instance of an attribute keeps its metadata; its type widens
    to cover both sides, and an attribute missing from either side is optional.
    """
    second_by_key = {attribute.key: attribute for attribute in second}
    first_keys = {attribute.key for attribute in first}
    merged: List[ElementAttribute] = []
    for attribute in first:
        other = second_by_key.get(attribute.key)
        if other is None:
            merged.append(replace(attribute, required=False))
        else:
            merged.append(replace(attribute,
                                  type=merge_types(attribute.type, other.type),
                                  required=attribute.required and other.required))
    for attribute in second:
        if attribute.key not in first_keys:
            merged.append(replace(attribute, required=False))
    return tuple(merged)
