"""
Primitive type inference over raw textual values.

Types form a small lattice: null sits below everything, integer widens to
number, and any other disagreement widens to string.
"""

import re
from typing import Iterable, Optional

from schemalyze.structure import BOOLEAN, INTEGER, NULL, NUMBER, PRIMITIVE_TYPES, STRING

_BOOLEAN_PATTERN = re.compile(r'^(true|false)$', re.IGNORECASE)
_INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')
_NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$')


def infer_type(value: Optional[str]) -> str:
    """
    Classify a single raw value.

    Args:
        value (Optional[str]): The raw text, as read from the sample.

    Returns:
        str: 'null' for None or blank text, 'boolean' for true/false in any
        case, 'integer' for optionally signed digits, 'number' for decimals
        and exponent notation, and 'string' for everything else (dates,
        e-mail addresses, codes).
    """
    if value is None:
        return NULL
    text = value.strip()
    if not text:
        return NULL
    if _BOOLEAN_PATTERN.match(text):
        return BOOLEAN
    if _INTEGER_PATTERN.match(text):
        return INTEGER
    if _NUMBER_PATTERN.match(text):
        return NUMBER
    return STRING


def merge_types(type1: Optional[str], type2: Optional[str]) -> str:
    """
    Find the most general common type of two primitive types.

    merge(x, null) = x, merge(x, x) = x, merge(integer, number) = number,
    and every other pair widens to string.
    """
    type1 = type1 or NULL
    type2 = type2 or NULL
    if type1 == type2:
        return type1
    if type1 == NULL:
        return type2
    if type2 == NULL:
        return type1
    if {type1, type2} == {INTEGER, NUMBER}:
        return NUMBER
    return STRING


def infer_field_type(values: Iterable[Optional[str]]) -> str:
    """
    Infer the type of a column from all of its values.

    Args:
        values (Iterable[Optional[str]]): The raw values of the column.

    Returns:
        str: The merged type; 'null' when there are no values. Stops reading
        as soon as the type has widened to 'string'.
    """
    result = NULL
    for value in values:
        result = merge_types(result, infer_type(value))
        if result == STRING:
            break
    return result


def is_numeric_type(type_name: str) -> bool:
    return type_name in (INTEGER, NUMBER)


def is_primitive_type(type_name: str) -> bool:
    return type_name in PRIMITIVE_TYPES


def is_compatible_type(type1: str, type2: str) -> bool:
    """Whether the two types merge without widening either side to string."""
    merged = merge_types(type1, type2)
    return merged != STRING or STRING in (type1, type2)


def widen_type(current: str, value: Optional[str]) -> str:
    """Widen a running column type with one more raw value."""
    return merge_types(current, infer_type(value))
