"""
Common utility functions for schemalyze.
"""

import re
from typing import List, Optional

_WORD_PATTERN = re.compile(r'[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z]+|[0-9]+')
_ESCAPES = {'\\t': '\t', '\\n': '\n', '\\r': '\r', '\\\\': '\\', '\\|': '|'}


def words(string: str) -> List[str]:
    """
    Split a name into words on separators and case boundaries.

    Args:
        string (str): The name to split, e.g. 'ORDER_ID', 'customerName' or 'ns:Item-Code'.

    Returns:
        List[str]: The words in their original casing.
    """
    result = []
    for part in re.split(r'[^A-Za-z0-9]+', string or ''):
        if part:
            result.extend(_WORD_PATTERN.findall(part))
    return result


def camel(string: str) -> str:
    """
    Convert a string to camelCase from snake_case, kebab-case, SCREAMING_CASE,
    camelCase, or PascalCase.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in camelCase.
    """
    parts = words(string)
    if not parts:
        return ''
    return parts[0].lower() + ''.join(word.capitalize() for word in parts[1:])


def java_field_name(name: str) -> str:
    """
    Derive a Java field identifier from a field name.

    Args:
        name (str): The source field, element, or attribute name.

    Returns:
        str: A camelCase identifier. Names that start with a digit are
        prefixed with an underscore; names without any letters or digits
        become 'field'.
    """
    result = camel(name)
    if not result:
        return 'field'
    if result[0].isdigit():
        result = '_' + result
    return result


def split_lines(text: str) -> List[str]:
    """
    Split text into lines, dropping the trailing empty line a final newline leaves.

    Args:
        text (str): The text to split. '\\r\\n' and '\\r' line endings are accepted.

    Returns:
        List[str]: The lines without their terminators.
    """
    lines = text.splitlines()
    if text.startswith('\ufeff') and lines:
        lines[0] = lines[0][1:]
    return lines


def unescape(value: Optional[str]) -> Optional[str]:
    """Resolve backslash escapes such as '\\t' that appear in option values."""
    if value is None or '\\' not in value:
        return value
    return re.sub(r'\\[tnr\\|]', lambda m: _ESCAPES[m.group(0)], value)


def parse_bool(value: str) -> Optional[bool]:
    """Parse 'true' or 'false' in any case; anything else yields None."""
    lowered = str(value).strip().lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    return None
