"""
Infers a structure tree from fixed-length records described by a field descriptor.
"""

import logging
from typing import Dict, List, Optional, Sequence

from schemalyze.common import split_lines
from schemalyze.errors import OptionError, ParseError
from schemalyze.fixedlengthdescriptor import FieldDefinition, FixedLengthDescriptor
from schemalyze.structure import FileFormat, StructureElement
from schemalyze.structuremerge import merge_structure_list
from schemalyze.tabular import ColumnCollector, record_tree

logger = logging.getLogger(__name__)

FORMAT = FileFormat.FIXED_LENGTH.code


def extract_field(line_bytes: bytes, definition: FieldDefinition, encoding: str, trim: bool,
                  warnings: Optional[List[str]] = None, line_number: Optional[int] = None) -> str:
    """
    Cut one field out of a record by byte offset.

    Args:
        line_bytes (bytes): The encoded record.
        definition (FieldDefinition): Offset and width of the field.
        encoding (str): Encoding used to turn the slice back into text.
        trim (bool): Strip surrounding whitespace when the field does not say otherwise.
        warnings (List[str]): Receives a message when the slice cannot be decoded,
            for example when a field boundary splits a multi-byte character.
        line_number (int): Line number used in that message.

    Returns:
        str: The field text, '' when the record ends before the field starts.
        The text is kept exactly as it appears apart from trimming, so leading
        zeros survive. Undecodable bytes become U+FFFD.
    """
    if definition.start >= len(line_bytes):
        return ''
    raw = line_bytes[definition.start:min(definition.end, len(line_bytes))]
    try:
        value = raw.decode(encoding)
    except UnicodeDecodeError:
        value = raw.decode(encoding, errors='replace')
        location = f"Line {line_number}: " if line_number is not None else ""
        message = (f"{location}field '{definition.name}' {definition.range_text} "
                   f"is not valid {encoding}; undecodable bytes were replaced")
        logger.warning(message)
        if warnings is not None:
            warnings.append(message)
    if definition.trim if definition.trim is not None else trim:
        value = value.strip()
    return value


class FixedLengthParser:
    """Parser for fixed-length records."""

    file_format = FileFormat.FIXED_LENGTH
    implemented = True

    def can_handle(self, request) -> bool:
        return (request is not None and request.file_format == self.file_format
                and (request.has_option('fieldDefinitions') or request.has_option('descriptorFile')))

    def available_options(self) -> Dict[str, str]:
        return {
            'descriptorFile': "Field descriptor document (JSON array of {name, start, length, type})",
            'fieldDefinitions': "Inline JSON field definitions, preferred over descriptorFile",
            'encoding': "Character encoding used for byte offsets (default: UTF-8)",
            'skipLines': "Number of lines to skip before reading (default: 0)",
            'trimFields': "Whether to trim whitespace from field values (default: true)",
            'recordLength': "Expected record length in bytes; mismatches are reported as warnings",
        }

    def load_descriptor(self, request) -> FixedLengthDescriptor:
        """
        Read and validate the descriptor named by the request options.

        Raises:
            OptionError: If neither 'fieldDefinitions' nor 'descriptorFile' is given.
            DescriptorError: If the descriptor is invalid.
        """
        if request.has_option('fieldDefinitions'):
            return FixedLengthDescriptor.from_json(str(request.get_option('fieldDefinitions')))
        if request.has_option('descriptorFile'):
            return FixedLengthDescriptor.from_json(str(request.get_option('descriptorFile')))
        raise OptionError("Either descriptorFile or fieldDefinitions must be provided",
                          'fieldDefinitions', FORMAT)

    def parse(self, request, warnings: Optional[List[str]] = None) -> StructureElement:
        """
        Infer the record tree of one sample.

        The descriptor is validated before any record is read. Declared field
        types win over inferred ones.
        """
        if warnings is None:
            warnings = []
        descriptor = self.load_descriptor(request)
        encoding = request.encoding
        skip_lines = request.get_int_option('skipLines', 0)
        trim = request.get_bool_option('trimFields', True)
        record_length = request.get_int_option('recordLength', None)

        lines = split_lines(request.text)
        if skip_lines and skip_lines >= len(lines):
            raise OptionError(f"skipLines ({skip_lines}) must be less than the number of lines ({len(lines)})",
                              'skipLines', FORMAT)

        collector = ColumnCollector(descriptor.field_names)
        for number, line in enumerate(lines, start=1):
            if number <= skip_lines or not line.strip():
                continue
            line_bytes = line.encode(encoding, errors='replace')
            if record_length is not None and len(line_bytes) != record_length:
                message = f"Line {number}: record length {len(line_bytes)} differs from expected {record_length}"
                logger.warning(message)
                warnings.append(message)
            collector.add_record({d.name: extract_field(line_bytes, d, encoding, trim, warnings, number)
                                  for d in descriptor})
        if not collector.records:
            raise ParseError("Content contains no data lines", FORMAT)

        declared = {d.name: d.type for d in descriptor if d.type}
        logger.debug("Parsed %d fixed-length records with %d fields", collector.records, len(descriptor))
        return record_tree(request.schema_name, collector.fields(declared_types=declared))

    def merge_samples(self, structures: Sequence[StructureElement]) -> StructureElement:
        return merge_structure_list(structures, FORMAT)
