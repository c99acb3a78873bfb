"""
Convert sample files on disk to a JSON Schema file.
"""

import logging
import os
import sys
from typing import Dict, List, Optional

from schemalyze.analyzer import SchemaAnalyzer
from schemalyze.config import parse_option_pairs
from schemalyze.errors import RequestError
from schemalyze.request import AnalysisRequest

logger = logging.getLogger(__name__)


def _read_bytes(path: str) -> bytes:
    if not os.path.exists(path):
        raise RequestError(f"Input file not found: {path}")
    with open(path, 'rb') as f:
        return f.read()


def convert_file_to_json_schema(input_file: str, output_file: Optional[str], file_format: str,
                                schema_name: Optional[str] = None,
                                sample_files: Optional[List[str]] = None,
                                parser_options: Optional[List[str]] = None,
                                descriptor_file: Optional[str] = None,
                                no_detect_arrays: bool = False,
                                no_optimize: bool = False) -> List[str]:
    """
    Analyze a sample file and write the inferred JSON Schema.

    Args:
        input_file: Path of the primary sample.
        output_file: Where to write the schema; stdout when empty.
        file_format: Format code such as 'csv' or 'fixed-length'.
        schema_name: Schema title; defaults to the input file's base name.
        sample_files: Paths of additional samples to merge.
        parser_options: 'name=value' option strings.
        descriptor_file: Path of a fixed-length field descriptor.
        no_detect_arrays: Do not group repeated XML elements into arrays.
        no_optimize: Do not add BeanIO hints.

    Returns:
        List[str]: Warnings reported by the analysis.
    """
    if not input_file:
        raise RequestError("An input file is required")
    options: Dict[str, str] = parse_option_pairs(parser_options)
    if descriptor_file:
        with open(descriptor_file, 'r', encoding='utf-8') as f:
            options['descriptorFile'] = f.read()
    if not schema_name:
        schema_name = os.path.splitext(os.path.basename(input_file))[0].replace(' ', '_')

    request = AnalysisRequest(
        file_format=file_format,
        content_bytes=_read_bytes(input_file),
        schema_name=schema_name,
        sample_contents=tuple(_read_bytes(path) for path in sample_files or []),
        detect_arrays=not no_detect_arrays,
        optimize=not no_optimize,
        parser_options=options)
    result = SchemaAnalyzer().analyze(request)

    if output_file:
        directory = os.path.dirname(output_file)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(result.json_schema_string)
    else:
        sys.stdout.write(result.json_schema_string + '\n')
    for warning in result.warnings:
        logger.warning(warning)
    return list(result.warnings)


def print_formats() -> None:
    """Print every registered format and whether it can be analyzed."""
    analyzer = SchemaAnalyzer()
    usable = set(analyzer.list_usable_formats())
    for file_format in analyzer.list_registered_formats():
        status = '' if file_format in usable else ' (not implemented)'
        print(f"{file_format.code}{status}")


def print_options(file_format: str) -> None:
    """Print the options a format understands."""
    for name, description in SchemaAnalyzer().describe_options(file_format).items():
        print(f"{name}: {description}")
