"""
Error types raised while analyzing sample files.

Every error carries a stable code and, where it is known, the file format
being processed so that callers can map failures to their own responses.
"""

from typing import List, Optional


class AnalyzerError(Exception):
    """
    Base exception for all schema analysis failures.

    Attributes:
        message: Human-readable error description
        code: Stable machine-readable error code
        file_format: Code of the format being analyzed, if known
        context: Optional context about where the error occurred
    """

    default_code = "ANALYSIS_ERROR"

    def __init__(self, message: str, code: Optional[str] = None,
                 file_format: Optional[str] = None,
                 context: Optional[str] = None) -> None:
        self.message = message
        self.code = code or self.default_code
        self.file_format = file_format
        self.context = context
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)

    @property
    def formatted_message(self) -> str:
        """The message prefixed with the error code and format."""
        prefix = f"[{self.code}]"
        if self.file_format:
            prefix += f" [{self.file_format}]"
        return f"{prefix} {self}"


class RequestError(AnalyzerError):
    """The analysis request is malformed or incomplete."""

    default_code = "INVALID_REQUEST"


class OptionError(AnalyzerError):
    """
    A format option is missing or cannot be parsed as its expected type.

    Attributes:
        option_name: Name of the offending option
    """

    default_code = "INVALID_OPTION"

    def __init__(self, message: str, option_name: Optional[str] = None,
                 file_format: Optional[str] = None) -> None:
        self.option_name = option_name
        super().__init__(message, file_format=file_format,
                         context=f"option '{option_name}'" if option_name else None)


class DescriptorError(AnalyzerError):
    """A fixed-length field descriptor is invalid."""

    default_code = "INVALID_DESCRIPTOR"

    def __init__(self, message: str, context: Optional[str] = None) -> None:
        super().__init__(message, file_format="fixed-length", context=context)


class ParseError(AnalyzerError):
    """
    The content does not conform to the expected format.

    Attributes:
        line_number: 1-based line number of the offending input, if known
    """

    default_code = "PARSE_ERROR"

    def __init__(self, message: str, file_format: Optional[str] = None,
                 line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        super().__init__(message, file_format=file_format,
                         context=f"line {line_number}" if line_number is not None else None)


class MergeError(AnalyzerError):
    """Structurally incompatible trees were merged, or nothing was given to merge."""

    default_code = "MERGE_ERROR"


class GenerationError(AnalyzerError):
    """The schema generator was handed a missing or invalid tree."""

    default_code = "GENERATION_ERROR"


class UnsupportedFormatError(AnalyzerError):
    """
    A format has no usable parser.

    Attributes:
        usable_formats: Codes of the formats that can currently be analyzed
    """

    default_code = "UNSUPPORTED_FORMAT"

    def __init__(self, message: str, file_format: Optional[str] = None,
                 usable_formats: Optional[List[str]] = None) -> None:
        self.usable_formats = list(usable_formats or [])
        if self.usable_formats:
            message = f"{message}. Usable formats: {', '.join(self.usable_formats)}"
        super().__init__(message, file_format=file_format)
