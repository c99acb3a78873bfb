"""
Analysis requests and results.
"""

import codecs
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from schemalyze._version import version
from schemalyze.common import parse_bool, unescape
from schemalyze.errors import OptionError, ParseError, RequestError
from schemalyze.structure import FileFormat

DEFAULT_SCHEMA_NAME = "Schema"
DEFAULT_ENCODING = "utf-8"
SCHEMA_VERSION = "http://json-schema.org/draft-07/schema#"


@dataclass(frozen=True)
class AnalysisRequest:
    """
    One analysis: the primary content, optional additional samples and the
    options that control parsing.

    Attributes:
        file_format: The format of the content; strings are resolved with FileFormat.from_code.
        content: Primary content as text.
        content_bytes: Primary content as bytes, decoded with the 'encoding' option.
        schema_name: Title of the generated schema.
        sample_contents: Additional samples (text or bytes) merged into the result.
        detect_arrays: Group repeated elements into arrays; None leaves the configured default.
        optimize: Add BeanIO code-generation hints; None leaves the configured default.
        parser_options: Format specific options such as 'delimiter' or 'skipLines'.
    """

    file_format: FileFormat
    content: Optional[str] = None
    content_bytes: Optional[bytes] = None
    schema_name: str = DEFAULT_SCHEMA_NAME
    sample_contents: Tuple[Union[str, bytes], ...] = ()
    detect_arrays: Optional[bool] = None
    optimize: Optional[bool] = None
    parser_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'file_format', FileFormat.from_code(self.file_format))
        if self.content is None and self.content_bytes is None:
            raise RequestError("Either content or content_bytes must be provided",
                               file_format=self.file_format.code)
        if not self.schema_name or not str(self.schema_name).strip():
            object.__setattr__(self, 'schema_name', DEFAULT_SCHEMA_NAME)
        object.__setattr__(self, 'sample_contents', tuple(self.sample_contents or ()))
        object.__setattr__(self, 'parser_options', MappingProxyType(dict(self.parser_options or {})))

    @property
    def format_code(self) -> str:
        return self.file_format.code

    @property
    def encoding(self) -> str:
        encoding = str(self.get_option('encoding', DEFAULT_ENCODING))
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise OptionError(f"Unknown encoding '{encoding}'", 'encoding', self.format_code) from e
        return encoding

    @property
    def text(self) -> str:
        """The primary content as text, decoding bytes with the requested encoding."""
        if self.content is not None:
            return self.content
        try:
            return self.content_bytes.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise ParseError(f"Content cannot be decoded as {self.encoding}: {e.reason}",
                             self.format_code) from e

    @property
    def raw_bytes(self) -> bytes:
        """The primary content as bytes in the requested encoding."""
        if self.content_bytes is not None:
            return self.content_bytes
        return self.content.encode(self.encoding)

    def for_sample(self, sample: Union[str, bytes]) -> "AnalysisRequest":
        """A copy of this request that carries one additional sample as its content."""
        if isinstance(sample, bytes):
            return replace(self, content=None, content_bytes=sample, sample_contents=())
        return replace(self, content=sample, content_bytes=None, sample_contents=())

    def with_options(self, **overrides) -> "AnalysisRequest":
        return replace(self, **overrides)

    def has_option(self, name: str) -> bool:
        value = self.parser_options.get(name)
        return value is not None and str(value) != ''

    def get_option(self, name: str, default: Any = None) -> Any:
        value = self.parser_options.get(name)
        if value is None:
            return default
        return value

    def get_bool_option(self, name: str, default: bool) -> bool:
        value = self.parser_options.get(name)
        if value is None or value == '':
            return default
        if isinstance(value, bool):
            return value
        parsed = parse_bool(value)
        if parsed is None:
            raise OptionError(f"Option '{name}' must be 'true' or 'false', got '{value}'", name, self.format_code)
        return parsed

    def get_int_option(self, name: str, default: Optional[int]) -> Optional[int]:
        value = self.parser_options.get(name)
        if value is None or value == '':
            return default
        if isinstance(value, bool):
            raise OptionError(f"Option '{name}' must be a non-negative integer, got '{value}'", name, self.format_code)
        try:
            number = int(str(value).strip())
        except ValueError as e:
            raise OptionError(f"Option '{name}' must be a non-negative integer, got '{value}'",
                              name, self.format_code) from e
        if number < 0:
            raise OptionError(f"Option '{name}' must be a non-negative integer, got '{value}'", name, self.format_code)
        return number

    def get_char_option(self, name: str, default: Optional[str]) -> Optional[str]:
        value = self.parser_options.get(name)
        if value is None or value == '':
            return default
        value = unescape(str(value))
        if len(value) != 1:
            raise OptionError(f"Option '{name}' must be a single character, got '{value}'", name, self.format_code)
        return value

    def get_text_option(self, name: str, default: Optional[str]) -> Optional[str]:
        value = self.parser_options.get(name)
        if value is None or value == '':
            return default
        return unescape(str(value))


@dataclass(frozen=True)
class SchemaMetadata:
    """Descriptive metadata about a generated schema."""

    root_element: str
    source_format: str
    schema_version: str = SCHEMA_VERSION
    required_fields: Tuple[str, ...] = ()
    beanio_hints: Mapping[str, Any] = field(default_factory=dict)
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    total_elements: int = 0
    total_attributes: int = 0
    array_elements: int = 0
    generator_version: str = version

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schemaVersion': self.schema_version,
            'rootElement': self.root_element,
            'requiredFields': list(self.required_fields),
            'beanIOHints': dict(self.beanio_hints),
            'sourceFileType': self.source_format,
            'generatedAt': self.generated_at,
            'totalElements': self.total_elements,
            'totalAttributes': self.total_attributes,
            'arrayElements': self.array_elements,
            'generatorVersion': self.generator_version,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    The outcome of an analysis.

    Failed results are only produced by SchemaAnalyzer.try_analyze; they carry
    the error and no schema.
    """

    success: bool
    schema_name: str
    source_format: str
    json_schema: Optional[Dict[str, Any]] = None
    json_schema_string: Optional[str] = None
    elements_analyzed: int = 0
    array_fields: Tuple[str, ...] = ()
    analysis_time_ms: int = 0
    warnings: Tuple[str, ...] = ()
    metadata: Optional[SchemaMetadata] = None
    parser_metadata: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[Exception] = None

    @property
    def array_fields_detected(self) -> int:
        return len(self.array_fields)

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    @classmethod
    def failed(cls, schema_name: str, source_format: str, error: Exception,
               analysis_time_ms: int = 0, warnings: Optional[List[str]] = None) -> "AnalysisResult":
        return cls(success=False, schema_name=schema_name, source_format=source_format,
                   analysis_time_ms=analysis_time_ms, warnings=tuple(warnings or ()), error=error)
