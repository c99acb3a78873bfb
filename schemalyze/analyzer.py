"""
Runs an analysis end to end: parse the primary content and any additional
samples, merge the inferred trees, generate the JSON Schema and add BeanIO
hints.
"""

import json
import logging
import time
from typing import Dict, List, Optional

from schemalyze.config import AnalyzerConfig
from schemalyze.errors import AnalyzerError, ParseError, RequestError, UnsupportedFormatError
from schemalyze.parserregistry import ParserRegistry
from schemalyze.request import AnalysisRequest, AnalysisResult, SchemaMetadata
from schemalyze.schemaoptimizer import SchemaOptimizer
from schemalyze.structure import FileFormat, StructureElement
from schemalyze.structuretojsonschema import JsonSchemaGenerator, validate_schema

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """
    Orchestrates parsers, schema generation and optimization.

    The analyzer owns its parser registry; pass a registry to substitute or
    add parsers without touching any other analyzer.
    """

    def __init__(self, registry: Optional[ParserRegistry] = None,
                 generator: Optional[JsonSchemaGenerator] = None,
                 optimizer: Optional[SchemaOptimizer] = None,
                 config: Optional[AnalyzerConfig] = None):
        self.registry = registry if registry is not None else ParserRegistry.default()
        self.generator = generator or JsonSchemaGenerator()
        self.optimizer = optimizer or SchemaOptimizer()
        self.config = config or AnalyzerConfig()

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze the request's content and samples.

        A sample that fails to parse is skipped with a warning; the primary
        content must parse.

        Args:
            request: What to analyze and how.

        Returns:
            AnalysisResult: The successful result.

        Raises:
            RequestError: If there is no request.
            UnsupportedFormatError: If the format has no usable parser.
            OptionError, DescriptorError, ParseError, MergeError, GenerationError:
                If the corresponding step fails.
            AnalyzerError: For any other unexpected failure.
        """
        if request is None:
            raise RequestError("No analysis request provided")
        try:
            return self._analyze(request)
        except AnalyzerError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure while analyzing %s content", request.format_code)
            raise AnalyzerError(f"Analysis failed: {e}", file_format=request.format_code) from e

    def try_analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Like analyze, but returns a failed result carrying the error instead of raising."""
        start = time.perf_counter()
        try:
            return self.analyze(request)
        except AnalyzerError as e:
            logger.warning("Analysis failed: %s", e.formatted_message)
            return AnalysisResult.failed(
                schema_name=request.schema_name if request is not None else "Schema",
                source_format=request.format_code if request is not None else "",
                error=e,
                analysis_time_ms=_elapsed_ms(start))

    def _analyze(self, request: AnalysisRequest) -> AnalysisResult:
        start = time.perf_counter()
        request = self.config.resolve(request)
        file_format = request.file_format
        parser = self.registry.get(file_format)
        if not getattr(parser, 'implemented', True):
            raise UnsupportedFormatError(f"Format '{file_format.code}' is registered but not implemented",
                                         file_format.code, [f.code for f in self.list_usable_formats()])
        logger.debug("Analyzing %s content for schema '%s' with %d additional samples",
                     file_format.code, request.schema_name, len(request.sample_contents))

        warnings: List[str] = []
        structures = [parser.parse(request, warnings)]
        skipped = 0
        for index, sample in enumerate(request.sample_contents, start=1):
            sample_warnings: List[str] = []
            try:
                structures.append(parser.parse(request.for_sample(sample), sample_warnings))
            except ParseError as e:
                skipped += 1
                message = f"Sample {index} skipped: {e}"
                logger.warning(message)
                warnings.append(message)
                continue
            warnings.extend(f"Sample {index}: {w}" for w in sample_warnings)

        merged = parser.merge_samples(structures)
        schema = self.generator.generate(merged, request)
        warnings.extend(validate_schema(schema))
        if request.optimize:
            schema = self.optimizer.optimize(schema, file_format, True, request.parser_options)

        array_fields = merged.array_paths()
        result = AnalysisResult(
            success=True,
            schema_name=request.schema_name,
            source_format=file_format.code,
            json_schema=schema,
            json_schema_string=json.dumps(schema, indent=2),
            elements_analyzed=merged.count_elements(),
            array_fields=tuple(array_fields),
            analysis_time_ms=_elapsed_ms(start),
            warnings=tuple(warnings),
            metadata=_metadata(merged, schema, file_format, array_fields),
            parser_metadata={
                'parser': type(parser).__name__,
                'samplesParsed': len(structures),
                'samplesSkipped': skipped,
                'detectArrays': request.detect_arrays,
                'optimized': request.optimize,
            })
        logger.debug("Analysis of '%s' finished in %d ms with %d warnings",
                     request.schema_name, result.analysis_time_ms, len(warnings))
        return result

    def list_usable_formats(self) -> List[FileFormat]:
        return self.registry.usable_formats()

    def list_registered_formats(self) -> List[FileFormat]:
        return self.registry.registered_formats()

    def describe_options(self, file_format) -> Dict[str, str]:
        return self.registry.describe_options(file_format)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _metadata(tree: StructureElement, schema: Dict, file_format: FileFormat,
              array_fields: List[str]) -> SchemaMetadata:
    record = tree.item if tree.is_array and tree.item is not None else tree
    hints = {key: value for key, value in schema.items()
             if key.startswith('x-') and key not in ('x-metadata',)}
    return SchemaMetadata(
        root_element=tree.name,
        source_format=file_format.code,
        required_fields=tuple(child.name for child in record.children if child.required),
        beanio_hints=hints,
        total_elements=tree.count_elements(),
        total_attributes=tree.count_attributes(),
        array_elements=len(array_fields))


def analyze(request: AnalysisRequest) -> AnalysisResult:
    """Analyze a request with a freshly configured analyzer."""
    return SchemaAnalyzer().analyze(request)


def list_usable_formats() -> List[FileFormat]:
    return SchemaAnalyzer().list_usable_formats()


def list_registered_formats() -> List[FileFormat]:
    return SchemaAnalyzer().list_registered_formats()


def describe_options(file_format) -> Dict[str, str]:
    return SchemaAnalyzer().describe_options(file_format)
