import importlib

mod = "schemalyze"
class LazyLoader:
    """
    Lazy loader for the schemalyze functions so that pandas and lxml are
    only imported when a parser that needs them is used.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Public names and the modules that define them
_mappings = {
    "analyze": (f"{mod}.analyzer", "analyze"),
    "list_usable_formats": (f"{mod}.analyzer", "list_usable_formats"),
    "list_registered_formats": (f"{mod}.analyzer", "list_registered_formats"),
    "describe_options": (f"{mod}.analyzer", "describe_options"),
    "SchemaAnalyzer": (f"{mod}.analyzer", "SchemaAnalyzer"),
    "AnalysisRequest": (f"{mod}.request", "AnalysisRequest"),
    "AnalysisResult": (f"{mod}.request", "AnalysisResult"),
    "AnalyzerConfig": (f"{mod}.config", "AnalyzerConfig"),
    "FileFormat": (f"{mod}.structure", "FileFormat"),
    "StructureElement": (f"{mod}.structure", "StructureElement"),
    "ElementAttribute": (f"{mod}.structure", "ElementAttribute"),
    "ParserRegistry": (f"{mod}.parserregistry", "ParserRegistry"),
    "JsonSchemaGenerator": (f"{mod}.structuretojsonschema", "JsonSchemaGenerator"),
    "SchemaOptimizer": (f"{mod}.schemaoptimizer", "SchemaOptimizer"),
    "convert_file_to_json_schema": (f"{mod}.filetoschema", "convert_file_to_json_schema"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
