"""
Deployment-wide analyzer defaults.

Adapters that receive flat key/value settings (form fields, JSON request
bodies) use the 'parserOptions.<name>' convention for format options and
top-level 'detectArrays' / 'optimize' flags. AnalyzerConfig reads that
convention and applies it to requests that leave those settings unset.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from schemalyze.common import parse_bool
from schemalyze.errors import OptionError
from schemalyze.request import AnalysisRequest

logger = logging.getLogger(__name__)

PARSER_OPTIONS_PREFIX = "parserOptions."


@dataclass(frozen=True)
class AnalyzerConfig:
    """
    Defaults applied to every request handled by an analyzer.

    Attributes:
        detect_arrays: Default for AnalysisRequest.detect_arrays.
        optimize: Default for AnalysisRequest.optimize.
        parser_options: Options merged beneath each request's own options.
    """

    detect_arrays: bool = True
    optimize: bool = True
    parser_options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, settings: Optional[Mapping[str, Any]]) -> "AnalyzerConfig":
        """
        Build a config from a flat settings mapping.

        Args:
            settings: Keys 'detectArrays', 'optimize' (or 'optimizeForBeanIO')
                and any number of 'parserOptions.<name>' entries.

        Returns:
            AnalyzerConfig: The config; unknown keys are ignored.
        """
        settings = settings or {}
        detect_arrays = _flag(settings, 'detectArrays', True)
        optimize = _flag(settings, 'optimize', _flag(settings, 'optimizeForBeanIO', True))
        options: Dict[str, Any] = {}
        for key, value in settings.items():
            if key.startswith(PARSER_OPTIONS_PREFIX) and len(key) > len(PARSER_OPTIONS_PREFIX):
                options[key[len(PARSER_OPTIONS_PREFIX):]] = value
        logger.debug("Analyzer config: detectArrays=%s optimize=%s options=%s", detect_arrays, optimize, options)
        return cls(detect_arrays=detect_arrays, optimize=optimize, parser_options=options)

    def resolve(self, request: AnalysisRequest) -> AnalysisRequest:
        """Fill the request's unset flags and missing options from this config."""
        options = dict(self.parser_options)
        options.update(request.parser_options)
        return replace(
            request,
            detect_arrays=self.detect_arrays if request.detect_arrays is None else request.detect_arrays,
            optimize=self.optimize if request.optimize is None else request.optimize,
            parser_options=options)


def _flag(settings: Mapping[str, Any], key: str, default: bool) -> bool:
    value = settings.get(key)
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    parsed = parse_bool(value)
    if parsed is None:
        raise OptionError(f"Setting '{key}' must be 'true' or 'false', got '{value}'", key)
    return parsed


def parse_option_pairs(pairs) -> Dict[str, str]:
    """
    Parse 'name=value' strings, as given on the command line, into an option map.

    Raises:
        OptionError: If an entry has no '=' or an empty name.
    """
    options: Dict[str, str] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition('=')
        name = name.strip()
        if not sep or not name:
            raise OptionError(f"Option '{pair}' must have the form name=value", name or pair)
        if name.startswith(PARSER_OPTIONS_PREFIX):
            name = name[len(PARSER_OPTIONS_PREFIX):]
        options[name] = value
    return options
