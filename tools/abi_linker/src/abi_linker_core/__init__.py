from .config import LinkerConfig, config_from_args
from .descriptor import (
    AbiEntity,
    LinkedDescriptor,
    TranslationUnitDescriptor,
    parse_descriptor,
    serialize_descriptor,
)
from .errors import (
    AbiLinkerError,
    ConfigurationError,
    InputParseError,
    LinkError,
    ResolutionError,
    SerializationError,
)
from .linker import LinkState, synthesize_symbols
from .orchestration import LinkResult, link_and_dump
from .patterns import WildcardMatcher, compile_patterns
from .visibility import ResolvedVisibility, resolve_visibility

__all__ = [
    "AbiEntity",
    "AbiLinkerError",
    "ConfigurationError",
    "InputParseError",
    "LinkError",
    "LinkResult",
    "LinkState",
    "LinkedDescriptor",
    "LinkerConfig",
    "ResolutionError",
    "ResolvedVisibility",
    "SerializationError",
    "TranslationUnitDescriptor",
    "WildcardMatcher",
    "compile_patterns",
    "config_from_args",
    "link_and_dump",
    "parse_descriptor",
    "resolve_visibility",
    "serialize_descriptor",
    "synthesize_symbols",
]
