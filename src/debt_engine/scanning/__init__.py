"""Source discovery, language detection and static scans."""

from .complexity import (
    ComplexityParser,
    ComplexityReport,
    FunctionComplexity,
    ParserRegistry,
    TreeSitterComplexityParser,
    UnsupportedLanguageParser,
)
from .files import SourceFile, discover_files, read_source, relative_to_workspace
from .imports import ImportGraph, extract_imports
from .languages import LANGUAGES, detect_language, is_source_file

__all__ = [
    "LANGUAGES",
    "ComplexityParser",
    "ComplexityReport",
    "FunctionComplexity",
    "ImportGraph",
    "ParserRegistry",
    "SourceFile",
    "TreeSitterComplexityParser",
    "UnsupportedLanguageParser",
    "detect_language",
    "discover_files",
    "extract_imports",
    "is_source_file",
    "read_source",
    "relative_to_workspace",
]
