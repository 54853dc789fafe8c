"""Language configurations: the single source of truth for per-language patterns.

Adding a new language:
  1. Add a LanguageConfig entry to LANGUAGES below.
  2. Add a grammar entry in ``scanning.complexity`` if tree-sitter supports it.
"""

from __future__ import annotations

import re as _re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional


@dataclass(frozen=True)
class LanguageConfig:
    """Everything the scanners need to know about a language."""

    name: str
    extensions: tuple[str, ...]

    # Line comment markers, used by the smell scanner.
    line_comments: tuple[str, ...] = ("//",)
    # Block comment delimiters as (open, close).
    block_comments: tuple[tuple[str, str], ...] = (("/*", "*/"),)

    # Import detection regexes. Group 1 is captured as the import specifier.
    import_patterns: tuple[str, ...] = ()

    # Function header regex. Group 1 is the name, group 2 the parameter list.
    function_pattern: str = ""

    # Empty exception handler regex, matched against the whole file text.
    empty_handler_pattern: str = ""

    # Separator between segments of an import specifier.
    import_separators: tuple[str, ...] = ("/",)

    compiled_imports: tuple[_re.Pattern, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "compiled_imports",
            tuple(_re.compile(p, _re.MULTILINE) for p in self.import_patterns),
        )


_JS_IMPORTS = (
    r"""^\s*import\s+(?:[^'"]*?\s+from\s+)?['"]([^'"]+)['"]""",
    r"""^\s*export\s+[^'"]*?\s+from\s+['"]([^'"]+)['"]""",
    r"""require\(\s*['"]([^'"]+)['"]\s*\)""",
)
_JS_FUNCTION = (
    r"(?:function\s*\*?\s*([A-Za-z_$][\w$]*)\s*\(([^)]*)\)"
    r"|([A-Za-z_$][\w$]*)\s*=\s*(?:async\s+)?\(([^)]*)\)\s*=>)"
)
_C_STYLE_EMPTY_CATCH = r"catch\s*(?:\([^)]*\))?\s*\{\s*\}"

LANGUAGES: dict[str, LanguageConfig] = {
    "python": LanguageConfig(
        name="python",
        extensions=(".py", ".pyi"),
        line_comments=("#",),
        block_comments=(),
        import_patterns=(
            r"^\s*from\s+([.\w]+)\s+import\s",
            r"^\s*import\s+([.\w]+)",
        ),
        function_pattern=r"^[ \t]*(?:async\s+)?def\s+(\w+)\s*\(([^)]*)\)",
        empty_handler_pattern=r"except[^:\n]*:[ \t]*(?:\n[ \t]*)?pass\b",
        import_separators=(".",),
    ),
    "javascript": LanguageConfig(
        name="javascript",
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        import_patterns=_JS_IMPORTS,
        function_pattern=_JS_FUNCTION,
        empty_handler_pattern=_C_STYLE_EMPTY_CATCH,
    ),
    "typescript": LanguageConfig(
        name="typescript",
        extensions=(".ts", ".tsx", ".mts", ".cts"),
        import_patterns=_JS_IMPORTS,
        function_pattern=_JS_FUNCTION,
        empty_handler_pattern=_C_STYLE_EMPTY_CATCH,
    ),
    "go": LanguageConfig(
        name="go",
        extensions=(".go",),
        import_patterns=(
            r"""^\s*import\s+(?:[\w.]+\s+)?"([^"]+)\"""",
            r"""^\s+(?:[\w.]+\s+)?"([^"]+)"\s*$""",
        ),
        function_pattern=r"^func\s+(?:\([^)]*\)\s*)?(\w+)\s*\(([^)]*)\)",
        empty_handler_pattern=r"if\s+err\s*!=\s*nil\s*\{\s*\}",
    ),
    "rust": LanguageConfig(
        name="rust",
        extensions=(".rs",),
        import_patterns=(r"^\s*(?:pub(?:\([^)]*\))?\s+)?use\s+([\w:]+)",),
        function_pattern=r"\bfn\s+(\w+)\s*(?:<[^>]*>)?\s*\(([^)]*)\)",
        empty_handler_pattern=r"Err\(\s*_?\w*\s*\)\s*=>\s*\{\s*\}",
        import_separators=("::",),
    ),
    "java": LanguageConfig(
        name="java",
        extensions=(".java",),
        import_patterns=(r"^\s*import\s+(?:static\s+)?([\w.]+)",),
        function_pattern=(
            r"^[ \t]*(?:(?:public|protected|private|static|final|synchronized|abstract)[ \t]+)+"
            r"[\w<>\[\],.? ]+?[ \t]+(\w+)[ \t]*\(([^)]*)\)"
        ),
        empty_handler_pattern=_C_STYLE_EMPTY_CATCH,
        import_separators=(".",),
    ),
}

_EXTENSION_MAP: dict[str, str] = {
    ext: cfg.name for cfg in LANGUAGES.values() for ext in cfg.extensions
}


def detect_language(path: str) -> Optional[str]:
    """Language name for a path, or None for files the engine does not score."""
    return _EXTENSION_MAP.get(PurePosixPath(path).suffix.lower())


def get_language_config(language: str) -> Optional[LanguageConfig]:
    return LANGUAGES.get(language)


def is_source_file(path: str) -> bool:
    return detect_language(path) is not None
