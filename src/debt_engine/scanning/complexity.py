"""Per-function cyclomatic complexity from tree-sitter syntax trees.

Each supported language is described by a :class:`GrammarSpec`; the
:class:`TreeSitterComplexityParser` walks the tree once and attributes
every branching node to the innermost enclosing function. Languages
without a grammar get an :class:`UnsupportedLanguageParser`, which always
reports nothing instead of failing.
"""

from __future__ import annotations

import importlib
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import ParsingError, UnsupportedLanguageError
from ..logging_config import get_logger

logger = get_logger(__name__)

_LOGICAL_OPERATORS = frozenset({"&&", "||", "??", "and", "or"})


@dataclass(frozen=True)
class FunctionComplexity:
    name: str
    line: int  # 1-based
    complexity: int


@dataclass(frozen=True)
class ComplexityReport:
    functions: tuple[FunctionComplexity, ...] = ()
    note: Optional[str] = None

    @property
    def max_complexity(self) -> int:
        return max((f.complexity for f in self.functions), default=0)

    @property
    def mean_complexity(self) -> float:
        if not self.functions:
            return 0.0
        return sum(f.complexity for f in self.functions) / len(self.functions)

    def top(self, n: int = 3) -> list[FunctionComplexity]:
        return sorted(self.functions, key=lambda f: (-f.complexity, f.line))[:n]


@dataclass(frozen=True)
class GrammarSpec:
    """Node vocabulary of one tree-sitter grammar."""

    module: str
    entry_point: str
    function_nodes: frozenset[str]
    branch_nodes: frozenset[str]
    # Nodes carrying an ``operator`` field that count when it is a logical operator.
    operator_nodes: frozenset[str] = frozenset({"binary_expression"})
    # Nodes that count only when their source text starts with one of these prefixes.
    prefixed_nodes: dict[str, str] = field(default_factory=dict)


_JS_FUNCTIONS = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
_JS_BRANCHES = frozenset(
    {
        "if_statement",
        "for_statement",
        "for_in_statement",
        "while_statement",
        "do_statement",
        "switch_case",
        "catch_clause",
        "ternary_expression",
    }
)

GRAMMARS: dict[str, GrammarSpec] = {
    "python": GrammarSpec(
        module="tree_sitter_python",
        entry_point="language",
        function_nodes=frozenset({"function_definition", "lambda"}),
        branch_nodes=frozenset(
            {
                "if_statement",
                "elif_clause",
                "for_statement",
                "while_statement",
                "except_clause",
                "case_clause",
                "conditional_expression",
                "for_in_clause",
                "if_clause",
            }
        ),
        operator_nodes=frozenset({"boolean_operator"}),
    ),
    "javascript": GrammarSpec(
        module="tree_sitter_javascript",
        entry_point="language",
        function_nodes=_JS_FUNCTIONS,
        branch_nodes=_JS_BRANCHES,
    ),
    "typescript": GrammarSpec(
        module="tree_sitter_typescript",
        entry_point="language_typescript",
        function_nodes=_JS_FUNCTIONS,
        branch_nodes=_JS_BRANCHES,
    ),
    "tsx": GrammarSpec(
        module="tree_sitter_typescript",
        entry_point="language_tsx",
        function_nodes=_JS_FUNCTIONS,
        branch_nodes=_JS_BRANCHES,
    ),
    "go": GrammarSpec(
        module="tree_sitter_go",
        entry_point="language",
        function_nodes=frozenset({"function_declaration", "method_declaration", "func_literal"}),
        branch_nodes=frozenset(
            {
                "if_statement",
                "for_statement",
                "expression_case",
                "type_case",
                "communication_case",
            }
        ),
    ),
    "rust": GrammarSpec(
        module="tree_sitter_rust",
        entry_point="language",
        function_nodes=frozenset({"function_item", "closure_expression"}),
        branch_nodes=frozenset(
            {
                "if_expression",
                "while_expression",
                "loop_expression",
                "for_expression",
                "match_arm",
                "if_let_expression",
                "while_let_expression",
            }
        ),
    ),
    "java": GrammarSpec(
        module="tree_sitter_java",
        entry_point="language",
        function_nodes=frozenset(
            {"method_declaration", "constructor_declaration", "lambda_expression"}
        ),
        branch_nodes=frozenset(
            {
                "if_statement",
                "for_statement",
                "enhanced_for_statement",
                "while_statement",
                "do_statement",
                "catch_clause",
                "ternary_expression",
            }
        ),
        prefixed_nodes={"switch_label": "case"},
    ),
}

# Declarations whose ``name`` field names an anonymous function assigned to them.
_NAMING_PARENTS = frozenset(
    {"variable_declarator", "assignment", "assignment_expression", "pair", "let_declaration"}
)


class ComplexityParser(ABC):
    """Capability: turn source bytes into per-function complexity."""

    language: str

    @abstractmethod
    def analyze(self, source: bytes) -> ComplexityReport:
        """Return the complexity of every function in ``source``.

        Raises:
            ParsingError: If the source does not parse cleanly
        """


class UnsupportedLanguageParser(ComplexityParser):
    """Zero outcome for languages without a grammar."""

    def __init__(self, language: str, reason: str = "no grammar available"):
        self.language = language
        self.reason = reason

    def analyze(self, source: bytes) -> ComplexityReport:
        return ComplexityReport(note=f"complexity not measured: {self.language} ({self.reason})")


class TreeSitterComplexityParser(ComplexityParser):
    """Complexity for one language backed by a tree-sitter grammar.

    The Language object is shared; a Parser is created per thread since
    tree-sitter parsers must not be used concurrently.
    """

    def __init__(self, language: str, grammar: GrammarSpec, ts_language: Any):
        self.language = language
        self.grammar = grammar
        self._ts_language = ts_language
        self._local = threading.local()

    def _parser(self) -> Any:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            import tree_sitter

            parser = tree_sitter.Parser(self._ts_language)
            self._local.parser = parser
        return parser

    def analyze(self, source: bytes) -> ComplexityReport:
        tree = self._parser().parse(source)
        root = tree.root_node
        if root.has_error:
            raise ParsingError("<source>", self.language, "syntax tree contains errors")
        return ComplexityReport(functions=tuple(self._walk(root)))

    def _walk(self, root: Any) -> list[FunctionComplexity]:
        grammar = self.grammar
        # Each frame is [name, line, branch_count]; frame 0 is module level code.
        frames: list[list[Any]] = [["<module>", 1, 0]]
        stack: list[tuple[Any, int]] = [(root, 0)]

        while stack:
            node, frame_index = stack.pop()
            node_type = node.type

            if node_type in grammar.function_nodes:
                frames.append([_function_name(node), node.start_point[0] + 1, 0])
                frame_index = len(frames) - 1
            elif self._is_branch(node):
                frames[frame_index][2] += 1

            for child in reversed(node.children):
                stack.append((child, frame_index))

        functions = [FunctionComplexity(name, line, 1 + count) for name, line, count in frames[1:]]
        module_name, module_line, module_branches = frames[0]
        if module_branches:
            functions.append(FunctionComplexity(module_name, module_line, 1 + module_branches))
        return functions

    def _is_branch(self, node: Any) -> bool:
        node_type = node.type
        grammar = self.grammar
        if node_type in grammar.branch_nodes:
            return True
        if node_type in grammar.operator_nodes:
            operator = node.child_by_field_name("operator")
            return operator is not None and operator.type in _LOGICAL_OPERATORS
        prefix = grammar.prefixed_nodes.get(node_type)
        if prefix is not None:
            text = node.text or b""
            return text.decode("utf-8", errors="replace").lstrip().startswith(prefix)
        return False


def _node_text(node: Any) -> str:
    text = node.text
    return text.decode("utf-8", errors="replace") if text else ""


def _function_name(node: Any) -> str:
    name = node.child_by_field_name("name")
    if name is not None:
        return _node_text(name)
    parent = node.parent
    if parent is not None and parent.type in _NAMING_PARENTS:
        for field_name in ("name", "left", "key", "pattern"):
            target = parent.child_by_field_name(field_name)
            if target is not None:
                return _node_text(target)
    return "<anonymous>"


class ParserRegistry:
    """Lazily builds one ComplexityParser per language."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._parsers: dict[str, ComplexityParser] = {}

    def for_path(self, relative_path: str, language: str) -> ComplexityParser:
        key = "tsx" if relative_path.lower().endswith(".tsx") else language
        with self._lock:
            parser = self._parsers.get(key)
            if parser is None:
                parser = self._build(key)
                self._parsers[key] = parser
        return parser

    def _build(self, key: str) -> ComplexityParser:
        grammar = GRAMMARS.get(key)
        if grammar is None:
            return UnsupportedLanguageParser(key)
        try:
            return TreeSitterComplexityParser(key, grammar, load_language(grammar))
        except UnsupportedLanguageError as e:
            logger.warning("%s", e)
            return UnsupportedLanguageParser(key, "grammar not installed")


def load_language(grammar: GrammarSpec) -> Any:
    """Wrap a grammar package's language capsule in a tree_sitter.Language."""
    try:
        import tree_sitter

        module = importlib.import_module(grammar.module)
    except ImportError as e:
        raise UnsupportedLanguageError(grammar.module, sorted(GRAMMARS)) from e
    return tree_sitter.Language(getattr(module, grammar.entry_point)())
