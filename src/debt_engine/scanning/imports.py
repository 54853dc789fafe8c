"""Static import scan and the workspace import graph.

Import specifiers are resolved to workspace files by file stem: ``./utils``,
``pkg.utils`` and ``crate::utils::Thing`` all resolve to a file named
``utils.*``. This is deliberately shallow; the graph only has to tell
"these two files reference each other" apart from "they do not".
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Mapping, Optional, Sequence

from .languages import get_language_config

_IGNORED_SEGMENTS = frozenset({"crate", "self", "super", "mod", "*"})


def extract_imports(text: str, language: str) -> list[str]:
    """Import specifiers of a source file in order of appearance."""
    config = get_language_config(language)
    if config is None:
        return []
    found: list[tuple[int, str]] = []
    for pattern in config.compiled_imports:
        for match in pattern.finditer(text):
            found.append((match.start(), match.group(1)))
    found.sort()
    return [spec for _, spec in found]


def candidate_stems(specifier: str, language: str) -> list[str]:
    """Stems an import may refer to, most specific first."""
    config = get_language_config(language)
    separators = config.import_separators if config is not None else ("/",)
    spec = specifier.strip().lstrip(".")
    if not spec:
        return []

    if "/" in separators:
        stem = PurePosixPath(spec).stem
        return [stem] if stem else []

    segments = [spec]
    for sep in separators:
        segments = [part for seg in segments for part in seg.split(sep)]
    return [s for s in reversed(segments) if s and s not in _IGNORED_SEGMENTS]


@dataclass(frozen=True)
class ImportGraph:
    """Directed import edges between workspace files.

    ``out_degree`` counts every import statement of a file (resolved or
    not); ``in_degree`` counts resolved imports pointing at a file.
    """

    imports: Mapping[str, tuple[str, ...]]
    languages: Mapping[str, str]
    edges: frozenset[tuple[str, str]] = field(default=frozenset())
    in_degree: Mapping[str, int] = field(default_factory=dict)
    max_degree: int = 0

    @classmethod
    def build(
        cls, imports: Mapping[str, Sequence[str]], languages: Mapping[str, str]
    ) -> "ImportGraph":
        frozen_imports = {path: tuple(specs) for path, specs in imports.items()}

        by_stem: dict[str, list[str]] = defaultdict(list)
        for path in sorted(frozen_imports):
            by_stem[PurePosixPath(path).stem].append(path)

        edges: set[tuple[str, str]] = set()
        in_degree: Counter[str] = Counter()
        for path, specs in frozen_imports.items():
            language = languages.get(path, "")
            for spec in specs:
                target = _resolve(spec, language, path, by_stem)
                if target is not None:
                    edges.add((path, target))
                    in_degree[target] += 1

        max_degree = max(
            (len(specs) + in_degree.get(path, 0) for path, specs in frozen_imports.items()),
            default=0,
        )
        return cls(
            imports=frozen_imports,
            languages=dict(languages),
            edges=frozenset(edges),
            in_degree=dict(in_degree),
            max_degree=max_degree,
        )

    def with_file(self, path: str, language: str, specs: Sequence[str]) -> "ImportGraph":
        """A new graph with one file's imports replaced."""
        imports = dict(self.imports)
        imports[path] = tuple(specs)
        languages = dict(self.languages)
        languages[path] = language
        return ImportGraph.build(imports, languages)

    def degree(self, path: str) -> tuple[int, int]:
        """(in, out) degree of a file."""
        return self.in_degree.get(path, 0), len(self.imports.get(path, ()))

    def has_link(self, a: str, b: str) -> bool:
        return (a, b) in self.edges or (b, a) in self.edges


def _resolve(
    spec: str, language: str, source: str, by_stem: Mapping[str, list[str]]
) -> Optional[str]:
    for stem in candidate_stems(spec, language):
        for target in by_stem.get(stem, ()):
            if target != source:
                return target
    return None
