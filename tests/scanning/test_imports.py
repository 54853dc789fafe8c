"""Tests for the import scan and import graph."""

from debt_engine.scanning.imports import ImportGraph, candidate_stems, extract_imports


class TestExtractImports:
    def test_python(self):
        text = "import os\nfrom pkg.utils import slugify\nfrom . import models\n\nx = 1\n"
        assert extract_imports(text, "python") == ["os", "pkg.utils", "."]

    def test_javascript(self):
        text = (
            "import React from 'react';\n"
            "import { api } from \"./api/client\";\n"
            "import './styles.css';\n"
            "const fs = require('fs');\n"
            "export { helper } from '../lib/helper';\n"
        )
        assert extract_imports(text, "javascript") == [
            "react",
            "./api/client",
            "./styles.css",
            "fs",
            "../lib/helper",
        ]

    def test_go_import_block(self):
        text = 'package main\n\nimport (\n\t"fmt"\n\tlog "github.com/acme/logger"\n)\n'
        assert extract_imports(text, "go") == ["fmt", "github.com/acme/logger"]

    def test_rust(self):
        text = "use std::collections::HashMap;\npub use crate::store::Store;\n"
        assert extract_imports(text, "rust") == ["std::collections::HashMap", "crate::store::Store"]

    def test_java(self):
        text = "import java.util.List;\nimport static com.acme.Util.helper;\n"
        assert extract_imports(text, "java") == ["java.util.List", "com.acme.Util.helper"]

    def test_unknown_language(self):
        assert extract_imports("import x", "cobol") == []


class TestCandidateStems:
    def test_path_style(self):
        assert candidate_stems("./api/client", "javascript") == ["client"]
        assert candidate_stems("../lib/helper.js", "typescript") == ["helper"]

    def test_dotted(self):
        assert candidate_stems("pkg.utils", "python") == ["utils", "pkg"]
        assert candidate_stems("..models", "python") == ["models"]

    def test_rust_skips_keywords(self):
        assert candidate_stems("crate::store::Store", "rust") == ["Store", "store"]

    def test_empty(self):
        assert candidate_stems(".", "python") == []


class TestImportGraph:
    def _graph(self):
        return ImportGraph.build(
            {
                "app.py": ["pkg.models", "os"],
                "pkg/models.py": [],
                "web/index.js": ["./widgets/button"],
                "web/widgets/button.js": [],
            },
            {
                "app.py": "python",
                "pkg/models.py": "python",
                "web/index.js": "javascript",
                "web/widgets/button.js": "javascript",
            },
        )

    def test_edges(self):
        graph = self._graph()
        assert graph.edges == frozenset(
            {("app.py", "pkg/models.py"), ("web/index.js", "web/widgets/button.js")}
        )

    def test_degree_counts_unresolved_imports_as_outgoing(self):
        graph = self._graph()
        assert graph.degree("app.py") == (0, 2)
        assert graph.degree("pkg/models.py") == (1, 0)
        assert graph.max_degree == 2

    def test_has_link_is_symmetric(self):
        graph = self._graph()
        assert graph.has_link("app.py", "pkg/models.py")
        assert graph.has_link("pkg/models.py", "app.py")
        assert not graph.has_link("app.py", "web/index.js")

    def test_with_file_replaces_imports(self):
        graph = self._graph().with_file("app.py", "python", [])
        assert not graph.has_link("app.py", "pkg/models.py")
        assert graph.degree("pkg/models.py") == (0, 0)

    def test_self_import_is_not_an_edge(self):
        graph = ImportGraph.build({"utils.py": ["utils"]}, {"utils.py": "python"})
        assert graph.edges == frozenset()
