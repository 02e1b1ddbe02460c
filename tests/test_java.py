import os
import threading

import pytest

from repohealth.analyzers.java import JavaAnalyzer
from repohealth.models import AnalysisCancelled, Repository

SERVICE = """package com.example;

import java.util.List;
import Helper;

public class Service {
    public void start() {
        System.out.println("start");
    }

    public int compute(int x) {
        if (x > 0 && x < 10) {
            return x;
        }
        return 0;
    }
}
"""


@pytest.fixture
def analyzer():
    return JavaAnalyzer()


def _write(path, text):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text)
    return path


def test_identity(analyzer):
    assert analyzer.name == "java-analyzer"
    assert analyzer.language == "java"
    assert analyzer.extensions == (".java",)


def test_parse_methods_and_classes(analyzer):
    functions, classes, _ = analyzer.parse(SERVICE, "Service.java")
    assert [f.name for f in functions] == ["start", "compute"]
    assert [c.name for c in classes] == ["Service"]
    assert [m.name for m in classes[0].methods] == ["start", "compute"]
    lines = SERVICE.split("\n")
    assert functions[0].line == lines.index("    public void start() {") + 1
    assert classes[0].line == lines.index("public class Service {") + 1
    assert all(f.file == "Service.java" and f.language == "java" for f in functions)


def test_parse_complexity(analyzer):
    functions, _, _ = analyzer.parse(SERVICE, "Service.java")
    by_name = {f.name: f.complexity for f in functions}
    assert by_name["start"] == 1
    assert by_name["compute"] > by_name["start"]


def test_parse_imports(analyzer):
    _, _, imports = analyzer.parse(SERVICE, "Service.java")
    assert [(i.name, i.path, i.is_local) for i in imports] == [
        ("List", "java.util.List", False),
        ("Helper", "Helper", True),
    ]


def test_parse_consecutive_classes(analyzer):
    content = "class A {\n}\nclass B {\n}\n"
    _, classes, _ = analyzer.parse(content, "AB.java")
    assert [c.name for c in classes] == ["A", "B"]


def test_parse_unclosed_method_is_kept(analyzer):
    content = "class C {\n    void run() {\n        if (x) {\n"
    functions, classes, _ = analyzer.parse(content, "C.java")
    assert [f.name for f in functions] == ["run"]
    assert [c.name for c in classes] == ["C"]
    assert [m.name for m in classes[0].methods] == ["run"]
    assert functions[0].complexity > 1


def test_line_complexity_ignores_comments(analyzer):
    assert analyzer.line_complexity("// if (x) {") == 0
    assert analyzer.line_complexity("* for (int i : xs)") == 0
    assert analyzer.line_complexity("   ") == 0


def test_line_complexity_orderings(analyzer):
    plain = analyzer.line_complexity("int y = x;")
    assert analyzer.line_complexity("if (a) {") > plain
    assert analyzer.line_complexity("if (a && b || c) {") > analyzer.line_complexity("if (a) {")
    assert analyzer.line_complexity("} else if (a) {") > analyzer.line_complexity("if (a) {")
    assert analyzer.line_complexity("int y = x > 0 ? x : -x;") > plain
    assert analyzer.line_complexity("case 1:") > plain
    assert analyzer.line_complexity("} catch (Exception e) {") > plain


def test_analyze_file_metrics(analyzer, tmp_path):
    path = _write(str(tmp_path / "Service.java"), SERVICE)
    analysis = analyzer.analyze_file(path)
    assert analysis.path == path
    assert analysis.metrics["class_count"] == len(analysis.classes)
    assert analysis.metrics["import_count"] == len(analysis.imports)
    assert analysis.metrics["function_count"] == len(analysis.functions)
    total = sum(f.complexity for f in analysis.functions)
    assert analysis.metrics["average_complexity"] == total / len(analysis.functions)


def test_analyze_repository(analyzer, tmp_path):
    main = _write(str(tmp_path / "src" / "Service.java"), SERVICE)
    generated = _write(str(tmp_path / "target" / "Gen.java"), "class Gen {\n}\n")
    result = analyzer.analyze(str(tmp_path))
    assert list(result.files) == [main]
    assert generated not in result.files
    assert result.language == "java"
    assert result.metrics["total_files"] == len(result.files)
    assert result.metrics["total_functions"] == len(result.functions)
    assert result.metrics["total_classes"] == sum(
        len(f.classes) for f in result.files.values()
    )
    assert result.metrics["max_complexity"] == max(f.complexity for f in result.functions)


def test_can_analyze(analyzer, tmp_path):
    repo_dir = tmp_path / "repo"
    empty_dir = tmp_path / "empty"
    empty_dir.mkdir()
    _write(str(repo_dir / "Service.java"), SERVICE)
    assert analyzer.can_analyze(Repository(name="repo", path=str(repo_dir)))
    assert not analyzer.can_analyze(Repository(name="empty", path=str(empty_dir)))


def test_analyze_cancelled(analyzer, tmp_path):
    _write(str(tmp_path / "Service.java"), SERVICE)
    event = threading.Event()
    event.set()
    with pytest.raises(AnalysisCancelled):
        analyzer.analyze(str(tmp_path), cancel_event=event)