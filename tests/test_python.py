import threading

import pytest

from repohealth.analyzers.python import PythonAnalyzer
from repohealth.models import AnalysisCancelled, Repository


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return str(path)


def test_identity():
    analyzer = PythonAnalyzer()
    assert analyzer.name == "python-analyzer"
    assert analyzer.language == "python"
    assert tuple(analyzer.extensions) == (".py",)


def test_parse_functions_and_lines():
    content = (
        "import os\n\ndef first(a):\n    return a\n\n\n"
        "def second(b):\n    if b:\n        return 1\n    return 2\n"
    )
    functions, _ = PythonAnalyzer().parse(content, "m.py")
    lines = content.split("\n")

    assert [fn.name for fn in functions] == ["first", "second"]
    assert [fn.line for fn in functions] == [
        lines.index("def first(a):") + 1,
        lines.index("def second(b):") + 1,
    ]
    assert all(fn.file == "m.py" and fn.language == "python" for fn in functions)
    assert functions[1].complexity > functions[0].complexity


def test_parse_imports():
    content = "import os, sys\nfrom pkg.sub import thing as alias\nimport a.b\n"
    _, imports = PythonAnalyzer().parse(content, "m.py")

    assert [imp.name for imp in imports] == ["os", "sys", "thing", "a.b"]
    assert imports[2].alias == "alias"
    assert imports[2].path == "pkg.sub"
    assert [imp.is_local for imp in imports] == [True, True, False, False]
    assert imports[0].line == imports[1].line < imports[2].line < imports[3].line


def test_function_ends_at_dedent():
    body = "def f(x):\n    return x\n"
    alone, _ = PythonAnalyzer().parse(body, "f.py")
    followed, _ = PythonAnalyzer().parse(body + "if x:\n    pass\n", "f.py")

    assert [fn.name for fn in followed] == ["f"]
    assert followed[0].complexity == alone[0].complexity


def test_nested_def_starts_new_function():
    content = "def outer():\n    if a:\n        pass\n    def inner():\n        pass\n"
    functions, _ = PythonAnalyzer().parse(content, "n.py")
    assert [fn.name for fn in functions] == ["outer", "inner"]
    assert functions[0].complexity > functions[1].complexity


def test_function_at_end_of_file_is_kept():
    functions, _ = PythonAnalyzer().parse("def tail():\n    while x:\n        pass", "t.py")
    assert [fn.name for fn in functions] == ["tail"]
    assert functions[0].complexity > 1


def test_line_complexity_ignores_comments():
    analyzer = PythonAnalyzer()
    assert analyzer.line_complexity("# if x and y:") == analyzer.line_complexity("") == 0


def test_line_complexity_logical_operators_add():
    analyzer = PythonAnalyzer()
    assert analyzer.line_complexity("if a and b:") > analyzer.line_complexity("if a:")
    assert analyzer.line_complexity("while a or b:") > analyzer.line_complexity("while a:")
    assert analyzer.line_complexity("ys = [y for y in xs if y]") > analyzer.line_complexity(
        "x = y if z else w"
    )


@pytest.mark.parametrize(
    "line",
    ["for x in xs:", "with open(p) as f:", "assert x", "except ValueError:", "f = lambda x: x"],
)
def test_line_complexity_decision_points(line):
    analyzer = PythonAnalyzer()
    assert analyzer.line_complexity(line) > analyzer.line_complexity("x = compute()")


def test_analyze_excludes_and_metrics(tmp_path):
    main = _write(tmp_path / "main.py", "def a():\n    if x:\n        pass\n\ndef b():\n    pass\n")
    _write(tmp_path / ".venv" / "lib.py", "def hidden():\n    pass\n")
    _write(tmp_path / "__pycache__" / "cached.py", "def cached():\n    pass\n")

    result = PythonAnalyzer().analyze(str(tmp_path))
    complexities = [fn.complexity for fn in result.functions]

    assert set(result.files) == {main}
    assert [fn.name for fn in result.functions] == ["a", "b"]
    assert result.metrics["total_functions"] == len(complexities)
    assert result.metrics["total_complexity"] == sum(complexities)
    assert result.metrics["max_complexity"] == max(complexities)


def test_analyze_file_metrics(tmp_path):
    path = _write(tmp_path / "m.py", "import os\n\ndef f():\n    for x in y:\n        pass\n")
    analysis = PythonAnalyzer().analyze_file(path)

    assert analysis.metrics["function_count"] == len(analysis.functions)
    assert analysis.metrics["import_count"] == len(analysis.imports)
    assert analysis.metrics["average_complexity"] == analysis.functions[0].complexity


def test_can_analyze(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    repo = tmp_path / "repo"
    _write(repo / "tool.py", "print('x')\n")

    analyzer = PythonAnalyzer()
    assert analyzer.can_analyze(Repository(name="repo", path=str(repo)))
    assert not analyzer.can_analyze(Repository(name="empty", path=str(empty)))


def test_analyze_cancelled(tmp_path):
    _write(tmp_path / "m.py", "def f():\n    pass\n")
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(AnalysisCancelled):
        PythonAnalyzer().analyze(str(tmp_path), None, cancel)