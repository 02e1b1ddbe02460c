import threading
from pathlib import Path

import pytest

from repohealth.analyzers.common import LanguageAnalyzer
from repohealth.models import (
    AnalysisCancelled,
    AnalyzerConfig,
    FileAnalysis,
    FunctionInfo,
    Repository,
)


class TinyAnalyzer(LanguageAnalyzer):
    name = "tiny-analyzer"
    language = "tiny"
    extensions = (".tiny",)
    excludes = ("skip/", "_gen.tiny")

    def analyze_file(self, file_path):
        text = Path(file_path).read_text()
        if text.startswith("bad"):
            raise ValueError("unparsable")
        analysis = FileAnalysis(path=file_path, language=self.language)
        for number, line in enumerate(text.splitlines(), start=1):
            name, complexity = line.split()
            analysis.functions.append(
                FunctionInfo(name=name, file=file_path, line=number, complexity=int(complexity))
            )
        return self._finish_file(analysis)


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return str(path)


def test_find_files_applies_extensions_and_excludes(tmp_path):
    a = _write(tmp_path / "a.tiny", "f 1")
    b = _write(tmp_path / "sub" / "b.tiny", "g 2")
    _write(tmp_path / "skip" / "c.tiny", "h 3")
    _write(tmp_path / "d_gen.tiny", "i 4")
    _write(tmp_path / "e.txt", "j 5")
    assert LanguageAnalyzer.find_files(TinyAnalyzer(), str(tmp_path)) == [a, b]


def test_find_files_missing_root_raises(tmp_path):
    with pytest.raises(OSError):
        LanguageAnalyzer.find_files(TinyAnalyzer(), str(tmp_path / "missing"))


def test_can_analyze(tmp_path):
    analyzer = TinyAnalyzer()
    assert analyzer.can_analyze(Repository(name="r", path=str(tmp_path))) is False
    _write(tmp_path / "a.tiny", "f 1")
    assert analyzer.can_analyze(Repository(name="r", path=str(tmp_path))) is True
    assert analyzer.can_analyze(Repository(name="r", path=str(tmp_path / "nope"))) is False


def test_analyze_aggregates_metrics(tmp_path):
    a = _write(tmp_path / "a.tiny", "f 1\ng 3")
    b = _write(tmp_path / "b.tiny", "h 5")
    result = TinyAnalyzer().analyze(str(tmp_path), AnalyzerConfig())
    assert result.language == "tiny"
    assert set(result.files) == {a, b}
    assert [fn.name for fn in result.functions] == ["f", "g", "h"]
    assert result.metrics["total_files"] == 2
    assert result.metrics["total_functions"] == 3
    assert result.metrics["total_complexity"] == 9
    assert result.metrics["max_complexity"] == 5
    assert result.metrics["average_complexity"] == 3.0
    assert result.files[a].metrics["function_count"] == 2
    assert result.files[a].metrics["average_complexity"] == 2.0


def test_analyze_skips_broken_files(tmp_path, caplog):
    good = _write(tmp_path / "a.tiny", "f 2")
    bad = _write(tmp_path / "b.tiny", "bad content")
    with caplog.at_level("WARNING"):
        result = TinyAnalyzer().analyze(str(tmp_path), AnalyzerConfig())
    assert list(result.files) == [good]
    assert bad not in result.files
    assert any(bad in record.getMessage() for record in caplog.records)


def test_analyze_empty_repository(tmp_path):
    result = TinyAnalyzer().analyze(str(tmp_path), AnalyzerConfig())
    assert result.metrics["total_functions"] == 0
    assert result.metrics["average_complexity"] == 0.0
    assert result.functions == []


def test_analyze_cancelled(tmp_path):
    _write(tmp_path / "a.tiny", "f 1")
    event = threading.Event()
    event.set()
    with pytest.raises(AnalysisCancelled):
        TinyAnalyzer().analyze(str(tmp_path), AnalyzerConfig(), event)