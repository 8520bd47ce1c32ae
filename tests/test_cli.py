"""Test CLI functionality."""

import io
import json
from pathlib import Path

import pytest

import yaml

from ctest_tracing.cli import app, convert

ONE_TEST = """
                Start  1: test_one
            1/1 Test #1: test_one ......................   Passed   0.20 sec
            """

TWO_TESTS = """
                Start  1: test_one
            1/2 Test #1: test_one ......................   Passed   0.20 sec
                Start  2: test_two
            2/2 Test #2: test_two ......................   Passed   0.30 sec
            """

PARTIAL = """
                Start  2: test_two
            1/2 Test #1: test_one ......................   Passed   0.20 sec
            2/2 Test #2: test_two ......................   Passed   0.20 sec
            """

ONE_EXPECTED = (
    '[{"name":"test_one","cat":"test","ph":"X","ts":0,"dur":200000,"pid":0,"tid":0}]'
)


def run(tokens: list, stdin: str | None = None, monkeypatch=None) -> int:
    """Run the app and return its exit code."""
    if stdin is not None:
        monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
    try:
        app([str(t) for t in tokens])
    except SystemExit as e:
        return e.code or 0
    return 0


@pytest.fixture
def logfile(tmp_path: Path):
    def _write(text: str) -> Path:
        path = tmp_path / "ctest.log"
        path.write_text(text)
        return path

    return _write


class TestInput:
    """Tests of where the log is read from."""

    def test_reading_from_file(self, logfile, capsys):
        assert run([logfile(ONE_TEST)]) == 0
        assert capsys.readouterr().out == ONE_EXPECTED

    def test_reading_from_file_multiple_tests(self, logfile, capsys):
        assert run([logfile(TWO_TESTS)]) == 0
        assert capsys.readouterr().out == (
            '[{"name":"test_one","cat":"test","ph":"X","ts":0,"dur":200000,"pid":0,"tid":0},'
            '{"name":"test_two","cat":"test","ph":"X","ts":200000,"dur":300000,"pid":0,"tid":0}]'
        )

    def test_reading_from_stdin(self, capsys, monkeypatch):
        assert run([], stdin=ONE_TEST, monkeypatch=monkeypatch) == 0
        assert capsys.readouterr().out == ONE_EXPECTED

    def test_reading_from_dash(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(ONE_TEST))
        convert(Path("-"))
        assert capsys.readouterr().out == ONE_EXPECTED

    def test_empty_input(self, capsys, monkeypatch):
        assert run([], stdin="", monkeypatch=monkeypatch) == 0
        assert capsys.readouterr().out == "[]"

    def test_missing_file(self, tmp_path, capsys):
        assert run([tmp_path / "nope.log"]) == 1
        assert "Could not read" in capsys.readouterr().err

    def test_undecodable_bytes_are_replaced(self, tmp_path, capsys):
        path = tmp_path / "latin.log"
        path.write_bytes(ONE_TEST.encode() + b"caf\xe9 noise\n")
        assert run([path]) == 0
        assert capsys.readouterr().out == ONE_EXPECTED


class TestOutput:
    """Tests of writing the trace to a file."""

    def test_writing_to_output_file(self, tmp_path, capsys, monkeypatch):
        out = tmp_path / "temp_output_file.json"
        assert run(["-o", out], stdin=ONE_TEST, monkeypatch=monkeypatch) == 0
        assert capsys.readouterr().out == ""
        assert out.read_text() == ONE_EXPECTED

    def test_writing_to_nested_output_file(self, tmp_path, capsys, monkeypatch):
        out = tmp_path / "nested" / "file" / "name.json"
        assert run(["--output", out], stdin=ONE_TEST, monkeypatch=monkeypatch) == 0
        assert capsys.readouterr().out == ""
        assert out.read_text() == ONE_EXPECTED

    def test_failure_to_create_parent_dir(self, tmp_path, capsys, monkeypatch):
        (tmp_path / "some").write_text("blocked")
        out = tmp_path / "some" / "file" / "name.json"

        assert run(["-o", out], stdin=ONE_TEST, monkeypatch=monkeypatch) == 1
        assert "Error creating parent directory" in capsys.readouterr().err
        assert not out.exists()


class TestStrict:
    """Tests of the handling of tests that end without starting."""

    def test_partial_results_skipped_by_default(self, capsys, monkeypatch):
        assert run([], stdin=PARTIAL, monkeypatch=monkeypatch) == 0
        out = capsys.readouterr().out
        assert '"name":"test_two"' in out
        assert "test_one" not in out

    def test_failure_on_partial_results(self, capsys, monkeypatch):
        assert run(["--strict"], stdin=PARTIAL, monkeypatch=monkeypatch) == 1
        captured = capsys.readouterr()
        assert 'Saw end of "test_one" without start indicator' in captured.err
        assert captured.out == ""

    def test_strict_from_config_file(self, tmp_path, capsys, monkeypatch):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text(yaml.safe_dump({"strict": True}))
        tokens = ["--config", cfg]

        assert run(tokens, stdin=PARTIAL, monkeypatch=monkeypatch) == 1
        assert "without start indicator" in capsys.readouterr().err

        assert run([*tokens, "--no-strict"], stdin=PARTIAL, monkeypatch=monkeypatch) == 0

    def test_bad_config_file(self, tmp_path, capsys, monkeypatch):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text(yaml.safe_dump({"unknown": 1}))

        assert run(["--config", cfg], stdin=ONE_TEST, monkeypatch=monkeypatch) == 1
        assert "Could not read the configuration" in capsys.readouterr().err


UMLAUT_TEST = """
    Start 1: prüfung
1/1 Test #1: prüfung .......................   Passed   0.20 sec
"""


class TestEncoding:
    """Tests of the text encodings used for reading and writing."""

    def test_stdout_is_written_in_configured_encoding(self, monkeypatch):
        """A non-UTF-8 terminal encoding does not break non-ASCII test names."""
        raw = io.BytesIO()
        monkeypatch.setattr("sys.stdout", io.TextIOWrapper(raw, encoding="ascii"))

        assert run([], stdin=UMLAUT_TEST, monkeypatch=monkeypatch) == 0
        assert '"name":"prüfung"' in raw.getvalue().decode("utf-8")

    def test_stdin_read_in_configured_encoding(self, tmp_path, capsys, monkeypatch):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text(yaml.safe_dump({"encoding": "latin-1"}))
        stdin = io.TextIOWrapper(io.BytesIO(UMLAUT_TEST.encode("latin-1")), "utf-8")
        monkeypatch.setattr("sys.stdin", stdin)

        assert run(["--config", cfg]) == 0
        assert '"name":"prüfung"' in capsys.readouterr().out

    def test_undecodable_input_in_strict_mode(self, tmp_path, capsys):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text(yaml.safe_dump({"encoding_errors": "strict"}))
        path = tmp_path / "ctest.log"
        path.write_bytes(b"caf\xe9\n")

        assert run(["--config", cfg, path]) == 1
        captured = capsys.readouterr()
        assert "Could not decode" in captured.err
        assert "Traceback" not in captured.err
        assert captured.out == ""

    def test_unencodable_output(self, tmp_path, capsys, monkeypatch):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text(yaml.safe_dump({"encoding": "ascii"}))
        out = tmp_path / "trace.json"

        tokens = ["--config", cfg, "-o", out]
        assert run(tokens, stdin=UMLAUT_TEST, monkeypatch=monkeypatch) == 1
        assert "Could not encode" in capsys.readouterr().err


class TestConfigFile:
    """Tests of the --config option."""

    def test_missing_config_file(self, tmp_path, capsys, monkeypatch):
        missing = tmp_path / "typo.yml"
        assert run(["--config", missing], stdin=ONE_TEST, monkeypatch=monkeypatch) == 1
        captured = capsys.readouterr()
        assert "does not exist" in captured.err
        assert captured.out == ""


class TestVerbosity:
    """Tests of the -v/--verbosity option."""

    UNFINISHED = ONE_TEST + "    Start 2: hung_test\n"

    def test_quiet_by_default(self, capsys, monkeypatch):
        assert run([], stdin=self.UNFINISHED, monkeypatch=monkeypatch) == 0
        captured = capsys.readouterr()
        assert captured.out == ONE_EXPECTED
        assert "hung_test" not in captured.err

    @pytest.mark.parametrize("flag", ["-v", "--verbosity"])
    def test_info_goes_to_stderr(self, flag, capsys, monkeypatch):
        tokens = [flag, "INFO"]
        assert run(tokens, stdin=self.UNFINISHED, monkeypatch=monkeypatch) == 0
        captured = capsys.readouterr()
        assert "hung_test" in captured.err
        assert json.loads(captured.out)[0]["name"] == "test_one"
        assert "hung_test" not in captured.out
