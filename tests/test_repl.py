"""
Unit tests for the interactive shell and command-line entry point.
"""

import io
import pytest
from tinylake.storage.database import Database
from tinylake.parser.parser import SQLParser
from tinylake.executor.executor import QueryExecutor
from tinylake.repl import handle_special_command, run_query, repl, main
from tinylake.utils.exceptions import ParseError, TableNotFoundError


SAMPLE_CSV = "Region,Close\nEU,1200\nEU,900\nUS,6200\n"


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["TINYLAKE_COERCION", "TINYLAKE_LOG_LEVEL", "TINYLAKE_DEFAULT_TABLE"]:
        monkeypatch.delenv(name, raising=False)


class TestSpecialCommands:
    """Test dot commands."""

    def setup_method(self):
        self.db = Database("test")

    def test_exit(self, capsys):
        """Test that .exit and .quit stop the loop."""
        assert handle_special_command(".exit", self.db) is False
        assert handle_special_command(".QUIT;", self.db) is False
        assert "Goodbye!" in capsys.readouterr().out

    def test_load_and_tables(self, csv_path, capsys):
        """Test loading a file and listing tables."""
        assert handle_special_command(f".load {csv_path} ticks", self.db) is True
        assert "LOAD OK: ticks (3 rows, 2 columns)" in capsys.readouterr().out

        handle_special_command(".tables", self.db)
        assert "ticks (3 rows)" in capsys.readouterr().out

    def test_load_default_name(self, csv_path):
        """Test that the table name defaults to the file stem."""
        handle_special_command(f".load {csv_path}", self.db)
        assert self.db.has_table("prices")

    def test_load_errors(self, tmp_path, capsys):
        """Test usage and missing-file messages."""
        handle_special_command(".load", self.db)
        assert "Usage: .load PATH [NAME]" in capsys.readouterr().out

        handle_special_command(f".load {tmp_path / 'missing.csv'}", self.db)
        assert "Error:" in capsys.readouterr().out
        assert self.db.table_count() == 0

    def test_no_tables(self, capsys):
        """Test .tables on an empty catalog."""
        handle_special_command(".tables", self.db)
        assert "No tables." in capsys.readouterr().out

    def test_schema(self, csv_path, capsys):
        """Test .schema for known and unknown tables."""
        handle_special_command(f".load {csv_path}", self.db)
        capsys.readouterr()

        handle_special_command(".schema prices", self.db)
        out = capsys.readouterr().out
        assert "Region: STRING" in out
        assert "Close: FLOAT64" in out

        handle_special_command(".schema Prices", self.db)
        assert "does not exist" in capsys.readouterr().out

    def test_stats(self, csv_path, capsys):
        """Test .stats output."""
        handle_special_command(f".load {csv_path}", self.db)
        handle_special_command(".stats", self.db)
        out = capsys.readouterr().out
        assert "Tables: 1" in out
        assert "Rows: 3" in out

    def test_unknown_command(self, capsys):
        """Test an unknown dot command."""
        assert handle_special_command(".bogus", self.db) is True
        assert "Unknown command: .bogus" in capsys.readouterr().out


class TestRunQuery:
    """Test running single queries."""

    def setup_method(self):
        self.db = Database("test")
        self.parser = SQLParser()
        self.executor = QueryExecutor(self.db)

    def test_run_query(self, csv_path):
        """Test that a trailing semicolon is accepted."""
        handle_special_command(f".load {csv_path}", self.db)

        output = run_query("SELECT Region, COUNT(*) FROM prices GROUP BY Region;", self.parser, self.executor)
        assert "EU" in output
        assert output.endswith("(2 rows)")

    def test_run_query_errors(self):
        """Test that errors propagate to the caller."""
        with pytest.raises(TableNotFoundError):
            run_query("SELECT a FROM nowhere", self.parser, self.executor)
        with pytest.raises(ParseError):
            run_query("SELECT FROM", self.parser, self.executor)


class TestRepl:
    """Test the read-eval-print loop on scripted input."""

    def test_session(self, csv_path, monkeypatch, capsys):
        """Test a multi-line query, an error and .exit."""
        script = (
            f".load {csv_path}\n"
            "SELECT COUNT(*)\n"
            "FROM prices;\n"
            "SELECT a FROM;\n"
            "SELECT Missing FROM prices;\n"
            ".exit\n"
        )
        monkeypatch.setattr("sys.stdin", io.StringIO(script))

        repl(Database("test"))
        out = capsys.readouterr().out

        assert "LOAD OK: prices" in out
        assert "(1 row)" in out
        assert "Syntax Error:" in out
        assert "Error (ColumnNotFoundError):" in out
        assert "Goodbye!" in out

    def test_eof_exits(self, monkeypatch, capsys):
        """Test that end of input ends the session."""
        monkeypatch.setattr("sys.stdin", io.StringIO(""))

        repl()
        assert "Goodbye!" in capsys.readouterr().out


class TestMain:
    """Test the command-line entry point."""

    def test_command(self, csv_path, capsys):
        """Test -c with the first file under the default table name."""
        code = main(["--load", str(csv_path), "-c", "SELECT SUM(Close) FROM data"])

        assert code == 0
        out = capsys.readouterr().out
        assert "expr_0" in out
        assert "8300" in out

    def test_named_load(self, csv_path, capsys):
        """Test NAME=PATH load specs."""
        code = main(["--load", f"ticks={csv_path}", "-c", "SELECT Region FROM ticks WHERE Close > 1000"])

        assert code == 0
        assert "(2 rows)" in capsys.readouterr().out

    def test_default_table_from_env(self, csv_path, monkeypatch, capsys):
        """Test TINYLAKE_DEFAULT_TABLE."""
        monkeypatch.setenv("TINYLAKE_DEFAULT_TABLE", "prices")

        assert main(["--load", str(csv_path), "-c", "SELECT COUNT(*) FROM prices"]) == 0

    def test_query_error(self, csv_path, capsys):
        """Test that a failing query exits with status 1."""
        code = main(["--load", str(csv_path), "-c", "SELECT a FROM nowhere"])

        assert code == 1
        assert "TableNotFoundError" in capsys.readouterr().err

    def test_strict_flag(self, csv_path, capsys):
        """Test that --strict turns operand errors into failures."""
        sql = "SELECT Region FROM data WHERE Missing < 1"

        assert main(["--load", str(csv_path), "-c", sql]) == 0
        assert main(["--strict", "--load", str(csv_path), "-c", sql]) == 1
        assert "ColumnNotFoundError" in capsys.readouterr().err

    def test_load_failure(self, tmp_path, capsys):
        """Test that a missing file exits with status 1."""
        code = main(["--load", str(tmp_path / "missing.csv"), "-c", "SELECT a FROM data"])

        assert code == 1
        assert "Error loading" in capsys.readouterr().err

    def test_invalid_log_level(self, csv_path, capsys):
        """Test that a bad --log-level exits with status 2 instead of a traceback."""
        code = main(["--log-level", "LOUD", "--load", str(csv_path), "-c", "SELECT COUNT(*) FROM data"])

        assert code == 2
        err = capsys.readouterr().err
        assert "Error: invalid settings" in err
        assert "log_level" in err

    def test_invalid_coercion_env(self, monkeypatch, capsys):
        """Test that a bad TINYLAKE_COERCION is reported the same way."""
        monkeypatch.setenv("TINYLAKE_COERCION", "sloppy")

        assert main(["-c", "SELECT a FROM data"]) == 2
        assert "coercion_policy" in capsys.readouterr().err


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
