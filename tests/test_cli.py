"""Tests for the CLI interface."""

import json

import pytest
from typer.testing import CliRunner

from lending.cli import app
from lending.model import LibraryData


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def broken_export(export_path):
    """An export whose copies share a barcode."""
    data = LibraryData.sample().to_dict()
    data["copies"][1]["barcode"] = data["copies"][0]["barcode"]
    export_path.write_text(json.dumps({"version": "1.0", "library": data}), encoding="utf-8")
    return export_path


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_help(self, runner: CliRunner):
        """Test that help command works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "lending library" in result.stdout

    def test_version(self, runner: CliRunner):
        """Test version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout


class TestSampleCommand:
    """Tests for the sample command."""

    def test_prints_json(self, runner: CliRunner):
        """Test the sample is printed as JSON."""
        result = runner.invoke(app, ["sample"])
        assert result.exit_code == 0
        document = json.loads(result.stdout)
        assert [a["id"] for a in document["library"]["authors"]] == ["A-01", "A-02"]

    def test_writes_file(self, runner: CliRunner, export_path):
        """Test --output writes an export file."""
        result = runner.invoke(app, ["sample", "--output", str(export_path)])
        assert result.exit_code == 0
        assert "Wrote" in result.stdout
        assert export_path.exists()

    def test_save_to_configured_path(self, runner: CliRunner, tmp_path):
        """Test --save writes to LENDING_EXPORT_PATH."""
        target = tmp_path / "configured.json"
        result = runner.invoke(app, ["sample", "--save"], env={"LENDING_EXPORT_PATH": str(target)})
        assert result.exit_code == 0
        assert target.exists()

    def test_unwritable_output(self, runner: CliRunner, tmp_path):
        """Test export failures exit with an error."""
        result = runner.invoke(app, ["sample", "-o", str(tmp_path / "no" / "x.json")])
        assert result.exit_code == 1
        assert "Export failed" in result.stdout


class TestShowCommand:
    """Tests for the show command."""

    def test_show_sample(self, runner: CliRunner):
        """Test the sample tables are shown."""
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 0
        assert "Orwell" in result.stdout
        assert "BC-0004" in result.stdout
        assert "repair" in result.stdout

    def test_show_file(self, runner: CliRunner, export_path):
        """Test showing an exported file."""
        runner.invoke(app, ["sample", "-o", str(export_path)])
        result = runner.invoke(app, ["show", str(export_path)])
        assert result.exit_code == 0
        assert "Nguyen" in result.stdout

    def test_show_missing_file(self, runner: CliRunner, tmp_path):
        """Test a missing file is reported."""
        result = runner.invoke(app, ["show", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestLoansCommand:
    """Tests for the loans command."""

    def test_all_loans(self, runner: CliRunner):
        """Test every loan is listed."""
        result = runner.invoke(app, ["loans"])
        assert result.exit_code == 0
        for loan_id in ["L-01", "L-02", "L-03", "L-04"]:
            assert loan_id in result.stdout

    def test_open_loans(self, runner: CliRunner):
        """Test --open hides returned loans."""
        result = runner.invoke(app, ["loans", "--open"])
        assert result.exit_code == 0
        assert "L-01" not in result.stdout
        assert "L-02" in result.stdout


class TestCheckCommand:
    """Tests for the check command."""

    def test_sample_passes(self, runner: CliRunner):
        """Test the sample passes the integrity check."""
        result = runner.invoke(app, ["check"])
        assert result.exit_code == 0
        assert "passed" in result.stdout

    def test_duplicate_barcode_fails(self, runner: CliRunner, broken_export):
        """Test integrity errors exit with status 1."""
        result = runner.invoke(app, ["check", str(broken_export)])
        assert result.exit_code == 1
        assert "BC-0001" in result.stdout
        assert "failed" in result.stdout

    def test_dangling_reference_reported(self, runner: CliRunner, export_path):
        """Test dangling references in a file appear in the report."""
        data = LibraryData.sample().to_dict()
        data["books"][0]["authorID"] = "A-99"
        export_path.write_text(json.dumps(data), encoding="utf-8")

        result = runner.invoke(app, ["check", str(export_path)])
        assert result.exit_code == 1
        assert "foreign_key" in result.stdout
        assert "A-99" in result.stdout
        assert "failed" in result.stdout

    def test_duplicate_id_reported(self, runner: CliRunner, export_path):
        """Test repeated ids in a file appear in the report."""
        data = LibraryData.sample().to_dict()
        data["members"].append(dict(data["members"][0]))
        export_path.write_text(json.dumps(data), encoding="utf-8")

        result = runner.invoke(app, ["check", str(export_path)])
        assert result.exit_code == 1
        assert "duplicate_id" in result.stdout
        assert "M-01" in result.stdout

    def test_stale_cached_data_reported(self, runner: CliRunner, export_path):
        """Test stale cached lists and embedded records are checked as written."""
        data = LibraryData.sample().to_dict()
        data["authors"][0]["books"] = []
        data["loans"][0]["member"]["email"] = "ava@elsewhere.example"
        export_path.write_text(json.dumps(data), encoding="utf-8")

        result = runner.invoke(app, ["check", str(export_path)])
        assert result.exit_code == 0
        assert "back_reference" in result.stdout
        assert "embedded_snapshot" in result.stdout
        assert "passed" in result.stdout

    def test_show_rejects_dangling_reference(self, runner: CliRunner, export_path):
        """Test commands that need a resolved graph refuse dangling references."""
        data = LibraryData.sample().to_dict()
        data["books"][0]["authorID"] = "A-99"
        export_path.write_text(json.dumps(data), encoding="utf-8")

        result = runner.invoke(app, ["show", str(export_path)])
        assert result.exit_code == 1
        assert "A-99" in result.stdout


class TestConfiguration:
    """Tests for configuration errors at startup."""

    def test_unknown_log_level(self, runner: CliRunner):
        """Test an unknown log level is reported instead of crashing."""
        result = runner.invoke(app, ["check"], env={"LENDING_LOG_LEVEL": "LOUD"})
        assert result.exit_code == 1
        assert "Unknown log level: LOUD" in result.stdout

    def test_non_integer_indent(self, runner: CliRunner):
        """Test a non-numeric indent is reported instead of crashing."""
        result = runner.invoke(app, ["sample"], env={"LENDING_JSON_INDENT": "wide"})
        assert result.exit_code == 1
        assert "LENDING_JSON_INDENT" in result.stdout

    def test_negative_indent(self, runner: CliRunner):
        """Test a negative indent is rejected."""
        result = runner.invoke(app, ["sample"], env={"LENDING_JSON_INDENT": "-2"})
        assert result.exit_code == 1
        assert "must not be negative" in result.stdout
