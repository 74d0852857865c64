"""Tests for the sql-codegen command line."""
import json

import pytest

from sql_codegen.cli.commands import run, split_names


class TestParseCommands:
    """Test parse-table and parse-seed."""

    def test_parse_table(self, schema_dir, capsys):
        """Should print the parsed table as JSON."""
        run(["parse-table", str(schema_dir / "dbo" / "Tables" / "Project.sql")])

        data = json.loads(capsys.readouterr().out)
        assert data["table_name"] == "Project"
        assert data["primary_key_column"] == "ProjectID"
        assert data["columns"][2]["max_length"] == -1

    def test_parse_seed(self, schema_dir, capsys):
        """Should print the parsed seed rows as JSON."""
        run(["parse-seed", str(schema_dir / "dbo" / "Scripts" / "LookupTables" / "dbo.ProjectStage.sql")])

        data = json.loads(capsys.readouterr().out)
        assert data["column_names"][0] == "ProjectStageID"
        assert len(data["rows"]) == 3

    def test_parse_failure_exits_with_reason(self, schema_dir, capsys):
        """Should exit 1 and print why the file could not be parsed."""
        with pytest.raises(SystemExit) as exc_info:
            run(["parse-table", str(schema_dir / "dbo" / "Tables" / "Broken.sql")])

        assert exc_info.value.code == 1
        assert "never balance" in capsys.readouterr().err


class TestResolveCommand:
    """Test the resolve command."""

    def test_resolves(self, capsys):
        """Should print the lookup table name."""
        run(["resolve", "--column", "AssessedAsTreatmentBMPTypeID", "--lookup", "Commodity,TreatmentBMPType"])
        assert capsys.readouterr().out.strip() == "TreatmentBMPType"

    def test_collision(self, capsys):
        """Should print (none) when another table owns the name."""
        run([
            "resolve", "--column", "CommodityConvertedToID",
            "--lookup", "Commodity", "--table", "CommodityConvertedTo",
        ])
        assert capsys.readouterr().out.strip() == "(none)"

    def test_split_names(self):
        """Should ignore blanks around commas."""
        assert split_names(" A, ,B ") == ["A", "B"]
        assert split_names(None) == []


class TestGenerateCommand:
    """Test the generate command."""

    def test_generate(self, schema_copy, tmp_path, capsys, monkeypatch):
        """Should write files and exit normally despite diagnostics."""
        monkeypatch.delenv("SQL_CODEGEN_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        out_dir = tmp_path / "cs"

        run([
            "generate",
            "--schema-root", str(schema_copy),
            "--output-dir", str(out_dir),
            "--namespace", "Acme.Entities",
            "--exclude", "TreatmentBMPType",
        ])

        output = capsys.readouterr().out
        assert "Generation complete" in output
        assert "Broken.sql" in output
        assert (out_dir / "Project.Binding.cs").exists()
        assert not (out_dir / "TreatmentBMPType.Binding.cs").exists()
        assert "namespace Acme.Entities" in (out_dir / "ProjectPrimaryKey.cs").read_text(encoding="utf-8")

    def test_dry_run(self, schema_copy, tmp_path, capsys, monkeypatch):
        """Should not write anything on a dry run."""
        monkeypatch.delenv("SQL_CODEGEN_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)

        run(["generate", "--schema-root", str(schema_copy), "--output-dir", "cs", "--dry-run"])

        assert "(dry run)" in capsys.readouterr().out
        assert not (tmp_path / "cs").exists()

    def test_bad_namespace_exits_1(self, schema_copy, tmp_path, capsys, monkeypatch):
        """Should exit 1 on a configuration error."""
        monkeypatch.delenv("SQL_CODEGEN_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)

        with pytest.raises(SystemExit) as exc_info:
            run(["generate", "--schema-root", str(schema_copy), "--namespace", "not a namespace"])

        assert exc_info.value.code == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_missing_config_file_exits_1(self, tmp_path, monkeypatch):
        """Should exit 1 when --config names a missing file."""
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit) as exc_info:
            run(["generate", "--config", str(tmp_path / "missing.yaml")])
        assert exc_info.value.code == 1
