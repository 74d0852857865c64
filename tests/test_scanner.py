"""Tests for schema file discovery."""
import pytest

from sql_codegen.config import DiscoveryConfig
from sql_codegen.indexer.scanner import classify_sql_files, scan_sql_files


def touch(path, content="-- sql\n"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestScanSqlFiles:
    """Test walking a database project."""

    def test_sorted_sql_files_only(self, tmp_path):
        """Should yield .sql files in sorted order and skip other files."""
        touch(tmp_path / "b" / "Two.sql")
        touch(tmp_path / "a" / "One.SQL")
        touch(tmp_path / "a" / "notes.txt")

        files = [p.relative_to(tmp_path.resolve()).as_posix() for p in scan_sql_files(tmp_path)]
        assert files == ["a/One.SQL", "b/Two.sql"]

    def test_gitignore_and_hidden(self, tmp_path):
        """Should honor .gitignore patterns and skip hidden directories."""
        touch(tmp_path / ".gitignore", "bin/\n*.generated.sql\n")
        touch(tmp_path / "bin" / "Tables" / "Stale.sql")
        touch(tmp_path / ".vs" / "Cache.sql")
        touch(tmp_path / "Tables" / "Keep.sql")
        touch(tmp_path / "Tables" / "Drop.generated.sql")

        files = [p.name for p in scan_sql_files(tmp_path)]
        assert files == ["Keep.sql"]

    def test_missing_root(self, tmp_path):
        """Should raise for a missing or non-directory root."""
        with pytest.raises(FileNotFoundError):
            list(scan_sql_files(tmp_path / "missing"))

        touch(tmp_path / "file.sql")
        with pytest.raises(NotADirectoryError):
            list(scan_sql_files(tmp_path / "file.sql"))


class TestClassifySqlFiles:
    """Test splitting files into tables and seeds."""

    def test_fixture_project(self, schema_dir):
        """Should find four table files and two seed files."""
        sources = classify_sql_files(schema_dir)

        assert [p.name for p in sources.table_files] == [
            "Broken.sql", "Project.sql", "ProjectStage.sql", "TreatmentBMPType.sql"
        ]
        assert [p.name for p in sources.seed_files] == ["dbo.ProjectStage.sql", "dbo.TreatmentBMPType.sql"]

    def test_custom_directory_names(self, tmp_path):
        """Should use configured directory names case-insensitively."""
        touch(tmp_path / "schema" / "tbl" / "A.sql")
        touch(tmp_path / "Seed" / "A.sql")
        touch(tmp_path / "Views" / "V.sql")

        discovery = DiscoveryConfig(tables_dir_name="TBL", lookup_tables_dir_name="seed")
        sources = classify_sql_files(tmp_path, discovery)

        assert [p.parent.name for p in sources.table_files] == ["tbl"]
        assert [p.parent.name for p in sources.seed_files] == ["Seed"]

    def test_lookup_dir_wins_over_tables_dir(self, tmp_path):
        """Should treat a file under both directory names as a seed file."""
        touch(tmp_path / "Tables" / "LookupTables" / "X.sql")
        sources = classify_sql_files(tmp_path)
        assert sources.table_files == []
        assert len(sources.seed_files) == 1
