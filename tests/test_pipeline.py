"""Tests for the batch driver and the write-if-changed writer."""
import threading

from sql_codegen.config import GeneratorConfig
from sql_codegen.pipeline.generator import (
    ParseCache,
    generate,
    parse_sources,
    run_generation,
)
from sql_codegen.pipeline.writer import resolve_output_dir, write_if_changed

PROJECT_STAGE_TABLE = """CREATE TABLE [dbo].[ProjectStage](
    [ProjectStageID] [int] NOT NULL CONSTRAINT [PK_ProjectStage] PRIMARY KEY,
    [ProjectStageName] [varchar](100) NOT NULL,
    [ProjectStageDisplayName] [varchar](100) NOT NULL,
    [SortOrder] [int] NOT NULL
)"""

PROJECT_STAGE_SEED = """MERGE INTO dbo.ProjectStage AS Target
USING (VALUES
(1, 'Proposal', 'Proposal', 10),
(2, 'PlanningDesign', 'Planning/Design', 20),
(3, 'Implementation', 'Implementation', 30, 'extra')
)
AS Source (ProjectStageID, ProjectStageName, ProjectStageDisplayName, SortOrder)
ON Target.ProjectStageID = Source.ProjectStageID;"""

PROJECT_TABLE = """CREATE TABLE [dbo].[Project](
    [ProjectID] [int] IDENTITY(1,1) NOT NULL CONSTRAINT [PK_Project] PRIMARY KEY,
    [ProjectName] [varchar](140) NOT NULL,
    [ProjectStageID] [int] NOT NULL
)"""

TRUNCATED_TABLE = "CREATE TABLE [dbo].[Broken](\n[BrokenID] [int] NOT NULL,\n[Name] [varchar](50"


def sources():
    tables = [
        ("Tables/ProjectStage.sql", PROJECT_STAGE_TABLE),
        ("Tables/Broken.sql", TRUNCATED_TABLE),
        ("Tables/Project.sql", PROJECT_TABLE),
    ]
    seeds = [("LookupTables/ProjectStage.sql", PROJECT_STAGE_SEED)]
    return tables, seeds


class TestParseSources:
    """Test phase 1 parsing."""

    def test_failures_become_diagnostics(self):
        """Should skip a broken file and keep parsing the rest."""
        tables, seeds = sources()
        parsed = parse_sources(tables, seeds)

        assert [t.table_name for t in parsed.tables] == ["ProjectStage", "Project"]
        assert parsed.lookup_for("projectstage") is not None
        assert len(parsed.diagnostics) == 1
        diagnostic = parsed.diagnostics[0]
        assert diagnostic.path == "Tables/Broken.sql"
        assert diagnostic.kind == "table_parse_error"

    def test_order_independent_of_workers(self):
        """Should return tables in input order with several threads."""
        tables = [
            (f"Tables/T{i}.sql", f"CREATE TABLE [dbo].[T{i}](\n[T{i}ID] [int] NOT NULL\n)")
            for i in range(20)
        ]
        serial = parse_sources(tables, [], max_workers=1)
        threaded = parse_sources(tables, [], max_workers=8)
        assert serial.tables == threaded.tables
        assert [t.table_name for t in threaded.tables] == [f"T{i}" for i in range(20)]

    def test_duplicate_seed_keeps_first(self):
        """Should keep the first seed for a table and report the second."""
        seeds = [("a.sql", PROJECT_STAGE_SEED), ("b.sql", PROJECT_STAGE_SEED.replace("Proposal", "Idea"))]
        parsed = parse_sources([], seeds)

        assert parsed.lookup_for("ProjectStage").rows[0].values[1] == "Proposal"
        assert [d.kind for d in parsed.diagnostics] == ["duplicate_seed"]
        assert parsed.diagnostics[0].path == "b.sql"

    def test_cache_skips_reparse(self):
        """Should reuse parse results for identical text."""
        cache = ParseCache()
        tables, seeds = sources()
        first = parse_sources(tables, seeds, cache=cache)
        misses = cache.misses
        second = parse_sources(tables, seeds, cache=cache)

        assert cache.misses == misses
        assert cache.hits == len(tables) + len(seeds)
        assert first.tables == second.tables
        assert len(second.diagnostics) == 1


class TestGenerate:
    """Test phase 2 generation."""

    def test_files_per_table(self):
        """Should emit key and binding files, plus TypeScript for lookups."""
        tables, seeds = sources()
        result = generate(parse_sources(tables, seeds), GeneratorConfig())

        names = [f.file_name for f in result.files]
        assert names == [
            "ProjectStagePrimaryKey.cs",
            "ProjectStage.Binding.cs",
            "project-stage-enum.ts",
            "ProjectPrimaryKey.cs",
            "Project.Binding.cs",
            "TypeScriptEnums.manifest.json",
        ]
        assert result.table_count == 2
        assert result.lookup_count == 1

    def test_mismatched_row_is_reported(self):
        """Should skip the wide seed row and record a diagnostic for it."""
        tables, seeds = sources()
        result = generate(parse_sources(tables, seeds), GeneratorConfig())

        kinds = [d.kind for d in result.diagnostics]
        assert kinds == ["table_parse_error", "row_width_mismatch"]
        ts = next(f for f in result.files if f.file_name == "project-stage-enum.ts").content
        assert "Implementation" not in ts

    def test_navigation_uses_all_lookups(self):
        """Should resolve regular table columns against parsed seed tables."""
        tables, seeds = sources()
        result = generate(parse_sources(tables, seeds), GeneratorConfig())

        binding = next(f for f in result.files if f.file_name == "Project.Binding.cs").content
        assert "public ProjectStage ProjectStage => ProjectStage.AllLookupDictionary[ProjectStageID];" in binding

    def test_exclusion_is_case_insensitive(self):
        """Should skip excluded tables entirely."""
        tables, seeds = sources()
        config = GeneratorConfig(exclude_tables="project")
        result = generate(parse_sources(tables, seeds), config)

        assert all(f.table_name != "Project" for f in result.files)
        assert result.table_count == 1

    def test_orphan_seed(self):
        """Should report seed data without a table definition."""
        result = generate(parse_sources([], [("s.sql", PROJECT_STAGE_SEED)]), GeneratorConfig())
        assert result.files == []
        assert [d.kind for d in result.diagnostics] == ["orphan_seed"]

    def test_byte_identical_output(self):
        """Should produce identical files for identical input."""
        tables, seeds = sources()
        first = generate(parse_sources(tables, seeds), GeneratorConfig(namespace="Acme.Data"))
        second = generate(parse_sources(tables, seeds, max_workers=4), GeneratorConfig(namespace="Acme.Data"))
        assert first.files == second.files


class TestRunGeneration:
    """Test the full discover, parse, generate and write run."""

    def make_config(self, schema_root, tmp_path, **kwargs):
        return GeneratorConfig(
            output_dir=str(tmp_path / "out" / "cs"),
            typescript_output_dir=str(tmp_path / "out" / "ts"),
            discovery={"schema_root": str(schema_root)},
            **kwargs,
        )

    def test_writes_files(self, schema_copy, tmp_path):
        """Should write C# and TypeScript outputs and report the broken file."""
        config = self.make_config(schema_copy, tmp_path)
        result = run_generation(config)

        cs_dir = tmp_path / "out" / "cs"
        ts_dir = tmp_path / "out" / "ts"
        assert (cs_dir / "ProjectPrimaryKey.cs").exists()
        assert (cs_dir / "ProjectStage.Binding.cs").exists()
        assert (ts_dir / "project-stage-enum.ts").exists()
        assert (ts_dir / "treatment-b-m-p-type-enum.ts").exists()
        assert not (cs_dir / "TypeScriptEnums.manifest.json").exists()

        assert result.table_count == 3
        assert result.lookup_count == 2
        assert any(d.kind == "table_parse_error" and d.path.endswith("Broken.sql") for d in result.diagnostics)
        assert all(o.status == "written" for o in result.write_outcomes)

    def test_second_run_is_unchanged(self, schema_copy, tmp_path):
        """Should not rewrite files whose content is identical."""
        config = self.make_config(schema_copy, tmp_path)
        run_generation(config)
        result = run_generation(config)

        assert result.write_outcomes
        assert all(o.status == "unchanged" for o in result.write_outcomes)
        assert result.written_count == 0

    def test_manifest_written_when_enabled(self, schema_copy, tmp_path):
        """Should write the manifest next to the C# output."""
        config = self.make_config(schema_copy, tmp_path, write_typescript_manifest=True)
        run_generation(config)
        assert (tmp_path / "out" / "cs" / "TypeScriptEnums.manifest.json").exists()

    def test_dry_run(self, schema_copy, tmp_path):
        """Should generate in memory without touching disk."""
        config = self.make_config(schema_copy, tmp_path)
        result = run_generation(config, dry_run=True)

        assert result.files
        assert result.write_outcomes == []
        assert not (tmp_path / "out").exists()

    def test_cancelled_before_start(self, schema_copy, tmp_path):
        """Should stop at the first file boundary when cancelled."""
        event = threading.Event()
        event.set()
        result = run_generation(self.make_config(schema_copy, tmp_path), cancel_event=event)

        assert result.cancelled
        assert result.files == []
        assert not (tmp_path / "out").exists()


class TestWriter:
    """Test write-if-changed."""

    def test_write_then_unchanged(self, tmp_path):
        """Should write once and then report unchanged."""
        first = write_if_changed(tmp_path / "nested", "A.cs", "class A {}\n")
        second = write_if_changed(tmp_path / "nested", "A.cs", "class A {}\n")
        third = write_if_changed(tmp_path / "nested", "A.cs", "class B {}\n")

        assert first.status == "written"
        assert second.status == "unchanged"
        assert third.status == "written"
        assert (tmp_path / "nested" / "A.cs").read_text(encoding="utf-8") == "class B {}\n"

    def test_failure_is_reported_not_raised(self, tmp_path):
        """Should return a failed outcome when the directory cannot be created."""
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        outcome = write_if_changed(blocker / "sub", "A.cs", "content")

        assert outcome.status == "failed"
        assert outcome.error

    def test_resolve_output_dir(self, tmp_path):
        """Should resolve relative paths against the project directory."""
        assert resolve_output_dir("Generated", tmp_path) == (tmp_path / "Generated").resolve()
        absolute = tmp_path / "abs"
        assert resolve_output_dir(absolute, "/ignored") == absolute
