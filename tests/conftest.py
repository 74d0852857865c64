"""Shared pytest fixtures for all tests."""
import shutil
from pathlib import Path

import pytest

from sql_codegen.sql_schema.merge_parser import parse_merge_statement_or_raise
from sql_codegen.sql_schema.parser import parse_create_table_or_raise

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SCHEMA_DIR = FIXTURES_DIR / "schema"
TABLES_DIR = SCHEMA_DIR / "dbo" / "Tables"
LOOKUPS_DIR = SCHEMA_DIR / "dbo" / "Scripts" / "LookupTables"


def read_fixture(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def schema_dir():
    """Path to the read-only sample database project."""
    return SCHEMA_DIR


@pytest.fixture
def schema_copy(tmp_path):
    """Writable copy of the sample database project."""
    target = tmp_path / "schema"
    shutil.copytree(SCHEMA_DIR, target)
    return target


@pytest.fixture(scope="session")
def project_stage_table():
    return parse_create_table_or_raise(read_fixture(TABLES_DIR / "ProjectStage.sql"))


@pytest.fixture(scope="session")
def project_stage_lookup():
    return parse_merge_statement_or_raise(read_fixture(LOOKUPS_DIR / "dbo.ProjectStage.sql"))


@pytest.fixture(scope="session")
def treatment_bmp_type_table():
    return parse_create_table_or_raise(read_fixture(TABLES_DIR / "TreatmentBMPType.sql"))


@pytest.fixture(scope="session")
def treatment_bmp_type_lookup():
    return parse_merge_statement_or_raise(read_fixture(LOOKUPS_DIR / "dbo.TreatmentBMPType.sql"))


@pytest.fixture(scope="session")
def project_table():
    return parse_create_table_or_raise(read_fixture(TABLES_DIR / "Project.sql"))
