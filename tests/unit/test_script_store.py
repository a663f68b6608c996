"""
Unit tests for ScriptStore and filename parsing.

Tests cover:
- Identifier extraction from filenames
- Script discovery and sorting
- Filtering of non-script files
- Duplicate identifier rejection
- Missing directory behaviour
"""

import pytest

from schemaledger.errors import (
    ConfigurationError,
    DuplicateIdentifierError,
    ScriptNameError,
    ScriptReadError,
)
from schemaledger.migrations.migration import ScriptName
from schemaledger.migrations.script_store import ScriptStore, parse_script_name


class TestParseScriptName:
    """Test identifier extraction."""

    def test_identifier_before_first_separator(self):
        """Everything before the first underscore is the identifier."""
        assert parse_script_name('0002_add_approval_system.sql') == ScriptName(
            '0002', 'add_approval_system'
        )

    def test_only_first_separator_splits(self):
        """Later underscores stay in the description."""
        name = parse_script_name('20250517_add_new_tables.sql')
        assert name.identifier == '20250517'
        assert name.description == 'add_new_tables'

    def test_no_description(self):
        """A bare identifier filename is allowed."""
        assert parse_script_name('0003.sql') == ScriptName('0003', '')

    def test_empty_identifier_rejected(self):
        """Leading separator leaves no identifier."""
        with pytest.raises(ScriptNameError, match="no identifier"):
            parse_script_name('_orphan.sql')

    def test_wrong_extension_rejected(self):
        """Only .sql files are scripts."""
        with pytest.raises(ScriptNameError, match="'.sql' extension"):
            parse_script_name('0001_init.js')


class TestScriptDiscovery:
    """Test migration file discovery."""

    @pytest.fixture
    def populated_dir(self, migrations_dir):
        """Directory with scripts written out of order plus noise."""
        (migrations_dir / "010_third.sql").write_text("SELECT 10;")
        (migrations_dir / "001_first.sql").write_text("SELECT 1;")
        (migrations_dir / "002_second.sql").write_text("SELECT 2;")
        (migrations_dir / "README.md").write_text("# Migrations")
        (migrations_dir / "20250517_add_new_tables.js").write_text("// js")
        (migrations_dir / "meta").mkdir()
        return migrations_dir

    def test_list_scripts_sorted_by_filename(self, populated_dir):
        """Scripts come back in lexicographic filename order."""
        scripts = ScriptStore(populated_dir).list_scripts()

        assert [s.identifier for s in scripts] == ['001', '002', '010']

    def test_list_scripts_reads_body(self, populated_dir):
        """Body is the raw file text."""
        scripts = ScriptStore(populated_dir).list_scripts()

        assert scripts[0].body == "SELECT 1;"
        assert scripts[0].filename == "001_first.sql"
        assert scripts[0].description == "first"

    def test_non_sql_files_skipped(self, populated_dir):
        """README, .js files and subdirectories are ignored."""
        filenames = ScriptStore(populated_dir).list_filenames()

        assert filenames == ['001_first.sql', '002_second.sql', '010_third.sql']

    def test_missing_directory_is_empty(self, tmp_path):
        """Absent directory yields no scripts, not an error."""
        store = ScriptStore(tmp_path / "nope")

        assert not store.exists()
        assert store.list_scripts() == []
        assert store.list_filenames() == []

    def test_empty_directory(self, migrations_dir):
        """Existing but empty directory yields no scripts."""
        store = ScriptStore(migrations_dir)

        assert store.exists()
        assert store.list_scripts() == []

    def test_duplicate_identifier_rejected(self, migrations_dir):
        """Two files sharing a leading token is a configuration error."""
        (migrations_dir / "0001_initial_migration.sql").write_text("SELECT 1;")
        (migrations_dir / "0001_other.sql").write_text("SELECT 2;")

        with pytest.raises(DuplicateIdentifierError, match="'0001'") as exc_info:
            ScriptStore(migrations_dir).list_scripts()

        assert exc_info.value.filenames == [
            '0001_initial_migration.sql', '0001_other.sql'
        ]

    def test_list_directory_includes_everything(self, populated_dir):
        """Directory listing (used after generate) is not filtered."""
        entries = ScriptStore(populated_dir).list_directory()

        assert 'README.md' in entries
        assert 'meta' in entries
        assert '001_first.sql' in entries

    def test_non_utf8_script_rejected(self, migrations_dir):
        """Undecodable script text is a configuration error naming the file."""
        (migrations_dir / "001_bad.sql").write_bytes(b"SELECT '\xff';")

        with pytest.raises(ScriptReadError, match="001_bad.sql") as exc_info:
            ScriptStore(migrations_dir).list_scripts()

        assert exc_info.value.filename == '001_bad.sql'
        assert isinstance(exc_info.value, ConfigurationError)
