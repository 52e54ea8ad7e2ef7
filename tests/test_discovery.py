"""
Tests for the discovery module (env file lookup).
"""

import tempfile
from pathlib import Path

from envdrift.core.discovery import (
    ENV_SPECIFIC_FILES,
    display_path,
    read_file_safe,
    resolve_env_files,
)


class TestResolveEnvFiles:
    """Test env file discovery."""

    def test_discovers_env_file(self):
        """Should discover basic .env file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / ".env").write_text("KEY=value\n")

            files = resolve_env_files(tmpdir)
            assert [f.name for f in files] == [".env"]

    def test_input_first_then_listed_order(self):
        """The input file comes first, then the conventional variants in order."""
        with tempfile.TemporaryDirectory() as tmpdir:
            for name in [".env.test", ".env", ".env.local", ".env.production"]:
                (Path(tmpdir) / name).write_text("KEY=value\n")

            files = resolve_env_files(tmpdir)
            assert [f.name for f in files] == [".env", ".env.local", ".env.production", ".env.test"]

    def test_ignores_example_and_unknown_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / ".env.example").write_text("KEY=\n")
            (Path(tmpdir) / ".env.staging").write_text("KEY=value\n")

            assert resolve_env_files(tmpdir) == []

    def test_custom_input_not_duplicated(self):
        """An input that is also a known variant is listed once."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / ".env.local").write_text("KEY=value\n")

            files = resolve_env_files(tmpdir, ".env.local")
            assert [f.name for f in files] == [".env.local"]

    def test_directories_skipped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / ".env").mkdir()
            assert resolve_env_files(tmpdir) == []

    def test_known_variants(self):
        assert ".env.development.local" in ENV_SPECIFIC_FILES
        assert ".env" not in ENV_SPECIFIC_FILES


class TestReadFileSafe:
    """Missing files read as empty."""

    def test_reads_content(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("A=1\n")
        assert read_file_safe(path) == "A=1\n"

    def test_missing_file(self, tmp_path):
        assert read_file_safe(tmp_path / "nope") == ""

    def test_binary_file(self, tmp_path):
        path = tmp_path / ".env"
        path.write_bytes(b"\xff\xfe\xfa")
        assert read_file_safe(path) == ""


class TestDisplayPath:
    """Test relative display names."""

    def test_relative_to_root(self, tmp_path):
        (tmp_path / "sub").mkdir()
        assert display_path(tmp_path / "sub" / ".env", str(tmp_path)) == "sub/.env"

    def test_outside_root_uses_name(self, tmp_path):
        other = tmp_path / "other"
        root = tmp_path / "root"
        root.mkdir()
        assert display_path(other / ".env", str(root)) == ".env"
