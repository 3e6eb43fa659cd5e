"""Tests for scanner module."""

import asyncio
import os
import sys
from pathlib import Path

import pytest

from scanner.discovery import (
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_EXTENSIONS,
    FileDecodeError,
    FileTable,
    collect_files,
    is_excluded_dir,
    is_extension_allowed,
    normalize_extensions,
)


def collect(root, **kwargs):
    return asyncio.run(collect_files(root, **kwargs))


def write(path: Path, text: str = "scalar X\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestExtensionFiltering:
    """Tests for extension and directory filters."""
    
    def test_allowed_extensions(self):
        """Test default extensions are accepted case-insensitively."""
        assert is_extension_allowed(Path("schema/user.graphql"), DEFAULT_EXTENSIONS)
        assert is_extension_allowed(Path("schema/user.GQL"), DEFAULT_EXTENSIONS)
    
    def test_disallowed_extensions(self):
        """Test other files and files without a suffix are rejected."""
        assert not is_extension_allowed(Path("README.md"), DEFAULT_EXTENSIONS)
        assert not is_extension_allowed(Path("Makefile"), DEFAULT_EXTENSIONS)
        assert not is_extension_allowed(Path(".graphql"), DEFAULT_EXTENSIONS)
    
    def test_normalize_extensions(self):
        """Test extensions are lower-cased and dotted."""
        assert normalize_extensions(["graphqls", ".GQL"]) == {".graphqls", ".gql"}
    
    def test_excluded_dirs(self):
        """Test exact names and *suffix patterns."""
        exclude = {"node_modules", "*.egg-info"}
        
        assert is_excluded_dir("node_modules", exclude)
        assert is_excluded_dir("pkg.egg-info", exclude)
        assert not is_excluded_dir("schema", exclude)


class TestFileTable:
    """Tests for the shared file table."""
    
    def test_insert_and_read(self):
        """Test inserted entries are readable and sorted."""
        table = FileTable()
        
        async def fill():
            await asyncio.gather(
                table.insert(Path("b.graphql"), "B"),
                table.insert(Path("a.graphql"), "A"),
            )
        
        asyncio.run(fill())
        
        assert len(table) == 2
        assert Path("a.graphql") in table
        assert table.get(Path("b.graphql")) == "B"
        assert table.paths() == [Path("a.graphql"), Path("b.graphql")]
        assert table.items() == [(Path("a.graphql"), "A"), (Path("b.graphql"), "B")]
    
    def test_insert_is_upsert(self):
        """Test inserting a path twice keeps the last contents."""
        table = FileTable({Path("a.graphql"): "old"})
        
        asyncio.run(table.insert(Path("a.graphql"), "new"))
        
        assert len(table) == 1
        assert table.get(Path("a.graphql")) == "new"


class TestCollectFiles:
    """Tests for recursive file collection."""
    
    def test_only_allowed_files_collected(self, tmp_path):
        """Test a disallowed file is skipped and an allowed one is read."""
        allowed = write(tmp_path / "types.graphql", "type A { id: ID }\n")
        write(tmp_path / "notes.txt", "not a schema")
        
        table = collect(tmp_path)
        
        assert table.paths() == [allowed]
        assert table.get(allowed) == "type A { id: ID }\n"
    
    def test_recurses_into_subdirectories(self, tmp_path):
        """Test nested directories are walked."""
        top = write(tmp_path / "schema.graphql")
        nested = write(tmp_path / "types" / "user" / "user.gql")
        write(tmp_path / "types" / "README")
        
        table = collect(tmp_path)
        
        assert set(table.paths()) == {top, nested}
    
    def test_excluded_directories_skipped(self, tmp_path):
        """Test excluded directories are never descended into."""
        kept = write(tmp_path / "schema.graphql")
        write(tmp_path / "node_modules" / "dep" / "schema.graphql")
        
        table = collect(tmp_path, exclude_dirs=DEFAULT_EXCLUDE_DIRS)
        
        assert table.paths() == [kept]
    
    def test_no_exclusions_by_default(self, tmp_path):
        """Test a default walk enters every subdirectory, build and env included."""
        built = write(tmp_path / "build" / "x.graphql", "scalar X\n")
        env = write(tmp_path / "env" / "a.graphql", "scalar A\n")
        
        table = collect(tmp_path)
        
        assert set(table.paths()) == {built, env}
    
    def test_custom_extensions(self, tmp_path):
        """Test a caller-supplied allow-list replaces the default one."""
        write(tmp_path / "a.graphql")
        custom = write(tmp_path / "b.graphqls")
        
        table = collect(tmp_path, include_ext={"graphqls"})
        
        assert table.paths() == [custom]
    
    def test_max_depth(self, tmp_path):
        """Test directories below the maximum depth are skipped."""
        shallow = write(tmp_path / "a" / "a.graphql")
        write(tmp_path / "a" / "b" / "b.graphql")
        
        table = collect(tmp_path, max_depth=1)
        
        assert table.paths() == [shallow]
    
    def test_root_file(self, tmp_path):
        """Test a root that is itself an allowed file."""
        single = write(tmp_path / "only.graphql")
        
        assert collect(single).paths() == [single]
        assert len(collect(write(tmp_path / "only.txt"))) == 0
    
    def test_existing_table_is_filled(self, tmp_path):
        """Test collecting into a table supplied by the caller."""
        table = FileTable({Path("elsewhere.graphql"): "scalar Y"})
        write(tmp_path / "a.graphql")
        
        result = collect(tmp_path, table=table)
        
        assert result is table
        assert len(table) == 2
    
    def test_workers_give_same_result(self, tmp_path):
        """Test the collected set doesn't depend on the number of workers."""
        for i in range(5):
            for j in range(3):
                write(tmp_path / f"dir{i}" / f"sub{j}" / f"t{i}_{j}.graphql", f"scalar S{i}_{j}\n")
        
        single = collect(tmp_path, workers=1)
        parallel = collect(tmp_path, workers=4)
        
        assert len(single) == 15
        assert single.items() == parallel.items()
    
    def test_missing_root(self, tmp_path):
        """Test a root that doesn't exist raises an I/O error."""
        with pytest.raises(FileNotFoundError):
            collect(tmp_path / "nope")
    
    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permissions are not enforced for root or on Windows",
    )
    def test_unreadable_directory(self, tmp_path):
        """Test a directory that can't be listed raises PermissionError."""
        write(tmp_path / "a.graphql")
        locked = tmp_path / "locked"
        write(locked / "b.graphql")
        locked.chmod(0)
        
        try:
            with pytest.raises(PermissionError):
                collect(tmp_path)
        finally:
            locked.chmod(0o755)
    
    def test_entries_kept_after_failure(self, tmp_path):
        """Test files inserted before the first error stay in the caller's table."""
        good = write(tmp_path / "a.graphql")
        bad = tmp_path / "sub" / "bad.graphql"
        bad.parent.mkdir()
        bad.write_bytes(b"\xff\xfe\x00\xc3\x28")
        table = FileTable()
        
        with pytest.raises(FileDecodeError):
            collect(tmp_path, table=table)
        
        assert table.paths() == [good]
        assert table.get(good) == "scalar X\n"
    
    def test_undecodable_file(self, tmp_path):
        """Test non-text content aborts collection."""
        bad = tmp_path / "bad.graphql"
        bad.write_bytes(b"\xff\xfe\x00\xc3\x28")
        
        with pytest.raises(FileDecodeError) as excinfo:
            collect(tmp_path)
        
        assert excinfo.value.path == bad
        assert isinstance(excinfo.value, OSError)
    
    def test_invalid_workers(self, tmp_path):
        """Test at least one worker is required."""
        with pytest.raises(ValueError):
            collect(tmp_path, workers=0)
    
    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
    def test_symlink_loop(self, tmp_path):
        """Test a directory symlink pointing back up doesn't loop forever."""
        kept = write(tmp_path / "sub" / "a.graphql")
        os.symlink(tmp_path, tmp_path / "sub" / "loop")
        
        table = collect(tmp_path)
        
        assert table.paths() == [kept]
