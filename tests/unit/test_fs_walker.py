"""
Unit tests for the filesystem walker module.

Tests depth bounds, skip-list pruning, ignore-file handling, symlinks and
the parallel traversal of the FSWalker class.
"""

import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import pytest

from pathfinder.models.search_query import DepthMode
from pathfinder.tools.fs_walker import FSWalker, SKIP_DIRS, path_contains_skip_dir, walk_files


class TestFSWalker:
    """Test cases for the FSWalker class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self._create_test_structure()
        self.walker = FSWalker(threads=4)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _create_test_structure(self):
        """
        Create a test directory structure:

        src/main.py, src/utils.py, tests/test_main.py, .git/config,
        node_modules/pkg/index.js, README.md
        """
        test_files = [
            "src/main.py",
            "src/utils.py",
            "tests/test_main.py",
            ".git/config",
            "node_modules/pkg/index.js",
            "README.md",
        ]

        for file_path in test_files:
            full_path = self.test_root / file_path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(f"Content of {file_path}")

    def test_walk_excludes_git(self):
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert not any(".git" in p for p in paths)

    def test_walk_excludes_node_modules(self):
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert not any("node_modules" in p for p in paths)

    def test_walk_includes_source_files(self):
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert "src/main.py" in paths
        assert "src/utils.py" in paths
        assert "tests/test_main.py" in paths
        assert "README.md" in paths

    def test_walk_includes_directories(self):
        """Test that directories are candidates too."""
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert "src" in paths
        assert "tests" in paths

    def test_root_is_never_emitted(self):
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert "" not in paths
        assert "." not in paths

    def test_paths_are_relative_with_forward_slashes(self):
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        for path in paths:
            assert not os.path.isabs(path)
            assert "\\" not in path

    def test_no_duplicates(self):
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert len(paths) == len(set(paths))

    def test_complete_set_is_returned(self):
        """Test that the walk returns exactly the eligible entries."""
        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert sorted(paths) == sorted([
            "README.md",
            "src",
            "src/main.py",
            "src/utils.py",
            "tests",
            "tests/test_main.py",
        ])

    def test_hidden_files_included(self):
        (self.test_root / ".env.example").write_text("")
        (self.test_root / ".github").mkdir()
        (self.test_root / ".github" / "ci.yml").write_text("")

        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert ".env.example" in paths
        assert ".github/ci.yml" in paths

    def test_nested_skip_dirs_pruned(self):
        (self.test_root / "src" / "__pycache__").mkdir()
        (self.test_root / "src" / "__pycache__" / "main.cpython-312.pyc").write_text("")
        (self.test_root / "web" / "build").mkdir(parents=True)
        (self.test_root / "web" / "build" / "bundle.js").write_text("")

        paths = self.walker.walk(self.test_root, DepthMode.DEEP)

        assert not any("__pycache__" in p for p in paths)
        assert not any(p.startswith("web/build") for p in paths)
        assert "web" in paths

    def test_stats_are_collected(self):
        self.walker.walk(self.test_root, DepthMode.DEEP)
        stats = self.walker.get_stats()

        assert stats['directories_traversed'] >= 3
        assert stats['entries_found'] == 6
        assert stats['entries_skipped'] >= 2

        self.walker.reset_stats()
        assert self.walker.get_stats()['entries_found'] == 0

    def test_missing_base_returns_empty(self):
        assert self.walker.walk(self.test_root / "missing", DepthMode.DEEP) == []

    def test_file_base_returns_empty(self):
        assert self.walker.walk(self.test_root / "README.md", DepthMode.DEEP) == []

    def test_single_thread_matches_parallel(self):
        single = FSWalker(threads=1).walk(self.test_root, DepthMode.DEEP)
        parallel = FSWalker(threads=8).walk(self.test_root, DepthMode.DEEP)

        assert sorted(single) == sorted(parallel)

    def test_default_thread_count(self):
        with patch("pathfinder.tools.fs_walker.os.cpu_count", return_value=None):
            assert FSWalker().threads == 4

        with patch("pathfinder.tools.fs_walker.os.cpu_count", return_value=12):
            assert FSWalker().threads == 12


class TestDepthBounds:
    """Test cases for shallow and deep traversal limits."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.base = Path(self.temp_dir)

        # depth 0: root, depth 1: a, depth 2: a/shallow.txt
        (self.base / "a/b/c/d/e/f").mkdir(parents=True)
        (self.base / "a/shallow.txt").write_text("")
        (self.base / "a/b/c/d/e/six.txt").write_text("")
        (self.base / "a/b/c/d/e/f/deep.txt").write_text("")

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_shallow_includes_depth_two(self):
        paths = walk_files(self.base, DepthMode.SHALLOW)

        assert "a/shallow.txt" in paths
        assert "a/b" in paths

    def test_shallow_excludes_deeper_entries(self):
        paths = walk_files(self.base, DepthMode.SHALLOW)

        assert not any(p.count("/") >= 2 for p in paths)
        assert not any("deep.txt" in p for p in paths)

    def test_deep_includes_depth_six(self):
        paths = walk_files(self.base, DepthMode.DEEP)

        assert "a/b/c/d/e/six.txt" in paths
        assert "a/b/c/d/e/f" in paths

    def test_deep_excludes_depth_seven(self):
        paths = walk_files(self.base, DepthMode.DEEP)

        assert "a/b/c/d/e/f/deep.txt" not in paths


class TestIgnoreFiles:
    """Test cases for ignore files applied during the walk."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.base = Path(self.temp_dir)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_walk_respects_gitignore(self):
        (self.base / ".git").mkdir()
        (self.base / ".gitignore").write_text("ignored.txt\n")
        (self.base / "ignored.txt").write_text("")
        (self.base / "included.txt").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert "ignored.txt" not in paths
        assert "included.txt" in paths

    def test_gitignore_honored_outside_repository(self):
        (self.base / ".gitignore").write_text("*.log\n")
        (self.base / "debug.log").write_text("")
        (self.base / "notes.txt").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert "debug.log" not in paths
        assert "notes.txt" in paths

    def test_ignored_directory_is_pruned(self):
        (self.base / ".gitignore").write_text("generated/\n")
        (self.base / "generated" / "deep").mkdir(parents=True)
        (self.base / "generated" / "deep" / "out.py").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert not any(p.startswith("generated") for p in paths)

    def test_nested_gitignore_applies_to_its_subtree(self):
        (self.base / "pkg").mkdir()
        (self.base / "pkg" / ".gitignore").write_text("secret.txt\n")
        (self.base / "pkg" / "secret.txt").write_text("")
        (self.base / "secret.txt").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert "pkg/secret.txt" not in paths
        assert "secret.txt" in paths

    def test_contents_glob_negation_reincludes_file(self):
        (self.base / ".git").mkdir()
        (self.base / ".gitignore").write_text("foo/**\n!foo/keep.txt\n")
        (self.base / "foo").mkdir()
        (self.base / "foo" / "keep.txt").write_text("")
        (self.base / "foo" / "drop.txt").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert "foo" in paths
        assert "foo/keep.txt" in paths
        assert "foo/drop.txt" not in paths

    def test_deeper_negation_overrides_parent_rule(self):
        (self.base / ".gitignore").write_text("*.txt\n")
        (self.base / "keep").mkdir()
        (self.base / "keep" / ".gitignore").write_text("!wanted.txt\n")
        (self.base / "keep" / "wanted.txt").write_text("")
        (self.base / "keep" / "other.txt").write_text("")
        (self.base / "top.txt").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert "keep/wanted.txt" in paths
        assert "keep/other.txt" not in paths
        assert "top.txt" not in paths

    def test_dot_ignore_file(self):
        (self.base / ".ignore").write_text("scratch\n")
        (self.base / "scratch").write_text("")
        (self.base / "kept").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert "scratch" not in paths
        assert "kept" in paths

    def test_repository_exclude_file(self):
        (self.base / ".git" / "info").mkdir(parents=True)
        (self.base / ".git" / "info" / "exclude").write_text("local-only.md\n")
        (self.base / "local-only.md").write_text("")
        (self.base / "shared.md").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert "local-only.md" not in paths
        assert "shared.md" in paths

    def test_global_excludes_file(self, isolated_home):
        git_config_dir = isolated_home / ".config" / "git"
        git_config_dir.mkdir(parents=True)
        (git_config_dir / "ignore").write_text(".DS_Store\n")
        (self.base / ".DS_Store").write_text("")
        (self.base / "app.py").write_text("")

        paths = walk_files(self.base, DepthMode.DEEP)

        assert ".DS_Store" not in paths
        assert "app.py" in paths

    def test_parent_gitignore_applies_inside_repository(self):
        (self.base / ".git").mkdir()
        (self.base / ".gitignore").write_text("sub/cache.db\n")
        (self.base / "sub").mkdir()
        (self.base / "sub" / "cache.db").write_text("")
        (self.base / "sub" / "code.py").write_text("")

        paths = walk_files(self.base / "sub", DepthMode.DEEP)

        assert "cache.db" not in paths
        assert "code.py" in paths


class TestSkipDirs:
    """Test cases for the skip-list helpers."""

    def test_skip_list_contents(self):
        for name in (".git", "node_modules", ".venv", "__pycache__", "target", "dist", "build"):
            assert name in SKIP_DIRS

    def test_path_contains_skip_dir(self):
        assert path_contains_skip_dir(".git")
        assert path_contains_skip_dir(".git/config")
        assert path_contains_skip_dir("web/node_modules/react/index.js")
        assert not path_contains_skip_dir("src/main.py")
        assert not path_contains_skip_dir("my.git/config")
        assert not path_contains_skip_dir("node_modules_backup/x")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlinks_reported_but_not_followed(self):
        temp_dir = tempfile.mkdtemp()
        try:
            base = Path(temp_dir)
            (base / "real").mkdir()
            (base / "real" / "file.txt").write_text("")
            try:
                os.symlink(base / "real", base / "link")
            except OSError:
                pytest.skip("cannot create symlinks")

            paths = walk_files(base, DepthMode.DEEP)

            assert "link" in paths
            assert "real/file.txt" in paths
            assert "link/file.txt" not in paths
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)
