"""
Filesystem walker for pathfinder.

This module traverses a directory tree up to a fixed depth and collects every
file and directory path relative to the walk base. It prunes a fixed list of
dependency, cache and build directories, respects hierarchical ignore files,
and reads disjoint subtrees in parallel on a pool of worker threads.
"""

import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from ..models.config import DEFAULT_WALKER_THREADS
from ..models.search_query import DepthMode
from .ignore import IgnoreRules, build_root_rules


logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset([
    ".git",
    "node_modules",
    ".venv",
    "__pycache__",
    ".mypy_cache",
    ".cache",
    "dist",
    "build",
    ".next",
    "target",
    ".tox",
    ".pytest_cache",
])


def path_contains_skip_dir(rel_path: str) -> bool:
    """
    Check if any segment of a relative path is a skip-listed name.

    Args:
        rel_path: Forward-slash separated path relative to the walk base

    Returns:
        True if the path passes through (or is) a skip-listed directory name
    """
    return any(segment in SKIP_DIRS for segment in rel_path.split('/'))


@dataclass(frozen=True)
class _DirectoryTask:
    """A directory waiting to be read, with the ignore rules of its parent."""
    path: Path
    rel_path: str
    depth: int
    parent_rules: IgnoreRules


class FSWalker:
    """
    Filesystem walker that collects candidate paths below a base directory.

    This class provides bounded directory traversal with support for:
    - A fixed skip-list of directories that are never entered
    - Hierarchical gitignore-style ignore files
    - Parallel reading of disjoint subtrees

    Workers share one queue of directories still to be read and one unbounded
    queue of discovered paths. The walk is complete once every queued
    directory has been processed.
    """

    def __init__(self, threads: Optional[int] = None):
        """
        Initialize the filesystem walker.

        Args:
            threads: Worker thread count; defaults to the detected CPU count
        """
        self.threads = threads or os.cpu_count() or DEFAULT_WALKER_THREADS
        self._stats_lock = threading.Lock()
        self._stats = self._empty_stats()

    def walk(self, base: Union[str, Path], depth_mode: DepthMode) -> List[str]:
        """
        Collect every eligible entry between depth 1 and the mode's max depth.

        Args:
            base: Directory to walk; it is never included in the results
            depth_mode: Depth bound for the traversal

        Returns:
            Forward-slash separated paths relative to base, in arrival order
        """
        base_path = Path(base)
        if not base_path.is_dir():
            logger.warning(f"Walk base is not a directory: {base_path}")
            return []

        logger.info(f"Walking {base_path} to depth {depth_mode.max_depth} with {self.threads} threads")

        work: "queue.Queue[Optional[_DirectoryTask]]" = queue.Queue()
        results: "queue.SimpleQueue[str]" = queue.SimpleQueue()
        work.put(_DirectoryTask(base_path, '', 0, build_root_rules(base_path)))

        with ThreadPoolExecutor(max_workers=self.threads, thread_name_prefix="pathfinder-walk") as executor:
            futures = [
                executor.submit(self._worker, work, results, depth_mode.max_depth)
                for _ in range(self.threads)
            ]

            work.join()
            for _ in futures:
                work.put(None)

            for future in as_completed(futures):
                future.result()

        paths = []
        while True:
            try:
                paths.append(results.get_nowait())
            except queue.Empty:
                break

        logger.info(f"Walk of {base_path} found {len(paths)} entries")
        return paths

    def _worker(self, work: "queue.Queue[Optional[_DirectoryTask]]",
                results: "queue.SimpleQueue[str]", max_depth: int) -> None:
        """Process queued directories until a stop sentinel arrives."""
        while True:
            task = work.get()
            try:
                if task is None:
                    return
                self._scan_directory(task, work, results, max_depth)
            except Exception as e:
                logger.warning(f"Error walking directory {task.path}: {e}")
                self._record({'errors': 1})
            finally:
                work.task_done()

    def _scan_directory(self, task: _DirectoryTask, work: "queue.Queue[Optional[_DirectoryTask]]",
                        results: "queue.SimpleQueue[str]", max_depth: int) -> None:
        """
        Read one directory, emit its eligible entries and queue its subdirectories.

        Args:
            task: Directory to read
            work: Queue receiving subdirectories still to be read
            results: Queue receiving discovered relative paths
            max_depth: Deepest level that is emitted
        """
        counts = {'directories_traversed': 1}

        if task.rel_path:
            rules = task.parent_rules.child(task.path, task.rel_path)
        else:
            rules = task.parent_rules

        try:
            with os.scandir(task.path) as it:
                entries = list(it)
        except OSError as e:
            logger.debug(f"Cannot read directory {task.path}: {e}")
            counts['errors'] = 1
            self._record(counts)
            return

        depth = task.depth + 1
        for entry in entries:
            rel_path = f"{task.rel_path}/{entry.name}" if task.rel_path else entry.name

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                logger.debug(f"Cannot stat {entry.path}: {e}")
                self._bump(counts, 'errors')
                continue

            if is_dir and entry.name in SKIP_DIRS:
                self._bump(counts, 'entries_skipped')
                continue

            if rules.is_ignored(rel_path, is_dir):
                self._bump(counts, 'entries_ignored')
                continue

            if not self._is_printable(rel_path):
                logger.debug(f"Skipping path that is not valid UTF-8: {rel_path!r}")
                self._bump(counts, 'entries_skipped')
                continue

            # Symlinks are reported but not followed, so this only guards
            # against skip-listed names reached through a linked path
            if path_contains_skip_dir(rel_path):
                self._bump(counts, 'entries_skipped')
            else:
                results.put(rel_path)
                self._bump(counts, 'entries_found')

            if is_dir and depth < max_depth:
                work.put(_DirectoryTask(Path(entry.path), rel_path, depth, rules))

        self._record(counts)

    @staticmethod
    def _is_printable(rel_path: str) -> bool:
        try:
            rel_path.encode('utf-8')
        except UnicodeEncodeError:
            return False
        return True

    @staticmethod
    def _bump(counts: Dict[str, int], key: str) -> None:
        counts[key] = counts.get(key, 0) + 1

    def _record(self, counts: Dict[str, int]) -> None:
        with self._stats_lock:
            for key, value in counts.items():
                self._stats[key] += value

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'directories_traversed': 0,
            'entries_found': 0,
            'entries_ignored': 0,
            'entries_skipped': 0,
            'errors': 0
        }

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walks performed so far.

        Returns:
            Dictionary containing operation statistics
        """
        with self._stats_lock:
            return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        with self._stats_lock:
            self._stats = self._empty_stats()


def walk_files(base: Union[str, Path], depth_mode: DepthMode, threads: Optional[int] = None) -> List[str]:
    """
    Walk a directory and return candidate paths relative to it.

    Args:
        base: Directory to walk
        depth_mode: Shallow listing or deep search bound
        threads: Worker thread count (optional)

    Returns:
        Relative paths of every eligible file and directory
    """
    return FSWalker(threads=threads).walk(base, depth_mode)
