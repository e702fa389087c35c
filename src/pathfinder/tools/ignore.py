"""
Hierarchical ignore rules for the directory walker.

Implements the usual git precedence: per-directory ``.ignore`` and
``.gitignore`` files (deeper directories override shallower ones), then the
repository's ``.git/info/exclude``, then the user's global excludes file.
Pattern syntax is handled by ``pathspec``; this module only decides which rule
set gets the final word.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import pathspec
from pathspec.patterns import GitWildMatchPattern


logger = logging.getLogger(__name__)

# Files read in every walked directory, highest precedence first
IGNORE_FILE_NAMES = ('.ignore', '.gitignore')


class RuleSet:
    """
    Patterns from one ignore file, anchored at the directory holding it.

    Candidate paths arrive relative to the walk base and are rewritten to be
    relative to the anchor directory before matching.

    Attributes:
        rules: Compiled patterns paired with whether each is directory-only
            (written with a trailing slash)
        below: Anchor directory relative to the walk base with a trailing
            slash, for files found inside the walked tree ('' at the base)
        above: Walk base relative to the anchor directory with a trailing
            slash, for files found in ancestors of the base
        source: File the patterns came from
    """

    def __init__(self, rules: Sequence[Tuple[pathspec.Pattern, bool]], below: str = '', above: str = '',
                 source: str = '<lines>'):
        self.rules = [(pattern, dir_only) for pattern, dir_only in rules if pattern.include is not None]
        self.below = below
        self.above = above
        self.source = source

    @classmethod
    def from_lines(cls, lines: Iterable[str], below: str = '', above: str = '',
                   source: str = '<lines>') -> 'RuleSet':
        """Compile gitignore-style lines into a rule set."""
        rules = []
        for line in lines:
            pattern = GitWildMatchPattern(line)
            rules.append((pattern, line.rstrip().endswith('/')))
        return cls(rules, below=below, above=above, source=source)

    def __bool__(self) -> bool:
        return bool(self.rules)

    def check(self, rel_path: str, is_dir: bool) -> Optional[bool]:
        """
        Match a path against this rule set.

        Directories match directory-only patterns in their ``name/`` form and
        every other pattern by bare name, so ``foo/**`` covers the contents of
        ``foo`` but not ``foo`` itself.

        Args:
            rel_path: Path relative to the walk base, forward-slash separated
            is_dir: Whether the path names a directory

        Returns:
            True if ignored, False if explicitly re-included by a negation,
            None if no pattern matched
        """
        path = self._localize(rel_path)
        if path is None:
            return None
        dir_path = f"{path}/" if is_dir else path

        result = None
        for pattern, dir_only in self.rules:
            if pattern.match_file(dir_path if dir_only else path) is not None:
                result = pattern.include
        return result

    def _localize(self, rel_path: str) -> Optional[str]:
        if self.below:
            if not rel_path.startswith(self.below):
                return None
            rel_path = rel_path[len(self.below):]
        return self.above + rel_path


class IgnoreRules:
    """
    Immutable chain of rule sets for one directory in the walk.

    Each directory's rules point at its parent's, so sibling subtrees walked by
    different threads share the common part of the chain without copying.
    """

    def __init__(self, local: Sequence[RuleSet] = (), parent: Optional['IgnoreRules'] = None,
                 fallback: Sequence[RuleSet] = ()):
        self.local = [rules for rules in local if rules]
        self.parent = parent
        self.fallback = list(fallback) if parent is None else parent.fallback

    def child(self, directory: Path, rel_dir: str) -> 'IgnoreRules':
        """
        Build the rules for a subdirectory by reading its ignore files.

        Args:
            directory: Absolute path of the subdirectory
            rel_dir: Its path relative to the walk base

        Returns:
            The extended chain, or self when the directory has no ignore files
        """
        local = load_directory_rules(directory, below=f"{rel_dir}/")
        if not local:
            return self
        return IgnoreRules(local, parent=self)

    def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
        """
        Check if a path relative to the walk base is ignored.

        The deepest rule set with a matching pattern decides; the repository
        exclude file and the global excludes file are consulted last.
        """
        node = self
        while node is not None:
            for rules in node.local:
                result = rules.check(rel_path, is_dir)
                if result is not None:
                    return result
            node = node.parent

        for rules in self.fallback:
            result = rules.check(rel_path, is_dir)
            if result is not None:
                return result

        return False


def read_rule_set(path: Path, below: str = '', above: str = '') -> Optional[RuleSet]:
    """
    Read one ignore file, returning None if it is missing, empty or unreadable.
    """
    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            rules = RuleSet.from_lines(f.read().splitlines(), below=below, above=above, source=str(path))
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.debug(f"Skipping unreadable ignore file {path}: {e}")
        return None
    except ValueError as e:
        # pathspec rejects some malformed patterns outright
        logger.debug(f"Skipping invalid ignore file {path}: {e}")
        return None

    return rules if rules else None


def load_directory_rules(directory: Path, below: str = '', above: str = '') -> List[RuleSet]:
    """Load the per-directory ignore files of one directory, highest precedence first."""
    loaded = []
    for name in IGNORE_FILE_NAMES:
        rules = read_rule_set(directory / name, below=below, above=above)
        if rules is not None:
            loaded.append(rules)
    return loaded


def find_repository_root(start: Path) -> Optional[Path]:
    """Find the closest directory at or above ``start`` containing ``.git``."""
    for candidate in [start, *start.parents]:
        if (candidate / '.git').exists():
            return candidate
    return None


def _git_dir(repo_root: Path) -> Optional[Path]:
    dot_git = repo_root / '.git'
    if dot_git.is_dir():
        return dot_git

    # Worktrees and submodules use a ".git" file pointing at the real gitdir
    try:
        content = dot_git.read_text(encoding='utf-8').strip()
    except OSError:
        return None

    if not content.startswith('gitdir:'):
        return None

    git_dir = Path(content[len('gitdir:'):].strip())
    if not git_dir.is_absolute():
        git_dir = repo_root / git_dir
    return git_dir


def global_excludes_path() -> Path:
    """
    Locate the user's global git excludes file.

    Honors ``core.excludesFile`` from ``~/.gitconfig`` or
    ``$XDG_CONFIG_HOME/git/config`` and falls back to
    ``$XDG_CONFIG_HOME/git/ignore``.
    """
    home = Path.home()
    xdg_home = Path(os.getenv('XDG_CONFIG_HOME') or home / '.config')

    for gitconfig in (home / '.gitconfig', xdg_home / 'git' / 'config'):
        parser = configparser.ConfigParser(strict=False, interpolation=None, allow_no_value=True)
        try:
            parser.read(gitconfig, encoding='utf-8')
        except (configparser.Error, UnicodeDecodeError) as e:
            logger.debug(f"Cannot parse git config {gitconfig}: {e}")
            continue

        value = _git_config_value(parser.get('core', 'excludesfile', fallback=None) or '')
        if value:
            return Path(value).expanduser()

    return xdg_home / 'git' / 'ignore'


def _git_config_value(raw: str) -> str:
    """Unquote a git config value and drop any trailing ``;`` or ``#`` comment."""
    chars = []
    quoted = False
    for ch in raw:
        if ch == '"':
            quoted = not quoted
        elif ch in ';#' and not quoted:
            break
        else:
            chars.append(ch)
    return ''.join(chars).strip()


def _relative_prefix(base: Path, anchor_dir: Path) -> str:
    rel = base.relative_to(anchor_dir).as_posix()
    return '' if rel == '.' else f"{rel}/"


def build_root_rules(base: Path) -> IgnoreRules:
    """
    Build the ignore rules that apply at the walk base.

    Includes the base's own ignore files, those of its ancestors up to the
    enclosing repository root, the repository exclude file and the global
    excludes file. Outside a repository only the base's own files and the
    global excludes file apply.

    Args:
        base: Absolute directory the walk starts from

    Returns:
        IgnoreRules for the base directory
    """
    repo_root = find_repository_root(base)
    anchor_dir = repo_root if repo_root is not None else base
    above = _relative_prefix(base, anchor_dir)

    fallback = []
    if repo_root is not None:
        git_dir = _git_dir(repo_root)
        if git_dir is not None:
            exclude = read_rule_set(git_dir / 'info' / 'exclude', above=above)
            if exclude is not None:
                fallback.append(exclude)

    global_rules = read_rule_set(global_excludes_path(), above=above)
    if global_rules is not None:
        fallback.append(global_rules)

    rules = IgnoreRules(fallback=fallback)

    # Ancestors between the repository root and the base, outermost first
    if repo_root is not None and repo_root != base:
        for rel_parent in reversed(base.relative_to(repo_root).parents):
            directory = repo_root / rel_parent
            local = load_directory_rules(directory, above=_relative_prefix(base, directory))
            if local:
                rules = IgnoreRules(local, parent=rules)

    local = load_directory_rules(base)
    if local:
        rules = IgnoreRules(local, parent=rules)

    return rules
