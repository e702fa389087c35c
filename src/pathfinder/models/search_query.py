"""
Search query data models for pathfinder.

This module defines how a raw completion query is split into the fuzzy pattern,
the directory to search from, and the ``../`` prefix that must be put back in
front of every result.
"""

from enum import Enum
from pathlib import Path
from typing import Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


CURRENT_DIR_PREFIX = "./"
PARENT_DIR_PREFIX = "../"
PARENT_DIR = ".."


class DepthMode(Enum):
    """Traversal depth bounds, selected by whether the pattern is empty."""
    SHALLOW = 2
    DEEP = 6

    @property
    def max_depth(self) -> int:
        """Deepest relative level that is still emitted (root is depth 0)."""
        return self.value


class ParsedQuery(BaseModel):
    """
    A completion query split into its pattern and parent-directory chain.

    Instances are immutable and describe exactly one search run.

    Attributes:
        pattern: Fuzzy pattern to match against candidate paths
        search_base: Absolute directory the walk starts from
        output_prefix: ``../`` repeated once per consumed parent segment
        is_empty: Whether the pattern is empty (shallow listing mode)
    """

    model_config = ConfigDict(frozen=True)

    pattern: str = Field("", description="Fuzzy pattern to match")
    search_base: Path = Field(..., description="Directory to search from")
    output_prefix: str = Field("", description="Prefix prepended to every result")
    is_empty: bool = Field(True, description="Whether this is a shallow listing query")

    @model_validator(mode='after')
    def validate_query(self):
        """Validate the relationship between pattern, prefix and emptiness."""
        if self.pattern.startswith(PARENT_DIR_PREFIX) or self.pattern.startswith(CURRENT_DIR_PREFIX):
            raise ValueError(f"Pattern must not start with a relative prefix: {self.pattern!r}")

        if self.output_prefix != PARENT_DIR_PREFIX * self.parent_count:
            raise ValueError(f"Invalid output prefix: {self.output_prefix!r}")

        if self.is_empty != (len(self.pattern) == 0):
            raise ValueError("is_empty must reflect whether the pattern is empty")

        return self

    @property
    def parent_count(self) -> int:
        """Number of parent directories climbed from the working directory."""
        return len(self.output_prefix) // len(PARENT_DIR_PREFIX)

    @property
    def depth_mode(self) -> DepthMode:
        """Depth bound to walk with: shallow listing or deep search."""
        return DepthMode.SHALLOW if self.is_empty else DepthMode.DEEP

    def __str__(self) -> str:
        """String representation of the parsed query."""
        parts = [f"Pattern: '{self.pattern}'"]
        parts.append(f"Base: {self.search_base}")

        if self.output_prefix:
            parts.append(f"Prefix: '{self.output_prefix}'")

        parts.append(f"Mode: {self.depth_mode.name.lower()}")

        return " | ".join(parts)


def _strip_current_dir(text: str) -> str:
    if text.startswith(CURRENT_DIR_PREFIX):
        return text[len(CURRENT_DIR_PREFIX):]
    return text


def parse_query(raw_query: str, cwd: Union[str, Path]) -> ParsedQuery:
    """
    Parse a raw query and extract its leading ``../`` chain.

    Examples (cwd ``/home/user/project``):
        ``main.py``    -> pattern ``main.py``, no prefix, search ``/home/user/project``
        ``../foo``     -> pattern ``foo``, prefix ``../``, search ``/home/user``
        ``../../bar``  -> pattern ``bar``, prefix ``../../``, search ``/home``
        ``./src``      -> pattern ``src``, no prefix, search ``/home/user/project``
        ``..``         -> empty pattern, prefix ``../``, search ``/home/user``

    Climbing above the filesystem root is clamped: the root is its own parent.
    Interleaved ``./`` segments (``./.././x``) are dropped wherever they sit in
    the leading chain, so the pattern never starts with a relative prefix.

    Args:
        raw_query: Query text as typed by the user
        cwd: Working directory the query is relative to

    Returns:
        ParsedQuery describing the search to run
    """
    remaining = _strip_current_dir(raw_query.strip())

    parent_count = 0
    while remaining.startswith(PARENT_DIR_PREFIX) or remaining.startswith(CURRENT_DIR_PREFIX):
        if remaining.startswith(PARENT_DIR_PREFIX):
            parent_count += 1
            remaining = remaining[len(PARENT_DIR_PREFIX):]
        else:
            remaining = remaining[len(CURRENT_DIR_PREFIX):]

    # A bare trailing ".." climbs one more level
    if remaining == PARENT_DIR:
        parent_count += 1
        remaining = ""

    pattern = _strip_current_dir(remaining)

    search_base = Path(cwd)
    for _ in range(parent_count):
        search_base = search_base.parent

    return ParsedQuery(
        pattern=pattern,
        search_base=search_base,
        output_prefix=PARENT_DIR_PREFIX * parent_count,
        is_empty=len(pattern) == 0
    )
