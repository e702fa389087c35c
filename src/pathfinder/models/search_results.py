"""
Search results data models for pathfinder.

This module defines the scored candidates produced by the fuzzy ranker and the
final result set written back to the caller.
"""

from dataclasses import dataclass
from typing import Iterator, List
from pydantic import BaseModel, Field, field_validator


MAX_RESULTS = 50


@dataclass(frozen=True)
class ScoredCandidate:
    """
    A candidate path together with its fuzzy match score.

    Only produced when the pattern is non-empty; candidates that cannot be
    aligned with the pattern at all never get one.

    Attributes:
        path: Candidate path relative to the search base
        score: Match score, higher is more relevant
    """
    path: str
    score: int

    def __post_init__(self):
        if self.score < 0:
            raise ValueError(f"Score must be non-negative, got {self.score}")


class SearchResults(BaseModel):
    """
    Ranked paths ready to be emitted.

    Attributes:
        prefix: ``../`` chain prepended to every path
        paths: Ranked candidate paths relative to the search base
    """

    prefix: str = Field("", description="Prefix prepended to each path")
    paths: List[str] = Field(default_factory=list, description="Ranked relative paths")

    @field_validator('paths')
    @classmethod
    def validate_paths(cls, v: List[str]) -> List[str]:
        """Ensure the result count never exceeds the fixed cap."""
        if len(v) > MAX_RESULTS:
            raise ValueError(f"At most {MAX_RESULTS} results allowed, got {len(v)}")
        return v

    def lines(self) -> Iterator[str]:
        """Yield each result with the prefix reattached."""
        for path in self.paths:
            yield f"{self.prefix}{path}"

    def render(self) -> str:
        """Render the results as newline-terminated lines."""
        return "".join(f"{line}\n" for line in self.lines())

    def is_empty(self) -> bool:
        """Check if no paths were found."""
        return not self.paths

    def __len__(self) -> int:
        return len(self.paths)
