"""
Fuzzy path matching and ranking for pathfinder.

A pattern matches a path when its characters appear in the path in order,
not necessarily next to each other. Every possible alignment is scored and
the best one wins: matched characters earn points, characters at word or
path-segment boundaries earn bonuses, runs of consecutive matches keep the
bonus of their first character, and skipped characters cost a gap penalty.

Comparison uses smart case (an uppercase character in the pattern makes the
match case-sensitive) and smart normalization (accented characters in a path
match their plain counterparts unless the pattern itself is accented).
"""

import unicodedata
from enum import IntEnum
from functools import lru_cache
from itertools import islice
from typing import Callable, Iterable, List, Optional, Protocol
import logging

from ..models.search_results import ScoredCandidate


logger = logging.getLogger(__name__)

SCORE_MATCH = 16
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1

BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_BOUNDARY_WHITE = BONUS_BOUNDARY + 2
BONUS_BOUNDARY_DELIMITER = BONUS_BOUNDARY + 1
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_CAMEL123 = BONUS_BOUNDARY - PENALTY_GAP_EXTENSION
BONUS_CONSECUTIVE = PENALTY_GAP_START + PENALTY_GAP_EXTENSION
BONUS_FIRST_CHAR_MULTIPLIER = 2
BONUS_EXACT_MATCH = SCORE_MATCH

# Alignment scores are scaled so that path length only breaks ties
LENGTH_SCALE = 256

PATH_DELIMITERS = frozenset('/')


class CharClass(IntEnum):
    """Character classes used to detect word and segment boundaries."""
    WHITE = 0
    NON_WORD = 1
    DELIMITER = 2
    LOWER = 3
    UPPER = 4
    LETTER = 5
    NUMBER = 6


@lru_cache(maxsize=4096)
def char_class(c: str) -> CharClass:
    """Classify a single character."""
    if c.isspace():
        return CharClass.WHITE
    if c in PATH_DELIMITERS:
        return CharClass.DELIMITER
    if c.islower():
        return CharClass.LOWER
    if c.isupper():
        return CharClass.UPPER
    if c.isdigit():
        return CharClass.NUMBER
    if c.isalpha():
        return CharClass.LETTER
    return CharClass.NON_WORD


def bonus_for(prev: CharClass, cur: CharClass) -> int:
    """Bonus for matching a character of class ``cur`` that follows ``prev``."""
    if cur > CharClass.DELIMITER:
        if prev == CharClass.WHITE:
            return BONUS_BOUNDARY_WHITE
        if prev == CharClass.DELIMITER:
            return BONUS_BOUNDARY_DELIMITER
        if prev == CharClass.NON_WORD:
            return BONUS_BOUNDARY

    if (prev == CharClass.LOWER and cur == CharClass.UPPER) or \
            (prev != CharClass.NUMBER and cur == CharClass.NUMBER):
        return BONUS_CAMEL123

    if cur == CharClass.WHITE:
        return BONUS_BOUNDARY_WHITE

    if cur in (CharClass.NON_WORD, CharClass.DELIMITER):
        return BONUS_NON_WORD

    return 0


@lru_cache(maxsize=4096)
def normalize_char(c: str) -> str:
    """
    Fold a character to its unaccented base form.

    Characters whose decomposition is not a single base character are kept
    as-is, so alignment positions always correspond one-to-one.
    """
    if c.isascii():
        return c
    decomposed = unicodedata.normalize('NFKD', c)
    base = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base if len(base) == 1 else c


def _lower_char(c: str) -> str:
    lowered = c.lower()
    return lowered if len(lowered) == 1 else c


class Scorer(Protocol):
    """Scores one haystack against a pattern compiled ahead of time."""

    def score(self, haystack: str) -> Optional[int]:
        """Return a non-negative score, or None if the haystack cannot match."""
        ...


class CompiledPattern:
    """
    A pattern prepared once for scoring many haystacks.

    Attributes:
        text: The original pattern
        case_sensitive: True when the pattern contains an uppercase character
        normalize: True when haystack characters are folded to their base form
        needle: Pattern characters after case and normalization folding
    """

    def __init__(self, text: str):
        self.text = text
        self.case_sensitive = any(c.isupper() for c in text)
        self.normalize = all(normalize_char(c) == c for c in text)
        self.needle = [self.fold(c) for c in text]

    def fold(self, c: str) -> str:
        """Fold one character the way haystack characters are compared."""
        if self.normalize:
            c = normalize_char(c)
        if not self.case_sensitive:
            c = _lower_char(c)
        return c

    def __len__(self) -> int:
        return len(self.needle)


class FuzzyScorer:
    """
    Optimal-alignment fuzzy scorer in the style of fzf's v2 algorithm.

    The score of a haystack is the best alignment score, scaled by
    LENGTH_SCALE, plus a small tie-breaker that favours shorter haystacks.
    A haystack equal to the pattern (after folding) gets an extra bonus, so
    it always outranks every other haystack for the same pattern.
    """

    def __init__(self, pattern: str):
        self.pattern = CompiledPattern(pattern)

    def score(self, haystack: str) -> Optional[int]:
        needle = self.pattern.needle
        if not needle or len(needle) > len(haystack):
            return None

        folded = [self.pattern.fold(c) for c in haystack]

        window = self._match_window(folded, needle)
        if window is None:
            return None
        first, last = window

        alignment = self._align(haystack, folded, needle, first, last)
        if alignment is None:
            return None

        alignment = max(alignment, 0)
        if folded == needle:
            alignment += BONUS_EXACT_MATCH

        excess = min(len(haystack) - len(needle), LENGTH_SCALE - 1)
        return alignment * LENGTH_SCALE + (LENGTH_SCALE - 1 - excess)

    @staticmethod
    def _match_window(folded: List[str], needle: List[str]) -> Optional[tuple]:
        """
        Find the span any alignment must lie in, or None if there is none.

        The span starts at the earliest possible match of the first pattern
        character and ends at the last occurrence of the final one.
        """
        idx = 0
        first = -1
        for j, c in enumerate(folded):
            if c == needle[idx]:
                if idx == 0:
                    first = j
                idx += 1
                if idx == len(needle):
                    break
        if idx < len(needle):
            return None

        last = len(folded) - 1
        while folded[last] != needle[-1]:
            last -= 1
        return first, last

    @staticmethod
    def _align(haystack: str, folded: List[str], needle: List[str], first: int, last: int) -> Optional[int]:
        """
        Score the best alignment of needle within folded[first:last + 1].

        Each row of the table holds, per haystack position, the best score
        with the current pattern character matched exactly there, along with
        the length and starting bonus of the consecutive run it ends.
        """
        width = last - first + 1
        prev_class = char_class(haystack[first - 1]) if first > 0 else CharClass.WHITE
        bonuses = []
        for j in range(first, last + 1):
            cur_class = char_class(haystack[j])
            bonuses.append(bonus_for(prev_class, cur_class))
            prev_class = cur_class

        prev_scores: List[Optional[int]] = []
        prev_runs: List[Optional[tuple]] = []
        for i, nc in enumerate(needle):
            scores: List[Optional[int]] = [None] * width
            runs: List[Optional[tuple]] = [None] * width
            gap_best = None

            for j in range(width):
                if i > 0:
                    if gap_best is not None:
                        gap_best -= PENALTY_GAP_EXTENSION
                    if j >= 2 and prev_scores[j - 2] is not None:
                        opened = prev_scores[j - 2] - PENALTY_GAP_START
                        if gap_best is None or opened > gap_best:
                            gap_best = opened

                if folded[first + j] != nc:
                    continue

                bonus = bonuses[j]
                if i == 0:
                    scores[j] = SCORE_MATCH + bonus * BONUS_FIRST_CHAR_MULTIPLIER
                    runs[j] = (1, bonus)
                    continue

                best = None
                best_run = None
                if gap_best is not None:
                    best = gap_best + SCORE_MATCH + bonus
                    best_run = (1, bonus)

                if j >= 1 and prev_scores[j - 1] is not None:
                    run_length, run_bonus = prev_runs[j - 1]
                    if bonus >= BONUS_BOUNDARY and bonus > run_bonus:
                        # A stronger boundary starts a new run
                        step_bonus, run = bonus, (1, bonus)
                    else:
                        step_bonus = max(bonus, run_bonus, BONUS_CONSECUTIVE)
                        run = (run_length + 1, run_bonus)
                    consecutive = prev_scores[j - 1] + SCORE_MATCH + step_bonus
                    if best is None or consecutive >= best:
                        best, best_run = consecutive, run

                scores[j] = best
                runs[j] = best_run

            prev_scores, prev_runs = scores, runs

        final = [s for s in prev_scores if s is not None]
        return max(final) if final else None


class FuzzyMatcher:
    """
    Ranks candidate paths against a pattern.

    The scoring heuristic is supplied by ``scorer_factory``, which is called
    once per pattern and must return an object implementing Scorer.
    """

    def __init__(self, scorer_factory: Callable[[str], Scorer] = FuzzyScorer):
        self.scorer_factory = scorer_factory

    def score_paths(self, paths: Iterable[str], pattern: str) -> List[ScoredCandidate]:
        """
        Score every path, dropping those that cannot match at all.

        Args:
            paths: Candidate paths
            pattern: Non-empty fuzzy pattern

        Returns:
            Scored candidates in input order
        """
        scorer = self.scorer_factory(pattern)
        scored = []
        for path in paths:
            score = scorer.score(path)
            if score is not None:
                scored.append(ScoredCandidate(path=path, score=score))
        return scored

    def match_paths(self, paths: Iterable[str], pattern: str, limit: int) -> List[str]:
        """
        Match paths against a pattern and return the best ``limit`` of them.

        With an empty pattern the first ``limit`` paths are returned in input
        order without scoring. Otherwise paths are ordered by descending score;
        equal scores keep their input order.

        Args:
            paths: Candidate paths
            pattern: Fuzzy pattern, possibly empty
            limit: Maximum number of paths to return

        Returns:
            At most ``limit`` paths, best first
        """
        limit = max(limit, 0)
        if not pattern:
            return list(islice(paths, limit))

        scored = self.score_paths(paths, pattern)
        ranked = sorted(scored, key=lambda candidate: candidate.score, reverse=True)
        logger.debug(f"Pattern '{pattern}' matched {len(scored)} paths")

        return [candidate.path for candidate in ranked[:limit]]


def match_paths(paths: Iterable[str], pattern: str, limit: int) -> List[str]:
    """
    Convenience function to rank paths with the default scorer.

    Args:
        paths: Candidate paths
        pattern: Fuzzy pattern, possibly empty
        limit: Maximum number of paths to return

    Returns:
        At most ``limit`` paths, best first
    """
    return FuzzyMatcher().match_paths(paths, pattern, limit)
