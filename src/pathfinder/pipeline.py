"""
Search pipeline for pathfinder.

Parses the query, walks the search base and ranks the candidates. The result
carries the ``../`` prefix that turns each ranked path back into something
relative to the caller's working directory.
"""

import logging
from typing import Optional

from .models.config import PathfinderConfig
from .models.search_query import ParsedQuery, parse_query
from .models.search_request import SearchRequest
from .models.search_results import MAX_RESULTS, SearchResults
from .tools.fs_walker import FSWalker
from .tools.fuzzy_matcher import FuzzyMatcher


logger = logging.getLogger(__name__)


class SearchPipeline:
    """
    Runs one completion query from request to ranked results.

    Attributes:
        config: Active configuration
        walker: Directory walker used for candidate discovery
        matcher: Fuzzy matcher used for ranking
    """

    def __init__(self, config: Optional[PathfinderConfig] = None,
                 walker: Optional[FSWalker] = None,
                 matcher: Optional[FuzzyMatcher] = None):
        self.config = config or PathfinderConfig()
        self.walker = walker or FSWalker(threads=self.config.walker.get_threads())
        self.matcher = matcher or FuzzyMatcher()

    def run(self, request: SearchRequest) -> Optional[SearchResults]:
        """
        Execute the request.

        Args:
            request: Decoded completion request

        Returns:
            SearchResults, or None when the resolved search base does not exist
        """
        parsed = parse_query(request.get_query(), request.get_cwd())
        logger.info(f"Parsed query: {parsed}")
        return self.search(parsed)

    def search(self, parsed: ParsedQuery) -> Optional[SearchResults]:
        """Walk and rank for an already parsed query."""
        if not parsed.search_base.exists():
            logger.info(f"Search base does not exist: {parsed.search_base}")
            return None

        self.walker.reset_stats()
        candidates = self.walker.walk(parsed.search_base, parsed.depth_mode)
        logger.debug(f"Walker stats: {self.walker.get_stats()}")
        ranked = self.matcher.match_paths(candidates, parsed.pattern, MAX_RESULTS)
        logger.info(f"Returning {len(ranked)} of {len(candidates)} candidates")

        return SearchResults(prefix=parsed.output_prefix, paths=ranked)


def run_search(request: SearchRequest, config: Optional[PathfinderConfig] = None) -> Optional[SearchResults]:
    """
    Convenience function to run a single request.

    Args:
        request: Decoded completion request
        config: Configuration (optional, defaults apply otherwise)

    Returns:
        SearchResults, or None when the resolved search base does not exist
    """
    return SearchPipeline(config).run(request)
