"""
Data models for pathfinder.

This module contains all the core data structures used throughout the system.
"""

from .config import PathfinderConfig, LoggingConfig, WalkerConfig
from .search_query import DepthMode, ParsedQuery, parse_query
from .search_request import SearchRequest
from .search_results import MAX_RESULTS, ScoredCandidate, SearchResults

__all__ = [
    'PathfinderConfig',
    'LoggingConfig',
    'WalkerConfig',
    'DepthMode',
    'ParsedQuery',
    'parse_query',
    'SearchRequest',
    'MAX_RESULTS',
    'ScoredCandidate',
    'SearchResults'
]
