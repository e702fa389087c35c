"""
Search tools and utilities for pathfinder.

This module contains the directory walker, the hierarchical ignore rules it
applies, and the fuzzy matcher that ranks what it finds.
"""
