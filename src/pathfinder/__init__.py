"""
pathfinder - Core Package

A one-shot fuzzy path-completion backend: given a query such as ``../src/ma``
and a working directory, it walks the relevant directory tree and returns the
best matching paths, prefixed so they stay relative to the caller.
"""

__version__ = "0.1.0"
__author__ = "pathfinder Team"
