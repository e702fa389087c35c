"""
Exception hierarchy for pathfinder.

Every failure raised during setup derives from PathfinderError so the CLI
boundary can map it to an empty, successful run.
"""


class PathfinderError(Exception):
    """Base class for all pathfinder errors."""
    pass


class ConfigurationError(PathfinderError):
    """Raised when configuration parsing or validation fails."""
    pass


class RequestError(PathfinderError):
    """Raised when the incoming request cannot be read or decoded."""
    pass
