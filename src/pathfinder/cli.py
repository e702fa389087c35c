"""
Command-line entry point for pathfinder.

Reads one JSON request from stdin and writes the ranked paths to stdout, one
per line. Every failure, whatever its cause, ends the run with no output and
exit status 0: callers only ever see results or silence. A broken
configuration is not a failure; the defaults stand in for it.
"""

import logging
import sys
from typing import BinaryIO, List, Optional

from .config.parser import load_config, setup_logging
from .errors import ConfigurationError
from .models.config import PathfinderConfig
from .models.search_request import SearchRequest
from .pipeline import SearchPipeline


logger = logging.getLogger(__name__)


def configure() -> PathfinderConfig:
    """
    Load the configuration and set up logging from it.

    An unreadable or invalid configuration file falls back to the defaults,
    and a log file that cannot be opened falls back to discarding records.

    Returns:
        The configuration the run should use
    """
    problems: List[str] = []

    try:
        config = load_config().config
    except ConfigurationError as e:
        problems.append(str(e))
        config = PathfinderConfig()

    try:
        setup_logging(config)
    except ConfigurationError as e:
        problems.append(str(e))
        config = config.model_copy(update={'logging': PathfinderConfig().logging})
        setup_logging(config)

    for problem in problems:
        logger.debug(f"Using defaults after configuration error: {problem}")

    return config


def run(stdin: BinaryIO, stdout: BinaryIO) -> None:
    """
    Run one request end to end.

    Raises:
        PathfinderError: If the request is invalid
        OSError: If stdin cannot be read or stdout cannot be written
    """
    config = configure()

    request = SearchRequest.from_bytes(stdin.read())
    results = SearchPipeline(config).run(request)
    if results is None or results.is_empty():
        return

    stdout.write(results.render().encode('utf-8'))
    stdout.flush()


def main(stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None) -> int:
    """
    Process entry point.

    Args:
        stdin: Byte stream to read the request from (defaults to sys.stdin)
        stdout: Byte stream to write results to (defaults to sys.stdout)

    Returns:
        Exit status, always 0
    """
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer

    try:
        run(stdin, stdout)
    except Exception as e:
        # Failures are reported as "no results", never as an error status
        logger.debug(f"Search aborted: {e}", exc_info=True)

    return 0
