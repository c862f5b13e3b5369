import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Route the package's log records to stderr through rich.
    Only the CLI calls this; the library itself never installs handlers.
    """
    logger = logging.getLogger("cxxdemangle")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Re-running main() in one process must not stack handlers
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
