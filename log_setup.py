"""Logging setup and the SUCCESS level used to report completed operations."""
import logging
import sys
from typing import Optional

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def log_success(logger: logging.Logger, message: str, *args) -> None:
    """Log at the SUCCESS level (between INFO and WARNING)."""
    logger.log(SUCCESS, message, *args)


def setup_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers, force=True)
    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
