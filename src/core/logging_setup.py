"""
Logging configuration shared by the API server, the CLI and scripts.
"""

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Union[str, int] = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure root logging once.

    Args:
        level: Level name or number (e.g. "INFO", logging.DEBUG)
        log_file: Optional file to mirror console output into
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
