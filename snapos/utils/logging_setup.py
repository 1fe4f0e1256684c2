import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = "snapos.log"


def setup_logging(log_dir: str, level: int = logging.INFO, name: Optional[str] = "SnaPOS") -> logging.Logger:
    """
    Setup logging to a file in the given directory.

    Args:
        log_dir: Directory for snapos.log, created if missing
        level: Root log level
        name: Name of the logger to return

    Returns:
        The application logger
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    handlers = [logging.FileHandler(log_path / LOG_FILE_NAME)]

    # Only add stdout handler if not running as a frozen app (to avoid console issues)
    if not getattr(sys, 'frozen', False):
        handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers
    )

    return logging.getLogger(name)
