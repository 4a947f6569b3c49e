"""
Process-wide logging for the CSI controller launcher.

Every record goes to stdout, and optionally to a file, with the component
tag in the prefix so controller and gateway client lines can be told apart
in a shared node log.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_level(name: str, default: int = logging.INFO) -> int:
    """Map a level name such as 'debug' to its logging constant."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(component_name: str, level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Install root handlers for one component and return its logger.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.
    """
    fmt = logging.Formatter(
        f"[%(asctime)s] [{component_name.upper()}] %(levelname)s %(name)s - %(message)s",
        datefmt=DATE_FORMAT,
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(fmt)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # urllib3 logs every gateway connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    logger = logging.getLogger(component_name)
    logger.info(f"logging ready for {component_name} (level={logging.getLevelName(level)}, file={log_file or '-'})")
    return logger
