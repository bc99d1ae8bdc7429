import logging
import sys
from typing import Optional

_logger = logging.getLogger("academic_records")
if not _logger.handlers:
    _logger.setLevel(logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    _logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if name:
        # Module paths come in as "academic_records.x.y" or "src.academic_records.academic_records.x.y".
        short = name.split("academic_records.")[-1]
        return _logger.getChild(short)
    return _logger


def set_level(level: str) -> None:
    _logger.setLevel(str(level).upper())
