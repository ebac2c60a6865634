"""
Logging utilities for release-db
"""

import logging


def setup_logging(debug_mode: bool = False) -> logging.Logger:
    """Setup logging configuration"""
    level = logging.DEBUG if debug_mode else logging.INFO

    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    return logging.getLogger("release_db")
