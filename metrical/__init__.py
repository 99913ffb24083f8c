"""
Metrical - Construction Material Quantity Engine
Derives concrete, masonry, plaster, waterproofing and reinforcement
quantities from plain form-state data.

Results are estimates only and carry no structural guarantee.
"""

import logging
from pathlib import Path

__version__ = "1.0.0"
__author__ = "Metrical"

# Package paths
PACKAGE_ROOT = Path(__file__).parent
RULES_DIR = PACKAGE_ROOT / "rules"

_HANDLER_NAME = "metrical-console"


def setup_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Host applications that configure logging themselves do not need this.
    Calling it again only changes the level.
    """
    logger = logging.getLogger(__name__)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
        logger.addHandler(handler)
    return logger
