import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """Install a single stdout handler on the root logger; later calls only adjust the level."""
    logger = logging.getLogger()
    logger.setLevel(level)
    if logger.handlers:
        return
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s - %(message)s"
    ))
    logger.addHandler(h)
