import logging
import sys


def setup_logging(level="INFO"):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    # urllib3 logs every catalog request at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
