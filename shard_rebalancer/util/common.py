# Copyright (c) 2026, The shard-rebalancer Developers.
# Distributed under the terms of the AGPLv3 license.
import logging

import colorlog
from colorlog.escape_codes import escape_codes


def setup_logging(level=logging.INFO, verbose: bool = False, width: int = 36):
    reset = escape_codes["reset"]
    log_format = f"%(asctime)-15s [%(name)-{width}s] %(log_color)s%(levelname)-8s:{reset} %(message)s"

    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(log_format))

    logging.basicConfig(format=log_format, level=level, handlers=[handler])

    # Per-request chatter is only interesting when debugging.
    logging.getLogger("urllib3.connectionpool").setLevel(level if level <= logging.DEBUG else logging.WARNING)

    if verbose:
        logging.getLogger("shard_rebalancer").setLevel(logging.DEBUG)
