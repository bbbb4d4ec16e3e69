# Copyright (c) 2026, The shard-rebalancer Developers.
# Distributed under the terms of the AGPLv3 license.
import logging
import typing as t

import click

from shard_rebalancer.util.common import setup_logging

logger = logging.getLogger(__name__)


def boot_click(ctx: click.Context, verbose: bool = False, debug: bool = False):
    """
    Bootstrap the CLI application.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    # Adjust log level according to `verbose` / `debug` flags.
    log_level = logging.INFO
    if debug:
        log_level = logging.DEBUG

    setup_logging(level=log_level, verbose=verbose)


def error_level_by_debug(debug: bool):
    if debug:
        return logger.exception
    else:
        return logger.error


def running_with_debug(ctx: click.Context) -> bool:
    return bool(ctx.find_root().params.get("debug", False))


def error_logger(about: t.Union[click.Context, bool]) -> t.Callable:
    if isinstance(about, click.Context):
        return error_level_by_debug(running_with_debug(about))
    if isinstance(about, bool):
        return error_level_by_debug(about)
    raise TypeError(f"Unknown type for argument: {about}")
