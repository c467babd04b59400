"""Logging setup for the command line, on top of loguru."""

import click
from loguru import logger

CONSOLE_FORMAT = "{level: <8} | {name} - {message}"


def _echo_sink(message) -> None:
    # resolve stderr per record so click's test runner captures it
    click.echo(message, err=True, nl=False)


def configure_logging(verbose: bool = False) -> None:
    """Replace loguru's default sink with a stderr sink at INFO or DEBUG."""
    logger.remove()
    logger.add(_echo_sink, format=CONSOLE_FORMAT, level="DEBUG" if verbose else "INFO")
