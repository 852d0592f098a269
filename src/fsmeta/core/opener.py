"""Hand a URL to an external application."""

from __future__ import annotations

import logging
import shlex
import subprocess

import click

from fsmeta.core.exceptions import OpenError

logger = logging.getLogger(__name__)


def open_url(url: str, command: str = "") -> None:
    """
    Open *url* with *command* (URL appended as the last argument), or with
    the platform default handler when *command* is empty.
    """
    if command:
        argv = [*shlex.split(command), url]
        logger.info("Opening with %s", argv)
        try:
            subprocess.run(argv, check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise OpenError(f"Cannot open {url} with {argv[0]!r}: {exc}") from exc
        return

    logger.info("Opening %s with the default handler", url)
    rc = click.launch(url)
    if rc != 0:
        raise OpenError(f"Default handler failed to open {url} (exit {rc})")
