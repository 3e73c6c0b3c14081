# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging utilities for smtp-send.

Modules obtain their logger through ``get_logger``. Handlers, level and
format are configured once by the entry point (see ``smtp_send.cli``) via
``logging.basicConfig()`` to avoid duplicate handlers.

Example:
    Typical usage in a module::

        from smtp_send.logger import get_logger

        logger = get_logger("dispatcher")
        logger.debug("Connecting to %s:%s", host, port)
"""

import logging

LOGGER_PREFIX = "smtp_send"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child of it when ``name`` is given.

    Args:
        name: Child logger name, e.g. ``"dispatcher"``.

    Returns:
        A ``logging.Logger`` named ``smtp_send`` or ``smtp_send.<name>``.
    """
    if not name:
        return logging.getLogger(LOGGER_PREFIX)
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
