# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for SMTP credentials and delivery settings.

Settings are read from an INI-style configuration file with environment
variables as fallbacks. Priority: config file > environment > defaults.

Example:
    Configuration file format (config.ini)::

        [smtp]
        host = smtp.example.com
        port = 465
        secure = true
        user = mailer@example.com
        password = secret

        [delivery]
        timeout_seconds = 30
        allow_unauthorized_certs = false

        [logging]
        level = DEBUG

Environment variables (all prefixed with SMTP_SEND_):
    SMTP_SEND_CONFIG - Path to the config file (default: config.ini)
    SMTP_SEND_HOST, SMTP_SEND_PORT, SMTP_SEND_SECURE,
    SMTP_SEND_USER, SMTP_SEND_PASSWORD - SMTP credentials
    SMTP_SEND_TIMEOUT_SECONDS - Socket timeout for the SMTP session
    SMTP_SEND_ALLOW_UNAUTHORIZED_CERTS - Skip TLS certificate validation
    SMTP_SEND_LOG_LEVEL - Logging level (default: INFO)
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from .errors import ConfigurationError
from .logger import get_logger
from .models import ConnectionCredentials

ENV_PREFIX = "SMTP_SEND_"
DEFAULT_CONFIG_PATH = "config.ini"
CREDENTIAL_FIELDS = ("host", "port", "secure", "user", "password")

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}

logger = get_logger("config_loader")


@dataclass
class DeliverySettings:
    """Ambient settings for a send.

    Attributes:
        timeout_seconds: Socket timeout for the SMTP session, ``None`` for
            the transport default.
        allow_unauthorized_certs: Default for the certificate policy option.
        log_level: Logging level name.
    """

    timeout_seconds: float | None = None
    allow_unauthorized_certs: bool = False
    log_level: str = "INFO"


def parse_bool(value: str | None, default: bool | None = None) -> bool | None:
    """Interpret common truthy/falsy strings, ``default`` otherwise."""
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    return default


def resolve_config_path(config_path: str | None = None) -> Path:
    return Path(config_path or os.environ.get(f"{ENV_PREFIX}CONFIG", DEFAULT_CONFIG_PATH))


def _read_parser(config_path: str | None) -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    path = resolve_config_path(config_path)
    if path.exists():
        parser.read(path)
    return parser


def _lookup(parser: configparser.ConfigParser, section: str, option: str, env_name: str) -> str | None:
    if parser.has_option(section, option):
        return parser.get(section, option)
    return os.environ.get(f"{ENV_PREFIX}{env_name}")


def load_settings(config_path: str | None = None) -> DeliverySettings:
    """Load delivery and logging settings.

    Invalid numeric values fall back to the default with a warning.
    """
    parser = _read_parser(config_path)
    settings = DeliverySettings()

    timeout = _lookup(parser, "delivery", "timeout_seconds", "TIMEOUT_SECONDS")
    if timeout:
        try:
            settings.timeout_seconds = float(timeout)
        except ValueError:
            logger.warning("Invalid value for timeout_seconds (%r), using default", timeout)

    allow = _lookup(parser, "delivery", "allow_unauthorized_certs", "ALLOW_UNAUTHORIZED_CERTS")
    settings.allow_unauthorized_certs = bool(parse_bool(allow, default=False))

    level = _lookup(parser, "logging", "level", "LOG_LEVEL")
    if level:
        settings.log_level = level.strip().upper()
    return settings


def load_credentials(config_path: str | None = None) -> ConnectionCredentials | None:
    """Load SMTP credentials from the ``[smtp]`` section or the environment.

    Returns:
        The credentials, or ``None`` when no SMTP host is configured at all.

    Raises:
        ConfigurationError: If a host is configured but other fields are
            missing or invalid.
    """
    parser = _read_parser(config_path)
    values = {
        field: _lookup(parser, "smtp", field, field.upper())
        for field in CREDENTIAL_FIELDS
    }
    if not values["host"]:
        return None

    missing = [field for field, value in values.items() if value is None]
    if missing:
        raise ConfigurationError(
            f"Incomplete SMTP credentials, missing: {', '.join(missing)}",
            code="incomplete_credentials",
        )

    secure = parse_bool(values["secure"])
    if secure is None:
        raise ConfigurationError(
            f"Invalid value for secure: {values['secure']!r}", code="invalid_credentials"
        )

    try:
        return ConnectionCredentials(
            host=values["host"].strip(),
            port=values["port"].strip(),
            secure=secure,
            user=values["user"],
            password=values["password"],
        )
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid SMTP credentials: {exc}", code="invalid_credentials"
        ) from exc
