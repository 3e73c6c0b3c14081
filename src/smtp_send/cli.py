# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for smtp-send.

Sends one email using the SMTP credentials found in the config file or the
environment, and prints the delivery result as JSON.

Usage:
    smtp-send --from admin@example.com --to info@example.com \\
        --subject "Report" --text "See attachment" \\
        --attach report=./report.pdf --attach logo=./logo.png

    smtp-send --config /etc/smtp-send.ini --from a@x.com --to b@x.com \\
        --html "<p>Hello</p>" --allow-unauthorized-certs

Exit codes: 0 on success, 1 for configuration or input errors, 2 when the
SMTP server could not be reached or refused the message.
"""

from __future__ import annotations

import asyncio
import base64
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .config_loader import load_credentials, load_settings
from .errors import ConfigurationError, DeliveryError
from .logger import configure_logging
from .models import BinaryRecord, EmailRequest
from .node import send_email

console = Console()
err_console = Console(stderr=True)

EXIT_CONFIGURATION = 1
EXIT_DELIVERY = 2


def run_async(coro):
    """Execute an async coroutine synchronously from CLI context."""
    return asyncio.run(coro)


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_json(data: Any) -> None:
    """Print data as syntax-highlighted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def read_binary_record(path: Path) -> BinaryRecord:
    """Load a file from disk as a base64 binary record."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return BinaryRecord(
        file_name=path.name,
        mime_type=mime_type,
        data=base64.b64encode(path.read_bytes()).decode("ascii"),
    )


def parse_attach_option(value: str) -> tuple[str, Path]:
    """Split a ``NAME=PATH`` option; a bare path is named after its stem."""
    name, sep, path = value.partition("=")
    if not sep:
        path_obj = Path(value)
        return path_obj.stem, path_obj
    name = name.strip()
    if not name:
        raise click.BadParameter(f"missing name in {value!r}", param_hint="--attach")
    return name, Path(path)


@click.command()
@click.version_option(package_name="smtp-send")
@click.option("--from", "from_email", required=True, help="Sender address, optionally with name.")
@click.option("--to", "to_email", required=True, help="Recipient address(es).")
@click.option("--cc", default="", help="CC recipient address(es).")
@click.option("--subject", "-s", default="", help="Subject line.")
@click.option("--text", "-t", default="", help="Plain text body.")
@click.option("--html", default="", help="HTML body.")
@click.option("--attach", "-a", "attach", multiple=True,
              help="Binary property as NAME=PATH (repeatable).")
@click.option("--attachments", "attachment_names", default=None,
              help="Comma-separated property names to attach (default: all --attach names).")
@click.option("--allow-unauthorized-certs", is_flag=True,
              help="Connect even if the TLS certificate cannot be validated.")
@click.option("--config", "-c", "config_path", default=None,
              type=click.Path(dir_okay=False), help="Path to config.ini.")
def main(
    from_email: str,
    to_email: str,
    cc: str,
    subject: str,
    text: str,
    html: str,
    attach: tuple[str, ...],
    attachment_names: str | None,
    allow_unauthorized_certs: bool,
    config_path: str | None,
) -> None:
    """Send a single email over SMTP."""
    settings = load_settings(config_path)
    configure_logging(settings.log_level)

    binary_data: dict[str, BinaryRecord] = {}
    for value in attach:
        name, path = parse_attach_option(value)
        if not path.is_file():
            print_error(f"Attachment not found: {path}")
            sys.exit(EXIT_CONFIGURATION)
        binary_data[name] = read_binary_record(path)

    if attachment_names is None:
        attachment_names = ",".join(binary_data)
    allow_unauthorized_certs = allow_unauthorized_certs or settings.allow_unauthorized_certs

    try:
        request = EmailRequest(
            from_email=from_email,
            to_email=to_email,
            cc=cc,
            subject=subject,
            text=text,
            html=html,
            attachment_names=attachment_names,
            binary_data=binary_data or None,
            allow_unauthorized_certs=allow_unauthorized_certs,
        )
    except ValidationError as exc:
        print_error(str(exc))
        sys.exit(EXIT_CONFIGURATION)

    try:
        credentials = load_credentials(config_path)
        result = run_async(send_email(request, credentials, timeout=settings.timeout_seconds))
    except ConfigurationError as exc:
        print_error(str(exc))
        sys.exit(EXIT_CONFIGURATION)
    except DeliveryError as exc:
        print_error(str(exc))
        sys.exit(EXIT_DELIVERY)

    print_json(result.model_dump(by_alias=True))


if __name__ == "__main__":
    main()
