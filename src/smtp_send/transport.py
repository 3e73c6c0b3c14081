# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP transport built on aiosmtplib.

A transport is one SMTP session: opened by ``connect()``, used for a single
``send()`` and then closed. Connection handshake, AUTH negotiation and
protocol framing are left to aiosmtplib.

TLS behavior follows the ``secure`` flag of the connection options:
- ``secure=True``: implicit TLS from the first byte (typically port 465)
- ``secure=False``: plain connection upgraded with STARTTLS when the
  server advertises it (typically ports 25 and 587)

Example:
    Sending one message::

        transport = await connect(options)
        try:
            result = await transport.send(message)
        finally:
            await transport.close()
"""

from __future__ import annotations

import mimetypes
import ssl
from email.message import EmailMessage
from email.utils import getaddresses, make_msgid, parseaddr
from typing import Any, Protocol

import aiosmtplib

from .logger import get_logger
from .models import (
    AssembledMessage,
    ConnectionOptions,
    DeliveryResult,
    Envelope,
    TlsOptions,
)

logger = get_logger("transport")


class Transport(Protocol):
    """An open SMTP session able to send one message."""

    async def send(self, message: AssembledMessage) -> DeliveryResult: ...

    async def close(self) -> None: ...


def build_tls_context(tls: TlsOptions | None) -> ssl.SSLContext | None:
    """Return a TLS context for the connection, or ``None`` for the defaults.

    With ``reject_unauthorized=False`` the context skips hostname and
    certificate chain verification. This is an opt-in insecure mode that
    only affects the connection it is passed to.
    """
    if tls is None or tls.reject_unauthorized:
        return None
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def guess_mime(filename: str) -> tuple[str, str]:
    """Determine the MIME type for a filename based on its extension."""
    mt, _ = mimetypes.guess_type(filename)
    if not mt:
        return ("application", "octet-stream")
    return tuple(mt.split("/", 1))  # type: ignore[return-value]


def render_email(message: AssembledMessage) -> EmailMessage:
    """Render an assembled message as a MIME ``EmailMessage``.

    Plain text and HTML become a multipart/alternative body when both are
    present. Cc is only emitted when non-empty.
    """
    msg = EmailMessage()
    msg["From"] = message.from_email
    msg["To"] = message.to_email
    if message.cc:
        msg["Cc"] = message.cc
    msg["Subject"] = message.subject
    msg["Message-ID"] = make_msgid(domain=_sender_domain(message.from_email))

    if message.text and message.html:
        msg.set_content(message.text)
        msg.add_alternative(message.html, subtype="html")
    elif message.html:
        msg.set_content(message.html, subtype="html")
    else:
        msg.set_content(message.text)

    for attachment in message.attachments or []:
        if attachment.content_type and "/" in attachment.content_type:
            maintype, subtype = attachment.content_type.split("/", 1)
        else:
            maintype, subtype = guess_mime(attachment.filename)
        msg.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype,
            filename=attachment.filename,
        )
    return msg


def envelope_for(message: AssembledMessage) -> Envelope:
    """Compute the SMTP envelope (MAIL FROM / RCPT TO) of a message."""
    sender = parseaddr(message.from_email)[1] or message.from_email
    recipients = [
        address
        for _name, address in getaddresses([message.to_email, message.cc])
        if address
    ]
    return Envelope(from_address=sender, to=recipients)


def _sender_domain(from_email: str) -> str | None:
    address = parseaddr(from_email)[1]
    if "@" not in address:
        return None
    return address.rsplit("@", 1)[1] or None


class SmtpTransport:
    """One aiosmtplib session wrapped behind the ``Transport`` interface."""

    def __init__(self, smtp: aiosmtplib.SMTP):
        self.smtp = smtp

    async def send(self, message: AssembledMessage) -> DeliveryResult:
        """Send ``message`` and report accepted and refused recipients.

        Raises:
            aiosmtplib.SMTPException: If the server refuses the sender, all
                recipients or the message data.
        """
        msg = render_email(message)
        envelope = envelope_for(message)
        errors, response = await self.smtp.send_message(
            msg,
            sender=envelope.from_address,
            recipients=envelope.to,
        )
        rejected_errors = {
            address: f"{reply.code} {reply.message}" for address, reply in errors.items()
        }
        return DeliveryResult(
            accepted=[address for address in envelope.to if address not in errors],
            rejected=list(rejected_errors),
            rejected_errors=rejected_errors,
            envelope=envelope,
            message_id=str(msg["Message-ID"]),
            response=response,
        )

    async def close(self) -> None:
        if not self.smtp.is_connected:
            return
        try:
            await self.smtp.quit()
        except aiosmtplib.SMTPException:
            self.smtp.close()


async def connect(options: ConnectionOptions) -> SmtpTransport:
    """Open an SMTP session and log in.

    Login is skipped when user or password is empty.

    Raises:
        aiosmtplib.SMTPException: If the connection, TLS handshake or
            authentication fails.
        OSError: If the host cannot be reached.
    """
    kwargs: dict[str, Any] = {
        "hostname": options.host,
        "port": options.port,
        "use_tls": options.secure,
        # None lets aiosmtplib upgrade with STARTTLS when the server offers it
        "start_tls": False if options.secure else None,
    }
    tls_context = build_tls_context(options.tls)
    if tls_context is not None:
        kwargs["tls_context"] = tls_context
    if options.timeout is not None:
        kwargs["timeout"] = options.timeout

    smtp = aiosmtplib.SMTP(**kwargs)
    logger.debug("Connecting to %s:%s (secure=%s)", options.host, options.port, options.secure)
    await smtp.connect()
    transport = SmtpTransport(smtp)
    if options.auth.user and options.auth.password:
        try:
            await smtp.login(options.auth.user, options.auth.password)
        except BaseException:
            await transport.close()
            raise
    return transport
