# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Compose a single email and deliver it over SMTP.

Two stateless components per call:

- Message builder: resolves named attachments against the caller's binary
  records and assembles the outgoing message
- Transport dispatcher: configures a fresh SMTP session from credentials
  and options, sends the message once and returns the delivery metadata

Usage:
    from smtp_send import EmailRequest, ConnectionCredentials, send_email

    result = await send_email(request, credentials)
"""

from .builder import build_message, resolve_attachments, split_attachment_names
from .dispatcher import build_connection_options, send
from .errors import ConfigurationError, DeliveryError, SmtpSendError
from .models import (
    AssembledMessage,
    BinaryRecord,
    ConnectionCredentials,
    ConnectionOptions,
    DeliveryResult,
    EmailRequest,
    ResolvedAttachment,
    SendOptions,
    TlsOptions,
)
from .node import execute_item, request_from_parameters, send_email

__all__ = [
    "AssembledMessage",
    "BinaryRecord",
    "ConfigurationError",
    "ConnectionCredentials",
    "ConnectionOptions",
    "DeliveryError",
    "DeliveryResult",
    "EmailRequest",
    "ResolvedAttachment",
    "SendOptions",
    "SmtpSendError",
    "TlsOptions",
    "build_connection_options",
    "build_message",
    "execute_item",
    "request_from_parameters",
    "resolve_attachments",
    "send",
    "send_email",
    "split_attachment_names",
]
