# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Per-record entry point used by a workflow host.

The host hands over one input record at a time together with the node
parameters and the SMTP credentials it resolved. Each call builds its own
message and transport, so records may be processed concurrently.

Parameter names follow the host's node definition::

    {
        "fromEmail": "admin@example.com",
        "toEmail": "info@example.com",
        "ccEmail": "",
        "subject": "Report",
        "text": "See attachment",
        "html": "",
        "attachments": "data, summary",
        "options": {"allowUnauthorizedCerts": False},
    }

Input records look like ``{"json": {...}, "binary": {"data": {...}}}``; the
output record is ``{"json": <delivery result>}``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .builder import build_message
from .dispatcher import Connector, send
from .models import ConnectionCredentials, DeliveryResult, EmailRequest, SendOptions


def request_from_parameters(
    parameters: Mapping[str, Any],
    binary: Mapping[str, Any] | None = None,
) -> EmailRequest:
    """Map node parameters and an item's binary records to an ``EmailRequest``.

    Raises:
        pydantic.ValidationError: If required parameters are missing or an
            unknown option is set.
    """
    options = SendOptions.model_validate(parameters.get("options") or {})
    return EmailRequest.model_validate(
        {
            "from": parameters.get("fromEmail", ""),
            "to": parameters.get("toEmail", ""),
            "cc": parameters.get("ccEmail", ""),
            "subject": parameters.get("subject", ""),
            "text": parameters.get("text", ""),
            "html": parameters.get("html", ""),
            "attachmentNames": parameters.get("attachments", ""),
            "binaryData": binary,
            "allowUnauthorizedCerts": options.allow_unauthorized_certs,
        }
    )


async def send_email(
    request: EmailRequest,
    credentials: ConnectionCredentials | None,
    *,
    timeout: float | None = None,
    connect: Connector | None = None,
) -> DeliveryResult:
    """Build the message for ``request`` and deliver it once."""
    message = build_message(request)
    return await send(credentials, request.options, message, timeout=timeout, connect=connect)


async def execute_item(
    parameters: Mapping[str, Any],
    item: Mapping[str, Any],
    credentials: ConnectionCredentials | None,
    *,
    timeout: float | None = None,
    connect: Connector | None = None,
) -> dict[str, Any]:
    """Send the email described by ``parameters`` for one input record.

    Returns:
        Output record holding the delivery result under ``"json"``.
    """
    request = request_from_parameters(parameters, item.get("binary"))
    result = await send_email(request, credentials, timeout=timeout, connect=connect)
    return {"json": result.model_dump(by_alias=True)}
