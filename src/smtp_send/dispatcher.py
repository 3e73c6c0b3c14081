# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Single-message SMTP dispatch.

``send()`` runs a linear sequence for every call:

1. Validate that credentials were supplied (``ConfigurationError`` otherwise,
   before any network activity)
2. Build the connection options, applying the certificate policy
3. Open a fresh transport
4. Send the message exactly once
5. Return the transport's result unchanged

There is no retry, no pooling and no reuse of transports across calls, so
concurrent calls share nothing. Transport failures are raised as
``DeliveryError`` with the original exception chained.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from . import transport as smtp_transport
from .errors import ConfigurationError, DeliveryError
from .logger import get_logger
from .models import (
    AssembledMessage,
    AuthOptions,
    ConnectionCredentials,
    ConnectionOptions,
    DeliveryResult,
    SendOptions,
    TlsOptions,
)
from .transport import Transport

Connector = Callable[[ConnectionOptions], Awaitable[Transport]]

logger = get_logger("dispatcher")


def build_connection_options(
    credentials: ConnectionCredentials,
    options: SendOptions | None = None,
    *,
    timeout: float | None = None,
) -> ConnectionOptions:
    """Translate credentials and send options into transport settings.

    ``allow_unauthorized_certs`` adds a TLS override that disables
    certificate validation for this connection only. It is never a default.
    """
    options = options or SendOptions()
    tls = None
    if options.allow_unauthorized_certs:
        tls = TlsOptions(reject_unauthorized=False)
    return ConnectionOptions(
        host=credentials.host,
        port=credentials.port,
        secure=credentials.secure,
        auth=AuthOptions(user=credentials.user, password=credentials.password),
        tls=tls,
        timeout=timeout,
    )


async def send(
    credentials: ConnectionCredentials | None,
    options: SendOptions | None,
    message: AssembledMessage,
    *,
    timeout: float | None = None,
    connect: Connector | None = None,
) -> DeliveryResult:
    """Deliver ``message`` through a transport opened for this call only.

    Args:
        credentials: SMTP server and login; ``None`` when the credential
            store could not provide any.
        options: Delivery options, defaults apply when ``None``.
        message: Message produced by the builder.
        timeout: Optional socket timeout handed to the transport.
        connect: Transport factory, defaults to the aiosmtplib transport.

    Returns:
        The transport's delivery result, unmodified.

    Raises:
        ConfigurationError: If ``credentials`` is ``None``.
        DeliveryError: If connecting, authenticating or sending fails.
    """
    if credentials is None:
        raise ConfigurationError()

    connection_options = build_connection_options(credentials, options, timeout=timeout)
    if connection_options.tls is not None:
        logger.warning(
            "TLS certificate validation disabled for %s:%s",
            connection_options.host,
            connection_options.port,
        )

    connect = connect or smtp_transport.connect
    try:
        transport = await connect(connection_options)
    except Exception as exc:
        logger.warning(
            "Could not connect to %s:%s: %s", connection_options.host, connection_options.port, exc
        )
        raise DeliveryError("connect", exc) from exc

    try:
        result = await transport.send(message)
    except Exception as exc:
        logger.warning("Sending to %s failed: %s", message.to_email, exc)
        raise DeliveryError("send", exc) from exc
    finally:
        await _close_quietly(transport)

    logger.debug("Message %s delivered to %s", result.message_id, result.accepted)
    return result


async def _close_quietly(transport: Transport) -> None:
    try:
        await transport.close()
    except Exception as exc:
        logger.debug("Ignoring error while closing SMTP session: %s", exc)
