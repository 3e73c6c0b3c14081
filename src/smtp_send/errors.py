# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exceptions raised while dispatching a message."""

from __future__ import annotations


class SmtpSendError(RuntimeError):
    """Base class for smtp-send failures."""

    code = "smtp_send_error"


class ConfigurationError(SmtpSendError):
    """Raised when SMTP credentials are missing or incomplete.

    Fatal: raised before any network activity and never worth retrying.
    """

    def __init__(
        self,
        message: str = "No SMTP credentials available",
        code: str = "missing_credentials",
    ):
        super().__init__(message)
        self.code = code


class DeliveryError(SmtpSendError):
    """Raised when the transport fails to connect, authenticate or send.

    Attributes:
        stage: ``"connect"`` or ``"send"``.
        original: The exception raised by the transport.
        smtp_code: SMTP reply code when the transport reported one.
    """

    def __init__(self, stage: str, original: BaseException):
        self.stage = stage
        self.original = original
        self.smtp_code = _smtp_code(original)
        detail = str(original) or original.__class__.__name__
        if self.smtp_code:
            detail = f"{detail} (SMTP {self.smtp_code})"
        super().__init__(f"SMTP {stage} failed: {detail}")
        self.code = "delivery_failed"


def _smtp_code(exc: BaseException) -> int | None:
    # aiosmtplib keeps the reply code on ``code``; some wrappers use ``smtp_code``
    code = getattr(exc, "smtp_code", None) or getattr(exc, "code", None)
    return code if isinstance(code, int) else None
