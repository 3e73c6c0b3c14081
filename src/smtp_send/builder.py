# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Message assembly from a flat send request.

Attachments are referenced by name and looked up in the request's binary
records. Names that do not resolve, and payloads that cannot be decoded,
are skipped without error: building a message never fails.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable, Mapping

from .models import (
    UNKNOWN_FILENAME,
    AssembledMessage,
    BinaryRecord,
    EmailRequest,
    ResolvedAttachment,
)


def split_attachment_names(names: str) -> list[str]:
    """Split a comma-separated list of binary property names.

    Order and duplicates are preserved; surrounding whitespace is removed.
    """
    if not names:
        return []
    return [name.strip() for name in names.split(",")]


def decode_payload(data: str) -> bytes | None:
    """Decode a base64 payload.

    Line breaks and other whitespace are ignored, missing padding is
    tolerated and both the standard and URL-safe alphabets are accepted.
    Returns ``None`` when the payload is not valid base64.
    """
    content = "".join(data.split())
    padding_needed = 4 - (len(content) % 4)
    if padding_needed != 4:
        content += "=" * padding_needed
    try:
        return base64.b64decode(content, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError):
        return None


def resolve_attachments(
    names: Iterable[str],
    binary_data: Mapping[str, BinaryRecord],
) -> list[ResolvedAttachment]:
    """Resolve attachment names against the binary records of a request."""
    attachments: list[ResolvedAttachment] = []
    for name in names:
        record = binary_data.get(name)
        if record is None:
            continue
        content = decode_payload(record.data)
        if content is None:
            continue
        attachments.append(
            ResolvedAttachment(
                filename=record.file_name or UNKNOWN_FILENAME,
                content=content,
                content_type=record.mime_type,
            )
        )
    return attachments


def build_message(request: EmailRequest) -> AssembledMessage:
    """Assemble the outgoing message for ``request``.

    Header and body fields are copied verbatim. ``attachments`` is only set
    when at least one requested name resolved.
    """
    attachments: list[ResolvedAttachment] = []
    if request.attachment_names and request.binary_data:
        attachments = resolve_attachments(
            split_attachment_names(request.attachment_names),
            request.binary_data,
        )

    return AssembledMessage(
        from_email=request.from_email,
        to_email=request.to_email,
        cc=request.cc,
        subject=request.subject,
        text=request.text,
        html=request.html,
        attachments=attachments or None,
    )
