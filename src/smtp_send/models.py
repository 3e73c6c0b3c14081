# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for message assembly and SMTP dispatch.

Every entity lives for a single call: built from the caller's input,
used once, then discarded.

Models:
    - BinaryRecord: Named binary payload attached to an input record
    - EmailRequest: Flat send request as supplied by the caller
    - SendOptions: Enumerated delivery options
    - ConnectionCredentials: SMTP server and login
    - ResolvedAttachment / AssembledMessage: Builder output
    - AuthOptions / TlsOptions / ConnectionOptions: Transport configuration
    - DeliveryResult: Transport metadata returned to the caller
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_FILENAME = "unknown"


class BinaryRecord(BaseModel):
    """Binary data attached to an input record.

    Attributes:
        file_name: Original file name, if the host knows it.
        mime_type: MIME type declared by the host, if any.
        data: Payload as base64 text.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_name: Annotated[
        str | None,
        Field(default=None, alias="fileName", description="Original file name")
    ]
    mime_type: Annotated[
        str | None,
        Field(default=None, alias="mimeType", description="Declared MIME type")
    ]
    data: Annotated[
        str,
        Field(description="Base64-encoded payload")
    ]


class EmailRequest(BaseModel):
    """A single send request.

    ``attachment_names`` is a comma-separated list of keys into
    ``binary_data``. Address fields are not syntax-checked here.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_email: Annotated[
        str,
        Field(alias="from", min_length=1, description="Sender address, optionally with name")
    ]
    to_email: Annotated[
        str,
        Field(alias="to", min_length=1, description="Recipient address(es)")
    ]
    cc: Annotated[str, Field(default="", description="CC recipient address(es)")]
    subject: Annotated[str, Field(default="", description="Subject line")]
    text: Annotated[str, Field(default="", description="Plain text body")]
    html: Annotated[str, Field(default="", description="HTML body")]
    attachment_names: Annotated[
        str,
        Field(default="", alias="attachmentNames",
              description="Comma-separated binary property names to attach")
    ]
    binary_data: Annotated[
        dict[str, BinaryRecord] | None,
        Field(default=None, alias="binaryData", description="Binary records of the input item")
    ]
    allow_unauthorized_certs: Annotated[
        bool,
        Field(default=False, alias="allowUnauthorizedCerts",
              description="Connect even if the TLS certificate cannot be validated")
    ]

    @property
    def options(self) -> SendOptions:
        return SendOptions(allow_unauthorized_certs=self.allow_unauthorized_certs)


class SendOptions(BaseModel):
    """Delivery options recognised by the dispatcher.

    New options are added as fields; unknown keys are rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    allow_unauthorized_certs: Annotated[
        bool,
        Field(default=False, alias="allowUnauthorizedCerts",
              description="Disable TLS certificate validation (opt-in insecure mode)")
    ]


class ConnectionCredentials(BaseModel):
    """SMTP server and login, as supplied by the credential store."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: Annotated[str, Field(min_length=1, description="SMTP server hostname")]
    port: Annotated[int, Field(ge=1, le=65535, description="SMTP server port")]
    secure: Annotated[bool, Field(description="Use implicit TLS from the first byte")]
    user: Annotated[str, Field(description="Login user name")]
    password: Annotated[str, Field(description="Login password")]


class ResolvedAttachment(BaseModel):
    """Attachment ready to be rendered into the outgoing message."""

    model_config = ConfigDict(frozen=True)

    filename: str = UNKNOWN_FILENAME
    content: bytes
    content_type: str | None = None


class AssembledMessage(BaseModel):
    """Outgoing message produced by the builder.

    ``attachments`` is ``None`` unless at least one attachment resolved.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_email: Annotated[str, Field(alias="from")]
    to_email: Annotated[str, Field(alias="to")]
    cc: str = ""
    subject: str = ""
    text: str = ""
    html: str = ""
    attachments: list[ResolvedAttachment] | None = None


class AuthOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: str
    password: str


class TlsOptions(BaseModel):
    """TLS overrides for a single connection."""

    model_config = ConfigDict(frozen=True)

    reject_unauthorized: bool = True


class ConnectionOptions(BaseModel):
    """Everything the transport needs to open one SMTP session."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int
    secure: bool
    auth: AuthOptions
    tls: TlsOptions | None = None
    timeout: float | None = None


class Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_address: Annotated[str, Field(alias="from")]
    to: list[str] = Field(default_factory=list)


class DeliveryResult(BaseModel):
    """Metadata reported by the transport for a completed send.

    Recipients refused by the server while others were accepted are listed
    in ``rejected``; that is not an error.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    accepted: list[str] = Field(default_factory=list)
    rejected: list[str] = Field(default_factory=list)
    rejected_errors: Annotated[
        dict[str, str],
        Field(default_factory=dict, alias="rejectedErrors")
    ]
    envelope: Envelope
    message_id: Annotated[str | None, Field(default=None, alias="messageId")]
    response: str = ""
