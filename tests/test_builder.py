# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for message assembly and attachment resolution."""

import base64

import pytest

from smtp_send.builder import (
    build_message,
    decode_payload,
    resolve_attachments,
    split_attachment_names,
)
from smtp_send.models import BinaryRecord, EmailRequest


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def make_request(**overrides) -> EmailRequest:
    fields = {"from": "a@x.com", "to": "b@x.com", "subject": "Hi", "text": "hello"}
    fields.update(overrides)
    return EmailRequest.model_validate(fields)


class TestSplitAttachmentNames:

    def test_empty_string_gives_no_names(self):
        assert split_attachment_names("") == []

    def test_names_are_trimmed_in_order(self):
        assert split_attachment_names(" file1,file2 ,  data ") == ["file1", "file2", "data"]

    def test_duplicates_are_kept(self):
        assert split_attachment_names("data,data") == ["data", "data"]


class TestDecodePayload:

    def test_decodes_base64(self):
        assert decode_payload(b64(b"%PDF-1.4")) == b"%PDF-1.4"

    def test_tolerates_missing_padding(self):
        assert decode_payload("aGk") == b"hi"

    def test_line_wrapped_payload(self):
        data = bytes(range(256)) * 2
        wrapped = base64.encodebytes(data).decode("ascii")

        assert "\n" in wrapped.strip()
        assert decode_payload(wrapped) == data

    def test_crlf_wrapped_payload(self):
        data = b"%PDF-1.4 " * 20
        wrapped = base64.encodebytes(data).decode("ascii").replace("\n", "\r\n")

        assert decode_payload(wrapped) == data

    def test_urlsafe_alphabet(self):
        data = b"\xfb\xff\xfe" * 10
        encoded = base64.urlsafe_b64encode(data).decode("ascii")

        assert "-" in encoded or "_" in encoded
        assert decode_payload(encoded) == data

    def test_urlsafe_without_padding(self):
        data = b"\xfb\xff"
        encoded = base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")

        assert decode_payload(encoded) == data

    @pytest.mark.parametrize("payload", ["not base64 !!", "@@@", "a*b="])
    def test_invalid_payload_returns_none(self, payload):
        assert decode_payload(payload) is None


class TestResolveAttachments:

    def test_missing_names_are_skipped(self):
        binary = {"file1": BinaryRecord(fileName="a.pdf", data=b64(b"pdf"))}
        attachments = resolve_attachments(["file2", "file1", "file3"], binary)

        assert [a.filename for a in attachments] == ["a.pdf"]

    def test_missing_filename_defaults_to_unknown(self):
        binary = {"data": BinaryRecord(data=b64(b"raw"))}
        [attachment] = resolve_attachments(["data"], binary)

        assert attachment.filename == "unknown"
        assert attachment.content == b"raw"

    def test_empty_filename_defaults_to_unknown(self):
        binary = {"data": BinaryRecord(fileName="", data=b64(b"raw"))}
        [attachment] = resolve_attachments(["data"], binary)

        assert attachment.filename == "unknown"

    def test_duplicates_resolve_independently(self):
        binary = {"data": BinaryRecord(fileName="x.txt", data=b64(b"x"))}
        attachments = resolve_attachments(["data", "data"], binary)

        assert len(attachments) == 2
        assert all(a.content == b"x" for a in attachments)

    def test_undecodable_payload_is_skipped(self):
        binary = {
            "bad": BinaryRecord(fileName="bad.bin", data="@@@"),
            "good": BinaryRecord(fileName="good.bin", data=b64(b"ok")),
        }
        attachments = resolve_attachments(["bad", "good"], binary)

        assert [a.filename for a in attachments] == ["good.bin"]

    def test_mime_type_is_carried_over(self):
        binary = {"img": BinaryRecord(fileName="p.png", mimeType="image/png", data=b64(b"png"))}
        [attachment] = resolve_attachments(["img"], binary)

        assert attachment.content_type == "image/png"


class TestBuildMessage:

    def test_fields_are_copied_verbatim(self):
        request = make_request(
            cc=" c@x.com ",
            html="<p>hello</p>",
            subject="  spaced  ",
        )
        message = build_message(request)

        assert message.from_email == "a@x.com"
        assert message.to_email == "b@x.com"
        assert message.cc == " c@x.com "
        assert message.subject == "  spaced  "
        assert message.text == "hello"
        assert message.html == "<p>hello</p>"

    def test_plain_message_has_no_attachments(self):
        message = build_message(make_request(attachmentNames=""))

        assert message.attachments is None
        assert "attachments" not in message.model_dump(exclude_none=True)

    @pytest.mark.parametrize("binary", [None, {}, {"file1": {"fileName": "a.pdf", "data": b64(b"x")}}])
    def test_empty_names_ignore_binary_data(self, binary):
        message = build_message(make_request(attachmentNames="", binaryData=binary))

        assert message.attachments is None

    def test_names_without_binary_data_are_ignored(self):
        message = build_message(make_request(attachmentNames="file1"))

        assert message.attachments is None

    def test_all_names_missing_gives_no_attachments(self):
        request = make_request(
            attachmentNames="file2, file3",
            binaryData={"file1": {"fileName": "a.pdf", "data": b64(b"x")}},
        )

        assert build_message(request).attachments is None

    def test_partially_resolved_attachments(self):
        pdf = b"%PDF-1.4 test"
        request = make_request(
            attachmentNames="file1, file2",
            binaryData={"file1": {"fileName": "a.pdf", "data": b64(pdf)}},
        )
        message = build_message(request)

        assert message.attachments is not None
        assert len(message.attachments) == 1
        assert message.attachments[0].filename == "a.pdf"
        assert message.attachments[0].content == pdf

    @pytest.mark.parametrize("encode", [base64.encodebytes, base64.urlsafe_b64encode])
    def test_wrapped_and_urlsafe_attachments_are_kept(self, encode):
        data = bytes(range(256)) * 2
        request = make_request(
            attachmentNames="f",
            binaryData={"f": {"fileName": "a.bin", "data": encode(data).decode("ascii")}},
        )

        [attachment] = build_message(request).attachments

        assert attachment.filename == "a.bin"
        assert attachment.content == data
