"""
The immutable message produced by :class:`mailbuilder.MessageBuilder`.
"""

import datetime
import email.header
import email.message
import email.policy
import email.utils
from collections.abc import Mapping
from typing import NamedTuple, Optional

from aiosmtplib.email import flatten_message

from .address import Address


__all__ = ("Message",)

DEFAULT_CHARSET = "utf-8"


class CharsetHeader(str):
    """
    A header value that is encoded with a fixed charset when serialized.

    :py:class:`email.policy.EmailPolicy` stores objects with a ``name``
    attribute as they are, and folds them by calling their ``fold`` method;
    otherwise non-ASCII values would always be sent as utf-8.
    """

    name: str
    charset: str

    def __new__(cls, name: str, value: str, charset: str) -> "CharsetHeader":
        header = super().__new__(cls, value)
        header.name = name
        header.charset = charset
        return header

    def fold(self, *, policy: email.policy.Policy) -> str:
        encoded = email.header.Header(
            str(self), self.charset, header_name=self.name
        ).encode(linesep=policy.linesep, maxlinelen=policy.max_line_length or 0)

        return f"{self.name}: {encoded}{policy.linesep}"


class Message(NamedTuple):
    """
    A finished message, ready to hand to a transport.

    To, Cc and Bcc recipients are kept as separate groups;
    :meth:`all_recipients` gives the flattened view.
    """

    from_address: Address
    to: tuple[Address, ...]
    cc: tuple[Address, ...]
    bcc: tuple[Address, ...]
    headers: Mapping[str, str]
    subject: Optional[str]
    charset: Optional[str]
    reply_to: tuple[Address, ...]
    sent_date: datetime.datetime
    content: str
    mime_type: str

    def all_recipients(self) -> tuple[Address, ...]:
        return (*self.to, *self.cc, *self.bcc)

    def as_email_message(self) -> email.message.EmailMessage:
        """
        Convert to a standard library :py:class:`email.message.EmailMessage`.

        A non-ASCII subject is encoded with the message charset, if one was
        set, and utf-8 otherwise.
        """
        message = email.message.EmailMessage()

        message["From"] = self.from_address.as_header_address()
        for header_name, addresses in (
            ("To", self.to),
            ("Cc", self.cc),
            ("Bcc", self.bcc),
            ("Reply-To", self.reply_to),
        ):
            if addresses:
                message[header_name] = [
                    address.as_header_address() for address in addresses
                ]

        if self.subject is not None:
            if self.charset is not None and not self.subject.isascii():
                message["Subject"] = CharsetHeader(
                    "Subject", self.subject, self.charset
                )
            else:
                message["Subject"] = self.subject
        message["Date"] = email.utils.format_datetime(self.sent_date)

        _, subtype = self.mime_type.split("/", 1)
        message.set_content(
            self.content, subtype=subtype, charset=self.charset or DEFAULT_CHARSET
        )

        # Custom headers replace any generated header of the same name.
        for name, value in self.headers.items():
            del message[name]
            message[name] = value

        return message

    def as_bytes(self, *, utf8: bool = False, cte_type: str = "8bit") -> bytes:
        """
        Serialize for the wire, without Bcc headers.
        """
        return flatten_message(self.as_email_message(), utf8=utf8, cte_type=cte_type)
