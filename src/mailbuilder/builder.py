"""
Main message builder class.
"""

import codecs
import datetime
import enum
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from .address import Address, parse_address
from .errors import InvalidArgumentError, InvalidStateError, MissingFieldError
from .headers import HeaderStore
from .message import Message
from .recipients import AddressInput, RecipientSet
from .session import Authenticator, Session, SessionConfig, SessionProvider
from .transport import SMTPTransport, Transport


__all__ = ("BuilderState", "MessageBuilder")

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"


@enum.unique
class BuilderState(enum.Enum):
    CONFIGURING = "configuring"
    BUILT = "built"


class MessageBuilder:
    """
    Accumulates the parts of an email message, then builds it exactly once.

    Basic usage:

        >>> builder = MessageBuilder()
        >>> message = (
        ...     builder.set_from("alice@example.com")
        ...     .add_to("bob@example.com")
        ...     .set_subject("Hello")
        ...     .set_msg("Hi Bob")
        ...     .build()
        ... )
        >>> [str(address) for address in message.all_recipients()]
        ['bob@example.com']

    Setters return the builder, so calls can be chained. After a successful
    :meth:`build` the builder is exhausted; its fields remain readable.
    Instances are not thread safe; use one builder per message.
    """

    def __init__(self, session_config: Optional[SessionConfig] = None) -> None:
        self.from_address: Optional[Address] = None
        self.recipients = RecipientSet()
        self.headers = HeaderStore()
        self.subject: Optional[str] = None
        self.charset: Optional[str] = None
        self.content: Optional[str] = None
        self.mime_type = TEXT_PLAIN
        self.reply_to: list[Address] = []
        self.sent_date: Optional[datetime.datetime] = None
        self.session_config = session_config or SessionConfig()
        self.state = BuilderState.CONFIGURING
        self.message: Optional[Message] = None

    @property
    def is_built(self) -> bool:
        return self.state is BuilderState.BUILT

    # Addresses #

    def set_from(self, address: str, name: Optional[str] = None) -> "MessageBuilder":
        """
        :raises AddressFormatError: the address is malformed
        """
        self.from_address = parse_address(address, name)
        return self

    def add_to(
        self, addresses: Optional[AddressInput], name: Optional[str] = None
    ) -> "MessageBuilder":
        """
        Add one address, or a sequence of addresses, to the To recipients.

        :raises AddressFormatError: no addresses were given, or one of them is
            malformed. No addresses are added in that case.
        """
        self.recipients.add_to(addresses, name)
        return self

    def add_cc(
        self, addresses: Optional[AddressInput], name: Optional[str] = None
    ) -> "MessageBuilder":
        self.recipients.add_cc(addresses, name)
        return self

    def add_bcc(
        self, addresses: Optional[AddressInput], name: Optional[str] = None
    ) -> "MessageBuilder":
        self.recipients.add_bcc(addresses, name)
        return self

    def add_reply_to(
        self, address: str, name: Optional[str] = None
    ) -> "MessageBuilder":
        self.reply_to.append(parse_address(address, name))
        return self

    def get_to_addresses(self) -> list[Address]:
        return list(self.recipients.to)

    def get_cc_addresses(self) -> list[Address]:
        return list(self.recipients.cc)

    def get_bcc_addresses(self) -> list[Address]:
        return list(self.recipients.bcc)

    def get_reply_to_addresses(self) -> list[Address]:
        return list(self.reply_to)

    # Headers and content #

    def add_header(self, name: str, value: str) -> "MessageBuilder":
        """
        :raises InvalidArgumentError: name or value is empty
        """
        self.headers.add(name, value)
        return self

    def set_headers(self, headers: Mapping[str, str]) -> "MessageBuilder":
        for name, value in headers.items():
            self.headers.add(name, value)
        return self

    def set_subject(self, subject: str) -> "MessageBuilder":
        self.subject = subject
        return self

    def set_charset(self, charset: str) -> "MessageBuilder":
        """
        Set the charset used to encode the subject and content.

        :raises InvalidArgumentError: the charset is unknown
        """
        try:
            codecs.lookup(charset)
        except (LookupError, TypeError) as exc:
            raise InvalidArgumentError(f"Unknown charset {charset!r}") from exc

        self.charset = charset
        return self

    def set_content(
        self, content: str, mime_type: str = TEXT_PLAIN
    ) -> "MessageBuilder":
        """
        :raises InvalidArgumentError: the mime type is not a ``text/*`` type
        """
        maintype, _, subtype = mime_type.partition("/")
        if maintype.lower() != "text" or not subtype:
            raise InvalidArgumentError(f"Unsupported content type {mime_type!r}")

        self.content = content
        self.mime_type = mime_type.lower()
        return self

    def set_msg(self, msg: str) -> "MessageBuilder":
        """
        Set plain text content.
        """
        if not msg:
            raise InvalidArgumentError("Invalid message supplied")

        return self.set_content(msg, TEXT_PLAIN)

    # Dates and timeouts #

    def get_sent_date(self) -> datetime.datetime:
        """
        Return the sent date, or the current time if no date has been set.
        """
        if self.sent_date is None:
            return datetime.datetime.now(datetime.timezone.utc)

        return self.sent_date

    def set_sent_date(self, sent_date: datetime.datetime) -> "MessageBuilder":
        self.sent_date = sent_date
        return self

    def get_socket_connection_timeout(self) -> int:
        return self.session_config.socket_connection_timeout

    def set_socket_connection_timeout(self, timeout: int) -> "MessageBuilder":
        self.session_config.update(socket_connection_timeout=timeout)
        return self

    def get_socket_timeout(self) -> int:
        return self.session_config.socket_timeout

    def set_socket_timeout(self, timeout: int) -> "MessageBuilder":
        self.session_config.update(socket_timeout=timeout)
        return self

    # Session #

    def get_host_name(self) -> Optional[str]:
        return self.session_config.resolve_host()

    def set_host_name(self, host_name: str) -> "MessageBuilder":
        self.session_config.update(host_name=host_name)
        return self

    def set_smtp_port(self, port: int) -> "MessageBuilder":
        self.session_config.update(smtp_port=port)
        return self

    def set_ssl_on_connect(self, ssl_on_connect: bool) -> "MessageBuilder":
        self.session_config.update(ssl_on_connect=ssl_on_connect)
        return self

    def set_ssl_smtp_port(self, port: int) -> "MessageBuilder":
        self.session_config.update(ssl_smtp_port=port)
        return self

    def set_start_tls_enabled(self, enabled: bool) -> "MessageBuilder":
        self.session_config.update(start_tls_enabled=enabled)
        return self

    def set_start_tls_required(self, required: bool) -> "MessageBuilder":
        self.session_config.update(start_tls_required=required)
        return self

    def set_ssl_check_server_identity(self, check: bool) -> "MessageBuilder":
        self.session_config.update(ssl_check_server_identity=check)
        return self

    def set_send_partial(self, send_partial: bool) -> "MessageBuilder":
        self.session_config.update(send_partial=send_partial)
        return self

    def set_bounce_address(self, address: Optional[str]) -> "MessageBuilder":
        """
        :raises AddressFormatError: the address is malformed
        """
        if address is not None:
            address = parse_address(address).addr_spec

        self.session_config.update(bounce_address=address)
        return self

    def set_authentication(self, username: str, password: str) -> "MessageBuilder":
        self.session_config.update(authenticator=Authenticator(username, password))
        return self

    def set_mail_session(self, session: Session) -> "MessageBuilder":
        self.session_config.update(session_override=session)
        return self

    def get_mail_session(self, provider: Optional[SessionProvider] = None) -> Session:
        """
        :raises SessionUnavailableError: no session was supplied and no host
            name is configured
        """
        return self.session_config.get_or_create_session(provider)

    # Building #

    def _check_charset(self) -> None:
        if self.charset is None:
            return

        for field, text in (("Subject", self.subject), ("Content", self.content)):
            if not text:
                continue
            try:
                text.encode(self.charset)
            except UnicodeEncodeError as exc:
                raise InvalidArgumentError(
                    f"{field} can not be encoded with charset {self.charset!r}"
                ) from exc

    def build(self) -> Message:
        """
        Validate the configured fields and build the message.

        A failed build can be retried once the missing fields are set; a
        successful build can not be repeated.

        :raises InvalidStateError: the message has already been built
        :raises MissingFieldError: no From address or no recipients
        :raises InvalidArgumentError: the subject or content can not be encoded
            with the configured charset
        """
        if self.is_built:
            raise InvalidStateError("The message has already been built")
        if self.from_address is None:
            raise MissingFieldError("From address required", "from")
        if not self.recipients:
            raise MissingFieldError("At least one receiver address required", "to")
        self._check_charset()

        message = Message(
            from_address=self.from_address,
            to=tuple(self.recipients.to),
            cc=tuple(self.recipients.cc),
            bcc=tuple(self.recipients.bcc),
            headers=MappingProxyType(self.headers.all()),
            subject=self.subject,
            charset=self.charset,
            reply_to=tuple(self.reply_to),
            sent_date=self.get_sent_date(),
            content=self.content or "",
            mime_type=self.mime_type,
        )

        self.message = message
        self.state = BuilderState.BUILT
        logger.debug(
            "Built message from %s to %d recipient(s)",
            message.from_address.addr_spec,
            len(message.all_recipients()),
        )

        return message

    def send(self, transport: Optional[Transport] = None) -> Message:
        """
        Build the message and deliver it. Defaults to :class:`SMTPTransport`.

        :raises SessionUnavailableError: no session or host name configured
        """
        session = self.get_mail_session()
        message = self.build()

        if transport is None:
            transport = SMTPTransport()

        transport.send(message, session)

        return message
