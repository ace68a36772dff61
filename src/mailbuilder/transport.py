"""
Message delivery.

The SMTP protocol itself is handled by :mod:`aiosmtplib`; this module maps
session properties onto its connection options.
"""

import asyncio
import logging
from typing import Any, Optional

import aiosmtplib

from .errors import InvalidArgumentError
from .message import Message
from .session import (
    MAIL_HOST,
    MAIL_PORT,
    MAIL_SMTP_CONNECTIONTIMEOUT,
    MAIL_SMTP_FROM,
    MAIL_SMTP_HOST,
    MAIL_SMTP_SOCKET_FACTORY_CLASS,
    MAIL_SMTP_SSL_CHECKSERVERIDENTITY,
    MAIL_SMTP_STARTTLS_ENABLE,
    MAIL_SMTP_STARTTLS_REQUIRED,
    MAIL_SMTP_TIMEOUT,
    SSL_SOCKET_FACTORY,
    Session,
)


__all__ = ("SMTPTransport", "Transport", "smtp_options_from_session")

logger = logging.getLogger(__name__)

MAIL_SMTP_PORT = "mail.smtp.port"
MAIL_SMTP_SSL_ENABLE = "mail.smtp.ssl.enable"


def _is_true(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() == "true"


def _int_property(session: Session, key: str) -> Optional[int]:
    value = session.get_property(key)
    if not value:
        return None

    try:
        return int(value)
    except ValueError as exc:
        raise InvalidArgumentError(
            f"Session property {key} must be an integer, got {value!r}"
        ) from exc


def _timeout_seconds(session: Session, key: str) -> Optional[float]:
    milliseconds = _int_property(session, key)
    if milliseconds is None or milliseconds <= 0:
        return None

    return milliseconds / 1000


def smtp_options_from_session(session: Session) -> dict[str, Any]:
    """
    Translate session properties into :func:`aiosmtplib.send` keyword
    arguments.
    """
    hostname = session.get_property(MAIL_HOST) or session.get_property(MAIL_SMTP_HOST)
    port = _int_property(session, MAIL_PORT)
    if port is None:
        port = _int_property(session, MAIL_SMTP_PORT)

    use_tls = session.get_property(
        MAIL_SMTP_SOCKET_FACTORY_CLASS
    ) == SSL_SOCKET_FACTORY or _is_true(session.get_property(MAIL_SMTP_SSL_ENABLE))

    start_tls: Optional[bool]
    if use_tls:
        start_tls = False
    elif _is_true(session.get_property(MAIL_SMTP_STARTTLS_REQUIRED)):
        start_tls = True
    elif _is_true(session.get_property(MAIL_SMTP_STARTTLS_ENABLE)):
        # Upgrade only if the server supports it.
        start_tls = None
    else:
        start_tls = False

    timeout = _timeout_seconds(session, MAIL_SMTP_TIMEOUT)
    if timeout is None:
        timeout = _timeout_seconds(session, MAIL_SMTP_CONNECTIONTIMEOUT)

    options: dict[str, Any] = {
        "hostname": hostname or "localhost",
        "port": port,
        "use_tls": use_tls,
        "start_tls": start_tls,
        "timeout": timeout,
    }

    # Unset means the aiosmtplib default, which validates certificates.
    check_server_identity = session.get_property(MAIL_SMTP_SSL_CHECKSERVERIDENTITY)
    if check_server_identity is not None:
        options["validate_certs"] = _is_true(check_server_identity)

    authenticator = getattr(session, "authenticator", None)
    if authenticator is not None:
        options["username"] = authenticator.username
        options["password"] = authenticator.password

    return options


class Transport:
    """
    Base class for message delivery.
    """

    def send(self, message: Message, session: Session) -> None:
        raise NotImplementedError


class SMTPTransport(Transport):
    """
    Delivers messages over SMTP via :mod:`aiosmtplib`.

    Errors raised by :mod:`aiosmtplib` are propagated unchanged.
    """

    async def send_async(self, message: Message, session: Session) -> None:
        options = smtp_options_from_session(session)
        sender = session.get_property(MAIL_SMTP_FROM) or message.from_address.addr_spec
        recipients = [address.addr_spec for address in message.all_recipients()]

        logger.debug(
            "Sending message from %s to %d recipient(s) via %s:%s",
            sender,
            len(recipients),
            options["hostname"],
            options["port"] or "default port",
        )

        errors, response = await aiosmtplib.send(
            message.as_email_message(),
            sender=sender,
            recipients=recipients,
            **options,
        )

        for recipient, recipient_response in errors.items():
            logger.warning(
                "Recipient %s refused: %s", recipient, recipient_response
            )
        logger.debug("Server response: %s", response)

    def send(self, message: Message, session: Session) -> None:
        asyncio.run(self.send_async(message, session))
