"""
mailbuilder
===========

Builds and validates outbound email messages, and hands them to an SMTP
transport.

Delivery is handled by aiosmtplib.
"""

from .address import Address, parse_address
from .builder import BuilderState, MessageBuilder
from .errors import (
    AddressFormatError,
    EmailException,
    InvalidArgumentError,
    InvalidStateError,
    MissingFieldError,
    SessionUnavailableError,
)
from .headers import HeaderStore
from .message import Message
from .recipients import RecipientSet
from .session import (
    SMTP_PORT,
    SMTP_TLS_PORT,
    SOCKET_TIMEOUT_MS,
    Authenticator,
    DerivedConfig,
    OverrideSession,
    Session,
    SessionConfig,
    SessionProvider,
)
from .transport import SMTPTransport, Transport


__title__ = "mailbuilder"
__version__ = "1.0.0"
__license__ = "MIT"
__all__ = (
    "Address",
    "AddressFormatError",
    "Authenticator",
    "BuilderState",
    "DerivedConfig",
    "EmailException",
    "HeaderStore",
    "InvalidArgumentError",
    "InvalidStateError",
    "Message",
    "MessageBuilder",
    "MissingFieldError",
    "OverrideSession",
    "RecipientSet",
    "Session",
    "SessionConfig",
    "SessionProvider",
    "SessionUnavailableError",
    "SMTPTransport",
    "SMTP_PORT",
    "SMTP_TLS_PORT",
    "SOCKET_TIMEOUT_MS",
    "Transport",
    "parse_address",
)
