"""
Mail session configuration.

Derives the flat transport property mapping (host, port, SSL, timeouts,
authentication) from the configured options, and resolves the session used
for delivery.
"""

import logging
from types import MappingProxyType
from typing import Literal, NamedTuple, Optional, Union

from .errors import InvalidArgumentError, InvalidStateError, SessionUnavailableError
from .typing import Default, PropertiesType


__all__ = (
    "Authenticator",
    "DerivedConfig",
    "OverrideSession",
    "Session",
    "SessionConfig",
    "SessionProvider",
    "SMTP_PORT",
    "SMTP_TLS_PORT",
    "SOCKET_TIMEOUT_MS",
)

logger = logging.getLogger(__name__)

SMTP = "smtp"
SMTP_PORT = 25
SMTP_TLS_PORT = 465
SOCKET_TIMEOUT_MS = 60000
SSL_SOCKET_FACTORY = "SSLSocketFactory"

MAIL_HOST = "mail.host"
MAIL_PORT = "mail.port"
MAIL_TRANSPORT_PROTOCOL = "mail.transport.protocol"
MAIL_SMTP_HOST = "mail.smtp.host"
MAIL_SMTP_AUTH = "mail.smtp.auth"
MAIL_SMTP_FROM = "mail.smtp.from"
MAIL_SMTP_TIMEOUT = "mail.smtp.timeout"
MAIL_SMTP_CONNECTIONTIMEOUT = "mail.smtp.connectiontimeout"
MAIL_SMTP_SOCKET_FACTORY_PORT = "mail.smtp.socketFactory.port"
MAIL_SMTP_SOCKET_FACTORY_CLASS = "mail.smtp.socketFactory.class"
MAIL_SMTP_SOCKET_FACTORY_FALLBACK = "mail.smtp.socketFactory.fallback"
MAIL_SMTP_STARTTLS_ENABLE = "mail.smtp.starttls.enable"
MAIL_SMTP_STARTTLS_REQUIRED = "mail.smtp.starttls.required"
MAIL_SMTP_SSL_CHECKSERVERIDENTITY = "mail.smtp.ssl.checkserveridentity"
MAIL_SMTP_SEND_PARTIAL = "mail.smtp.sendpartial"


def _bool_property(value: bool) -> str:
    return "true" if value else "false"


class Authenticator(NamedTuple):
    """
    Username and password used to log in to the SMTP server.
    """

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Authenticator(username={self.username!r}, password='***')"


class Session:
    """
    A read only bag of transport properties, plus optional credentials.
    """

    def __init__(
        self,
        properties: PropertiesType,
        authenticator: Optional[Authenticator] = None,
    ) -> None:
        self.properties = MappingProxyType(dict(properties))
        self.authenticator = authenticator

    def get_property(self, key: str) -> Optional[str]:
        return self.properties.get(key)

    def __repr__(self) -> str:
        return f"Session({dict(self.properties)!r})"


class SessionProvider:
    """
    Materializes sessions from property mappings.

    Subclass and override :meth:`get_or_create` to share or pool sessions.
    """

    def get_or_create(
        self,
        properties: PropertiesType,
        authenticator: Optional[Authenticator] = None,
    ) -> Session:
        return Session(properties, authenticator)


class OverrideSession(NamedTuple):
    """
    A caller supplied session; takes precedence over all configured options.
    """

    session: Session

    @property
    def host(self) -> Optional[str]:
        return self.session.get_property(MAIL_HOST) or self.session.get_property(
            MAIL_SMTP_HOST
        )

    def get_session(self, provider: SessionProvider) -> Session:
        return self.session


class DerivedConfig(NamedTuple):
    """
    A session derived from the options set on a :class:`SessionConfig`.
    """

    config: "SessionConfig"

    @property
    def host(self) -> Optional[str]:
        return self.config.host_name

    def get_session(self, provider: SessionProvider) -> Session:
        if self.host is None:
            raise SessionUnavailableError(
                "Cannot find valid hostname for mail session"
            )

        return provider.get_or_create(
            self.config.build_properties(), self.config.authenticator
        )


ResolvedSession = Union[OverrideSession, DerivedConfig]


class SessionConfig:
    """
    Transport options for a message.

    Options can be provided on :meth:`__init__` or later via :meth:`update`.
    Once a session has been created from these options, they can no longer
    be changed (apart from replacing the session itself).
    """

    def __init__(
        self,
        *,
        host_name: Optional[str] = None,
        smtp_port: Optional[int] = None,
        ssl_on_connect: bool = False,
        ssl_smtp_port: Optional[int] = None,
        start_tls_enabled: bool = False,
        start_tls_required: bool = False,
        ssl_check_server_identity: bool = False,
        send_partial: bool = False,
        socket_timeout: int = SOCKET_TIMEOUT_MS,
        socket_connection_timeout: int = SOCKET_TIMEOUT_MS,
        bounce_address: Optional[str] = None,
        authenticator: Optional[Authenticator] = None,
        session_override: Optional[Session] = None,
    ) -> None:
        """
        :keyword host_name: SMTP server name (or IP).
        :keyword smtp_port: Plain SMTP port. Defaults to ``25``.
        :keyword ssl_on_connect: If True, connect to the server over TLS/SSL.
        :keyword ssl_smtp_port: Port used when ``ssl_on_connect`` is True.
            Defaults to ``465``.
        :keyword start_tls_enabled: Upgrade the connection via STARTTLS if
            the server supports it.
        :keyword start_tls_required: Fail unless the connection can be
            upgraded via STARTTLS.
        :keyword ssl_check_server_identity: Check the server certificate
            identity when using SSL or STARTTLS.
        :keyword send_partial: Send to valid recipients even if some of
            the recipients are refused.
        :keyword socket_timeout: Socket read timeout, in milliseconds.
            Defaults to 60000.
        :keyword socket_connection_timeout: Socket connection timeout, in
            milliseconds. Defaults to 60000.
        :keyword bounce_address: Envelope sender address, which receives
            delivery failure notifications.
        :keyword authenticator: Credentials to log in with.
        :keyword session_override: An existing :class:`Session`, used instead
            of all options above.

        :raises InvalidArgumentError: invalid options provided
        """
        self.host_name = host_name
        self.smtp_port = smtp_port
        self.ssl_on_connect = ssl_on_connect
        self.ssl_smtp_port = ssl_smtp_port
        self.start_tls_enabled = start_tls_enabled
        self.start_tls_required = start_tls_required
        self.ssl_check_server_identity = ssl_check_server_identity
        self.send_partial = send_partial
        self.socket_timeout = socket_timeout
        self.socket_connection_timeout = socket_connection_timeout
        self.bounce_address = bounce_address
        self.authenticator = authenticator
        self.session_override = session_override

        self._session: Optional[Session] = None

        self._validate_config()

    def update(
        self,
        *,
        host_name: Optional[Union[str, Literal[Default.token]]] = Default.token,
        smtp_port: Optional[Union[int, Literal[Default.token]]] = Default.token,
        ssl_on_connect: Optional[bool] = None,
        ssl_smtp_port: Optional[Union[int, Literal[Default.token]]] = Default.token,
        start_tls_enabled: Optional[bool] = None,
        start_tls_required: Optional[bool] = None,
        ssl_check_server_identity: Optional[bool] = None,
        send_partial: Optional[bool] = None,
        socket_timeout: Optional[int] = None,
        socket_connection_timeout: Optional[int] = None,
        bounce_address: Optional[Union[str, Literal[Default.token]]] = Default.token,
        authenticator: Optional[
            Union[Authenticator, Literal[Default.token]]
        ] = Default.token,
        session_override: Optional[
            Union[Session, Literal[Default.token]]
        ] = Default.token,
    ) -> None:
        """
        Update options from the kwargs provided.

        This method can be called multiple times, until a session has been
        created.

        :raises InvalidStateError: the session has already been created
        :raises InvalidArgumentError: invalid options provided
        """
        if session_override is not Default.token:
            self.session_override = session_override
            self._session = None

        options = {
            "host_name": host_name,
            "smtp_port": smtp_port,
            "ssl_smtp_port": ssl_smtp_port,
            "bounce_address": bounce_address,
            "authenticator": authenticator,
        }
        flags = {
            "ssl_on_connect": ssl_on_connect,
            "start_tls_enabled": start_tls_enabled,
            "start_tls_required": start_tls_required,
            "ssl_check_server_identity": ssl_check_server_identity,
            "send_partial": send_partial,
            "socket_timeout": socket_timeout,
            "socket_connection_timeout": socket_connection_timeout,
        }
        changes = {
            key: value for key, value in options.items() if value is not Default.token
        }
        changes.update(
            (key, value) for key, value in flags.items() if value is not None
        )
        if not changes:
            return

        if self._session is not None:
            raise InvalidStateError("The mail session is already initialized")

        for key, value in changes.items():
            setattr(self, key, value)

        self._validate_config()

    def _validate_config(self) -> None:
        if self.host_name is not None and (
            "\r" in self.host_name or "\n" in self.host_name
        ):
            raise InvalidArgumentError(
                "The host_name param contains prohibited newline characters"
            )

        for name in ("smtp_port", "ssl_smtp_port"):
            port = getattr(self, name)
            if port is not None and port < 1:
                raise InvalidArgumentError(f"The {name} param must be positive")

        for name in ("socket_timeout", "socket_connection_timeout"):
            if getattr(self, name) < 0:
                raise InvalidArgumentError(f"The {name} param can not be negative")

    @property
    def is_session_initialized(self) -> bool:
        return self._session is not None

    def resolve(self) -> ResolvedSession:
        """
        Select where session properties come from: a caller supplied session
        wins over the configured options.
        """
        if self.session_override is not None:
            return OverrideSession(self.session_override)

        return DerivedConfig(self)

    def resolve_host(self) -> Optional[str]:
        return self.resolve().host

    def build_properties(self) -> dict[str, str]:
        """
        Derive transport properties from the configured options.
        """
        properties = {MAIL_TRANSPORT_PROTOCOL: SMTP}

        if self.host_name is not None:
            properties[MAIL_HOST] = self.host_name

        if self.ssl_on_connect:
            # The SSL port always wins over a configured plain port.
            ssl_port = str(self.ssl_smtp_port or SMTP_TLS_PORT)
            properties[MAIL_PORT] = ssl_port
            properties[MAIL_SMTP_SOCKET_FACTORY_PORT] = ssl_port
            properties[MAIL_SMTP_SOCKET_FACTORY_CLASS] = SSL_SOCKET_FACTORY
            properties[MAIL_SMTP_SOCKET_FACTORY_FALLBACK] = "false"
        else:
            properties[MAIL_PORT] = str(self.smtp_port or SMTP_PORT)

        properties[MAIL_SMTP_STARTTLS_ENABLE] = _bool_property(self.start_tls_enabled)
        properties[MAIL_SMTP_STARTTLS_REQUIRED] = _bool_property(
            self.start_tls_required
        )

        if self.send_partial:
            properties[MAIL_SMTP_SEND_PARTIAL] = "true"

        if (
            self.ssl_on_connect or self.start_tls_enabled
        ) and self.ssl_check_server_identity:
            properties[MAIL_SMTP_SSL_CHECKSERVERIDENTITY] = "true"

        if self.bounce_address is not None:
            properties[MAIL_SMTP_FROM] = self.bounce_address

        if self.socket_timeout > 0:
            properties[MAIL_SMTP_TIMEOUT] = str(self.socket_timeout)
        if self.socket_connection_timeout > 0:
            properties[MAIL_SMTP_CONNECTIONTIMEOUT] = str(
                self.socket_connection_timeout
            )

        if self.authenticator is not None:
            properties[MAIL_SMTP_AUTH] = "true"

        return properties

    def get_or_create_session(
        self, provider: Optional[SessionProvider] = None
    ) -> Session:
        """
        Return the session to deliver with, creating it on first use.

        :raises SessionUnavailableError: no session was supplied and no host
            name is configured
        """
        if self._session is None:
            resolved = self.resolve()
            self._session = resolved.get_session(provider or SessionProvider())
            logger.debug(
                "Mail session initialized from %s for host %r",
                type(resolved).__name__,
                resolved.host,
            )

        return self._session
