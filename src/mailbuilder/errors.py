from typing import Optional


__all__ = (
    "AddressFormatError",
    "EmailException",
    "InvalidArgumentError",
    "InvalidStateError",
    "MissingFieldError",
    "SessionUnavailableError",
)


class EmailException(Exception):
    """
    Base class for all message building exceptions.
    """

    def __init__(self, message: str, /) -> None:
        self.message = message
        self.args = (message,)


class AddressFormatError(EmailException, ValueError):
    """
    An email address was missing or could not be parsed.
    """

    def __init__(self, message: str, address: Optional[str] = None, /) -> None:
        self.message = message
        self.address = address
        self.args = (message, address)


class InvalidArgumentError(EmailException, ValueError):
    """
    An argument was empty or contained prohibited characters.
    """


class MissingFieldError(EmailException):
    """
    A field required to build the message has not been set.
    """

    def __init__(self, message: str, field: str, /) -> None:
        self.message = message
        self.field = field
        self.args = (message, field)


class InvalidStateError(EmailException, RuntimeError):
    """
    The operation is not allowed in the current state, e.g. building a
    message twice.
    """


class SessionUnavailableError(EmailException):
    """
    A mail session was requested, but neither a session nor a host name
    has been provided.
    """
