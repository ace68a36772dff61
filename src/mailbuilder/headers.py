"""
Custom message header storage.
"""

import re
from collections.abc import Iterator, Mapping
from typing import Optional

from .errors import InvalidArgumentError


__all__ = ("HeaderStore",)


HEADER_NAME_PROHIBITED_REGEX = re.compile(r"[\s:]")


class HeaderStore(Mapping[str, str]):
    """
    Insertion ordered mapping of header names to values.

    Adding a header that is already present replaces its value. Stores
    compare equal to any mapping holding the same key/value pairs:

        >>> headers = HeaderStore()
        >>> headers.add("X-Mailer", "mailbuilder")
        >>> headers == {"X-Mailer": "mailbuilder"}
        True

    """

    def __init__(self) -> None:
        self._headers: dict[str, str] = {}

    def add(self, name: str, value: str) -> None:
        """
        :raises InvalidArgumentError: name or value is empty, or contains
            prohibited characters
        """
        if not name or not name.strip():
            raise InvalidArgumentError("Header name can not be empty")
        if not value or not value.strip():
            raise InvalidArgumentError(f"Value for header {name!r} can not be empty")

        if HEADER_NAME_PROHIBITED_REGEX.search(name):
            raise InvalidArgumentError(
                f"Header name {name!r} contains whitespace or ':' characters"
            )
        if "\r" in value or "\n" in value:
            raise InvalidArgumentError(
                f"Value for header {name!r} contains prohibited newline characters"
            )

        self._headers[name] = value

    def get(  # type: ignore[override]
        self, name: str, default: Optional[str] = None
    ) -> Optional[str]:
        return self._headers.get(name, default)

    def all(self) -> dict[str, str]:
        return dict(self._headers)

    def __getitem__(self, name: str) -> str:
        return self._headers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._headers!r})"
