"""
Email address parsing and formatting.
"""

import email.headerregistry
import email.utils
import re
from typing import NamedTuple, Optional

from .errors import AddressFormatError


__all__ = ("Address", "parse_address")


PROHIBITED_CHARS_REGEX = re.compile(r"[\s\x00-\x1f\x7f]")


class Address(NamedTuple):
    """
    A validated ``local@domain`` address, with an optional display name.

        >>> address = parse_address("bob@example.com", "Bob")
        >>> address.addr_spec
        'bob@example.com'
        >>> str(address)
        'Bob <bob@example.com>'

    """

    local_part: str
    domain: str
    display_name: Optional[str] = None

    @property
    def addr_spec(self) -> str:
        return f"{self.local_part}@{self.domain}"

    def as_header_address(self) -> email.headerregistry.Address:
        """
        Convert to an address object that :py:class:`email.message.EmailMessage`
        headers accept, and encode as needed on serialization.
        """
        return email.headerregistry.Address(
            display_name=self.display_name or "",
            username=self.local_part,
            domain=self.domain,
        )

    def formatted(self) -> str:
        """
        Format the address for use in a message header, quoting the display
        name if required.
        """
        return str(self.as_header_address())

    def __str__(self) -> str:
        if self.display_name:
            return f"{self.display_name} <{self.addr_spec}>"

        return self.addr_spec


def parse_address(raw: str, display_name: Optional[str] = None) -> Address:
    """
    Parse a raw ``local@domain`` string (or ``Name <local@domain>``) into
    an :class:`Address`.

    No DNS or MX lookups are performed.

    :raises AddressFormatError: the address is missing or malformed
    """
    if not isinstance(raw, str):
        raise AddressFormatError("Address must be a string", None)

    address = raw.strip()
    if address.count("@") != 1:
        raise AddressFormatError(
            f"Address {raw!r} must contain exactly one '@' character", raw
        )

    if address.endswith(">") and "<" in address:
        parsed_name, address = email.utils.parseaddr(address)
        if address.count("@") != 1:
            raise AddressFormatError(f"Invalid address {raw!r}", raw)
        if display_name is None and parsed_name:
            display_name = parsed_name

    local_part, domain = address.split("@")
    if not local_part or not domain:
        raise AddressFormatError(
            f"Address {raw!r} is missing a local part or domain", raw
        )

    if PROHIBITED_CHARS_REGEX.search(address):
        raise AddressFormatError(
            f"Address {raw!r} contains whitespace or control characters", raw
        )

    if display_name is not None and ("\r" in display_name or "\n" in display_name):
        raise AddressFormatError(
            "The display name contains prohibited newline characters", raw
        )

    return Address(local_part, domain, display_name or None)
