"""
To, Cc and Bcc recipient bookkeeping.
"""

from collections.abc import Sequence
from typing import Optional, Union

from .address import Address, parse_address
from .errors import AddressFormatError


__all__ = ("RecipientSet", "parse_addresses")


AddressInput = Union[str, Sequence[str]]


def parse_addresses(
    addresses: Optional[AddressInput], display_name: Optional[str] = None
) -> list[Address]:
    """
    Parse a single address or a sequence of addresses.

    Nothing is returned unless every address is valid.

    :raises AddressFormatError: no addresses were given, or one of them is
        malformed
    """
    if addresses is None:
        raise AddressFormatError("Address list provided was invalid", None)
    if isinstance(addresses, str):
        addresses = [addresses]

    if len(addresses) == 0:
        raise AddressFormatError("Address list provided was empty", None)
    if display_name is not None and len(addresses) > 1:
        raise AddressFormatError(
            "A display name can only be given with a single address", None
        )

    return [parse_address(raw, display_name) for raw in addresses]


class RecipientSet:
    """
    Ordered To, Cc and Bcc address lists.

    Each add call is atomic: if any address is invalid, none of the
    addresses given in that call are added.
    """

    def __init__(self) -> None:
        self.to: list[Address] = []
        self.cc: list[Address] = []
        self.bcc: list[Address] = []

    def add_to(
        self, addresses: Optional[AddressInput], display_name: Optional[str] = None
    ) -> "RecipientSet":
        self.to.extend(parse_addresses(addresses, display_name))
        return self

    def add_cc(
        self, addresses: Optional[AddressInput], display_name: Optional[str] = None
    ) -> "RecipientSet":
        self.cc.extend(parse_addresses(addresses, display_name))
        return self

    def add_bcc(
        self, addresses: Optional[AddressInput], display_name: Optional[str] = None
    ) -> "RecipientSet":
        self.bcc.extend(parse_addresses(addresses, display_name))
        return self

    def all_recipients(self) -> list[Address]:
        """
        Return all recipients, To first, then Cc, then Bcc.
        """
        return [*self.to, *self.cc, *self.bcc]

    def __len__(self) -> int:
        return len(self.to) + len(self.cc) + len(self.bcc)

    def __bool__(self) -> bool:
        return len(self) > 0
