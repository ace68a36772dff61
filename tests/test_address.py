"""
Test address parsing and formatting.
"""
import pytest
from hypothesis import example, given
from hypothesis.strategies import emails, text

from mailbuilder import Address, AddressFormatError, parse_address


@given(emails())
@example("email@[123.123.123.123]")
@example("_______@example.com")
@example("aaa@aaa")
def test_parse_address_round_trip(address: str) -> None:
    parsed = parse_address(address)

    assert str(parsed) == address
    assert parsed.addr_spec == address
    assert parsed.display_name is None


def test_parse_address_parts() -> None:
    parsed = parse_address("abc@def")

    assert parsed == Address("abc", "def")
    assert parsed.local_part == "abc"
    assert parsed.domain == "def"


@given(text().filter(lambda raw: raw.count("@") != 1))
@example("invalid")
@example("a@b@c")
@example("")
def test_parse_address_without_exactly_one_at_raises(raw: str) -> None:
    with pytest.raises(AddressFormatError):
        parse_address(raw)


@given(text().filter(lambda side: "@" not in side))
def test_parse_address_with_empty_side_raises(side: str) -> None:
    with pytest.raises(AddressFormatError):
        parse_address(f"{side}@")
    with pytest.raises(AddressFormatError):
        parse_address(f"@{side}")


@pytest.mark.parametrize(
    "raw",
    ("a b@example.com", "ab@exa\tmple.com", "ab@example.com\r\nBcc: x@y", None, 42),
    ids=("space", "tab", "newline", "none", "int"),
)
def test_parse_address_invalid_values_raise(raw: str) -> None:
    with pytest.raises(AddressFormatError) as excinfo:
        parse_address(raw)

    assert isinstance(excinfo.value, ValueError)


def test_parse_address_strips_surrounding_whitespace() -> None:
    assert parse_address("  abc@def \n").addr_spec == "abc@def"


def test_parse_address_with_display_name() -> None:
    parsed = parse_address("abc@def", "name")

    assert parsed.display_name == "name"
    assert str(parsed) == "name <abc@def>"


@pytest.mark.parametrize(
    "raw, expected_name, expected_address",
    (
        ('"A.Smith" <asmith+foo@example.com>', "A.Smith", "asmith+foo@example.com"),
        ("Pepé Le Pew <pepe@example.com>", "Pepé Le Pew", "pepe@example.com"),
        ("<a@new.topleveldomain>", None, "a@new.topleveldomain"),
    ),
    ids=("quotes", "nonascii", "no_name"),
)
def test_parse_address_with_angle_brackets(
    raw: str, expected_name: str, expected_address: str
) -> None:
    parsed = parse_address(raw)

    assert parsed.display_name == expected_name
    assert parsed.addr_spec == expected_address


def test_explicit_display_name_wins_over_parsed_name() -> None:
    parsed = parse_address("Bob <bob@example.com>", "Robert")

    assert parsed.display_name == "Robert"


def test_display_name_with_newline_raises() -> None:
    with pytest.raises(AddressFormatError):
        parse_address("bob@example.com", "Bob\r\nBcc: eve@example.com")


@pytest.mark.parametrize(
    "address, expected",
    (
        (Address("bob", "example.com"), "bob@example.com"),
        (Address("bob", "example.com", "Bob"), "Bob <bob@example.com>"),
        (Address("bob", "example.com", "Smith, Bob"), '"Smith, Bob" <bob@example.com>'),
        (Address("ålice", "example.com"), "ålice@example.com"),
    ),
    ids=("plain", "name", "quoted_name", "non_ascii"),
)
def test_address_formatted(address: Address, expected: str) -> None:
    assert address.formatted() == expected


def test_address_is_immutable() -> None:
    parsed = parse_address("abc@def")

    with pytest.raises(AttributeError):
        parsed.domain = "ghi"  # type: ignore[misc]


def test_as_header_address() -> None:
    header_address = parse_address("Bob <bob@example.com>").as_header_address()

    assert header_address.display_name == "Bob"
    assert header_address.username == "bob"
    assert header_address.domain == "example.com"
