"""
Test message export and serialization.
"""
import datetime
import email
import email.policy

import pytest

from mailbuilder import Message, MessageBuilder


SENT_DATE = datetime.datetime(2017, 11, 20, 21, 4, 27, tzinfo=datetime.timezone.utc)


@pytest.fixture(scope="function")
def message(builder: MessageBuilder) -> Message:
    builder.set_from("alice@example.com", "Alice")
    builder.add_to(["bob@example.com", "claire@example.com"])
    builder.add_cc("dustin@example.com")
    builder.add_bcc("eliza@example.com")
    builder.add_reply_to("replies@example.com")
    builder.add_header("X-Mailer", "mailbuilder")
    builder.set_subject("Hello, World.")
    builder.set_msg("This is a test")
    builder.set_sent_date(SENT_DATE)

    return builder.build()


def test_as_email_message(message: Message) -> None:
    exported = message.as_email_message()

    assert exported["From"] == "Alice <alice@example.com>"
    assert exported["To"] == "bob@example.com, claire@example.com"
    assert exported["Cc"] == "dustin@example.com"
    assert exported["Bcc"] == "eliza@example.com"
    assert exported["Reply-To"] == "replies@example.com"
    assert exported["Subject"] == "Hello, World."
    assert exported["Date"] == "Mon, 20 Nov 2017 21:04:27 +0000"
    assert exported["X-Mailer"] == "mailbuilder"
    assert exported.get_content_type() == "text/plain"
    assert exported.get_content_charset() == "utf-8"


def test_as_email_message_without_optional_headers(builder: MessageBuilder) -> None:
    builder.set_from("alice@example.com").add_bcc("bob@example.com")

    exported = builder.build().as_email_message()

    assert "To" not in exported
    assert "Cc" not in exported
    assert "Reply-To" not in exported
    assert "Subject" not in exported
    assert exported["Bcc"] == "bob@example.com"


def test_custom_header_replaces_generated_header(builder: MessageBuilder) -> None:
    builder.set_from("alice@example.com").add_to("bob@example.com")
    builder.set_subject("Generated")
    builder.add_header("Subject", "Custom")

    exported = builder.build().as_email_message()

    assert exported.get_all("Subject") == ["Custom"]


def test_as_bytes_removes_bcc(message: Message) -> None:
    flat_message = message.as_bytes()

    assert b"eliza@example.com" not in flat_message
    assert b"Bcc" not in flat_message
    assert b"To: bob@example.com, claire@example.com\r\n" in flat_message
    assert b"This is a test\r\n" in flat_message


def test_as_bytes_round_trip(message: Message) -> None:
    parsed = email.message_from_bytes(message.as_bytes(), policy=email.policy.default)

    assert parsed["Subject"] == "Hello, World."
    assert parsed.get_content().splitlines() == ["This is a test"]


def test_as_bytes_unicode_subject(builder: MessageBuilder) -> None:
    builder.set_from("alice@example.com").add_to("bob@example.com")
    builder.set_subject("☕ time")
    builder.set_charset("utf-8")

    flat_message = builder.build().as_bytes()
    parsed = email.message_from_bytes(flat_message, policy=email.policy.default)

    assert "☕".encode("utf-8") not in flat_message
    assert parsed["Subject"] == "☕ time"


def test_as_bytes_utf8(builder: MessageBuilder) -> None:
    builder.set_from("ålice@example.com").add_to("bob@example.com")

    flat_message = builder.build().as_bytes(utf8=True)

    assert "From: ålice@example.com".encode("utf-8") in flat_message


def test_as_bytes_utf8_recipients(builder: MessageBuilder) -> None:
    builder.set_from("alice@example.com").add_to("bjørn@example.com", "Bjørn")

    flat_message = builder.build().as_bytes(utf8=True)
    parsed = email.message_from_bytes(flat_message, policy=email.policy.SMTPUTF8)

    assert parsed["To"].addresses[0].username == "bjørn"
    assert parsed["To"].addresses[0].display_name == "Bjørn"


def test_as_bytes_subject_uses_charset(builder: MessageBuilder) -> None:
    builder.set_from("alice@example.com").add_to("bob@example.com")
    builder.set_subject("café")
    builder.set_charset("iso-8859-1")

    flat_message = builder.build().as_bytes()
    parsed = email.message_from_bytes(flat_message, policy=email.policy.default)

    assert b"Subject: =?iso-8859-1?q?caf=E9?=\r\n" in flat_message
    assert parsed["Subject"] == "café"


def test_as_bytes_long_subject_is_folded(builder: MessageBuilder) -> None:
    subject = " ".join(["☕"] * 40)
    builder.set_from("alice@example.com").add_to("bob@example.com")
    builder.set_subject(subject)
    builder.set_charset("utf-8")

    message = builder.build()
    flat_message = message.as_bytes()
    parsed = email.message_from_bytes(flat_message, policy=email.policy.default)

    assert message.as_email_message()["Subject"] == subject
    assert b"\r\n =?utf-8?" in flat_message
    assert parsed["Subject"] == subject


def test_as_bytes_cte_type(message: Message) -> None:
    flat_message = message.as_bytes(cte_type="7bit")

    assert b"Bcc" not in flat_message


def test_message_is_immutable(message: Message) -> None:
    with pytest.raises(AttributeError):
        message.subject = "Changed"  # type: ignore[misc]
