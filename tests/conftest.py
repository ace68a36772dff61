"""
Pytest fixtures and config.
"""

import email.message
import socket
import sys
from collections.abc import Generator
from typing import Union

import hypothesis
import pytest
from aiosmtpd.controller import Controller
from aiosmtpd.handlers import Message as MessageHandler

from mailbuilder import MessageBuilder, SessionConfig


IS_PYPY = hasattr(sys, "pypy_version_info")

# pypy can take a while to generate data, so don't fail the test due to health checks.
if IS_PYPY:
    base_settings = hypothesis.settings(
        suppress_health_check=(hypothesis.HealthCheck.too_slow,)
    )
else:
    base_settings = hypothesis.settings()
hypothesis.settings.register_profile("dev", parent=base_settings, max_examples=10)
hypothesis.settings.register_profile("ci", parent=base_settings, max_examples=100)


class RecordingHandler(MessageHandler):
    def __init__(
        self,
        messages_list: list[Union[email.message.EmailMessage, email.message.Message]],
    ):
        self.messages = messages_list
        super().__init__(message_class=email.message.EmailMessage)

    def handle_message(
        self, message: Union[email.message.EmailMessage, email.message.Message]
    ) -> None:
        self.messages.append(message)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--bind-addr",
        action="store",
        default="127.0.0.1",
        help="address to bind on for network tests",
    )


# Session scoped static values #


@pytest.fixture(scope="session")
def hostname(request: pytest.FixtureRequest) -> str:
    return str(request.config.getoption("--bind-addr"))


@pytest.fixture(scope="session")
def recipient_str() -> str:
    return "recipient@example.com"


@pytest.fixture(scope="session")
def sender_str() -> str:
    return "sender@example.com"


# Builders #


@pytest.fixture(scope="function")
def builder() -> MessageBuilder:
    return MessageBuilder()


@pytest.fixture(scope="function")
def ready_builder(
    builder: MessageBuilder, sender_str: str, recipient_str: str
) -> MessageBuilder:
    """A builder with the minimum fields needed to build."""
    builder.set_host_name("localhost")
    builder.set_from(sender_str)
    builder.add_to(recipient_str)

    return builder


@pytest.fixture(scope="function")
def session_config() -> SessionConfig:
    return SessionConfig(host_name="localhost")


# Server helpers #


@pytest.fixture(scope="function")
def free_tcp_port(hostname: str) -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((hostname, 0))
        return int(sock.getsockname()[1])


@pytest.fixture(scope="function")
def received_messages() -> list[email.message.EmailMessage]:
    return []


@pytest.fixture(scope="function")
def smtpd_server_port(
    hostname: str,
    free_tcp_port: int,
    received_messages: list[email.message.EmailMessage],
) -> Generator[int, None, None]:
    controller = Controller(
        RecordingHandler(received_messages),  # type: ignore[arg-type]
        hostname=hostname,
        port=free_tcp_port,
    )
    controller.start()

    yield free_tcp_port

    controller.stop()
