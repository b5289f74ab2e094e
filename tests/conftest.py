from __future__ import annotations

import socket
from typing import Callable

import pytest

from nntpwire import NNTPClient
from nntpwire.channel import LineChannel


class FakeSocket:
    """Socket stand-in that replays server data and records client data.

    Data is handed out in small pieces so that lines and compressed streams
    are split across receives.
    """

    def __init__(self, data: bytes, chunk: int = 7) -> None:
        self.data = data
        self.chunk = chunk
        self.sent = bytearray()
        self.closed = False

    def recv(self, size: int) -> bytes:
        n = min(size, self.chunk)
        data, self.data = self.data[:n], self.data[n:]
        return data

    def sendall(self, data: bytes) -> None:
        self.sent += data

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_channel() -> Callable[[bytes], LineChannel]:
    def factory(data: bytes) -> LineChannel:
        return LineChannel(FakeSocket(data))  # type: ignore[arg-type]

    return factory


@pytest.fixture
def make_client(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., tuple[NNTPClient, FakeSocket]]:
    """Factory for a client connected to a scripted server.

    The greeting is added to the front of the server data. Reader mode is off
    unless asked for so that MODE READER does not need to be scripted.
    """

    def factory(
        data: bytes,
        greeting: bytes = b"200 server ready\r\n",
        reader: bool = False,
    ) -> tuple[NNTPClient, FakeSocket]:
        fake = FakeSocket(greeting + data)
        monkeypatch.setattr(
            socket, "create_connection", lambda address, timeout: fake
        )
        return NNTPClient("news.example.com", reader=reader), fake

    return factory
