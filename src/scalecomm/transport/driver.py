"""Abstract interface for request/response transports.

The dispatcher hands a transport the method name and one encoded buffer per
argument and expects a single encoded response buffer back. Transports know
nothing about the schema; framing, connection management, correlation and
retry policy are entirely theirs.

Design Pattern: Strategy Pattern / Adapter Pattern
- Transport / AsyncTransport: Abstract interfaces (node-agnostic)
- MockTransport / AsyncMockTransport: In-process loopback for tests
- WebSocket or HTTP adapters for a real node live outside this package
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Transport(ABC):
    """Blocking request/response transport.

    Implementations signal cancellation with TransportCancelled and timeouts
    with TransportTimeout (or the builtin TimeoutError); any other exception
    is wrapped in TransportError by the dispatcher.

    Examples:
        ```python
        class HttpTransport(Transport):
            def send(self, method_name: str, encoded_args: list[bytes]) -> bytes:
                params = ["0x" + arg.hex() for arg in encoded_args]
                reply = post_json_rpc(method_name, params)
                return bytes.fromhex(reply.removeprefix("0x"))
        ```
    """

    @abstractmethod
    def send(self, method_name: str, encoded_args: list[bytes]) -> bytes:
        """Send one request and return the encoded response.

        Args:
            method_name: Remote operation name (e.g. "identity_getAssetDid")
            encoded_args: One buffer per parameter, in signature order

        Returns:
            The encoded return value
        """

    def close(self) -> None:
        """Release transport resources. The default does nothing."""


class AsyncTransport(ABC):
    """Asyncio request/response transport.

    ``send`` may suspend while the request is in flight; implementations that
    support concurrent outstanding requests allow many dispatcher calls to
    overlap.
    """

    @abstractmethod
    async def send(self, method_name: str, encoded_args: list[bytes]) -> bytes:
        """Send one request and return the encoded response."""

    async def close(self) -> None:
        """Release transport resources. The default does nothing."""
