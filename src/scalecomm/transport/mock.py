"""In-process mock transports for testing without a node.

Requests are routed to handlers registered per method name. Handlers receive
the raw argument buffers and return the raw response buffer, so tests can
play the remote node with the codec on both sides. Every request is recorded
for inspection, and latency, random failures and payload limits can be
simulated through MockTransportConfig.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
import time
from typing import Awaitable, Callable, Union

from ..exceptions import TransportError
from .config import MockTransportConfig
from .driver import AsyncTransport, Transport

log = logging.getLogger("scalecomm.transport")

Handler = Callable[[list[bytes]], bytes]
AsyncHandler = Callable[[list[bytes]], Union[bytes, Awaitable[bytes]]]


class _MockBase:
    def __init__(self, config: MockTransportConfig | None = None) -> None:
        self.config = config if config is not None else MockTransportConfig()
        self.requests: list[tuple[str, list[bytes]]] = []
        self._handlers: dict[str, Callable[..., object]] = {}
        self._rng = random.Random(self.config.seed)

    def _admit(self, method_name: str, encoded_args: list[bytes]) -> Callable[..., object]:
        """Record the request and apply simulated channel checks."""
        self.requests.append((method_name, list(encoded_args)))
        size = sum(len(arg) for arg in encoded_args)
        if size > self.config.max_payload_size:
            raise TransportError(
                f"Request of {size} bytes exceeds max_payload_size {self.config.max_payload_size}"
            )
        if self._rng.random() < self.config.failure_probability:
            log.warning("simulated failure for %s", method_name)
            raise TransportError(f"Simulated transport failure for {method_name}")
        handler = self._handlers.get(method_name)
        if handler is None:
            raise TransportError(f"No handler for method {method_name!r}")
        log.debug("mock %s: %d args, %d bytes", method_name, len(encoded_args), size)
        return handler


class MockTransport(_MockBase, Transport):
    """Blocking loopback transport.

    Examples:
        ```python
        from scalecomm.transport import MockTransport

        transport = MockTransport()
        transport.add_handler("identity_getAssetDid", lambda args: bytes(32))
        transport.send("identity_getAssetDid", [b"\\x00", b"ACME" + bytes(8)])
        # b'\\x00' * 32
        ```
    """

    def add_handler(self, method_name: str, handler: Handler) -> None:
        """Route requests for ``method_name`` to ``handler(encoded_args) -> bytes``."""
        self._handlers[method_name] = handler

    def send(self, method_name: str, encoded_args: list[bytes]) -> bytes:
        handler = self._admit(method_name, encoded_args)
        if self.config.latency:
            time.sleep(self.config.latency)
        return handler(list(encoded_args))  # type: ignore[return-value]


class AsyncMockTransport(_MockBase, AsyncTransport):
    """Asyncio loopback transport; handlers may be plain or async functions.

    Latency is simulated with ``asyncio.sleep`` so concurrent requests overlap.
    """

    def add_handler(self, method_name: str, handler: AsyncHandler) -> None:
        self._handlers[method_name] = handler

    async def send(self, method_name: str, encoded_args: list[bytes]) -> bytes:
        handler = self._admit(method_name, encoded_args)
        if self.config.latency:
            await asyncio.sleep(self.config.latency)
        result = handler(list(encoded_args))
        if inspect.isawaitable(result):
            result = await result
        return result  # type: ignore[return-value]
