"""Call dispatchers: one remote operation from arguments to decoded result.

Each ``invoke`` looks up the signature, binds and encodes the arguments,
hands the buffers to the transport and decodes the response with the
signature's return type. Dispatchers hold no per-call state, so one
dispatcher can serve many concurrent calls.

Errors from binding and decoding propagate unchanged. Transport failures are
wrapped in TransportError; cancellations and timeouts reported by the
transport surface as TransportCancelled / TransportTimeout and are never
retried here.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..codec.decoder import decode_all
from ..exceptions import TransportCancelled, TransportError, TransportTimeout
from ..transport.driver import AsyncTransport, Transport
from ..types.values import Value
from .methods import MethodSignature, MethodTable

log = logging.getLogger("scalecomm.rpc")

Arguments = Mapping[str, Any] | Iterable[tuple[str, Any]] | None
TIMEOUT_ERRORS = (TimeoutError, asyncio.TimeoutError)
# asyncio.CancelledError is a BaseException and is never caught here
CANCEL_ERRORS = (concurrent.futures.CancelledError,)


class _DispatcherBase:
    def __init__(self, methods: MethodTable) -> None:
        self.methods = methods

    def _prepare(
        self, method_name: str, args: Arguments, kwargs: dict[str, Any]
    ) -> tuple[MethodSignature, list[bytes]]:
        signature = self.methods.lookup(method_name)
        pairs: list[tuple[str, Any]] = []
        if args is not None:
            pairs.extend(args.items() if isinstance(args, Mapping) else args)
        pairs.extend(kwargs.items())
        bound = self.methods.bind_arguments(signature, pairs)
        buffers = [arg.encoded for arg in bound]
        log.debug("invoke %s with %d bytes of arguments", method_name, sum(map(len, buffers)))
        return signature, buffers

    def _finish(self, signature: MethodSignature, response: bytes) -> Value:
        if not isinstance(response, (bytes, bytearray)):
            raise TransportError(
                f"{signature.name}: transport returned {type(response).__name__}, expected bytes"
            )
        return decode_all(
            self.methods.registry, signature.returns, bytes(response), config=self.methods.config
        )


class Dispatcher(_DispatcherBase):
    """Blocking dispatcher over a Transport.

    Examples:
        ```python
        from scalecomm import Dispatcher, load_schema_file
        from scalecomm.transport import MockTransport

        registry, methods = load_schema_file("polymesh.json")
        transport = MockTransport()
        transport.add_handler("identity_getAssetDid", lambda args: bytes(32))

        rpc = Dispatcher(methods, transport)
        did = rpc.invoke("identity_getAssetDid", ticker=b"ACME".ljust(12, b"\\0"))
        ```
    """

    def __init__(self, methods: MethodTable, transport: Transport) -> None:
        super().__init__(methods)
        self.transport = transport

    def invoke(self, method_name: str, args: Arguments = None, /, **kwargs: Any) -> Value:
        """Call ``method_name`` and return its decoded result.

        Args:
            method_name: Registered method name
            args: ``(name, value)`` pairs or a mapping of arguments
            **kwargs: Further arguments by name

        Raises:
            UnknownMethod, BindingError: If the arguments do not bind
            TransportError: If the transport fails (TransportCancelled and
                TransportTimeout for cancellation and timeouts)
            DecodeError: If the response does not decode as the return type
        """
        signature, buffers = self._prepare(method_name, args, kwargs)
        try:
            response = self.transport.send(method_name, buffers)
        except TransportError as e:
            log.warning("%s failed in transport: %s", method_name, e)
            raise
        except TIMEOUT_ERRORS as e:
            log.warning("%s timed out in transport: %s", method_name, e)
            raise TransportTimeout(f"{method_name}: transport timed out") from e
        except CANCEL_ERRORS as e:
            log.warning("%s was cancelled in transport", method_name)
            raise TransportCancelled(f"{method_name}: transport cancelled the request") from e
        except Exception as e:
            log.warning("%s failed in transport: %s", method_name, e)
            raise TransportError(f"{method_name}: transport failed: {e}") from e
        return self._finish(signature, response)


class AsyncDispatcher(_DispatcherBase):
    """Asyncio dispatcher over an AsyncTransport.

    No lock is held while the transport call is awaited, so any number of
    ``invoke`` calls may be in flight at once. Cancelling the awaiting task
    propagates ``asyncio.CancelledError`` unchanged.
    """

    def __init__(self, methods: MethodTable, transport: AsyncTransport) -> None:
        super().__init__(methods)
        self.transport = transport

    async def invoke(self, method_name: str, args: Arguments = None, /, **kwargs: Any) -> Value:
        """Call ``method_name`` and return its decoded result (see Dispatcher.invoke)."""
        signature, buffers = self._prepare(method_name, args, kwargs)
        try:
            response = await self.transport.send(method_name, buffers)
        except TransportError as e:
            log.warning("%s failed in transport: %s", method_name, e)
            raise
        except TIMEOUT_ERRORS as e:
            log.warning("%s timed out in transport: %s", method_name, e)
            raise TransportTimeout(f"{method_name}: transport timed out") from e
        except CANCEL_ERRORS as e:
            log.warning("%s was cancelled in transport", method_name)
            raise TransportCancelled(f"{method_name}: transport cancelled the request") from e
        except Exception as e:
            log.warning("%s failed in transport: %s", method_name, e)
            raise TransportError(f"{method_name}: transport failed: {e}") from e
        return self._finish(signature, response)
