"""Transport collaborator interface.

The codec core never performs I/O itself: the dispatcher hands encoded
argument buffers to a transport and decodes the single buffer it returns.

## Available Transports

### MockTransport / AsyncMockTransport
In-process loopback for tests. Features:
- Per-method handlers that play the remote node
- Configurable latency and random failures
- Request recording for assertions

Real node adapters (WebSocket, HTTP JSON-RPC) implement ``Transport`` or
``AsyncTransport`` outside this package.
"""

from scalecomm.transport.config import MockTransportConfig
from scalecomm.transport.driver import AsyncTransport, Transport
from scalecomm.transport.mock import AsyncMockTransport, MockTransport

__all__ = [
    "Transport",
    "AsyncTransport",
    "MockTransport",
    "AsyncMockTransport",
    "MockTransportConfig",
]
