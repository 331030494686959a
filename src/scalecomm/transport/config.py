"""Configuration for mock transport simulation.

This module provides the configuration dataclass for the in-process mock
transport, enabling tests of latency and failure handling without a node.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class MockTransportConfig:
    """Configuration for mock transport simulation.

    Attributes:
        latency: Simulated round-trip delay in seconds (default 0.0).

        failure_probability: Probability that a request fails with
            TransportError before reaching the handler (default 0.0).

        max_payload_size: Maximum total size of the encoded arguments of one
            request in bytes (default 1 MiB). Larger requests are rejected
            with TransportError, as a node would reject an oversized frame.

        seed: Seed for the failure simulation RNG; None for nondeterministic.

    Examples:
        ```python
        from scalecomm.transport import MockTransport, MockTransportConfig

        # Flaky, slow node
        config = MockTransportConfig(latency=0.2, failure_probability=0.1, seed=7)
        transport = MockTransport(config)
        ```
    """

    latency: float = 0.0
    failure_probability: float = 0.0
    max_payload_size: int = 1 << 20
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.latency < 0:
            raise ValueError(f"latency must be >= 0, got {self.latency}")

        if not 0.0 <= self.failure_probability <= 1.0:
            raise ValueError(
                f"failure_probability must be 0.0-1.0, got {self.failure_probability}"
            )

        if self.max_payload_size <= 0:
            raise ValueError(f"max_payload_size must be > 0, got {self.max_payload_size}")
