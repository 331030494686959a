"""Configuration for the codec engine.

Decoding accepts bytes from an external channel, so a corrupted or hostile
buffer must not be able to drive unbounded recursion or giant allocations.
These limits are enforced by the decoder and raise LimitExceeded.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CodecConfig:
    """Limits applied while encoding and decoding.

    Attributes:
        max_depth: Maximum nesting depth of composite values (default 64).
            Only reachable through recursive types such as a tree whose
            children are a ``Vec`` of itself. Each level costs the decoder
            three or four interpreter frames, so values much above 200 run
            into the interpreter recursion limit; that is reported as
            LimitExceeded too.

        max_collection_length: Maximum element count of a decoded sequence or
            fixed array and maximum byte length of decoded text (default 16 Mi).

    Examples:
        ```python
        from scalecomm import CodecConfig, decode

        strict = CodecConfig(max_depth=32, max_collection_length=4096)
        value, used = decode(registry, "Ballot", data, config=strict)
        ```
    """

    max_depth: int = 64
    max_collection_length: int = 1 << 24

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.max_depth <= 0:
            raise ValueError(f"max_depth must be > 0, got {self.max_depth}")

        if self.max_collection_length < 0:
            raise ValueError(
                f"max_collection_length must be >= 0, got {self.max_collection_length}"
            )


DEFAULT_CONFIG = CodecConfig()
