"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from scalecomm import Enum, Option, Struct, TypeRegistry
from scalecomm.types import FixedArray, Sequence, Tuple


@pytest.fixture
def registry() -> TypeRegistry:
    """Frozen registry with a small set of schema types on top of the builtins."""
    reg = TypeRegistry()
    reg.register_many(
        {
            "Transfer": Struct(fields={"name": "Text", "amount": "u64"}),
            "Ticker": FixedArray(elem="u8", length=12),
            "Option<u32>": Option(inner="u32"),
            "Vec<u32>": Sequence(elem="u32"),
            "Vec<Text>": Sequence(elem="Text"),
            "(u8, bool)": Tuple(members=("u8", "bool")),
            "Permission": Enum(variants=["Full", "Admin", "Operator"]),
            "Signatory": Enum(variants={"Identity": "IdentityId", "AccountKey": "AccountId"}),
            "IdentityId": FixedArray(elem="u8", length=32),
        }
    )
    return reg.freeze()


@pytest.fixture
def schema_document() -> dict[str, Any]:
    """Schema source in the shape node client libraries use."""
    return {
        "types": {
            "IdentityId": "[u8; 32]",
            "Ticker": "[u8; 12]",
            "AssetName": "Text",
            "Document": {"name": "Text", "uri": "Text", "content_hash": "Text"},
            "Permission": {"_enum": ["Full", "Admin", "Operator", "SpendFunds"]},
            "Signatory": {"_enum": {"Identity": "IdentityId", "AccountKey": "AccountId"}},
            "LinkData": {
                "_enum": {
                    "DocumentOwned": "Document",
                    "TickerOwned": "Ticker",
                    "Nothing": "",
                }
            },
            "Holders": "BTreeMap<IdentityId, Balance>",
        },
        "rpc": {
            "identity": {
                "getAssetDid": {
                    "description": "query the DID of a ticker",
                    "params": [
                        {"name": "ticker", "type": "[u8; 12]", "isOptional": False},
                        {"name": "blockHash", "type": "Hash", "isOptional": True},
                    ],
                    "type": "IdentityId",
                },
            },
            "asset": {
                "getBalance": {
                    "params": [
                        {"name": "ticker", "type": "Ticker", "isOptional": False},
                        {"name": "did", "type": "IdentityId", "isOptional": False},
                        {"name": "blockHash", "type": "Hash", "isOptional": True},
                    ],
                    "type": "Balance",
                },
                "getDocuments": {
                    "params": [{"name": "ticker", "type": "Ticker"}],
                    "type": "Vec<(u64, Document)>",
                },
            },
        },
    }


@pytest.fixture
def ticker() -> bytes:
    """A 12-byte, zero-padded ticker."""
    return b"ACME".ljust(12, b"\x00")
